"""
Bootstrap traits.

A trait fixes what a curve interpolates (discount factors, zero rates,
instantaneous forwards, inflation rates) and how the bootstrapper searches
for each node: the anchor node, the starting guess, the admissible bracket
and the global-loop iteration budget.

Traits read the curve through ``curve.data`` / ``curve.times`` /
``curve.reference_date`` (plus ``base_date`` / ``base_rate`` for inflation
curves) and never modify anything except through ``update_guess``.
"""

from datetime import date
from typing import Optional, Tuple
import math
import sys

import numpy as np

from ..errors import NotSupportedError
from ..settings import get_settings

AVG_RATE = 0.05
MAX_RATE = 1.0
AVG_INFLATION = 0.02
MAX_INFLATION = 0.5

_EPSILON = sys.float_info.epsilon


class BootstrapTraits:
    """
    Interface of a curve trait.

    Args:
        negative_rates: Allow negative rates in the search brackets; defaults
            to the ``negative_rates`` library setting
    """

    quantity = None

    def __init__(self, negative_rates: Optional[bool] = None):
        if negative_rates is None:
            negative_rates = get_settings().negative_rates
        self.negative_rates = negative_rates

    # anchor node

    def initial_date(self, curve) -> date:
        return curve.reference_date

    def initial_value(self, curve) -> float:
        raise NotImplementedError

    # node search

    def guess(self, i: int, curve, valid_data: bool, first_alive_helper: int = 0) -> float:
        raise NotImplementedError

    def min_value_after(self, i: int, curve, valid_data: bool, first_alive_helper: int = 0) -> float:
        raise NotImplementedError

    def max_value_after(self, i: int, curve, valid_data: bool, first_alive_helper: int = 0) -> float:
        raise NotImplementedError

    def update_guess(self, data: np.ndarray, value: float, i: int) -> None:
        data[i] = value

    def max_iterations(self) -> int:
        raise NotImplementedError

    def hard_bounds(self, i: int, curve) -> Tuple[float, float]:
        """Limits no bracket may reach (lower) or cross (upper)."""
        return -math.inf, math.inf

    def widen_bracket(self, i: int, curve, lo: float, hi: float) -> Tuple[float, float]:
        """
        Enlarge a failed search bracket.

        The bracket grows by its own width on both sides. Near a hard lower
        bound the new lower end moves halfway towards it instead; the upper
        end is capped at the hard upper bound.
        """
        width = max(hi - lo, 1.0e-4)
        lower, upper = self.hard_bounds(i, curve)
        new_lo = lo - width
        if new_lo <= lower:
            new_lo = lower + 0.5 * (lo - lower)
        new_hi = min(hi + width, upper)
        return new_lo, new_hi

    # native quantity

    def discount_impl(self, interpolation, t: float) -> float:
        raise NotSupportedError(f"{type(self).__name__} does not provide discount factors")

    def zero_yield_impl(self, interpolation, t: float) -> float:
        raise NotSupportedError(f"{type(self).__name__} does not provide zero yields")

    def forward_impl(self, interpolation, t: float) -> float:
        raise NotSupportedError(f"{type(self).__name__} does not provide forward rates")

    def rate_impl(self, interpolation, t: float) -> float:
        raise NotSupportedError(f"{type(self).__name__} does not provide inflation rates")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(negative_rates={self.negative_rates})"


class Discount(BootstrapTraits):
    """Discount-factor curve."""

    quantity = "discount"

    def initial_value(self, curve) -> float:
        return 1.0

    def guess(self, i, curve, valid_data, first_alive_helper=0):
        if valid_data:
            return float(curve.data[i])
        if i == 1:
            return 1.0 / (1.0 + AVG_RATE * curve.times[1])
        # flat rate extrapolation
        r = -math.log(curve.data[i - 1]) / curve.times[i - 1]
        return math.exp(-r * curve.times[i])

    def min_value_after(self, i, curve, valid_data, first_alive_helper=0):
        if valid_data:
            if self.negative_rates:
                return float(np.min(curve.data)) / 2.0
            return float(curve.data[-1]) / 2.0
        dt = curve.times[i] - curve.times[i - 1]
        return float(curve.data[i - 1]) * math.exp(-MAX_RATE * dt)

    def max_value_after(self, i, curve, valid_data, first_alive_helper=0):
        if self.negative_rates:
            dt = curve.times[i] - curve.times[i - 1]
            return float(curve.data[i - 1]) * math.exp(MAX_RATE * dt)
        # discount factors cannot increase
        return float(curve.data[i - 1])

    def hard_bounds(self, i, curve):
        if self.negative_rates:
            return 0.0, math.inf
        return 0.0, float(curve.data[i - 1])

    def max_iterations(self) -> int:
        return 100

    def discount_impl(self, interpolation, t):
        return interpolation(t, True)


class _RateTraits(BootstrapTraits):
    """Shared search logic of zero-yield and forward-rate curves."""

    def initial_value(self, curve) -> float:
        return AVG_RATE

    def guess(self, i, curve, valid_data, first_alive_helper=0):
        if valid_data:
            return float(curve.data[i])
        if i == 1:
            return AVG_RATE
        return float(curve.data[i - 1])

    def min_value_after(self, i, curve, valid_data, first_alive_helper=0):
        if valid_data:
            r = float(np.min(curve.data))
            if self.negative_rates:
                return r * 2.0 if r < 0.0 else r / 2.0
            return r / 2.0
        return -MAX_RATE if self.negative_rates else _EPSILON

    def max_value_after(self, i, curve, valid_data, first_alive_helper=0):
        if valid_data:
            r = float(np.max(curve.data))
            if self.negative_rates:
                return r / 2.0 if r < 0.0 else r * 2.0
            return r * 2.0
        return MAX_RATE

    def hard_bounds(self, i, curve):
        if self.negative_rates:
            return -math.inf, math.inf
        return 0.0, math.inf

    def update_guess(self, data, value, i):
        data[i] = value
        if i == 1:
            # first point is updated as well
            data[0] = value

    def max_iterations(self) -> int:
        return 30


class ZeroYield(_RateTraits):
    """Continuously compounded zero-rate curve."""

    quantity = "zero_yield"

    def zero_yield_impl(self, interpolation, t):
        return interpolation(t, True)


class ForwardRate(_RateTraits):
    """Instantaneous forward-rate curve."""

    quantity = "forward"

    def forward_impl(self, interpolation, t):
        return interpolation(t, True)


class _InflationTraits(BootstrapTraits):
    """Search logic shared by zero and year-on-year inflation curves."""

    quantity = "inflation_rate"

    def initial_date(self, curve) -> date:
        return curve.base_date

    def initial_value(self, curve) -> float:
        return curve.base_rate

    def guess(self, i, curve, valid_data, first_alive_helper=0):
        if valid_data:
            return float(curve.data[i])
        return AVG_INFLATION

    def min_value_after(self, i, curve, valid_data, first_alive_helper=0):
        if valid_data:
            r = float(np.min(curve.data))
            return r * 2.0 if r < 0.0 else r / 2.0
        return -MAX_INFLATION

    def max_value_after(self, i, curve, valid_data, first_alive_helper=0):
        if valid_data:
            r = float(np.max(curve.data))
            return r / 2.0 if r < 0.0 else r * 2.0
        return MAX_INFLATION

    def hard_bounds(self, i, curve):
        # a rate of -100% would wipe the index out
        return -1.0, math.inf

    def update_guess(self, data, value, i):
        data[i] = value
        if i == 1:
            data[0] = value

    def rate_impl(self, interpolation, t):
        return interpolation(t, True)


class ZeroInflationTraits(_InflationTraits):
    """Zero-coupon inflation curve."""

    def max_iterations(self) -> int:
        return 5


class YoYInflationTraits(_InflationTraits):
    """Year-on-year inflation curve."""

    def max_iterations(self) -> int:
        return 40


_TRAITS = {
    "discount": Discount,
    "zero": ZeroYield,
    "zero_yield": ZeroYield,
    "forward": ForwardRate,
    "forward_rate": ForwardRate,
}


def create_traits(name: str, negative_rates: Optional[bool] = None) -> BootstrapTraits:
    """Build a yield-curve trait by name ("discount", "zero_yield", "forward")."""
    key = name.lower().replace("-", "_").replace(" ", "_")
    if key not in _TRAITS:
        raise ValueError(f"Unknown curve traits: {name}")
    return _TRAITS[key](negative_rates)


__all__ = [
    "AVG_RATE",
    "MAX_RATE",
    "AVG_INFLATION",
    "MAX_INFLATION",
    "BootstrapTraits",
    "Discount",
    "ZeroYield",
    "ForwardRate",
    "ZeroInflationTraits",
    "YoYInflationTraits",
    "create_traits",
]
