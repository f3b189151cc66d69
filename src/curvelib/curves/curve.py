"""
Yield curves built from nodes.

InterpolatedYieldCurve composes a trait (what is interpolated) with an
interpolator (how). Depending on the trait the nodes hold:
- discount factors P(0,t)
- continuously compounded zero rates z(t)
- instantaneous forward rates f(t)

Beyond the last node the curve extrapolates with a flat instantaneous
forward taken from the last node, which keeps discount factors continuous
at the last node time.
"""

from datetime import date
from typing import Optional, Sequence, Union
import math

from ..conventions import Compounding, DayCount, Frequency, compound_factor
from ..errors import ValidationError
from ..math.interpolation import Interpolator, LogLinear, create_interpolator
from ..quotes import Handle, Quote, as_quote_handle
from .base import DateOrTime, YieldTermStructure
from .interpolated import InterpolatedCurve
from .traits import BootstrapTraits, Discount, create_traits


class InterpolatedYieldCurve(InterpolatedCurve, YieldTermStructure):
    """
    Yield curve interpolating trait-defined node values.

    Attributes:
        reference_date: Curve anchor (t = 0)
        day_count: Day count for time calculations
        traits: Node quantity (Discount, ZeroYield or ForwardRate)
        interpolator: Interpolation scheme factory

    Conventions:
        - The first node sits at the reference date
        - Times are year fractions from the reference date
        - Discount factor at t=0 is 1.0
    """

    def __init__(
        self,
        reference_date: date,
        day_count: DayCount = DayCount.ACT_365,
        traits: Union[BootstrapTraits, str, None] = None,
        interpolator: Union[Interpolator, str, None] = None,
        dates: Optional[Sequence[date]] = None,
        data: Optional[Sequence[float]] = None
    ):
        super().__init__(reference_date, day_count)
        if isinstance(traits, str):
            traits = create_traits(traits)
        if isinstance(interpolator, str):
            interpolator = create_interpolator(interpolator)
        self.traits = traits if traits is not None else Discount()
        self._init_nodes(interpolator if interpolator is not None else LogLinear())

        if dates is not None:
            if data is None:
                raise ValidationError("node values are required with node dates")
            if dates[0] != reference_date:
                raise ValidationError(
                    f"first node date ({dates[0]}) must be the reference date ({reference_date})"
                )
            if self.traits.quantity == "discount":
                if data[0] != 1.0:
                    raise ValidationError(f"initial discount factor ({data[0]}) must be 1.0")
                if any(v <= 0.0 for v in data):
                    raise ValidationError("discount factors must be positive")
            self._set_nodes(dates, data)
            self.setup_interpolation()

    @classmethod
    def from_nodes(
        cls,
        dates: Sequence[date],
        data: Sequence[float],
        day_count: DayCount = DayCount.ACT_365,
        traits: Optional[BootstrapTraits] = None,
        interpolator: Optional[Interpolator] = None
    ) -> "InterpolatedYieldCurve":
        """Build a curve whose reference date is the first node date."""
        return cls(dates[0], day_count, traits, interpolator, dates, data)

    # ------------------------------------------------------------------
    # node quantity with extrapolation

    def _zero_yield(self, t: float) -> float:
        t_max = self._times[-1]
        if t <= t_max:
            return self.traits.zero_yield_impl(self._interpolation, t)
        z_max = self._data[-1]
        inst_fwd_max = z_max + t_max * self._interpolation.derivative(t_max, True)
        return (z_max * t_max + inst_fwd_max * (t - t_max)) / t

    def _forward(self, t: float) -> float:
        if t <= self._times[-1]:
            return self.traits.forward_impl(self._interpolation, t)
        return self._data[-1]

    def _zero_from_forwards(self, t: float) -> float:
        if t == 0.0:
            return self._forward(0.0)
        t_max = self._times[-1]
        if t <= t_max:
            integral = self._interpolation.primitive(t, True)
        else:
            integral = self._interpolation.primitive(t_max, True) + self._data[-1] * (t - t_max)
        return integral / t

    def discount_impl(self, t: float) -> float:
        self._ensure_nodes()
        quantity = self.traits.quantity
        if quantity == "discount":
            t_max = self._times[-1]
            if t <= t_max:
                return self.traits.discount_impl(self._interpolation, t)
            d_max = self._data[-1]
            inst_fwd_max = -self._interpolation.derivative(t_max, True) / d_max
            return d_max * math.exp(-inst_fwd_max * (t - t_max))
        if quantity == "zero_yield":
            return math.exp(-self._zero_yield(t) * t)
        if quantity == "forward":
            return math.exp(-self._zero_from_forwards(t) * t)
        raise ValidationError(f"traits {self.traits!r} cannot build a yield curve")

    def instantaneous_forward(self, d_or_t: DateOrTime, extrapolate: bool = False) -> float:
        """Instantaneous forward from the interpolation's derivative."""
        t = self._to_time(d_or_t)
        self.check_range(t, extrapolate)
        t = max(t, 0.0)
        quantity = self.traits.quantity
        t_max = self._times[-1]
        if quantity == "discount":
            if t <= t_max:
                return -self._interpolation.derivative(t, True) / self._interpolation(t, True)
            return -self._interpolation.derivative(t_max, True) / self._data[-1]
        if quantity == "zero_yield":
            if t <= t_max:
                return self._interpolation(t, True) + t * self._interpolation.derivative(t, True)
            return self._data[-1] + t_max * self._interpolation.derivative(t_max, True)
        return self._forward(t)

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(reference={self.reference_date}, "
                f"traits={type(self.traits).__name__}, interpolator={self.interpolator!r}, "
                f"nodes={len(self._dates)})")


class FlatForward(YieldTermStructure):
    """
    Curve with a single forward rate.

    The rate may be a number, a Quote or a Handle; quote changes are
    forwarded to the curve's observers.
    """

    def __init__(
        self,
        reference_date: date,
        forward: Union[float, Quote, Handle],
        day_count: DayCount = DayCount.ACT_365,
        compounding: Compounding = Compounding.CONTINUOUS,
        frequency: Frequency = Frequency.ANNUAL
    ):
        super().__init__(reference_date, day_count)
        self._forward = as_quote_handle(forward)
        self._forward.register_observer(self.notify_observers)
        self.compounding = compounding
        self.frequency = frequency

    @property
    def rate(self) -> float:
        return self._forward.current_link().value()

    def max_date(self) -> date:
        return date.max

    def max_time(self) -> float:
        return math.inf

    def discount_impl(self, t: float) -> float:
        return 1.0 / compound_factor(self.rate, t, self.compounding, self.frequency)

    def __repr__(self) -> str:
        return f"FlatForward(reference={self.reference_date}, rate={self._forward.current_link()!r})"


def create_flat_curve(
    anchor_date: date,
    rate: float,
    day_count: DayCount = DayCount.ACT_365,
    compounding: Compounding = Compounding.CONTINUOUS
) -> FlatForward:
    """
    Create a flat yield curve.

    Args:
        anchor_date: Valuation date
        rate: Flat rate (continuously compounded by default)
        day_count: Day count for time calculations
        compounding: Compounding of ``rate``

    Returns:
        Flat curve
    """
    return FlatForward(anchor_date, rate, day_count, compounding)


__all__ = [
    "InterpolatedYieldCurve",
    "FlatForward",
    "create_flat_curve",
]
