"""
Term structure base classes.

- LazyObject: calculate-on-demand with a dirty flag
- TermStructure: reference date, day count, time conversion and range checks
- YieldTermStructure: discount / zero / forward query surface

Queries accept either a date or a time (year fraction from the reference date).
Zero rates are continuously compounded unless another compounding is requested.
"""

from datetime import date
from typing import Union
import logging

from ..conventions import (
    Compounding,
    DayCount,
    Frequency,
    implied_rate,
    year_fraction
)
from ..errors import ExtrapolationError, ValidationError
from ..math.interpolation import close
from ..quotes import Observable

logger = logging.getLogger(__name__)

DateOrTime = Union[date, float]


class LazyObject(Observable):
    """
    Object whose results are computed on first use and cached until invalidated.

    ``calculate()`` marks the object as calculated before running
    ``perform_calculations()`` so that queries made while calculating see
    the partial state instead of recursing. A failed calculation leaves the
    object dirty and re-raises.
    """

    _calculated = False
    _frozen = False

    def update(self) -> None:
        """Invalidate cached results and forward the notification."""
        if self._frozen:
            return
        was_calculated = self._calculated
        self._calculated = False
        if was_calculated:
            self.notify_observers()
        else:
            # keep the version counter moving for pull-style dependents
            self._version += 1

    def calculate(self) -> None:
        if not self._calculated and not self._frozen:
            self._calculated = True
            try:
                self.perform_calculations()
            except Exception:
                self._calculated = False
                raise

    def recalculate(self) -> None:
        """Force a fresh calculation and notify observers."""
        was_frozen = self._frozen
        self._calculated = False
        self._frozen = False
        try:
            self.calculate()
        finally:
            self._frozen = was_frozen
        self.notify_observers()

    def freeze(self) -> None:
        """Stop reacting to updates; the current results are kept."""
        self._frozen = True

    def unfreeze(self) -> None:
        if self._frozen:
            self._frozen = False
            self.update()

    @property
    def is_calculated(self) -> bool:
        return self._calculated

    def perform_calculations(self) -> None:
        raise NotImplementedError


class TermStructure(Observable):
    """
    Base term structure.

    Attributes:
        reference_date: Date at which t = 0
        day_count: Day count used to turn dates into times
    """

    def __init__(self, reference_date: date, day_count: DayCount = DayCount.ACT_365):
        super().__init__()
        self.reference_date = reference_date
        self.day_count = day_count
        self._extrapolate = False

    def time_from_reference(self, d: date) -> float:
        return year_fraction(self.reference_date, d, self.day_count)

    def _to_time(self, d_or_t: DateOrTime) -> float:
        if isinstance(d_or_t, date):
            return self.time_from_reference(d_or_t)
        return float(d_or_t)

    def max_date(self) -> date:
        raise NotImplementedError

    def max_time(self) -> float:
        return self.time_from_reference(self.max_date())

    def enable_extrapolation(self, enabled: bool = True) -> None:
        self._extrapolate = enabled

    def disable_extrapolation(self) -> None:
        self._extrapolate = False

    def allows_extrapolation(self) -> bool:
        return self._extrapolate

    def check_range(self, t: float, extrapolate: bool = False) -> None:
        if t < 0.0 and not close(t, 0.0):
            raise ValidationError(f"negative time ({t}) given")
        t_max = self.max_time()
        if not (extrapolate or self._extrapolate or t <= t_max or close(t, t_max)):
            raise ExtrapolationError(
                f"time ({t}) is past max curve time ({t_max})"
            )


class YieldTermStructure(TermStructure):
    """
    Interest-rate term structure.

    Subclasses implement ``discount_impl(t)``; everything else is derived:
        z(t) = -ln P(t) / t
        f(t1, t2) from P(t1) / P(t2)
        f(t) = -d ln P(t) / dt
    """

    # step used for t = 0 zero rates and instantaneous forwards
    DT = 1.0e-4

    def discount(self, d_or_t: DateOrTime, extrapolate: bool = False) -> float:
        """Discount factor P(0, t)."""
        t = self._to_time(d_or_t)
        self.check_range(t, extrapolate)
        return float(self.discount_impl(max(t, 0.0)))

    def zero_rate(
        self,
        d_or_t: DateOrTime,
        compounding: Compounding = Compounding.CONTINUOUS,
        frequency: Frequency = Frequency.ANNUAL,
        extrapolate: bool = False
    ) -> float:
        """Zero rate to t with the given compounding."""
        t = self._to_time(d_or_t)
        if t <= 0.0:
            compound = 1.0 / self.discount(self.DT, extrapolate)
            return implied_rate(compound, self.DT, compounding, frequency)
        compound = 1.0 / self.discount(t, extrapolate)
        return implied_rate(compound, t, compounding, frequency)

    def forward_rate(
        self,
        d1: DateOrTime,
        d2: DateOrTime,
        compounding: Compounding = Compounding.SIMPLE,
        frequency: Frequency = Frequency.ANNUAL,
        extrapolate: bool = False
    ) -> float:
        """
        Forward rate between t1 and t2.

        When t1 == t2 the instantaneous forward is approximated over a
        small step starting at t1.
        """
        t1 = self._to_time(d1)
        t2 = self._to_time(d2)
        if t2 < t1:
            raise ValidationError(f"t2 ({t2}) < t1 ({t1})")
        if close(t1, t2):
            t1 = max(t1 - self.DT / 2.0, 0.0)
            t2 = t1 + self.DT
        compound = self.discount(t1, extrapolate) / self.discount(t2, extrapolate)
        return implied_rate(compound, t2 - t1, compounding, frequency)

    def instantaneous_forward(self, d_or_t: DateOrTime, extrapolate: bool = False) -> float:
        """Continuously compounded instantaneous forward f(t)."""
        t = self._to_time(d_or_t)
        return self.forward_rate(t, t, Compounding.CONTINUOUS, Frequency.ANNUAL, extrapolate)

    def discount_impl(self, t: float) -> float:
        raise NotImplementedError


__all__ = [
    "DateOrTime",
    "LazyObject",
    "TermStructure",
    "YieldTermStructure",
]
