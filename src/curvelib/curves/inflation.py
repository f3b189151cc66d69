"""
Inflation term structures.

Inflation curves are observed with a lag: the curve's base date is the
reference date minus the observation lag (moved to the start of its
inflation period when the index is not interpolated), and times are
measured from the base date rather than the reference date.

- ZeroInflationTermStructure: zero-coupon inflation rate z(d), so that
  I(d) = I(base) * (1 + z(d))^t(base, d)
- YoYInflationTermStructure: year-on-year inflation rate yoy(d)

Both come as curves interpolating given nodes and as piecewise curves
bootstrapped from inflation swap helpers.
"""

from datetime import date
from typing import List, Optional, Sequence, Union

from ..conventions import DayCount, Frequency, year_fraction
from ..dates import DateUtils, Period, inflation_period
from ..errors import ValidationError
from ..math.interpolation import Interpolator, Linear, create_interpolator
from ..quotes import Handle
from .base import DateOrTime, LazyObject, TermStructure
from .bootstrap import BootstrapConfig, IterativeBootstrap
from .interpolated import InterpolatedCurve
from .traits import BootstrapTraits, YoYInflationTraits, ZeroInflationTraits


class InflationTermStructure(TermStructure):
    """
    Base inflation term structure.

    Attributes:
        reference_date: Curve anchor
        observation_lag: Lag between a date and the index observation it uses
        frequency: Publication frequency of the index
        index_is_interpolated: Whether index fixings are interpolated within a period
        base_rate: Inflation rate at the base date
        nominal_term_structure: Handle to the nominal curve discounting inflation swaps
    """

    def __init__(
        self,
        reference_date: date,
        observation_lag,
        frequency: Frequency = Frequency.MONTHLY,
        index_is_interpolated: bool = False,
        base_rate: float = 0.0,
        day_count: DayCount = DayCount.ACT_365,
        nominal_term_structure: Optional[Handle] = None
    ):
        super().__init__(reference_date, day_count)
        self.observation_lag = Period.parse(observation_lag)
        self.frequency = frequency
        self.index_is_interpolated = index_is_interpolated
        self.base_rate = base_rate
        self.nominal_term_structure = (
            nominal_term_structure if nominal_term_structure is not None else Handle()
        )

    @property
    def base_date(self) -> date:
        lagged = DateUtils.add_period(self.reference_date, -self.observation_lag)
        if self.index_is_interpolated:
            return lagged
        return inflation_period(lagged, self.frequency)[0]

    def time_from_base(self, d: date) -> float:
        return year_fraction(self.base_date, d, self.day_count)

    def _to_time(self, d_or_t: DateOrTime) -> float:
        if isinstance(d_or_t, date):
            if d_or_t < self.base_date:
                raise ValidationError(f"date ({d_or_t}) is before base date ({self.base_date})")
            return self.time_from_base(d_or_t)
        return float(d_or_t)

    def max_time(self) -> float:
        return self.time_from_base(self.max_date())

    def nominal_curve(self):
        if self.nominal_term_structure.empty():
            raise ValidationError("nominal term structure not set")
        return self.nominal_term_structure.current_link()


class ZeroInflationTermStructure(InflationTermStructure):
    """Zero-coupon inflation rates; subclasses implement ``zero_rate_impl(t)``."""

    def zero_rate(self, d_or_t: DateOrTime, extrapolate: bool = False) -> float:
        t = self._to_time(d_or_t)
        self.check_range(t, extrapolate)
        return float(self.zero_rate_impl(t))

    def zero_rate_impl(self, t: float) -> float:
        raise NotImplementedError


class YoYInflationTermStructure(InflationTermStructure):
    """Year-on-year inflation rates; subclasses implement ``yoy_rate_impl(t)``."""

    def yoy_rate(self, d_or_t: DateOrTime, extrapolate: bool = False) -> float:
        t = self._to_time(d_or_t)
        self.check_range(t, extrapolate)
        return float(self.yoy_rate_impl(t))

    def yoy_rate_impl(self, t: float) -> float:
        raise NotImplementedError


class _InterpolatedInflationCurve(InterpolatedCurve):
    """Node handling shared by the interpolated inflation curves."""

    traits: BootstrapTraits = None

    def _init_inflation_nodes(
        self,
        traits: BootstrapTraits,
        interpolator: Union[Interpolator, str, None],
        dates: Optional[Sequence[date]],
        rates: Optional[Sequence[float]]
    ) -> None:
        if isinstance(interpolator, str):
            interpolator = create_interpolator(interpolator)
        self.traits = traits
        self._init_nodes(interpolator if interpolator is not None else Linear())
        if dates is not None:
            if rates is None:
                raise ValidationError("node rates are required with node dates")
            if dates[0] != self.base_date:
                raise ValidationError(
                    f"first node date ({dates[0]}) must be the base date ({self.base_date})"
                )
            self._set_nodes(dates, rates)
            self.setup_interpolation()
            self.base_rate = float(rates[0])

    def _node_time(self, d: date) -> float:
        return self.time_from_base(d)

    def _rate_impl(self, t: float) -> float:
        self._ensure_nodes()
        return self.traits.rate_impl(self._interpolation, t)


class InterpolatedZeroInflationCurve(_InterpolatedInflationCurve, ZeroInflationTermStructure):
    """
    Zero inflation curve interpolating given (date, rate) nodes.

    The first node must sit at the base date. Outside the nodes the
    interpolation is extended.
    """

    def __init__(
        self,
        reference_date: date,
        observation_lag,
        frequency: Frequency = Frequency.MONTHLY,
        index_is_interpolated: bool = False,
        dates: Optional[Sequence[date]] = None,
        rates: Optional[Sequence[float]] = None,
        interpolator: Union[Interpolator, str, None] = None,
        day_count: DayCount = DayCount.ACT_365,
        nominal_term_structure: Optional[Handle] = None,
        base_rate: float = 0.0
    ):
        super().__init__(
            reference_date, observation_lag, frequency, index_is_interpolated,
            base_rate, day_count, nominal_term_structure
        )
        self._init_inflation_nodes(ZeroInflationTraits(), interpolator, dates, rates)

    def zero_rate_impl(self, t: float) -> float:
        return self._rate_impl(t)


class InterpolatedYoYInflationCurve(_InterpolatedInflationCurve, YoYInflationTermStructure):
    """Year-on-year inflation curve interpolating given (date, rate) nodes."""

    def __init__(
        self,
        reference_date: date,
        observation_lag,
        frequency: Frequency = Frequency.MONTHLY,
        index_is_interpolated: bool = False,
        dates: Optional[Sequence[date]] = None,
        rates: Optional[Sequence[float]] = None,
        interpolator: Union[Interpolator, str, None] = None,
        day_count: DayCount = DayCount.ACT_365,
        nominal_term_structure: Optional[Handle] = None,
        base_rate: float = 0.0
    ):
        super().__init__(
            reference_date, observation_lag, frequency, index_is_interpolated,
            base_rate, day_count, nominal_term_structure
        )
        self._init_inflation_nodes(YoYInflationTraits(), interpolator, dates, rates)

    def yoy_rate_impl(self, t: float) -> float:
        return self._rate_impl(t)


class PiecewiseZeroInflationCurve(LazyObject, InterpolatedZeroInflationCurve):
    """
    Zero inflation curve bootstrapped from zero-coupon inflation swap helpers.

    Args:
        reference_date: Curve anchor
        base_rate: Starting value of the base node (replaced once the
            first node is solved)
        observation_lag: Swap observation lag
        frequency: Index publication frequency
        index_is_interpolated: Whether the index interpolates within a period
        instruments: ZeroCouponInflationSwapHelper list
        nominal_term_structure: Handle to the nominal discount curve
        day_count: Day count for times from the base date
        interpolator: Interpolation scheme (default Linear)
        config: Numerical settings of the bootstrap
    """

    def __init__(
        self,
        reference_date: date,
        base_rate: float,
        observation_lag,
        instruments: Sequence,
        frequency: Frequency = Frequency.MONTHLY,
        index_is_interpolated: bool = False,
        nominal_term_structure: Optional[Handle] = None,
        day_count: DayCount = DayCount.ACT_365,
        interpolator: Union[Interpolator, str, None] = None,
        config: Optional[BootstrapConfig] = None
    ):
        super().__init__(
            reference_date, observation_lag, frequency, index_is_interpolated,
            interpolator=interpolator, day_count=day_count,
            nominal_term_structure=nominal_term_structure, base_rate=base_rate
        )
        self.instruments: List = list(instruments)
        self.bootstrap = IterativeBootstrap(config)
        self.bootstrap.setup(self)
        self.nominal_term_structure.register_observer(self.update)

    def _ensure_nodes(self) -> None:
        self.calculate()

    def perform_calculations(self) -> None:
        self.bootstrap.calculate()


class PiecewiseYoYInflationCurve(LazyObject, InterpolatedYoYInflationCurve):
    """Year-on-year inflation curve bootstrapped from YoY inflation swap helpers."""

    def __init__(
        self,
        reference_date: date,
        base_rate: float,
        observation_lag,
        instruments: Sequence,
        frequency: Frequency = Frequency.MONTHLY,
        index_is_interpolated: bool = False,
        nominal_term_structure: Optional[Handle] = None,
        day_count: DayCount = DayCount.ACT_365,
        interpolator: Union[Interpolator, str, None] = None,
        config: Optional[BootstrapConfig] = None
    ):
        super().__init__(
            reference_date, observation_lag, frequency, index_is_interpolated,
            interpolator=interpolator, day_count=day_count,
            nominal_term_structure=nominal_term_structure, base_rate=base_rate
        )
        self.instruments: List = list(instruments)
        self.bootstrap = IterativeBootstrap(config)
        self.bootstrap.setup(self)
        self.nominal_term_structure.register_observer(self.update)

    def _ensure_nodes(self) -> None:
        self.calculate()

    def perform_calculations(self) -> None:
        self.bootstrap.calculate()


__all__ = [
    "InflationTermStructure",
    "ZeroInflationTermStructure",
    "YoYInflationTermStructure",
    "InterpolatedZeroInflationCurve",
    "InterpolatedYoYInflationCurve",
    "PiecewiseZeroInflationCurve",
    "PiecewiseYoYInflationCurve",
]
