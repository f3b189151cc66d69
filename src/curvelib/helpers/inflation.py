"""
Inflation swap bootstrap helpers.

The helper's pillar is the index observation date of the swap maturity
(maturity minus observation lag), moved to the start of its inflation
period when the index is not interpolated. Swaps start on the nominal
curve's reference date and are discounted on the nominal curve attached
to the inflation curve being bootstrapped.
"""

from datetime import date
from typing import Optional, Union

from ..conventions import BusinessDayConvention, DayCount, Frequency
from ..dates import DateUtils, Period, inflation_period
from ..errors import ValidationError
from ..indexes import InflationIndex, YoYInflationIndex, ZeroInflationIndex
from ..pricers.inflation import YearOnYearInflationSwap, ZeroCouponInflationSwap
from ..quotes import Handle, Quote, RelinkableHandle
from .base import BootstrapHelper


def _check_lags(observation_lag: Period, index: InflationIndex) -> None:
    if not index.interpolated:
        return
    period = Period.from_frequency(index.frequency)
    if not observation_lag - period > index.availability_lag:
        raise ValidationError(
            f"inconsistency between swap observation lag {observation_lag}, "
            f"index period {period} and index availability {index.availability_lag}: "
            f"need (observation lag - index period) > availability lag"
        )


class _InflationSwapHelper(BootstrapHelper):
    """Dates and curve linking shared by the inflation swap helpers."""

    def __init__(
        self,
        quote: Union[float, Quote, Handle],
        observation_lag,
        maturity: date,
        index: InflationIndex,
        day_count: DayCount,
        convention: BusinessDayConvention,
        holidays: Optional[set]
    ):
        super().__init__(quote)
        self.observation_lag = Period.parse(observation_lag)
        _check_lags(self.observation_lag, index)
        self.maturity = maturity
        self.day_count = day_count
        self.convention = convention
        self.holidays = holidays
        self._ts_handle = RelinkableHandle()
        self.index = index.clone(self._ts_handle)
        self.swap = None
        index.register_observer(self.update)

        observed = DateUtils.add_period(maturity, -self.observation_lag)
        if not index.interpolated:
            observed = inflation_period(observed, index.frequency)[0]
        self._earliest_date = observed
        self._latest_date = observed

    def set_term_structure(self, ts) -> None:
        super().set_term_structure(ts)
        self._ts_handle.link_to(ts, register_as_observer=False)
        start = ts.nominal_curve().reference_date
        if self.swap is None or self.swap.start_date != start:
            self.swap = self._build_swap(start, ts.nominal_term_structure)

    def _build_swap(self, start: date, discounting: Handle):
        raise NotImplementedError

    def implied_quote(self) -> float:
        self.term_structure()
        return self.swap.fair_rate()


class ZeroCouponInflationSwapHelper(_InflationSwapHelper):
    """
    Zero-coupon inflation swap quoted by its fixed rate.

    Args:
        quote: Fixed rate quote
        observation_lag: Lag on the swap's index observations
        maturity: Swap maturity
        index: Zero inflation index; cloned onto the curve being bootstrapped
        day_count: Day count of the fixed leg
        convention: Payment date adjustment
        holidays: Optional holiday dates
    """

    def __init__(
        self,
        quote: Union[float, Quote, Handle],
        observation_lag,
        maturity: date,
        index: ZeroInflationIndex,
        day_count: DayCount = DayCount.ACT_365,
        convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
        holidays: Optional[set] = None
    ):
        super().__init__(quote, observation_lag, maturity, index, day_count, convention, holidays)

    def _build_swap(self, start: date, discounting: Handle) -> ZeroCouponInflationSwap:
        return ZeroCouponInflationSwap(
            start, self.maturity, self._quote.current_link().value(), self.index,
            self.observation_lag, self.day_count, discounting, self.convention, self.holidays
        )


class YearOnYearInflationSwapHelper(_InflationSwapHelper):
    """Year-on-year inflation swap quoted by its fixed rate."""

    def __init__(
        self,
        quote: Union[float, Quote, Handle],
        observation_lag,
        maturity: date,
        index: YoYInflationIndex,
        payment_frequency: Frequency = Frequency.ANNUAL,
        day_count: DayCount = DayCount.ACT_365,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        holidays: Optional[set] = None
    ):
        self.payment_frequency = payment_frequency
        super().__init__(quote, observation_lag, maturity, index, day_count, convention, holidays)

    def _build_swap(self, start: date, discounting: Handle) -> YearOnYearInflationSwap:
        return YearOnYearInflationSwap(
            start, self.maturity, self._quote.current_link().value(), self.index,
            self.observation_lag, self.payment_frequency, self.day_count, discounting,
            self.convention, self.holidays
        )


__all__ = [
    "ZeroCouponInflationSwapHelper",
    "YearOnYearInflationSwapHelper",
]
