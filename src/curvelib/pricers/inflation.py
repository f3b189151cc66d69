"""
Inflation swaps.

- ZeroCouponInflationSwap: N[(1 + K)^T - 1] against N[I(T - lag) / I(start - lag) - 1],
  both paid at maturity
- YearOnYearInflationSwap: per period, K * tau against yoy(e_i - lag) * tau

Index fixings are read through the index's linked inflation curve;
cashflows are discounted on a separate nominal curve handle.
"""

from datetime import date
from typing import List, Optional

from ..conventions import (
    BusinessDayConvention,
    DayCount,
    Frequency,
    adjust_business_day,
    year_fraction
)
from ..dates import DateUtils, Period, generate_accrual_schedule
from ..errors import ValidationError
from ..indexes import YoYInflationIndex, ZeroInflationIndex
from ..quotes import Handle
from .swaps import SwapLegCashflow


def _lagged(d: date, lag: Period) -> date:
    return DateUtils.add_period(d, -lag)


class ZeroCouponInflationSwap:
    """
    Zero-coupon inflation-indexed swap (ZCIIS).

    Args:
        start_date: Swap start
        maturity_date: Swap end (payment date before adjustment)
        fixed_rate: Annual fixed rate K
        index: Zero inflation index
        observation_lag: Lag applied to both index observations
        day_count: Day count of the fixed leg tenor T
        discounting: Nominal discount curve handle
        nominal: Notional amount
    """

    def __init__(
        self,
        start_date: date,
        maturity_date: date,
        fixed_rate: float,
        index: ZeroInflationIndex,
        observation_lag,
        day_count: DayCount = DayCount.ACT_365,
        discounting: Optional[Handle] = None,
        convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
        holidays: Optional[set] = None,
        nominal: float = 1.0
    ):
        if maturity_date <= start_date:
            raise ValidationError(f"maturity {maturity_date} must be after start {start_date}")
        self.start_date = start_date
        self.maturity_date = maturity_date
        self.fixed_rate = fixed_rate
        self.index = index
        self.observation_lag = Period.parse(observation_lag)
        self.day_count = day_count
        self.discounting = discounting
        self.nominal = nominal
        self.payment_date = adjust_business_day(maturity_date, convention, holidays)

    def tenor(self) -> float:
        return year_fraction(self.start_date, self.maturity_date, self.day_count)

    def base_fixing_date(self) -> date:
        return _lagged(self.start_date, self.observation_lag)

    def fixing_date(self) -> date:
        return _lagged(self.maturity_date, self.observation_lag)

    def index_ratio(self) -> float:
        return self.index.fixing(self.fixing_date()) / self.index.fixing(self.base_fixing_date())

    def fair_rate(self) -> float:
        """K such that (1 + K)^T equals the index ratio."""
        return self.index_ratio() ** (1.0 / self.tenor()) - 1.0

    def npv(self) -> float:
        """Value to the inflation receiver."""
        if self.discounting is None or self.discounting.empty():
            raise ValidationError("no nominal discounting term structure set")
        df = self.discounting.current_link().discount(self.payment_date)
        fixed = (1.0 + self.fixed_rate) ** self.tenor() - 1.0
        inflation = self.index_ratio() - 1.0
        return (inflation - fixed) * df * self.nominal


class YearOnYearInflationSwap:
    """
    Year-on-year inflation swap.

    Each period pays the YoY rate fixed at (accrual end - observation lag)
    against the fixed rate, both accrued with the same day count.
    """

    def __init__(
        self,
        start_date: date,
        maturity_date: date,
        fixed_rate: float,
        index: YoYInflationIndex,
        observation_lag,
        payment_frequency: Frequency = Frequency.ANNUAL,
        day_count: DayCount = DayCount.ACT_365,
        discounting: Optional[Handle] = None,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        holidays: Optional[set] = None,
        nominal: float = 1.0
    ):
        if maturity_date <= start_date:
            raise ValidationError(f"maturity {maturity_date} must be after start {start_date}")
        self.start_date = start_date
        self.maturity_date = maturity_date
        self.fixed_rate = fixed_rate
        self.index = index
        self.observation_lag = Period.parse(observation_lag)
        self.discounting = discounting
        self.nominal = nominal
        schedule = generate_accrual_schedule(
            start_date, maturity_date, Period.from_frequency(payment_frequency),
            day_count, convention, holidays
        )
        self.leg: List[SwapLegCashflow] = [
            SwapLegCashflow(e, s, e, yf)
            for s, e, yf in zip(schedule.accrual_starts, schedule.accrual_ends, schedule.year_fractions)
        ]

    def _discount_curve(self):
        if self.discounting is None or self.discounting.empty():
            raise ValidationError("no nominal discounting term structure set")
        return self.discounting.current_link()

    def yoy_fixings(self) -> List[float]:
        return [self.index.fixing(_lagged(cf.accrual_end, self.observation_lag)) for cf in self.leg]

    def fixed_leg_annuity(self) -> float:
        curve = self._discount_curve()
        return sum(cf.year_fraction * curve.discount(cf.payment_date)
                   for cf in self.leg if cf.payment_date > curve.reference_date)

    def yoy_leg_npv(self) -> float:
        curve = self._discount_curve()
        pv = 0.0
        for cf, yoy in zip(self.leg, self.yoy_fixings()):
            if cf.payment_date > curve.reference_date:
                pv += yoy * cf.year_fraction * curve.discount(cf.payment_date)
        return pv * self.nominal

    def npv(self) -> float:
        """Value to the YoY receiver."""
        return self.yoy_leg_npv() - self.fixed_rate * self.fixed_leg_annuity() * self.nominal

    def fair_rate(self) -> float:
        return self.yoy_leg_npv() / (self.fixed_leg_annuity() * self.nominal)


__all__ = [
    "ZeroCouponInflationSwap",
    "YearOnYearInflationSwap",
]
