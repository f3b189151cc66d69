"""
Interest rate swaps.

Instruments priced off linked curve handles (dereferenced at each call,
so a curve being bootstrapped is always read in its current state):
- VanillaSwap: fixed leg vs. term-rate (ibor) leg
- OvernightIndexedSwap: fixed leg vs. compounded overnight leg
- BasisSwap: term-rate leg vs. term-rate leg plus spread

Floating coupons are forecast as par coupons over their accrual period,
    L_i = (P(s_i) / P(e_i) - 1) / tau_i
so a single-curve floating leg telescopes to P(start) - P(end).

Pricing formula (payer of fixed):
    NPV = PV_float - PV_fixed
    PV_fixed = K * sum(tau_i * P(T_i))
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from ..conventions import (
    BusinessDayConvention,
    DayCount,
    Frequency,
    advance_business_days,
    year_fraction
)
from ..dates import Period, generate_accrual_schedule
from ..errors import ValidationError
from ..indexes import IborIndex, OvernightIndex
from ..quotes import Handle

BASIS_POINT = 1.0e-4


@dataclass
class SwapLegCashflow:
    """A single swap leg coupon."""
    payment_date: date
    accrual_start: date
    accrual_end: date
    year_fraction: float


def _build_leg(
    start: date,
    end: date,
    tenor,
    day_count: DayCount,
    convention: BusinessDayConvention,
    holidays: Optional[set],
    end_of_month: bool,
    payment_lag: int = 0
) -> List[SwapLegCashflow]:
    schedule = generate_accrual_schedule(start, end, tenor, day_count, convention, holidays, end_of_month)
    leg = []
    for s, e, yf in zip(schedule.accrual_starts, schedule.accrual_ends, schedule.year_fractions):
        pay = advance_business_days(e, payment_lag, holidays) if payment_lag else e
        leg.append(SwapLegCashflow(pay, s, e, yf))
    return leg


def _floating_rate(index: IborIndex, cf: SwapLegCashflow) -> float:
    """Fixed-in-the-past rate from history, otherwise the par forecast."""
    fixing_date = index.fixing_date(cf.accrual_start)
    curve = index.forwarding.current_link()
    if fixing_date < curve.reference_date:
        return index.fixing(fixing_date)
    return index.forecast_fixing(cf.accrual_start, cf.accrual_end)


class _Swap:
    """Discounting plumbing shared by the swap types."""

    def __init__(self, discounting: Optional[Handle], forwarding: Handle):
        self._discounting = discounting
        self._forwarding = forwarding

    def discount_curve(self):
        if self._discounting is not None and not self._discounting.empty():
            return self._discounting.current_link()
        if self._forwarding.empty():
            raise ValidationError("no discounting term structure set")
        return self._forwarding.current_link()

    @staticmethod
    def _alive(leg: List[SwapLegCashflow], curve) -> List[SwapLegCashflow]:
        return [cf for cf in leg if cf.payment_date > curve.reference_date]


class VanillaSwap(_Swap):
    """
    Fixed vs. term-rate swap.

    Args:
        effective_date: Start of both legs
        maturity_date: End of both legs
        fixed_rate: Fixed coupon rate
        index: Floating index (its forwarding handle projects the fixings)
        fixed_frequency: Fixed leg coupon frequency
        fixed_day_count: Fixed leg accrual day count
        spread: Spread over the floating fixings
        discounting: Discount curve handle (defaults to the index curve)
        nominal: Notional amount
    """

    def __init__(
        self,
        effective_date: date,
        maturity_date: date,
        fixed_rate: float,
        index: IborIndex,
        fixed_frequency: Frequency = Frequency.SEMIANNUAL,
        fixed_day_count: DayCount = DayCount.THIRTY_360,
        spread: float = 0.0,
        discounting: Optional[Handle] = None,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        holidays: Optional[set] = None,
        end_of_month: bool = False,
        nominal: float = 1.0
    ):
        super().__init__(discounting, index.forwarding)
        if maturity_date <= effective_date:
            raise ValidationError(f"maturity {maturity_date} must be after start {effective_date}")
        self.effective_date = effective_date
        self.maturity_date = maturity_date
        self.fixed_rate = fixed_rate
        self.index = index
        self.spread = spread
        self.nominal = nominal
        self.fixed_leg = _build_leg(
            effective_date, maturity_date, Period.from_frequency(fixed_frequency),
            fixed_day_count, convention, holidays, end_of_month
        )
        self.floating_leg = _build_leg(
            effective_date, maturity_date, index.tenor,
            index.day_count, convention, holidays, end_of_month
        )

    def fixed_leg_annuity(self) -> float:
        """sum(tau_i * P(T_i)) over the fixed leg."""
        curve = self.discount_curve()
        return sum(cf.year_fraction * curve.discount(cf.payment_date)
                   for cf in self._alive(self.fixed_leg, curve))

    def fixed_leg_bps(self) -> float:
        """Fixed leg value of one basis point."""
        return self.fixed_leg_annuity() * self.nominal * BASIS_POINT

    def floating_leg_annuity(self) -> float:
        curve = self.discount_curve()
        return sum(cf.year_fraction * curve.discount(cf.payment_date)
                   for cf in self._alive(self.floating_leg, curve))

    def floating_leg_npv(self) -> float:
        curve = self.discount_curve()
        pv = 0.0
        for cf in self._alive(self.floating_leg, curve):
            rate = _floating_rate(self.index, cf) + self.spread
            pv += rate * cf.year_fraction * curve.discount(cf.payment_date)
        return pv * self.nominal

    def fixed_leg_npv(self) -> float:
        return self.fixed_rate * self.fixed_leg_annuity() * self.nominal

    def npv(self) -> float:
        """Value to the fixed-rate payer."""
        return self.floating_leg_npv() - self.fixed_leg_npv()

    def fair_rate(self) -> float:
        """Fixed rate giving zero NPV."""
        return self.floating_leg_npv() / (self.fixed_leg_annuity() * self.nominal)

    def fair_spread(self) -> float:
        """Floating spread giving zero NPV."""
        return self.spread - self.npv() / (self.floating_leg_annuity() * self.nominal)


class OvernightIndexedSwap(_Swap):
    """
    Fixed vs. compounded overnight swap.

    The compounded overnight coupon over [s, e] is forecast exactly by
    telescoping the daily compounding: P_f(s) / P_f(e) - 1.
    """

    def __init__(
        self,
        effective_date: date,
        maturity_date: date,
        fixed_rate: float,
        index: OvernightIndex,
        payment_frequency: Frequency = Frequency.ANNUAL,
        fixed_day_count: DayCount = DayCount.ACT_360,
        spread: float = 0.0,
        discounting: Optional[Handle] = None,
        payment_lag: int = 0,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        holidays: Optional[set] = None,
        end_of_month: bool = False,
        nominal: float = 1.0
    ):
        super().__init__(discounting, index.forwarding)
        if maturity_date <= effective_date:
            raise ValidationError(f"maturity {maturity_date} must be after start {effective_date}")
        self.effective_date = effective_date
        self.maturity_date = maturity_date
        self.fixed_rate = fixed_rate
        self.index = index
        self.spread = spread
        self.nominal = nominal
        tenor = Period.from_frequency(payment_frequency)
        self.fixed_leg = _build_leg(
            effective_date, maturity_date, tenor, fixed_day_count,
            convention, holidays, end_of_month, payment_lag
        )
        self.overnight_leg = _build_leg(
            effective_date, maturity_date, tenor, index.day_count,
            convention, holidays, end_of_month, payment_lag
        )

    def fixed_leg_annuity(self) -> float:
        curve = self.discount_curve()
        return sum(cf.year_fraction * curve.discount(cf.payment_date)
                   for cf in self._alive(self.fixed_leg, curve))

    def overnight_leg_npv(self) -> float:
        discount = self.discount_curve()
        forwarding = self.index.forwarding.current_link()
        pv = 0.0
        for cf in self._alive(self.overnight_leg, discount):
            compounded = forwarding.discount(cf.accrual_start) / forwarding.discount(cf.accrual_end) - 1.0
            pv += (compounded + self.spread * cf.year_fraction) * discount.discount(cf.payment_date)
        return pv * self.nominal

    def npv(self) -> float:
        """Value to the fixed-rate payer."""
        return self.overnight_leg_npv() - self.fixed_rate * self.fixed_leg_annuity() * self.nominal

    def fair_rate(self) -> float:
        return self.overnight_leg_npv() / (self.fixed_leg_annuity() * self.nominal)


class BasisSwap(_Swap):
    """
    Term-rate basis swap: base index flat vs. other index plus spread.

    Args:
        effective_date: Start of both legs
        maturity_date: End of both legs
        base_index: Index of the leg paid flat
        other_index: Index of the leg paying ``spread``
        spread: Spread over the other index
        discounting: Discount curve handle (required when the two
            indexes forecast off different curves)
    """

    def __init__(
        self,
        effective_date: date,
        maturity_date: date,
        base_index: IborIndex,
        other_index: IborIndex,
        spread: float = 0.0,
        discounting: Optional[Handle] = None,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        holidays: Optional[set] = None,
        end_of_month: bool = False,
        nominal: float = 1.0
    ):
        super().__init__(discounting, base_index.forwarding)
        if maturity_date <= effective_date:
            raise ValidationError(f"maturity {maturity_date} must be after start {effective_date}")
        self.effective_date = effective_date
        self.maturity_date = maturity_date
        self.base_index = base_index
        self.other_index = other_index
        self.spread = spread
        self.nominal = nominal
        self.base_leg = _build_leg(
            effective_date, maturity_date, base_index.tenor, base_index.day_count,
            convention, holidays, end_of_month
        )
        self.other_leg = _build_leg(
            effective_date, maturity_date, other_index.tenor, other_index.day_count,
            convention, holidays, end_of_month
        )

    def _leg_npv(self, leg, index, spread) -> float:
        curve = self.discount_curve()
        return sum(
            (_floating_rate(index, cf) + spread) * cf.year_fraction * curve.discount(cf.payment_date)
            for cf in self._alive(leg, curve)
        ) * self.nominal

    def base_leg_npv(self) -> float:
        return self._leg_npv(self.base_leg, self.base_index, 0.0)

    def other_leg_npv(self) -> float:
        return self._leg_npv(self.other_leg, self.other_index, self.spread)

    def other_leg_annuity(self) -> float:
        curve = self.discount_curve()
        return sum(cf.year_fraction * curve.discount(cf.payment_date)
                   for cf in self._alive(self.other_leg, curve))

    def npv(self) -> float:
        """Value to the receiver of the other leg."""
        return self.other_leg_npv() - self.base_leg_npv()

    def fair_spread(self) -> float:
        """Spread over the other index giving zero NPV."""
        return self.spread - self.npv() / (self.other_leg_annuity() * self.nominal)


__all__ = [
    "BASIS_POINT",
    "SwapLegCashflow",
    "VanillaSwap",
    "OvernightIndexedSwap",
    "BasisSwap",
]
