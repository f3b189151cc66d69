"""
Fixed-rate bond.

Features:
- Cashflow schedule generation (unadjusted accruals, adjusted payments)
- Accrued interest
- Clean and dirty price off a discount curve, relative to settlement
- Yield to maturity and modified duration, discounting to adjusted payment dates

Conventions:
- Prices are expressed per 100 face value
- Cashflows paid on or before settlement are excluded
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional
import math

from scipy.optimize import brentq

from ..conventions import (
    BusinessDayConvention,
    Compounding,
    DayCount,
    Frequency,
    adjust_business_day,
    advance_business_days,
    year_fraction
)
from ..dates import Period, generate_accrual_schedule
from ..errors import ValidationError


@dataclass
class BondCashflow:
    """A single bond cashflow."""
    date: date
    amount: float  # In currency units for the bond's face value
    type: str  # "COUPON" or "PRINCIPAL"
    accrual_start: Optional[date] = None
    accrual_end: Optional[date] = None


class FixedRateBond:
    """
    Bullet bond paying a fixed coupon.

    Attributes:
        issue_date: Start of the first accrual period
        maturity_date: Last accrual end and redemption date (unadjusted)
        coupon_rate: Annual coupon rate (decimal)
        frequency: Coupon frequency
        day_count: Accrual day count
        face_value: Face value
        settlement_days: Business days from trade to settlement
        payment_convention: Adjustment of payment dates
    """

    def __init__(
        self,
        issue_date: date,
        maturity_date: date,
        coupon_rate: float,
        frequency: Frequency = Frequency.SEMIANNUAL,
        day_count: DayCount = DayCount.ACT_ACT,
        face_value: float = 100.0,
        settlement_days: int = 1,
        payment_convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
        holidays: Optional[set] = None,
        end_of_month: bool = False
    ):
        if maturity_date <= issue_date:
            raise ValidationError(f"maturity {maturity_date} must be after issue {issue_date}")
        if face_value <= 0.0:
            raise ValidationError("face value must be positive")
        self.issue_date = issue_date
        self.maturity_date = maturity_date
        self.coupon_rate = coupon_rate
        self.frequency = frequency
        self.day_count = day_count
        self.face_value = face_value
        self.settlement_days = settlement_days
        self.payment_convention = payment_convention
        self.holidays = holidays

        schedule = generate_accrual_schedule(
            issue_date, maturity_date, Period.from_frequency(frequency), day_count,
            BusinessDayConvention.UNADJUSTED, holidays, end_of_month
        )
        self._cashflows: List[BondCashflow] = []
        for start, end, yf in zip(schedule.accrual_starts, schedule.accrual_ends, schedule.year_fractions):
            self._cashflows.append(BondCashflow(
                date=adjust_business_day(end, payment_convention, holidays),
                amount=face_value * coupon_rate * yf,
                type="COUPON",
                accrual_start=start,
                accrual_end=end
            ))
        self._cashflows.append(BondCashflow(
            date=adjust_business_day(maturity_date, payment_convention, holidays),
            amount=face_value,
            type="PRINCIPAL"
        ))

    def cashflows(self) -> List[BondCashflow]:
        return list(self._cashflows)

    def settlement_date(self, trade_date: date) -> date:
        d = advance_business_days(trade_date, self.settlement_days, self.holidays)
        return max(d, self.issue_date)

    def payment_date(self) -> date:
        """Date of the last cashflow."""
        return self._cashflows[-1].date

    def remaining_cashflows(self, settlement: date) -> List[BondCashflow]:
        return [cf for cf in self._cashflows if cf.date > settlement]

    def accrued_amount(self, settlement: date) -> float:
        """Accrued interest per 100 face at settlement."""
        for cf in self._cashflows:
            if cf.type != "COUPON":
                continue
            if cf.accrual_start <= settlement < cf.accrual_end and cf.date > settlement:
                period = year_fraction(cf.accrual_start, cf.accrual_end, self.day_count)
                elapsed = year_fraction(cf.accrual_start, settlement, self.day_count)
                return cf.amount * elapsed / period * 100.0 / self.face_value
        return 0.0

    def dirty_price(self, curve, settlement: date) -> float:
        """
        Price per 100 face, including accrued, discounted to settlement.

        Args:
            curve: Yield term structure providing discount(date)
            settlement: Settlement date
        """
        pv = sum(cf.amount * curve.discount(cf.date) for cf in self.remaining_cashflows(settlement))
        if settlement != curve.reference_date:
            pv /= curve.discount(settlement)
        return pv * 100.0 / self.face_value

    def clean_price(self, curve, settlement: date) -> float:
        return self.dirty_price(curve, settlement) - self.accrued_amount(settlement)

    def _price_at_yield(
        self,
        y: float,
        settlement: date,
        compounding: Compounding,
        frequency: Frequency
    ) -> float:
        f = frequency.value
        pv = 0.0
        for cf in self.remaining_cashflows(settlement):
            t = year_fraction(settlement, cf.date, self.day_count)
            if compounding == Compounding.CONTINUOUS:
                df = math.exp(-y * t)
            else:
                df = (1.0 + y / f) ** (-f * t)
            pv += cf.amount * df
        return pv * 100.0 / self.face_value

    def yield_to_maturity(
        self,
        price: float,
        settlement: date,
        clean: bool = True,
        compounding: Compounding = Compounding.COMPOUNDED,
        frequency: Optional[Frequency] = None
    ) -> float:
        """
        Yield that reprices the bond.

        Args:
            price: Market price per 100 face (clean or dirty)
            settlement: Settlement date
            clean: Whether ``price`` is clean
            compounding: COMPOUNDED (default) or CONTINUOUS
            frequency: Compounding frequency (bond frequency by default)
        """
        frequency = frequency or self.frequency
        target = price + self.accrued_amount(settlement) if clean else price

        def objective(y):
            return self._price_at_yield(y, settlement, compounding, frequency) - target

        return brentq(objective, -0.5 * frequency.value + 1e-6, 2.0, xtol=1e-12)

    def modified_duration(
        self,
        y: float,
        settlement: date,
        compounding: Compounding = Compounding.COMPOUNDED,
        frequency: Optional[Frequency] = None
    ) -> float:
        """
        Modified duration -1/P dP/dy at yield ``y``.

        For compounded yields this is the Macaulay duration divided by (1 + y/f).
        """
        frequency = frequency or self.frequency
        f = frequency.value
        price = 0.0
        dpdy = 0.0
        for cf in self.remaining_cashflows(settlement):
            t = year_fraction(settlement, cf.date, self.day_count)
            if compounding == Compounding.CONTINUOUS:
                df = math.exp(-y * t)
                dpdy -= t * cf.amount * df
            else:
                df = (1.0 + y / f) ** (-f * t)
                dpdy -= t * cf.amount * df / (1.0 + y / f)
            price += cf.amount * df
        if price == 0.0:
            return 0.0
        return -dpdy / price

    def __repr__(self) -> str:
        return (f"FixedRateBond({self.coupon_rate:.4%} {self.maturity_date}, "
                f"{self.frequency.name.lower()}, {self.day_count.value})")


__all__ = [
    "BondCashflow",
    "FixedRateBond",
]
