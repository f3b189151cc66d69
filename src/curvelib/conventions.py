"""
Day count conventions, business day adjustments and rate compounding.

Supported Day Counts:
- ACT/360: Actual days / 360 (money markets, OIS)
- ACT/365: Actual days / 365 (inflation, GBP)
- ACT/ACT: Actual days / actual days in year (ISDA)
- 30/360: 30 days per month / 360 (bond and swap fixed legs)

Business Day Conventions:
- Modified Following: Move to next business day, unless it falls in next month (then previous)
- Following: Move to next business day
- Preceding: Move to previous business day

The calendar is weekends plus an optional set of holiday dates.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Optional
import calendar
import math


class DayCount(Enum):
    """Day count convention enumeration."""
    ACT_360 = "ACT/360"
    ACT_365 = "ACT/365"
    ACT_ACT = "ACT/ACT"
    THIRTY_360 = "30/360"

    @classmethod
    def from_string(cls, s: str) -> "DayCount":
        """Parse day count from string representation."""
        mapping = {
            "ACT/360": cls.ACT_360,
            "ACT360": cls.ACT_360,
            "ACT/365": cls.ACT_365,
            "ACT365": cls.ACT_365,
            "ACT/365F": cls.ACT_365,
            "ACT/ACT": cls.ACT_ACT,
            "ACTACT": cls.ACT_ACT,
            "30/360": cls.THIRTY_360,
            "30360": cls.THIRTY_360,
        }
        key = s.upper().replace(" ", "")
        if key in mapping:
            return mapping[key]
        raise ValueError(f"Unknown day count convention: {s}")


class BusinessDayConvention(Enum):
    """Business day adjustment convention."""
    MODIFIED_FOLLOWING = "ModifiedFollowing"
    FOLLOWING = "Following"
    PRECEDING = "Preceding"
    UNADJUSTED = "Unadjusted"


class Compounding(Enum):
    """Interest rate compounding rule."""
    SIMPLE = "Simple"
    COMPOUNDED = "Compounded"
    CONTINUOUS = "Continuous"
    SIMPLE_THEN_COMPOUNDED = "SimpleThenCompounded"


class Frequency(Enum):
    """Payments (or compounding periods) per year."""
    ANNUAL = 1
    SEMIANNUAL = 2
    EVERY_FOUR_MONTH = 3
    QUARTERLY = 4
    BIMONTHLY = 6
    MONTHLY = 12

    @classmethod
    def from_string(cls, s: str) -> "Frequency":
        mapping = {
            "ANNUAL": cls.ANNUAL,
            "SEMI": cls.SEMIANNUAL,
            "SEMIANNUAL": cls.SEMIANNUAL,
            "QUARTERLY": cls.QUARTERLY,
            "MONTHLY": cls.MONTHLY,
        }
        key = s.upper().replace("_", "").replace("-", "")
        if key in mapping:
            return mapping[key]
        raise ValueError(f"Unknown frequency: {s}")

    @property
    def months(self) -> int:
        """Length of one period in months."""
        return 12 // self.value


@dataclass
class Conventions:
    """
    Container for instrument conventions.

    Attributes:
        day_count: Day count convention for accrual
        business_day: Business day adjustment rule
        compounding: Rate compounding convention
        frequency: Payment frequency
        settlement_days: Business days to settle from trade date
    """
    day_count: DayCount = DayCount.ACT_360
    business_day: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING
    compounding: Compounding = Compounding.CONTINUOUS
    frequency: Frequency = Frequency.ANNUAL
    settlement_days: int = 2

    @classmethod
    def usd_ois(cls) -> "Conventions":
        """Standard USD OIS conventions."""
        return cls(
            day_count=DayCount.ACT_360,
            business_day=BusinessDayConvention.MODIFIED_FOLLOWING,
            compounding=Compounding.COMPOUNDED,
            frequency=Frequency.ANNUAL,
            settlement_days=2
        )

    @classmethod
    def usd_treasury(cls) -> "Conventions":
        """Standard USD Treasury bond conventions."""
        return cls(
            day_count=DayCount.ACT_ACT,
            business_day=BusinessDayConvention.FOLLOWING,
            compounding=Compounding.COMPOUNDED,
            frequency=Frequency.SEMIANNUAL,
            settlement_days=1
        )

    @classmethod
    def usd_swap(cls) -> "Conventions":
        """Standard USD IRS conventions (fixed leg)."""
        return cls(
            day_count=DayCount.THIRTY_360,
            business_day=BusinessDayConvention.MODIFIED_FOLLOWING,
            compounding=Compounding.COMPOUNDED,
            frequency=Frequency.SEMIANNUAL,
            settlement_days=2
        )


def year_fraction(start: date, end: date, day_count: DayCount) -> float:
    """
    Calculate year fraction between two dates using specified day count convention.

    The result is signed: swapping the dates flips the sign.

    Conventions:
        ACT/360: (end - start).days / 360
        ACT/365: (end - start).days / 365
        ACT/ACT: ISDA, days in each calendar year over that year's length
        30/360: US bond basis
    """
    if start == end:
        return 0.0
    if start > end:
        return -year_fraction(end, start, day_count)

    actual_days = (end - start).days

    if day_count == DayCount.ACT_360:
        return actual_days / 360.0

    elif day_count == DayCount.ACT_365:
        return actual_days / 365.0

    elif day_count == DayCount.ACT_ACT:
        if start.year == end.year:
            days_in_year = 366 if calendar.isleap(start.year) else 365
            return actual_days / days_in_year
        total = 0.0
        for year in range(start.year, end.year + 1):
            period_start = start if year == start.year else date(year, 1, 1)
            period_end = end if year == end.year else date(year + 1, 1, 1)
            days_in_year = 366 if calendar.isleap(year) else 365
            total += (period_end - period_start).days / days_in_year
        return total

    elif day_count == DayCount.THIRTY_360:
        d1 = min(start.day, 30)
        d2 = end.day
        if d2 == 31 and d1 == 30:
            d2 = 30
        return (360 * (end.year - start.year) + 30 * (end.month - start.month) + (d2 - d1)) / 360.0

    else:
        raise ValueError(f"Unknown day count: {day_count}")


def is_business_day(d: date, holidays: Optional[set] = None) -> bool:
    """
    Check if a date is a business day.

    Uses weekend-only calendar by default (Saturday/Sunday are non-business days).
    """
    if d.weekday() >= 5:
        return False
    if holidays and d in holidays:
        return False
    return True


def adjust_business_day(
    d: date,
    convention: BusinessDayConvention,
    holidays: Optional[set] = None
) -> date:
    """Adjust a date according to business day convention."""
    if convention == BusinessDayConvention.UNADJUSTED or is_business_day(d, holidays):
        return d

    if convention == BusinessDayConvention.FOLLOWING:
        adjusted = d
        while not is_business_day(adjusted, holidays):
            adjusted += timedelta(days=1)
        return adjusted

    elif convention == BusinessDayConvention.PRECEDING:
        adjusted = d
        while not is_business_day(adjusted, holidays):
            adjusted -= timedelta(days=1)
        return adjusted

    elif convention == BusinessDayConvention.MODIFIED_FOLLOWING:
        adjusted = d
        while not is_business_day(adjusted, holidays):
            adjusted += timedelta(days=1)

        # If we crossed into next month, go preceding instead
        if adjusted.month != d.month:
            adjusted = d
            while not is_business_day(adjusted, holidays):
                adjusted -= timedelta(days=1)
        return adjusted

    return d


def advance_business_days(d: date, n: int, holidays: Optional[set] = None) -> date:
    """Move ``n`` business days forward (or backward when negative)."""
    if n == 0:
        return adjust_business_day(d, BusinessDayConvention.FOLLOWING, holidays)
    step = timedelta(days=1 if n > 0 else -1)
    result = d
    remaining = abs(n)
    while remaining > 0:
        result += step
        if is_business_day(result, holidays):
            remaining -= 1
    return result


def compound_factor(
    rate: float,
    t: float,
    compounding: Compounding = Compounding.CONTINUOUS,
    frequency: Frequency = Frequency.ANNUAL
) -> float:
    """Growth of one unit over ``t`` years at ``rate``."""
    if t < 0.0:
        raise ValueError(f"negative time ({t}) not allowed")
    f = frequency.value
    if compounding == Compounding.SIMPLE:
        return 1.0 + rate * t
    elif compounding == Compounding.COMPOUNDED:
        return (1.0 + rate / f) ** (f * t)
    elif compounding == Compounding.CONTINUOUS:
        return math.exp(rate * t)
    elif compounding == Compounding.SIMPLE_THEN_COMPOUNDED:
        if t <= 1.0 / f:
            return 1.0 + rate * t
        return (1.0 + rate / f) ** (f * t)
    raise ValueError(f"Unknown compounding: {compounding}")


def implied_rate(
    compound: float,
    t: float,
    compounding: Compounding = Compounding.CONTINUOUS,
    frequency: Frequency = Frequency.ANNUAL
) -> float:
    """Rate that turns one unit into ``compound`` over ``t`` years."""
    if compound <= 0.0:
        raise ValueError(f"positive compound factor required, got {compound}")
    if t <= 0.0:
        raise ValueError(f"positive time required, got {t}")
    if compound == 1.0:
        return 0.0
    f = frequency.value
    if compounding == Compounding.SIMPLE:
        return (compound - 1.0) / t
    elif compounding == Compounding.COMPOUNDED:
        return (compound ** (1.0 / (f * t)) - 1.0) * f
    elif compounding == Compounding.CONTINUOUS:
        return math.log(compound) / t
    elif compounding == Compounding.SIMPLE_THEN_COMPOUNDED:
        if t <= 1.0 / f:
            return (compound - 1.0) / t
        return (compound ** (1.0 / (f * t)) - 1.0) * f
    raise ValueError(f"Unknown compounding: {compounding}")


__all__ = [
    "DayCount",
    "BusinessDayConvention",
    "Compounding",
    "Frequency",
    "Conventions",
    "year_fraction",
    "is_business_day",
    "adjust_business_day",
    "advance_business_days",
    "compound_factor",
    "implied_rate",
]
