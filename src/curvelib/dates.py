"""
Date utilities for rates calculations.

Provides:
- Period: signed tenor (e.g. "3M", "-2Y") with comparison where decidable
- Tenor parsing and date generation
- Schedule generation for coupon bonds and swaps
- Inflation period boundaries
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Tuple
import calendar
import re

from .conventions import (
    BusinessDayConvention,
    DayCount,
    Frequency,
    adjust_business_day,
    advance_business_days,
    year_fraction
)


@dataclass(frozen=True)
class Period:
    """
    A signed length of time in days, weeks, months or years.

    Periods of the same family (D/W or M/Y) compare exactly; mixed
    families compare by their possible day ranges and raise when the
    ordering cannot be decided.
    """
    length: int
    unit: str

    PATTERN = re.compile(r'^(-?\d+)([DWMY])$', re.IGNORECASE)

    def __post_init__(self):
        unit = self.unit.upper()
        if unit not in ("D", "W", "M", "Y"):
            raise ValueError(f"Unknown period unit: {self.unit}")
        object.__setattr__(self, "unit", unit)

    @classmethod
    def parse(cls, tenor) -> "Period":
        """Parse "3M", "-1Y", ... (a Period is returned unchanged)."""
        if isinstance(tenor, Period):
            return tenor
        match = cls.PATTERN.match(str(tenor).upper().strip())
        if not match:
            raise ValueError(f"Invalid tenor format: {tenor}. Expected format like '3M', '2Y'")
        return cls(int(match.group(1)), match.group(2).upper())

    @classmethod
    def from_frequency(cls, frequency: Frequency) -> "Period":
        return cls(frequency.months, "M")

    @property
    def months(self) -> int:
        """Length in months (M/Y periods only)."""
        if self.unit == "M":
            return self.length
        if self.unit == "Y":
            return 12 * self.length
        raise ValueError(f"{self} cannot be expressed in months")

    @property
    def days(self) -> int:
        """Length in days (D/W periods only)."""
        if self.unit == "D":
            return self.length
        if self.unit == "W":
            return 7 * self.length
        raise ValueError(f"{self} cannot be expressed in days")

    def _day_range(self) -> Tuple[int, int]:
        if self.unit in ("D", "W"):
            return self.days, self.days
        if self.unit == "M":
            return 28 * self.length, 31 * self.length
        return 365 * self.length, 366 * self.length

    def __neg__(self) -> "Period":
        return Period(-self.length, self.unit)

    def __sub__(self, other: "Period") -> "Period":
        other = Period.parse(other)
        if self.unit in ("M", "Y") and other.unit in ("M", "Y"):
            return Period(self.months - other.months, "M")
        if self.unit in ("D", "W") and other.unit in ("D", "W"):
            return Period(self.days - other.days, "D")
        if other.length == 0:
            return self
        if self.length == 0:
            return -other
        raise ValueError(f"cannot subtract {other} from {self}")

    def __lt__(self, other: "Period") -> bool:
        other = Period.parse(other)
        if self.unit in ("M", "Y") and other.unit in ("M", "Y"):
            return self.months < other.months
        if self.unit in ("D", "W") and other.unit in ("D", "W"):
            return self.days < other.days
        lo1, hi1 = self._day_range()
        lo2, hi2 = other._day_range()
        if hi1 < lo2:
            return True
        if lo1 >= hi2:
            return False
        raise ValueError(f"undecidable comparison between {self} and {other}")

    def __gt__(self, other: "Period") -> bool:
        return Period.parse(other) < self

    def __str__(self) -> str:
        return f"{self.length}{self.unit}"


class DateUtils:
    """Utility class for date manipulation in rates contexts."""

    @staticmethod
    def parse_tenor(tenor: str) -> Tuple[int, str]:
        """
        Parse a tenor string into (amount, unit).

        Raises:
            ValueError: If tenor format is invalid
        """
        p = Period.parse(tenor)
        return p.length, p.unit

    @staticmethod
    def add_period(start: date, tenor, end_of_month: bool = False) -> date:
        """
        Add a (signed) calendar period to a date.

        Days and weeks are calendar days. Month and year arithmetic clips to
        the end of the target month; with ``end_of_month`` a start date on
        the last day of its month maps to the last day of the target month.
        """
        p = Period.parse(tenor)

        if p.unit == "D":
            return start + timedelta(days=p.length)
        if p.unit == "W":
            return start + timedelta(weeks=p.length)

        months = p.months
        year = start.year + (start.month + months - 1) // 12
        month = (start.month + months - 1) % 12 + 1
        last = _days_in_month(year, month)
        if end_of_month and start.day == _days_in_month(start.year, start.month):
            return date(year, month, last)
        return date(year, month, min(start.day, last))

    @staticmethod
    def add_tenor(start: date, tenor, holidays: Optional[set] = None) -> date:
        """
        Add a tenor to a date.

        "D" tenors count business days; other units are calendar periods.
        """
        p = Period.parse(tenor)
        if p.unit == "D":
            return advance_business_days(start, p.length, holidays)
        return DateUtils.add_period(start, p)

    @staticmethod
    def advance(
        start: date,
        tenor,
        convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
        end_of_month: bool = False,
        holidays: Optional[set] = None
    ) -> date:
        """Add a tenor and adjust the result to a business day."""
        p = Period.parse(tenor)
        if p.unit == "D":
            return advance_business_days(start, p.length, holidays)
        result = DateUtils.add_period(start, p, end_of_month)
        if end_of_month and start.day == _days_in_month(start.year, start.month):
            # end of month rule: stay on the last business day of the month
            return adjust_business_day(result, BusinessDayConvention.PRECEDING, holidays)
        return adjust_business_day(result, convention, holidays)

    @staticmethod
    def tenor_to_years(tenor: str) -> float:
        """Convert tenor to approximate year fraction."""
        p = Period.parse(tenor)

        if p.unit == 'D':
            return p.length / 365.0
        elif p.unit == 'W':
            return p.length * 7 / 365.0
        elif p.unit == 'M':
            return p.length / 12.0
        return float(p.length)

    @staticmethod
    def generate_schedule(
        start: date,
        end: date,
        tenor,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        holidays: Optional[set] = None,
        end_of_month: bool = False
    ) -> List[date]:
        """
        Generate an adjusted date schedule between start and end, inclusive.

        Dates are rolled backward from ``end`` so that any stub falls at the
        front. The first element is ``start`` and the last is the adjusted
        ``end``.
        """
        p = Period.parse(tenor)
        if p.length <= 0:
            raise ValueError("Schedule tenor must be positive")
        if end <= start:
            raise ValueError(f"Schedule end {end} must be after start {start}")

        unadjusted = [end]
        k = 1
        while True:
            if p.unit in ("D", "W"):
                prev_date = end - timedelta(days=k * p.days)
            else:
                prev_date = DateUtils.add_period(end, Period(-k * p.months, "M"), end_of_month)
            if prev_date <= start:
                break
            unadjusted.insert(0, prev_date)
            k += 1
        unadjusted.insert(0, start)

        adjusted = [adjust_business_day(d, convention, holidays) for d in unadjusted]
        # Adjustment may collapse a short stub onto its neighbour
        result = [adjusted[0]]
        for d in adjusted[1:]:
            if d > result[-1]:
                result.append(d)
        return result


@dataclass
class ScheduleInfo:
    """Container for schedule with accrual information."""
    payment_dates: List[date]
    accrual_starts: List[date]
    accrual_ends: List[date]
    year_fractions: List[float]
    day_count: DayCount


def generate_accrual_schedule(
    start: date,
    end: date,
    tenor,
    day_count: DayCount,
    convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
    holidays: Optional[set] = None,
    end_of_month: bool = False
) -> ScheduleInfo:
    """
    Generate accrual periods for a coupon leg.

    Payment dates coincide with accrual end dates.
    """
    dates = DateUtils.generate_schedule(start, end, tenor, convention, holidays, end_of_month)
    starts = dates[:-1]
    ends = dates[1:]
    return ScheduleInfo(
        payment_dates=list(ends),
        accrual_starts=list(starts),
        accrual_ends=list(ends),
        year_fractions=[year_fraction(s, e, day_count) for s, e in zip(starts, ends)],
        day_count=day_count
    )


def inflation_period(d: date, frequency: Frequency) -> Tuple[date, date]:
    """
    First and last day of the inflation period containing ``d``.

    Periods are aligned on January: quarterly periods start in
    January, April, July and October.
    """
    months = frequency.months
    start_month = ((d.month - 1) // months) * months + 1
    start = date(d.year, start_month, 1)
    end_month = start_month + months - 1
    end = date(d.year, end_month, _days_in_month(d.year, end_month))
    return start, end


def _days_in_month(year: int, month: int) -> int:
    """Return number of days in a month."""
    return calendar.monthrange(year, month)[1]


__all__ = [
    "Period",
    "DateUtils",
    "ScheduleInfo",
    "generate_accrual_schedule",
    "inflation_period",
]
