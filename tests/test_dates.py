"""
Unit tests for dates module.
"""

from datetime import date
import pytest

from curvelib.conventions import BusinessDayConvention, DayCount, Frequency
from curvelib.dates import (
    DateUtils,
    Period,
    ScheduleInfo,
    generate_accrual_schedule,
    inflation_period,
)


class TestPeriod:
    """Tests for Period parsing and arithmetic."""

    def test_parse(self):
        assert Period.parse("3M") == Period(3, "M")
        assert Period.parse("-1y") == Period(-1, "Y")
        p = Period(2, "W")
        assert Period.parse(p) is p

    def test_parse_invalid(self):
        with pytest.raises(ValueError):
            Period.parse("3X")

    def test_months_and_days(self):
        assert Period(2, "Y").months == 24
        assert Period(2, "W").days == 14
        with pytest.raises(ValueError):
            Period(1, "Y").days

    def test_subtraction(self):
        """Test same-family subtraction."""
        assert Period(3, "M") - Period(1, "M") == Period(2, "M")
        assert Period(1, "Y") - Period(3, "M") == Period(9, "M")
        assert Period(2, "W") - Period(3, "D") == Period(11, "D")

    def test_ordering(self):
        assert Period(2, "M") > Period(1, "M")
        assert Period(1, "Y") > Period(11, "M")
        assert Period(1, "W") < Period(1, "M")

    def test_undecidable_ordering(self):
        """Test 30 days vs. one month cannot be ordered."""
        with pytest.raises(ValueError):
            Period(30, "D") < Period(1, "M")

    def test_from_frequency(self):
        assert Period.from_frequency(Frequency.QUARTERLY) == Period(3, "M")


class TestDateUtils:
    """Tests for DateUtils class."""

    def test_parse_tenor_months(self):
        """Test parsing month tenors."""
        assert DateUtils.parse_tenor("3M") == (3, 'M')
        assert DateUtils.parse_tenor("6M") == (6, 'M')
        assert DateUtils.parse_tenor("12M") == (12, 'M')

    def test_parse_tenor_years(self):
        """Test parsing year tenors."""
        assert DateUtils.parse_tenor("1Y") == (1, 'Y')
        assert DateUtils.parse_tenor("30Y") == (30, 'Y')

    def test_parse_tenor_lowercase(self):
        """Test parsing lowercase tenors."""
        assert DateUtils.parse_tenor("3m") == (3, 'M')
        assert DateUtils.parse_tenor("5y") == (5, 'Y')

    def test_parse_tenor_invalid(self):
        """Test invalid tenor raises error."""
        with pytest.raises(ValueError):
            DateUtils.parse_tenor("invalid")
        with pytest.raises(ValueError):
            DateUtils.parse_tenor("3X")

    def test_add_tenor_months(self):
        """Test adding month tenors."""
        base = date(2024, 1, 15)
        assert DateUtils.add_tenor(base, "3M") == date(2024, 4, 15)
        assert DateUtils.add_tenor(base, "6M") == date(2024, 7, 15)

    def test_add_tenor_years(self):
        """Test adding year tenors."""
        base = date(2024, 1, 15)
        assert DateUtils.add_tenor(base, "1Y") == date(2025, 1, 15)
        assert DateUtils.add_tenor(base, "5Y") == date(2029, 1, 15)

    def test_add_tenor_weeks(self):
        """Test adding week tenors."""
        base = date(2024, 1, 15)
        assert DateUtils.add_tenor(base, "1W") == date(2024, 1, 22)
        assert DateUtils.add_tenor(base, "2W") == date(2024, 1, 29)

    def test_add_tenor_days_are_business_days(self):
        """Test day tenors skip the weekend."""
        assert DateUtils.add_tenor(date(2024, 1, 12), "2D") == date(2024, 1, 16)

    def test_add_period_clips_month_end(self):
        """Test adding a month to Jan 31 lands on Feb 29 (leap year)."""
        assert DateUtils.add_period(date(2024, 1, 31), "1M") == date(2024, 2, 29)

    def test_add_period_negative(self):
        assert DateUtils.add_period(date(2024, 5, 15), "-3M") == date(2024, 2, 15)

    def test_add_period_end_of_month(self):
        """Test the end-of-month rule keeps month ends."""
        assert DateUtils.add_period(date(2024, 2, 29), "1M", end_of_month=True) == date(2024, 3, 31)
        assert DateUtils.add_period(date(2024, 2, 29), "1M") == date(2024, 3, 29)

    def test_advance_adjusts(self):
        """Test advance rolls a weekend result to a business day."""
        # 2024-06-15 is a Saturday
        result = DateUtils.advance(date(2024, 3, 15), "3M", BusinessDayConvention.FOLLOWING)
        assert result == date(2024, 6, 17)

    def test_tenor_to_years(self):
        """Test converting tenor to years."""
        assert abs(DateUtils.tenor_to_years("1Y") - 1.0) < 1e-10
        assert abs(DateUtils.tenor_to_years("6M") - 0.5) < 1e-10
        assert abs(DateUtils.tenor_to_years("1W") - 7 / 365) < 1e-10


class TestScheduleGeneration:
    """Tests for schedule generation."""

    def test_semiannual_schedule(self):
        """Test accrual schedule generation."""
        schedule = generate_accrual_schedule(
            date(2024, 1, 15), date(2026, 1, 15), "6M", DayCount.ACT_ACT,
            BusinessDayConvention.UNADJUSTED
        )

        assert isinstance(schedule, ScheduleInfo)
        assert len(schedule.payment_dates) == 4
        assert schedule.payment_dates[-1] == date(2026, 1, 15)
        assert schedule.accrual_starts[0] == date(2024, 1, 15)
        assert schedule.accrual_starts[1:] == schedule.accrual_ends[:-1]

    def test_annual_schedule(self):
        """Test annual frequency."""
        schedule = generate_accrual_schedule(
            date(2024, 1, 15), date(2027, 1, 15), "1Y", DayCount.ACT_ACT
        )
        assert len(schedule.payment_dates) == 3

    def test_front_stub(self):
        """Test dates roll backward from maturity so the stub is at the front."""
        dates = DateUtils.generate_schedule(
            date(2024, 2, 1), date(2025, 1, 15), "6M", BusinessDayConvention.UNADJUSTED
        )
        assert dates == [date(2024, 2, 1), date(2024, 7, 15), date(2025, 1, 15)]

    def test_year_fractions(self):
        schedule = generate_accrual_schedule(
            date(2024, 1, 15), date(2025, 1, 15), "3M", DayCount.THIRTY_360,
            BusinessDayConvention.UNADJUSTED
        )
        assert all(abs(yf - 0.25) < 1e-12 for yf in schedule.year_fractions)

    def test_invalid_schedule(self):
        with pytest.raises(ValueError):
            DateUtils.generate_schedule(date(2025, 1, 15), date(2024, 1, 15), "6M")


class TestInflationPeriod:
    """Tests for inflation period boundaries."""

    def test_monthly(self):
        assert inflation_period(date(2024, 2, 10), Frequency.MONTHLY) == (
            date(2024, 2, 1), date(2024, 2, 29)
        )

    def test_quarterly(self):
        assert inflation_period(date(2024, 5, 20), Frequency.QUARTERLY) == (
            date(2024, 4, 1), date(2024, 6, 30)
        )
