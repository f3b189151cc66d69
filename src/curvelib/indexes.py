"""
Interest-rate and inflation indexes.

An index knows its fixing calendar and conventions, stores historical
fixings and forecasts future ones from a linked term structure:
- IborIndex: simple forward rate over the index tenor
- OvernightIndex: one-business-day IborIndex
- ZeroInflationIndex: CPI-style index level
- YoYInflationIndex: year-on-year inflation rate
"""

from datetime import date
from typing import Dict, Optional

from .conventions import (
    BusinessDayConvention,
    DayCount,
    Frequency,
    advance_business_days,
    year_fraction
)
from .dates import DateUtils, Period, inflation_period
from .errors import ValidationError
from .quotes import Handle, Observable, RelinkableHandle


class IborIndex(Observable):
    """
    Term-rate index (e.g. 3M SOFR term rate, Euribor).

    Attributes:
        name: Index name
        tenor: Index tenor ("3M", "6M", ...)
        fixing_days: Business days between fixing and value date
        day_count: Accrual day count
        convention: Business day adjustment of the maturity date
        end_of_month: End-of-month rule for the maturity date
        holidays: Optional holiday dates of the fixing calendar
        forwarding: Handle to the forecasting curve
    """

    def __init__(
        self,
        name: str,
        tenor,
        fixing_days: int = 2,
        day_count: DayCount = DayCount.ACT_360,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        end_of_month: bool = False,
        holidays: Optional[set] = None,
        forwarding: Optional[Handle] = None
    ):
        super().__init__()
        self.name = name
        self.tenor = Period.parse(tenor)
        self.fixing_days = fixing_days
        self.day_count = day_count
        self.convention = convention
        self.end_of_month = end_of_month
        self.holidays = holidays
        self.forwarding = forwarding if forwarding is not None else RelinkableHandle()
        self.forwarding.register_observer(self.notify_observers)
        self._fixings: Dict[date, float] = {}

    def fixing_date(self, value_date: date) -> date:
        return advance_business_days(value_date, -self.fixing_days, self.holidays)

    def value_date(self, fixing_date: date) -> date:
        return advance_business_days(fixing_date, self.fixing_days, self.holidays)

    def maturity_date(self, value_date: date) -> date:
        return DateUtils.advance(
            value_date, self.tenor, self.convention, self.end_of_month, self.holidays
        )

    def add_fixing(self, fixing_date: date, value: float) -> None:
        self._fixings[fixing_date] = value
        self.notify_observers()

    def clear_fixings(self) -> None:
        self._fixings.clear()
        self.notify_observers()

    def forecast_fixing(self, start: date, end: date) -> float:
        """Simple forward rate (P(start)/P(end) - 1) / tau off the forwarding curve."""
        if self.forwarding.empty():
            raise ValidationError(f"null term structure set to this instance of {self.name}")
        curve = self.forwarding.current_link()
        tau = year_fraction(start, end, self.day_count)
        if tau <= 0.0:
            raise ValidationError(f"{self.name}: accrual end {end} not after start {start}")
        return (curve.discount(start) / curve.discount(end) - 1.0) / tau

    def fixing(self, fixing_date: date) -> float:
        """Historical fixing if stored, otherwise forecast."""
        if fixing_date in self._fixings:
            return self._fixings[fixing_date]
        if not self.forwarding.empty():
            reference = self.forwarding.current_link().reference_date
            if fixing_date < reference:
                raise ValidationError(f"missing {self.name} fixing for {fixing_date}")
        start = self.value_date(fixing_date)
        return self.forecast_fixing(start, self.maturity_date(start))

    def clone(self, forwarding: Handle) -> "IborIndex":
        """Same index forecasting off another curve (fixings are shared)."""
        other = IborIndex(
            self.name, self.tenor, self.fixing_days, self.day_count,
            self.convention, self.end_of_month, self.holidays, forwarding
        )
        other._fixings = self._fixings
        return other

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name} {self.tenor})"


class OvernightIndex(IborIndex):
    """Overnight index (SOFR, ESTR, SONIA): 1D tenor, fixing on the value date."""

    def __init__(
        self,
        name: str,
        fixing_days: int = 0,
        day_count: DayCount = DayCount.ACT_360,
        holidays: Optional[set] = None,
        forwarding: Optional[Handle] = None
    ):
        super().__init__(
            name, "1D", fixing_days, day_count, BusinessDayConvention.FOLLOWING,
            False, holidays, forwarding
        )

    def clone(self, forwarding: Handle) -> "OvernightIndex":
        other = OvernightIndex(self.name, self.fixing_days, self.day_count, self.holidays, forwarding)
        other._fixings = self._fixings
        return other


class InflationIndex(Observable):
    """
    Base of inflation indexes.

    Fixings are published once per period and stored under the period
    start date.
    """

    def __init__(
        self,
        name: str,
        frequency: Frequency = Frequency.MONTHLY,
        availability_lag="1M",
        interpolated: bool = False,
        curve: Optional[Handle] = None
    ):
        super().__init__()
        self.name = name
        self.frequency = frequency
        self.availability_lag = Period.parse(availability_lag)
        self.interpolated = interpolated
        self.curve = curve if curve is not None else RelinkableHandle()
        self.curve.register_observer(self.notify_observers)
        self._fixings: Dict[date, float] = {}

    def add_fixing(self, d: date, value: float) -> None:
        start, _ = inflation_period(d, self.frequency)
        self._fixings[start] = value
        self.notify_observers()

    def has_fixing(self, d: date) -> bool:
        return inflation_period(d, self.frequency)[0] in self._fixings

    def _historical(self, d: date) -> Optional[float]:
        return self._fixings.get(inflation_period(d, self.frequency)[0])

    def _linked_curve(self):
        if self.curve.empty():
            raise ValidationError(f"no inflation term structure linked to {self.name}")
        return self.curve.current_link()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"


class ZeroInflationIndex(InflationIndex):
    """CPI-style index level, forecast as I_base * (1 + z(d))^t(base, d)."""

    def fixing(self, d: date) -> float:
        if not self.interpolated:
            value = self._historical(d)
            if value is not None:
                return value
            return self.forecast_fixing(d)

        start, end = inflation_period(d, self.frequency)
        first = self._historical(start)
        if first is not None and d == start:
            return first
        next_start = DateUtils.add_period(start, Period.from_frequency(self.frequency))
        second = self._historical(next_start)
        if first is not None and second is not None:
            weight = (d - start).days / float((next_start - start).days)
            return first + (second - first) * weight
        return self.forecast_fixing(d)

    def forecast_fixing(self, d: date) -> float:
        curve = self._linked_curve()
        base_date = curve.base_date
        base_fixing = self._historical(base_date)
        if base_fixing is None:
            raise ValidationError(
                f"missing {self.name} base fixing for {inflation_period(base_date, self.frequency)[0]}"
            )
        effective = d if self.interpolated else inflation_period(d, self.frequency)[0]
        zero = curve.zero_rate(effective)
        t = curve.time_from_base(effective)
        return base_fixing * (1.0 + zero) ** t

    def clone(self, curve: Handle) -> "ZeroInflationIndex":
        other = ZeroInflationIndex(
            self.name, self.frequency, self.availability_lag, self.interpolated, curve
        )
        other._fixings = self._fixings
        return other


class YoYInflationIndex(InflationIndex):
    """Year-on-year inflation rate, forecast from a YoY inflation curve."""

    def fixing(self, d: date) -> float:
        value = self._historical(d)
        if value is not None:
            return value
        curve = self._linked_curve()
        effective = d if self.interpolated else inflation_period(d, self.frequency)[0]
        return curve.yoy_rate(effective)

    def clone(self, curve: Handle) -> "YoYInflationIndex":
        other = YoYInflationIndex(
            self.name, self.frequency, self.availability_lag, self.interpolated, curve
        )
        other._fixings = self._fixings
        return other


__all__ = [
    "IborIndex",
    "OvernightIndex",
    "InflationIndex",
    "ZeroInflationIndex",
    "YoYInflationIndex",
]
