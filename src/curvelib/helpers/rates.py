"""
Interest-rate bootstrap helpers.

Each helper builds a representative instrument on the curve-in-progress
handle and reports the quote that instrument implies from the current
curve state:
- DepositRateHelper: simple deposit rate over the deposit tenor
- FraRateHelper: simple forward rate between two month offsets
- FuturesRateHelper: 100 * (1 - forward - convexity adjustment)
- SwapRateHelper: par fixed rate of a fixed vs. ibor swap
- OISRateHelper: par fixed rate of an overnight indexed swap
- FxSwapRateHelper: FX forward points against a collateral curve
- BasisSwapHelper: fair spread of a term-rate basis swap

Helpers observe the caller's index (fixings) and any exogenous curve
handle, never the clone built on the curve being bootstrapped.
"""

from datetime import date
from typing import Optional, Union

from ..conventions import (
    BusinessDayConvention,
    DayCount,
    Frequency,
    adjust_business_day,
    advance_business_days,
    year_fraction
)
from ..dates import DateUtils, Period
from ..errors import ValidationError
from ..indexes import IborIndex, OvernightIndex
from ..pricers.swaps import BASIS_POINT, BasisSwap, OvernightIndexedSwap, VanillaSwap
from ..quotes import Handle, Quote, as_quote_handle
from .base import BootstrapHelper, Pillar, RelativeDateHelper

QuoteLike = Union[float, Quote, Handle]


def _trade_date(evaluation_date: date, holidays: Optional[set]) -> date:
    return adjust_business_day(evaluation_date, BusinessDayConvention.FOLLOWING, holidays)


class DepositRateHelper(RelativeDateHelper):
    """
    Deposit quoted as a simple rate.

    Args:
        rate: Deposit rate quote
        tenor: Deposit tenor ("1M", "3M", ...)
        evaluation_date: Trade date
        fixing_days: Business days from trade to value date
        day_count: Accrual day count
        convention: Business day adjustment of the maturity date
        end_of_month: End-of-month rule for the maturity date
        holidays: Optional holiday dates
        index: Take the conventions from this index instead
    """

    def __init__(
        self,
        rate: QuoteLike,
        tenor,
        evaluation_date: date,
        fixing_days: int = 2,
        day_count: DayCount = DayCount.ACT_360,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        end_of_month: bool = False,
        holidays: Optional[set] = None,
        index: Optional[IborIndex] = None
    ):
        super().__init__(rate, evaluation_date)
        if index is None:
            index = IborIndex(
                "deposit", tenor, fixing_days, day_count, convention, end_of_month, holidays
            )
        else:
            index.register_observer(self.update)
        self.index = index.clone(self._ts_handle)
        self.initialize_dates()

    def initialize_dates(self) -> None:
        self.fixing_date = _trade_date(self.evaluation_date, self.index.holidays)
        self._earliest_date = self.index.value_date(self.fixing_date)
        self._maturity_date = self.index.maturity_date(self._earliest_date)
        self._latest_date = self._maturity_date
        self._latest_relevant_date = None
        self._set_pillar()

    def implied_quote(self) -> float:
        self.term_structure()
        return self.index.forecast_fixing(self._earliest_date, self._maturity_date)


class FraRateHelper(RelativeDateHelper):
    """
    Forward rate agreement, e.g. 3x6 with ``months_to_start=3, months_to_end=6``.

    The forward period starts ``months_to_start`` months after spot and
    runs for ``months_to_end - months_to_start`` months.
    """

    def __init__(
        self,
        rate: QuoteLike,
        months_to_start: int,
        months_to_end: int,
        evaluation_date: date,
        fixing_days: int = 2,
        day_count: DayCount = DayCount.ACT_360,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        end_of_month: bool = False,
        holidays: Optional[set] = None,
        pillar: Pillar.Choice = Pillar.Choice.LAST_RELEVANT_DATE,
        custom_pillar_date: Optional[date] = None
    ):
        if months_to_end <= months_to_start:
            raise ValidationError(
                f"months to end ({months_to_end}) must be greater than "
                f"months to start ({months_to_start})"
            )
        super().__init__(rate, evaluation_date, pillar, custom_pillar_date)
        self.months_to_start = months_to_start
        self.months_to_end = months_to_end
        self.index = IborIndex(
            f"FRA {months_to_start}x{months_to_end}",
            Period(months_to_end - months_to_start, "M"),
            fixing_days, day_count, convention, end_of_month, holidays, self._ts_handle
        )
        self.initialize_dates()

    def initialize_dates(self) -> None:
        index = self.index
        spot = index.value_date(_trade_date(self.evaluation_date, index.holidays))
        self._earliest_date = DateUtils.advance(
            spot, Period(self.months_to_start, "M"), index.convention,
            index.end_of_month, index.holidays
        )
        self.fixing_date = index.fixing_date(self._earliest_date)
        self._maturity_date = index.maturity_date(self._earliest_date)
        self._latest_date = self._maturity_date
        self._latest_relevant_date = None
        self._set_pillar()

    def implied_quote(self) -> float:
        self.term_structure()
        return self.index.forecast_fixing(self._earliest_date, self._maturity_date)


class FuturesRateHelper(BootstrapHelper):
    """
    Interest-rate future quoted as a price, 100 * (1 - rate).

    Args:
        price: Futures price quote
        start_date: Start of the underlying rate period
        length_months: Length of the rate period in months
        day_count: Accrual day count of the rate period
        convexity_adjustment: Futures-minus-forward rate adjustment (>= 0)
        convention: Business day adjustment of the period end
        end_of_month: End-of-month rule for the period end
        holidays: Optional holiday dates
    """

    def __init__(
        self,
        price: QuoteLike,
        start_date: date,
        length_months: int = 3,
        day_count: DayCount = DayCount.ACT_360,
        convexity_adjustment: QuoteLike = 0.0,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        end_of_month: bool = False,
        holidays: Optional[set] = None
    ):
        super().__init__(price)
        if length_months <= 0:
            raise ValidationError(f"futures length must be positive, got {length_months} months")
        self._convexity = as_quote_handle(convexity_adjustment)
        if self._convexity.current_link().is_valid() and self.convexity_adjustment() < 0.0:
            raise ValidationError(
                f"negative ({self.convexity_adjustment()}) futures convexity adjustment"
            )
        self._convexity.register_observer(self.update)
        self.day_count = day_count
        self._earliest_date = start_date
        self._maturity_date = DateUtils.advance(
            start_date, Period(length_months, "M"), convention, end_of_month, holidays
        )
        self._latest_date = self._maturity_date
        self.year_fraction = year_fraction(start_date, self._maturity_date, day_count)

    def convexity_adjustment(self) -> float:
        return self._convexity.current_link().value()

    def implied_quote(self) -> float:
        curve = self.term_structure()
        forward = (
            curve.discount(self._earliest_date) / curve.discount(self._maturity_date) - 1.0
        ) / self.year_fraction
        convexity = self.convexity_adjustment()
        if convexity < 0.0:
            raise ValidationError(f"negative ({convexity}) futures convexity adjustment")
        return 100.0 * (1.0 - (forward + convexity))


class SwapRateHelper(RelativeDateHelper):
    """
    Par swap rate of a fixed vs. ibor swap.

    Args:
        rate: Par fixed rate quote
        tenor: Swap tenor from the (forward) start date
        evaluation_date: Trade date
        index: Floating index; it is cloned onto the curve being bootstrapped
        fixed_frequency: Fixed leg coupon frequency
        fixed_day_count: Fixed leg accrual day count
        spread: Spread over the floating fixings (number or quote)
        forward_start: Period between spot and the swap start
        discounting: Exogenous discount curve handle; if None the curve
            being bootstrapped also discounts
        settlement_days: Business days to spot (index fixing days if None)
        convention: Roll convention of both legs
        pillar: Pillar choice
        custom_pillar_date: Pillar date for Pillar.Choice.CUSTOM_DATE
    """

    def __init__(
        self,
        rate: QuoteLike,
        tenor,
        evaluation_date: date,
        index: IborIndex,
        fixed_frequency: Frequency = Frequency.SEMIANNUAL,
        fixed_day_count: DayCount = DayCount.THIRTY_360,
        spread: QuoteLike = 0.0,
        forward_start="0D",
        discounting: Optional[Handle] = None,
        settlement_days: Optional[int] = None,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        end_of_month: bool = False,
        pillar: Pillar.Choice = Pillar.Choice.LAST_RELEVANT_DATE,
        custom_pillar_date: Optional[date] = None
    ):
        super().__init__(rate, evaluation_date, pillar, custom_pillar_date)
        self.tenor = Period.parse(tenor)
        self.forward_start = Period.parse(forward_start)
        self.fixed_frequency = fixed_frequency
        self.fixed_day_count = fixed_day_count
        self.convention = convention
        self.end_of_month = end_of_month
        self.settlement_days = index.fixing_days if settlement_days is None else settlement_days
        self._spread = as_quote_handle(spread)
        self._discounting = discounting
        self.index = index.clone(self._ts_handle)

        index.register_observer(self.update)
        self._spread.register_observer(self.update)
        if discounting is not None:
            discounting.register_observer(self.update)
        self.initialize_dates()

    def spread(self) -> float:
        return self._spread.current_link().value()

    def _discount_handle(self) -> Handle:
        if self._discounting is not None:
            return self._discounting
        return self._ts_handle

    def initialize_dates(self) -> None:
        holidays = self.index.holidays
        spot = advance_business_days(
            _trade_date(self.evaluation_date, holidays), self.settlement_days, holidays
        )
        start = DateUtils.advance(spot, self.forward_start, self.convention, False, holidays)
        maturity = DateUtils.advance(start, self.tenor, self.convention, self.end_of_month, holidays)
        self.swap = VanillaSwap(
            start, maturity, 0.0, self.index,
            fixed_frequency=self.fixed_frequency,
            fixed_day_count=self.fixed_day_count,
            discounting=self._discount_handle(),
            convention=self.convention,
            holidays=holidays,
            end_of_month=self.end_of_month
        )
        self._earliest_date = start
        self._maturity_date = maturity
        last_coupon = self.swap.floating_leg[-1]
        self._latest_date = max(maturity, last_coupon.payment_date)
        self._latest_relevant_date = self._latest_date
        self._set_pillar()

    def implied_quote(self) -> float:
        """Fixed rate equating the legs, with the spread valued on the floating annuity."""
        self.term_structure()
        floating = self.swap.floating_leg_npv()
        spread_npv = self.swap.floating_leg_annuity() * self.spread()
        return (floating + spread_npv) * BASIS_POINT / self.swap.fixed_leg_bps()


class OISRateHelper(RelativeDateHelper):
    """
    Par rate of an overnight indexed swap.

    The overnight index is cloned onto the curve being bootstrapped; with
    no exogenous ``discounting`` the same curve discounts.
    """

    def __init__(
        self,
        rate: QuoteLike,
        tenor,
        evaluation_date: date,
        index: OvernightIndex,
        settlement_days: int = 2,
        payment_frequency: Frequency = Frequency.ANNUAL,
        fixed_day_count: Optional[DayCount] = None,
        spread: QuoteLike = 0.0,
        payment_lag: int = 0,
        forward_start="0D",
        discounting: Optional[Handle] = None,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        end_of_month: bool = False,
        pillar: Pillar.Choice = Pillar.Choice.LAST_RELEVANT_DATE,
        custom_pillar_date: Optional[date] = None
    ):
        super().__init__(rate, evaluation_date, pillar, custom_pillar_date)
        self.tenor = Period.parse(tenor)
        self.forward_start = Period.parse(forward_start)
        self.settlement_days = settlement_days
        self.payment_frequency = payment_frequency
        self.fixed_day_count = fixed_day_count or index.day_count
        self.payment_lag = payment_lag
        self.convention = convention
        self.end_of_month = end_of_month
        self._spread = as_quote_handle(spread)
        self._discounting = discounting
        self.index = index.clone(self._ts_handle)

        index.register_observer(self.update)
        self._spread.register_observer(self.update)
        if discounting is not None:
            discounting.register_observer(self.update)
        self.initialize_dates()

    def spread(self) -> float:
        return self._spread.current_link().value()

    def initialize_dates(self) -> None:
        holidays = self.index.holidays
        spot = advance_business_days(
            _trade_date(self.evaluation_date, holidays), self.settlement_days, holidays
        )
        start = DateUtils.advance(spot, self.forward_start, self.convention, False, holidays)
        maturity = DateUtils.advance(start, self.tenor, self.convention, self.end_of_month, holidays)
        self.swap = OvernightIndexedSwap(
            start, maturity, 0.0, self.index,
            payment_frequency=self.payment_frequency,
            fixed_day_count=self.fixed_day_count,
            discounting=self._discounting if self._discounting is not None else self._ts_handle,
            payment_lag=self.payment_lag,
            convention=self.convention,
            holidays=holidays,
            end_of_month=self.end_of_month
        )
        self._earliest_date = start
        self._maturity_date = maturity
        # with a payment lag the last payment reads the curve after maturity
        last_payment = max(self.swap.fixed_leg[-1].payment_date, self.swap.overnight_leg[-1].payment_date)
        self._latest_date = max(maturity, last_payment)
        self._latest_relevant_date = self._latest_date
        self._set_pillar()

    def implied_quote(self) -> float:
        self.term_structure()
        self.swap.spread = self.spread()
        return self.swap.fair_rate()


class FxSwapRateHelper(RelativeDateHelper):
    """
    FX swap quoted in forward points (outright forward minus spot).

    The curve being bootstrapped belongs to one currency of the pair; the
    other currency is discounted on ``collateral_curve``. With the base
    currency as collateral currency
        points = spot * (P(s) / P(e) / (Pc(s) / Pc(e)) - 1)
    and the reciprocal ratio otherwise.

    Args:
        fwd_points: Forward points quote
        spot: FX spot quote
        tenor: Swap tenor from spot
        evaluation_date: Trade date
        fixing_days: Business days from trade to spot
        convention: Business day adjustment of the far date
        end_of_month: End-of-month rule for the far date
        is_fx_base_currency_collateral_currency: Whether the collateral
            curve is the base currency curve
        collateral_curve: Handle to the collateral currency curve
        holidays: Optional holiday dates
    """

    def __init__(
        self,
        fwd_points: QuoteLike,
        spot: QuoteLike,
        tenor,
        evaluation_date: date,
        fixing_days: int = 2,
        convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
        end_of_month: bool = False,
        is_fx_base_currency_collateral_currency: bool = True,
        collateral_curve: Optional[Handle] = None,
        holidays: Optional[set] = None
    ):
        super().__init__(fwd_points, evaluation_date)
        if collateral_curve is None:
            raise ValidationError("collateral curve handle required for an FX swap helper")
        self._spot = as_quote_handle(spot)
        self.tenor = Period.parse(tenor)
        self.fixing_days = fixing_days
        self.convention = convention
        self.end_of_month = end_of_month
        self.is_fx_base_currency_collateral_currency = is_fx_base_currency_collateral_currency
        self.collateral_curve = collateral_curve
        self.holidays = holidays
        self._spot.register_observer(self.update)
        collateral_curve.register_observer(self.update)
        self.initialize_dates()

    def spot(self) -> float:
        return self._spot.current_link().value()

    def initialize_dates(self) -> None:
        self._earliest_date = advance_business_days(
            _trade_date(self.evaluation_date, self.holidays), self.fixing_days, self.holidays
        )
        self._latest_date = DateUtils.advance(
            self._earliest_date, self.tenor, self.convention, self.end_of_month, self.holidays
        )
        self._maturity_date = None
        self._latest_relevant_date = None
        self._set_pillar()

    def implied_quote(self) -> float:
        curve = self.term_structure()
        if self.collateral_curve.empty():
            raise ValidationError("collateral term structure not set")
        collateral = self.collateral_curve.current_link()
        collateral_ratio = (
            collateral.discount(self._earliest_date) / collateral.discount(self._latest_date)
        )
        ratio = curve.discount(self._earliest_date) / curve.discount(self._latest_date)
        if self.is_fx_base_currency_collateral_currency:
            return (ratio / collateral_ratio - 1.0) * self.spot()
        return (collateral_ratio / ratio - 1.0) * self.spot()


class BasisSwapHelper(RelativeDateHelper):
    """
    Term-rate basis swap quoted as a spread on one leg.

    Exactly one of the two indexes must already have a forwarding curve;
    the other is cloned onto the curve being bootstrapped. With
    ``spread_on_short`` the spread is paid on the short-tenor leg.

    Args:
        spread: Basis spread quote
        tenor: Swap tenor from spot
        evaluation_date: Trade date
        short_index: Shorter-tenor index
        long_index: Longer-tenor index
        settlement_days: Business days to spot
        discounting: Discount curve handle (the curve being bootstrapped if None)
        spread_on_short: Whether the spread is on the short leg
    """

    def __init__(
        self,
        spread: QuoteLike,
        tenor,
        evaluation_date: date,
        short_index: IborIndex,
        long_index: IborIndex,
        settlement_days: int = 2,
        discounting: Optional[Handle] = None,
        spread_on_short: bool = True,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        end_of_month: bool = False,
        holidays: Optional[set] = None
    ):
        super().__init__(spread, evaluation_date)
        short_has_curve = not short_index.forwarding.empty()
        long_has_curve = not long_index.forwarding.empty()
        if short_has_curve and long_has_curve:
            raise ValidationError("both indexes have a forwarding curve: nothing to solve for")
        if not short_has_curve and not long_has_curve:
            raise ValidationError("one leg of the basis swap needs its forwarding curve")
        self.bootstraps_short_leg = not short_has_curve
        if self.bootstraps_short_leg:
            self.short_index = short_index.clone(self._ts_handle)
            self.long_index = long_index
        else:
            self.short_index = short_index
            self.long_index = long_index.clone(self._ts_handle)
        self.tenor = Period.parse(tenor)
        self.settlement_days = settlement_days
        self.spread_on_short = spread_on_short
        self.convention = convention
        self.end_of_month = end_of_month
        self.holidays = holidays
        self._discounting = discounting

        short_index.register_observer(self.update)
        long_index.register_observer(self.update)
        if discounting is not None:
            discounting.register_observer(self.update)
        self.initialize_dates()

    def initialize_dates(self) -> None:
        spot = advance_business_days(
            _trade_date(self.evaluation_date, self.holidays), self.settlement_days, self.holidays
        )
        maturity = DateUtils.advance(spot, self.tenor, self.convention, self.end_of_month, self.holidays)
        if self.spread_on_short:
            base, other = self.long_index, self.short_index
        else:
            base, other = self.short_index, self.long_index
        self.swap = BasisSwap(
            spot, maturity, base, other,
            discounting=self._discounting if self._discounting is not None else self._ts_handle,
            convention=self.convention,
            holidays=self.holidays,
            end_of_month=self.end_of_month
        )
        self._earliest_date = spot
        self._maturity_date = maturity
        self._latest_date = maturity
        self._latest_relevant_date = maturity
        self._set_pillar()

    def implied_quote(self) -> float:
        self.term_structure()
        return self.swap.fair_spread()


__all__ = [
    "DepositRateHelper",
    "FraRateHelper",
    "FuturesRateHelper",
    "SwapRateHelper",
    "OISRateHelper",
    "FxSwapRateHelper",
    "BasisSwapHelper",
]
