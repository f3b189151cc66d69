"""
Bond bootstrap helper.

Wraps a FixedRateBond and its market price. The implied quote is the
bond's clean (or dirty) price off the curve being bootstrapped, valued at
the bond's settlement date for the helper's evaluation date.
"""

from datetime import date
from typing import Optional, Union

from ..pricers.bonds import FixedRateBond
from ..quotes import Handle, Quote
from .base import Pillar, RelativeDateHelper


class BondHelper(RelativeDateHelper):
    """
    Bond quoted by price per 100 face.

    Args:
        price: Market price quote
        bond: The bond
        evaluation_date: Trade date (settlement follows the bond's settlement days)
        use_clean_price: Whether the quote is a clean price
        pillar: Pillar choice
        custom_pillar_date: Pillar date for Pillar.Choice.CUSTOM_DATE
    """

    def __init__(
        self,
        price: Union[float, Quote, Handle],
        bond: FixedRateBond,
        evaluation_date: date,
        use_clean_price: bool = True,
        pillar: Pillar.Choice = Pillar.Choice.LAST_RELEVANT_DATE,
        custom_pillar_date: Optional[date] = None
    ):
        super().__init__(price, evaluation_date, pillar, custom_pillar_date)
        self.bond = bond
        self.use_clean_price = use_clean_price
        self.initialize_dates()

    def initialize_dates(self) -> None:
        self.settlement = self.bond.settlement_date(self.evaluation_date)
        remaining = self.bond.remaining_cashflows(self.settlement)
        # a bond already redeemed at settlement is expired; keep its last date
        self._earliest_date = remaining[0].date if remaining else self.bond.payment_date()
        self._maturity_date = self.bond.maturity_date
        self._latest_date = self.bond.payment_date()
        self._latest_relevant_date = self._latest_date
        self._set_pillar()

    def market_dirty_price(self) -> float:
        """Quoted price converted to a dirty price."""
        price = self._quote.current_link().value()
        if self.use_clean_price:
            return price + self.bond.accrued_amount(self.settlement)
        return price

    def implied_quote(self) -> float:
        curve = self.term_structure()
        if self.use_clean_price:
            return self.bond.clean_price(curve, self.settlement)
        return self.bond.dirty_price(curve, self.settlement)


__all__ = ["BondHelper"]
