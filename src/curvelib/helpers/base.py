"""
Bootstrap helper base classes.

A helper wraps one market quote and an instrument built on a handle to
the curve being bootstrapped. The bootstrapper links the handle to the
curve without registering it as an observer: the instrument reads the
curve in its current (partial) state, and node updates during the
bootstrap do not bounce back as notifications.
"""

from datetime import date
from enum import Enum
from typing import Optional, Union

from ..errors import ValidationError
from ..quotes import Handle, Observable, Quote, RelinkableHandle, as_quote_handle


class Pillar:
    """Choice of the date a helper's curve node is placed at."""

    class Choice(Enum):
        MATURITY_DATE = "maturity"
        LAST_RELEVANT_DATE = "last_relevant"
        CUSTOM_DATE = "custom"


class BootstrapHelper(Observable):
    """
    Base class of bootstrap helpers.

    Subclasses set ``_earliest_date`` and ``_latest_date`` (and optionally
    ``_maturity_date``, ``_latest_relevant_date``, ``_pillar_date``) and
    implement ``implied_quote()``.
    """

    def __init__(self, quote: Union[float, Quote, Handle]):
        super().__init__()
        self._quote = as_quote_handle(quote)
        self._quote.register_observer(self.notify_observers)
        self._term_structure = None
        self._earliest_date: Optional[date] = None
        self._latest_date: Optional[date] = None
        self._maturity_date: Optional[date] = None
        self._latest_relevant_date: Optional[date] = None
        self._pillar_date: Optional[date] = None

    def quote(self) -> Handle:
        return self._quote

    def earliest_date(self) -> date:
        return self._earliest_date

    def latest_date(self) -> date:
        """Latest date of the instrument (at least the pillar)."""
        return self._latest_date

    def maturity_date(self) -> date:
        return self._maturity_date or self._latest_date

    def latest_relevant_date(self) -> date:
        """Latest date at which the instrument reads the curve."""
        return self._latest_relevant_date or self._latest_date

    def pillar_date(self) -> date:
        return self._pillar_date or self._latest_date

    def set_term_structure(self, ts) -> None:
        if ts is None:
            raise ValidationError("null term structure given")
        self._term_structure = ts

    def term_structure(self):
        if self._term_structure is None:
            raise ValidationError("term structure not set")
        return self._term_structure

    def implied_quote(self) -> float:
        raise NotImplementedError

    def quote_error(self) -> float:
        """Market quote minus the quote implied by the current curve."""
        return self._quote.current_link().value() - self.implied_quote()

    def update(self) -> None:
        self.notify_observers()

    def __repr__(self) -> str:
        link = None if self._quote.empty() else self._quote.current_link()
        return f"{type(self).__name__}(quote={link!r}, pillar={self.pillar_date()})"


class RelativeDateHelper(BootstrapHelper):
    """
    Helper whose dates are derived from an evaluation date.

    Instruments are built against ``self._ts_handle``, which
    ``set_term_structure`` links to the curve being bootstrapped.
    """

    def __init__(
        self,
        quote: Union[float, Quote, Handle],
        evaluation_date: date,
        pillar: Pillar.Choice = Pillar.Choice.LAST_RELEVANT_DATE,
        custom_pillar_date: Optional[date] = None
    ):
        super().__init__(quote)
        if pillar == Pillar.Choice.CUSTOM_DATE and custom_pillar_date is None:
            raise ValidationError("custom pillar date required with Pillar.Choice.CUSTOM_DATE")
        self.evaluation_date = evaluation_date
        self.pillar_choice = pillar
        self._custom_pillar_date = custom_pillar_date
        self._ts_handle = RelinkableHandle()

    def set_term_structure(self, ts) -> None:
        super().set_term_structure(ts)
        self._ts_handle.link_to(ts, register_as_observer=False)

    def set_evaluation_date(self, evaluation_date: date) -> None:
        """Move the helper to a new evaluation date and rebuild its dates."""
        if evaluation_date != self.evaluation_date:
            self.evaluation_date = evaluation_date
            self.initialize_dates()
            self.notify_observers()

    def initialize_dates(self) -> None:
        raise NotImplementedError

    def _set_pillar(self) -> None:
        """Place the pillar per the pillar choice; call after the other dates are set."""
        if self._maturity_date is None:
            self._maturity_date = self._latest_date
        if self._latest_relevant_date is None:
            self._latest_relevant_date = self._latest_date

        if self.pillar_choice == Pillar.Choice.MATURITY_DATE:
            self._pillar_date = self._maturity_date
        elif self.pillar_choice == Pillar.Choice.LAST_RELEVANT_DATE:
            self._pillar_date = self._latest_relevant_date
        else:
            custom = self._custom_pillar_date
            if custom < self._earliest_date:
                raise ValidationError(
                    f"pillar date ({custom}) must be on or after the earliest date "
                    f"({self._earliest_date})"
                )
            if custom > self._latest_relevant_date:
                raise ValidationError(
                    f"pillar date ({custom}) must be on or before the latest relevant date "
                    f"({self._latest_relevant_date})"
                )
            self._pillar_date = custom
        self._latest_date = max(self._latest_date, self._pillar_date)


__all__ = [
    "Pillar",
    "BootstrapHelper",
    "RelativeDateHelper",
]
