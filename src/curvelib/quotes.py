"""
Market quotes, handles and change notification.

Change propagation is explicit: each Observable keeps its own list of
callbacks and a version counter that increases on every notification.
Dependents either register a callback (push) or compare versions
(pull). There is no process-wide event bus.

A Handle is a shared, relinkable reference to a curve or quote. Linking
without registration gives a "curve-in-progress" reference: holders see
every in-place change of the target but are not notified of it.
"""

from typing import Callable, Generic, List, Optional, TypeVar, Union
import math

from .errors import InvalidQuoteError, ValidationError


T = TypeVar("T")


class Observable:
    """Object that notifies registered callbacks when it changes."""

    def __init__(self):
        self._observers: List[Callable[[], None]] = []
        self._version = 0

    @property
    def version(self) -> int:
        """Number of notifications sent so far."""
        return self._version

    def register_observer(self, callback: Callable[[], None]) -> None:
        if callback not in self._observers:
            self._observers.append(callback)

    def unregister_observer(self, callback: Callable[[], None]) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    def notify_observers(self) -> None:
        self._version += 1
        for callback in list(self._observers):
            callback()


class Quote(Observable):
    """Abstract market observable."""

    def value(self) -> float:
        raise NotImplementedError

    def is_valid(self) -> bool:
        raise NotImplementedError


class SimpleQuote(Quote):
    """
    Quote holding a single settable value.

    An unset (None) or non-finite value is invalid; reading it raises.
    """

    def __init__(self, value: Optional[float] = None):
        super().__init__()
        self._value = value

    def value(self) -> float:
        if not self.is_valid():
            raise InvalidQuoteError(f"invalid quote value: {self._value}")
        return self._value

    def is_valid(self) -> bool:
        return self._value is not None and math.isfinite(self._value)

    def set_value(self, value: Optional[float]) -> float:
        """Set a new value, notify observers if it changed and return the change."""
        old = self._value
        if value != old:
            self._value = value
            self.notify_observers()
        if value is None or old is None:
            return 0.0
        return value - old

    def reset(self) -> None:
        self.set_value(None)

    def __repr__(self) -> str:
        return f"SimpleQuote({self._value})"


class Handle(Observable, Generic[T]):
    """
    Shared reference to an observable object.

    Observers of the handle are notified when the target changes (if
    the link registers as observer) or when the handle is relinked.
    """

    def __init__(self, link: Optional[T] = None, register_as_observer: bool = True):
        super().__init__()
        self._link: Optional[T] = None
        self._is_observer = False
        self._link_to(link, register_as_observer)

    def _link_to(self, link: Optional[T], register_as_observer: bool) -> None:
        if link is self._link and register_as_observer == self._is_observer:
            return
        if self._link is not None and self._is_observer:
            self._link.unregister_observer(self.notify_observers)
        self._link = link
        self._is_observer = register_as_observer
        if link is not None and register_as_observer:
            link.register_observer(self.notify_observers)
        self.notify_observers()

    def current_link(self) -> T:
        if self._link is None:
            raise ValidationError("empty handle cannot be dereferenced")
        return self._link

    def empty(self) -> bool:
        return self._link is None

    def __bool__(self) -> bool:
        return self._link is not None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._link!r})"


class RelinkableHandle(Handle[T]):
    """Handle whose target can be replaced after construction."""

    def link_to(self, link: Optional[T], register_as_observer: bool = True) -> None:
        self._link_to(link, register_as_observer)


def as_quote_handle(quote: Union[float, Quote, Handle]) -> Handle:
    """Wrap a number or Quote in a Handle (handles are returned unchanged)."""
    if isinstance(quote, Handle):
        return quote
    if isinstance(quote, Quote):
        return Handle(quote)
    return Handle(SimpleQuote(float(quote)))


__all__ = [
    "Observable",
    "Quote",
    "SimpleQuote",
    "Handle",
    "RelinkableHandle",
    "as_quote_handle",
]
