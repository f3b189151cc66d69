"""
Unit tests for quotes, handles and lazy objects.
"""

import pytest

from curvelib.curves import LazyObject
from curvelib.errors import InvalidQuoteError, ValidationError
from curvelib.quotes import Handle, RelinkableHandle, SimpleQuote, as_quote_handle


class Counter:
    """Observer callback counting notifications."""

    def __init__(self):
        self.count = 0

    def __call__(self):
        self.count += 1


class SquareOf(LazyObject):
    """Lazy square of a quote."""

    def __init__(self, quote):
        super().__init__()
        self.quote = quote
        self.runs = 0
        quote.register_observer(self.update)

    def perform_calculations(self):
        self.runs += 1
        self.result = self.quote.value() ** 2


class TestSimpleQuote:
    """Tests for SimpleQuote."""

    def test_value(self):
        q = SimpleQuote(0.05)
        assert q.value() == 0.05
        assert q.is_valid()

    def test_invalid(self):
        """Test unset and non-finite quotes."""
        with pytest.raises(InvalidQuoteError):
            SimpleQuote().value()
        assert not SimpleQuote(float("nan")).is_valid()
        assert not SimpleQuote(float("inf")).is_valid()

    def test_set_value_notifies(self):
        q = SimpleQuote(0.05)
        counter = Counter()
        q.register_observer(counter)

        diff = q.set_value(0.06)
        assert abs(diff - 0.01) < 1e-15
        assert counter.count == 1
        assert q.version == 1

        # Same value: no notification
        q.set_value(0.06)
        assert counter.count == 1

        q.reset()
        assert counter.count == 2
        assert not q.is_valid()

    def test_unregister(self):
        q = SimpleQuote(1.0)
        counter = Counter()
        q.register_observer(counter)
        q.register_observer(counter)
        q.set_value(2.0)
        assert counter.count == 1

        q.unregister_observer(counter)
        q.set_value(3.0)
        assert counter.count == 1


class TestHandle:
    """Tests for Handle and RelinkableHandle."""

    def test_empty(self):
        h = RelinkableHandle()
        assert h.empty()
        assert not h
        with pytest.raises(ValidationError):
            h.current_link()

    def test_forwards_notifications(self):
        q = SimpleQuote(1.0)
        h = Handle(q)
        counter = Counter()
        h.register_observer(counter)

        q.set_value(2.0)
        assert counter.count == 1

    def test_link_without_registration(self):
        """Test a curve-in-progress link sees the target but is not notified."""
        q = SimpleQuote(1.0)
        h = RelinkableHandle()
        counter = Counter()
        h.register_observer(counter)

        h.link_to(q, register_as_observer=False)
        assert counter.count == 1
        assert h.current_link() is q

        q.set_value(2.0)
        assert counter.count == 1
        assert h.current_link().value() == 2.0

    def test_relink(self):
        """Test relinking notifies once and detaches from the old target."""
        q1 = SimpleQuote(1.0)
        q2 = SimpleQuote(2.0)
        h = RelinkableHandle(q1)
        counter = Counter()
        h.register_observer(counter)

        h.link_to(q2)
        assert counter.count == 1

        # Same link again: nothing happens
        h.link_to(q2)
        assert counter.count == 1

        q1.set_value(5.0)
        assert counter.count == 1
        q2.set_value(5.0)
        assert counter.count == 2

    def test_as_quote_handle(self):
        h = as_quote_handle(0.03)
        assert h.current_link().value() == 0.03

        q = SimpleQuote(0.04)
        assert as_quote_handle(q).current_link() is q
        assert as_quote_handle(h) is h


class TestLazyObject:
    """Tests for calculate-on-demand behaviour."""

    def test_calculates_once(self):
        q = SimpleQuote(3.0)
        obj = SquareOf(q)
        assert not obj.is_calculated

        obj.calculate()
        obj.calculate()
        assert obj.result == 9.0
        assert obj.runs == 1

    def test_update_marks_dirty(self):
        q = SimpleQuote(3.0)
        obj = SquareOf(q)
        counter = Counter()
        obj.register_observer(counter)
        obj.calculate()

        q.set_value(4.0)
        assert not obj.is_calculated
        assert counter.count == 1

        # Already dirty: observers are not notified again
        q.set_value(5.0)
        assert counter.count == 1

        obj.calculate()
        assert obj.result == 25.0

    def test_failed_calculation_stays_dirty(self):
        q = SimpleQuote()
        obj = SquareOf(q)
        with pytest.raises(InvalidQuoteError):
            obj.calculate()
        assert not obj.is_calculated

        q.set_value(2.0)
        obj.calculate()
        assert obj.result == 4.0

    def test_freeze(self):
        q = SimpleQuote(3.0)
        obj = SquareOf(q)
        obj.calculate()
        obj.freeze()

        q.set_value(4.0)
        obj.calculate()
        assert obj.result == 9.0

        obj.unfreeze()
        obj.calculate()
        assert obj.result == 16.0

    def test_recalculate(self):
        q = SimpleQuote(3.0)
        obj = SquareOf(q)
        obj.calculate()
        obj.recalculate()
        assert obj.runs == 2
