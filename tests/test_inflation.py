"""
Unit tests for inflation term structures and inflation swap helpers.
"""

from datetime import date

import pytest

from curvelib.conventions import DayCount, year_fraction
from curvelib.curves import (
    FlatForward,
    InterpolatedYoYInflationCurve,
    InterpolatedZeroInflationCurve,
    PiecewiseYoYInflationCurve,
    PiecewiseZeroInflationCurve,
)
from curvelib.errors import ExtrapolationError, ValidationError
from curvelib.helpers import YearOnYearInflationSwapHelper, ZeroCouponInflationSwapHelper
from curvelib.indexes import YoYInflationIndex, ZeroInflationIndex
from curvelib.pricers import ZeroCouponInflationSwap
from curvelib.quotes import Handle, SimpleQuote


REF = date(2024, 1, 15)
BASE = date(2023, 10, 1)


@pytest.fixture
def cpi():
    index = ZeroInflationIndex("CPI")
    index.add_fixing(date(2023, 10, 1), 300.0)
    return index


@pytest.fixture
def nominal():
    return Handle(FlatForward(REF, 0.04))


def zc_helpers(index, quotes=(0.025, 0.027, 0.030)):
    maturities = [date(2025, 1, 15), date(2026, 1, 15), date(2029, 1, 15)]
    return [ZeroCouponInflationSwapHelper(q, "3M", m, index) for q, m in zip(quotes, maturities)]


class TestInterpolatedZeroInflationCurve:
    """Tests for zero inflation curves on given nodes."""

    @pytest.fixture
    def curve(self):
        return InterpolatedZeroInflationCurve(
            REF, "3M",
            dates=[BASE, date(2024, 10, 1), date(2025, 10, 1)],
            rates=[0.020, 0.025, 0.030]
        )

    def test_base_date(self, curve):
        """Test the base date is the lagged reference at its period start."""
        assert curve.base_date == BASE
        assert curve.time_from_base(date(2024, 10, 1)) == 366.0 / 365.0

    def test_interpolated_base_date(self):
        curve = InterpolatedZeroInflationCurve(REF, "3M", index_is_interpolated=True)
        assert curve.base_date == date(2023, 10, 15)

    def test_node_values(self, curve):
        assert abs(curve.zero_rate(date(2024, 10, 1)) - 0.025) < 1e-15
        assert curve.base_rate == 0.020

    def test_linear_between_nodes(self, curve):
        t1 = curve.time_from_base(date(2024, 10, 1))
        t2 = curve.time_from_base(date(2025, 10, 1))
        mid = 0.5 * (t1 + t2)
        assert abs(curve.zero_rate(mid) - 0.0275) < 1e-12

    def test_date_before_base(self, curve):
        with pytest.raises(ValidationError):
            curve.zero_rate(date(2023, 9, 1))

    def test_beyond_last_node(self, curve):
        with pytest.raises(ExtrapolationError):
            curve.zero_rate(date(2026, 10, 1))

    def test_first_node_must_be_base(self):
        with pytest.raises(ValidationError):
            InterpolatedZeroInflationCurve(
                REF, "3M", dates=[date(2023, 11, 1), date(2024, 10, 1)], rates=[0.02, 0.025]
            )

    def test_index_forecast(self, curve, cpi):
        """Test index levels grow from the base fixing at the zero rate."""
        index = cpi.clone(Handle(curve))
        t = year_fraction(BASE, date(2024, 10, 1), DayCount.ACT_365)
        expected = 300.0 * 1.025 ** t
        assert abs(index.fixing(date(2024, 10, 15)) - expected) < 1e-10
        # published fixings win over the curve
        assert index.fixing(date(2023, 10, 20)) == 300.0

    def test_missing_base_fixing(self, curve):
        index = ZeroInflationIndex("CPI", curve=Handle(curve))
        with pytest.raises(ValidationError):
            index.fixing(date(2024, 10, 1))


class TestPiecewiseZeroInflationCurve:
    """Tests for zero inflation curves bootstrapped from ZC swaps."""

    @pytest.fixture
    def curve(self, cpi, nominal):
        return PiecewiseZeroInflationCurve(
            REF, 0.025, "3M", zc_helpers(cpi), nominal_term_structure=nominal
        )

    def test_base_date(self, curve):
        assert curve.base_date == BASE

    def test_pillars(self, curve):
        """Test pillars sit at the lagged maturities' period starts."""
        pillars = [h.pillar_date() for h in curve.instruments]
        assert pillars == [date(2024, 10, 1), date(2025, 10, 1), date(2028, 10, 1)]
        curve.calculate()
        assert curve.dates == [BASE] + pillars

    def test_reprices_swaps(self, curve):
        curve.calculate()
        for helper in curve.instruments:
            assert abs(helper.quote_error()) < 1e-10

    def test_node_rates_match_quotes(self, curve):
        """Test each node equals its quote when the swap tenor and node time agree."""
        for helper, quote in zip(curve.instruments, (0.025, 0.027, 0.030)):
            assert abs(curve.zero_rate(helper.pillar_date()) - quote) < 1e-10

    def test_swap_npv_at_market(self, curve, cpi, nominal):
        curve.calculate()
        index = cpi.clone(Handle(curve))
        swap = ZeroCouponInflationSwap(REF, date(2026, 1, 15), 0.027, index, "3M",
                                       discounting=nominal)
        assert abs(swap.npv()) < 1e-10

    def test_quote_change(self, cpi, nominal):
        quote = SimpleQuote(0.025)
        helpers = zc_helpers(cpi, (quote, 0.027, 0.030))
        curve = PiecewiseZeroInflationCurve(REF, 0.025, "3M", helpers,
                                            nominal_term_structure=nominal)
        before = curve.zero_rate(date(2024, 10, 1))

        quote.set_value(0.028)

        assert not curve.is_calculated
        assert curve.zero_rate(date(2024, 10, 1)) > before

    def test_nominal_curve_required(self, cpi):
        curve = PiecewiseZeroInflationCurve(REF, 0.025, "3M", zc_helpers(cpi))
        with pytest.raises(ValidationError):
            curve.calculate()


class TestObservationLag:
    """Tests for lag consistency with interpolated indexes."""

    def test_lag_too_short(self):
        index = ZeroInflationIndex("CPI", interpolated=True, availability_lag="1M")
        with pytest.raises(ValidationError):
            ZeroCouponInflationSwapHelper(0.025, "2M", date(2025, 1, 15), index)

    def test_lag_long_enough(self):
        index = ZeroInflationIndex("CPI", interpolated=True, availability_lag="1M")
        helper = ZeroCouponInflationSwapHelper(0.025, "3M", date(2025, 1, 15), index)
        assert helper.pillar_date() == date(2024, 10, 15)

    def test_lag_ignored_without_interpolation(self):
        index = ZeroInflationIndex("CPI", availability_lag="1M")
        helper = ZeroCouponInflationSwapHelper(0.025, "2M", date(2025, 1, 15), index)
        assert helper.pillar_date() == date(2024, 11, 1)


class TestYoYInflationCurves:
    """Tests for year-on-year inflation curves."""

    def test_interpolated_curve(self):
        curve = InterpolatedYoYInflationCurve(
            REF, "3M", dates=[BASE, date(2025, 10, 1)], rates=[0.02, 0.03]
        )
        assert abs(curve.yoy_rate(date(2025, 10, 1)) - 0.03) < 1e-15
        assert 0.02 < curve.yoy_rate(date(2024, 10, 1)) < 0.03

    def test_bootstrap(self, nominal):
        index = YoYInflationIndex("YOY")
        helpers = [
            YearOnYearInflationSwapHelper(rate, "3M", maturity, index)
            for rate, maturity in [(0.024, date(2025, 1, 15)), (0.026, date(2026, 1, 15)),
                                   (0.028, date(2029, 1, 15))]
        ]
        curve = PiecewiseYoYInflationCurve(REF, 0.024, "3M", helpers,
                                           nominal_term_structure=nominal)
        curve.calculate()
        for helper in curve.instruments:
            assert abs(helper.quote_error()) < 1e-10
        # a one-period swap pays a single fixing
        assert abs(curve.yoy_rate(date(2024, 10, 1)) - 0.024) < 1e-10
