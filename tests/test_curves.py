"""
Unit tests for curves module.
"""

from datetime import date, timedelta
import math

import numpy as np
import pytest

from curvelib.conventions import Compounding, DayCount, Frequency
from curvelib.curves import (
    Discount,
    FlatForward,
    ForwardRate,
    InterpolatedYieldCurve,
    YoYInflationTraits,
    ZeroInflationTraits,
    ZeroYield,
    create_flat_curve,
)
from curvelib.errors import DuplicateTimeError, ExtrapolationError, ValidationError
from curvelib.math import BackwardFlat, Linear, LogLinear
from curvelib.quotes import SimpleQuote


REF = date(2024, 1, 15)


@pytest.fixture
def discount_curve():
    """Three-node log-linear discount curve (t = 0, 1, 2 under ACT/365)."""
    dates = [REF, REF + timedelta(days=365), REF + timedelta(days=730)]
    return InterpolatedYieldCurve(
        REF, DayCount.ACT_365, Discount(), LogLinear(), dates, [1.0, 0.96, 0.92]
    )


class TestInterpolatedYieldCurve:
    """Tests for curves built from given nodes."""

    def test_node_values(self, discount_curve):
        """Test discount factors at the nodes."""
        assert discount_curve.discount(REF) == 1.0
        assert abs(discount_curve.discount(1.0) - 0.96) < 1e-14
        assert abs(discount_curve.discount(REF + timedelta(days=730)) - 0.92) < 1e-14

    def test_zero_rate(self, discount_curve):
        """Test continuously compounded zero rate."""
        z = discount_curve.zero_rate(1.0)
        assert abs(z + math.log(0.96)) < 1e-12

        # Annual compounding
        z_annual = discount_curve.zero_rate(1.0, Compounding.COMPOUNDED, Frequency.ANNUAL)
        assert abs(z_annual - (1.0 / 0.96 - 1.0)) < 1e-12

    def test_zero_rate_at_reference(self, discount_curve):
        """Test zero rate at t=0 is the short rate of the first segment."""
        assert abs(discount_curve.zero_rate(0.0) + math.log(0.96)) < 1e-8

    def test_forward_rates(self, discount_curve):
        """Test simple and instantaneous forwards in the second segment."""
        fwd = discount_curve.forward_rate(1.0, 2.0)
        assert abs(fwd - (0.96 / 0.92 - 1.0)) < 1e-12

        inst = discount_curve.instantaneous_forward(1.5)
        assert abs(inst - math.log(0.96 / 0.92)) < 1e-12

    def test_forward_rate_order(self, discount_curve):
        with pytest.raises(ValidationError):
            discount_curve.forward_rate(2.0, 1.0)

    def test_extrapolation(self, discount_curve):
        """Test queries past the last node need extrapolation."""
        with pytest.raises(ExtrapolationError):
            discount_curve.discount(2.5)

        # Flat forward beyond the last node, continuous at the node
        inst = math.log(0.96 / 0.92)
        assert abs(discount_curve.discount(3.0, extrapolate=True) - 0.92 * math.exp(-inst)) < 1e-12
        assert abs(discount_curve.discount(2.0 + 1e-10, extrapolate=True) - 0.92) < 1e-10

        discount_curve.enable_extrapolation()
        assert discount_curve.allows_extrapolation()
        discount_curve.discount(10.0)

    def test_negative_time(self, discount_curve):
        with pytest.raises(ValidationError):
            discount_curve.discount(-0.5)

    def test_max_date(self, discount_curve):
        assert discount_curve.max_date() == REF + timedelta(days=730)
        assert abs(discount_curve.max_time() - 2.0) < 1e-14

    def test_nodes_frame(self, discount_curve):
        df = discount_curve.nodes_frame()
        assert list(df.columns) == ["date", "time", "value"]
        assert len(df) == 3
        assert discount_curve.nodes()[1] == (REF + timedelta(days=365), 0.96)

    def test_from_nodes(self):
        dates = [REF, REF + timedelta(days=365)]
        curve = InterpolatedYieldCurve.from_nodes(dates, [1.0, 0.95])
        assert curve.reference_date == REF
        assert isinstance(curve.interpolator, LogLinear)


class TestNodeValidation:
    """Tests for node checks."""

    def test_first_node_at_reference(self):
        with pytest.raises(ValidationError):
            InterpolatedYieldCurve(
                REF, dates=[REF + timedelta(days=1), REF + timedelta(days=365)], data=[1.0, 0.95]
            )

    def test_initial_discount_is_one(self):
        with pytest.raises(ValidationError):
            InterpolatedYieldCurve(REF, dates=[REF, REF + timedelta(days=365)], data=[0.99, 0.95])

    def test_positive_discounts(self):
        with pytest.raises(ValidationError):
            InterpolatedYieldCurve(REF, dates=[REF, REF + timedelta(days=365)], data=[1.0, -0.95])

    def test_unsorted_dates(self):
        dates = [REF, REF + timedelta(days=730), REF + timedelta(days=365)]
        with pytest.raises(ValidationError):
            InterpolatedYieldCurve(REF, dates=dates, data=[1.0, 0.9, 0.95])

    def test_dates_with_same_time(self):
        """Test two dates collapsing to one 30/360 time."""
        ref = date(2024, 1, 30)
        dates = [ref, date(2024, 3, 30), date(2024, 3, 31)]
        with pytest.raises(DuplicateTimeError):
            InterpolatedYieldCurve(ref, DayCount.THIRTY_360, dates=dates, data=[1.0, 0.99, 0.98])

    def test_mismatched_nodes(self):
        with pytest.raises(ValidationError):
            InterpolatedYieldCurve(REF, dates=[REF, REF + timedelta(days=365)], data=[1.0])


class TestTraits:
    """Tests for curve traits and the node curves they define."""

    def test_zero_yield_curve(self):
        dates = [REF, REF + timedelta(days=365), REF + timedelta(days=730)]
        curve = InterpolatedYieldCurve(REF, traits=ZeroYield(), interpolator=Linear(),
                                       dates=dates, data=[0.03, 0.04, 0.05])

        assert abs(curve.discount(1.0) - math.exp(-0.04)) < 1e-14
        assert abs(curve.discount(1.5) - math.exp(-0.045 * 1.5)) < 1e-14
        assert abs(curve.zero_rate(2.0) - 0.05) < 1e-12

        # Instantaneous forward of z(t) t at t=2: z + t z' = 0.05 + 2 * 0.01
        assert abs(curve.instantaneous_forward(2.0) - 0.07) < 1e-12
        assert abs(curve.discount(3.0, extrapolate=True) - math.exp(-(0.10 + 0.07))) < 1e-12

    def test_forward_curve(self):
        dates = [REF, REF + timedelta(days=365), REF + timedelta(days=730)]
        curve = InterpolatedYieldCurve(REF, traits=ForwardRate(), interpolator=BackwardFlat(),
                                       dates=dates, data=[0.03, 0.03, 0.05])

        assert abs(curve.discount(2.0) - math.exp(-0.08)) < 1e-14
        assert abs(curve.instantaneous_forward(1.5) - 0.05) < 1e-14
        # Last forward continues beyond the last node
        assert abs(curve.discount(3.0, extrapolate=True) - math.exp(-0.13)) < 1e-14

    def test_traits_by_name(self):
        dates = [REF, REF + timedelta(days=365)]
        curve = InterpolatedYieldCurve(REF, traits="zero_yield", interpolator="linear",
                                       dates=dates, data=[0.02, 0.02])
        assert isinstance(curve.traits, ZeroYield)
        assert abs(curve.discount(0.5) - math.exp(-0.01)) < 1e-14

    def test_iteration_budgets(self):
        assert Discount().max_iterations() == 100
        assert ZeroYield().max_iterations() == 30
        assert ForwardRate().max_iterations() == 30
        assert ZeroInflationTraits().max_iterations() == 5
        assert YoYInflationTraits().max_iterations() == 40

    def test_update_guess_anchor(self):
        data = np.array([0.0, 0.0, 0.0])
        ZeroYield().update_guess(data, 0.04, 1)
        assert data[0] == 0.04 and data[1] == 0.04

        data = np.array([1.0, 0.0, 0.0])
        Discount().update_guess(data, 0.96, 1)
        assert data[0] == 1.0 and data[1] == 0.96

    def test_widen_bracket(self, discount_curve):
        traits = Discount(negative_rates=False)
        lo, hi = traits.widen_bracket(2, discount_curve, 0.90, 0.95)
        assert abs(lo - 0.85) < 1e-14
        # Capped at the previous discount factor
        assert abs(hi - 0.96) < 1e-14

        # Never reaches zero
        lo, hi = traits.widen_bracket(2, discount_curve, 0.01, 0.5)
        assert abs(lo - 0.005) < 1e-14


class TestFlatForward:
    """Tests for FlatForward."""

    def test_continuous(self):
        curve = create_flat_curve(REF, 0.05)
        assert abs(curve.discount(2.0) - math.exp(-0.10)) < 1e-14
        assert abs(curve.zero_rate(3.0) - 0.05) < 1e-12
        assert abs(curve.instantaneous_forward(1.0) - 0.05) < 1e-8

    def test_annual_compounding(self):
        curve = FlatForward(REF, 0.05, compounding=Compounding.COMPOUNDED)
        assert abs(curve.discount(2.0) - 1.05 ** -2) < 1e-14

    def test_no_max_date(self):
        curve = create_flat_curve(REF, 0.05)
        curve.discount(100.0)

    def test_quote_change_notifies(self):
        """Test the curve forwards quote changes."""
        quote = SimpleQuote(0.05)
        curve = FlatForward(REF, quote)
        calls = []
        curve.register_observer(lambda: calls.append(1))

        quote.set_value(0.04)

        assert calls == [1]
        assert abs(curve.discount(1.0) - math.exp(-0.04)) < 1e-14
