"""
Unit tests for pricers module.
"""

from datetime import date
import math

import pytest

from curvelib.conventions import BusinessDayConvention, Compounding, DayCount, Frequency, year_fraction
from curvelib.curves import FlatForward, InterpolatedYoYInflationCurve, InterpolatedZeroInflationCurve
from curvelib.errors import ValidationError
from curvelib.indexes import IborIndex, OvernightIndex, YoYInflationIndex, ZeroInflationIndex
from curvelib.pricers import (
    BasisSwap,
    FixedRateBond,
    OvernightIndexedSwap,
    VanillaSwap,
    YearOnYearInflationSwap,
    ZeroCouponInflationSwap,
)
from curvelib.quotes import Handle


REF = date(2024, 1, 15)


@pytest.fixture
def flat_curve():
    """Create a flat 4% continuously compounded curve."""
    return FlatForward(REF, 0.04)


@pytest.fixture
def term_index(flat_curve):
    return IborIndex("TERM3M", "3M", forwarding=Handle(flat_curve))


class TestVanillaSwap:
    """Tests for fixed vs. term-rate swaps."""

    def test_floating_leg_telescopes(self, flat_curve, term_index):
        """Test a single-curve floating leg is worth P(start) - P(end)."""
        swap = VanillaSwap(date(2024, 1, 17), date(2029, 1, 17), 0.04, term_index)
        expected = flat_curve.discount(date(2024, 1, 17)) - flat_curve.discount(date(2029, 1, 17))
        assert abs(swap.floating_leg_npv() - expected) < 1e-14

    def test_fair_rate_zero_npv(self, term_index):
        swap = VanillaSwap(date(2024, 1, 17), date(2029, 1, 17), 0.05, term_index)
        assert swap.npv() < 0.0  # paying above market
        swap.fixed_rate = swap.fair_rate()
        assert abs(swap.npv()) < 1e-14

    def test_fair_spread_zero_npv(self, term_index):
        swap = VanillaSwap(date(2024, 1, 17), date(2029, 1, 17), 0.05, term_index)
        swap.spread = swap.fair_spread()
        assert swap.spread > 0.0
        assert abs(swap.npv()) < 1e-14

    def test_bps(self, term_index):
        swap = VanillaSwap(date(2024, 1, 17), date(2026, 1, 19), 0.04, term_index, nominal=1e6)
        assert abs(swap.fixed_leg_bps() - swap.fixed_leg_annuity() * 100.0) < 1e-8

    def test_leg_layout(self, term_index):
        swap = VanillaSwap(date(2024, 1, 17), date(2025, 1, 17), 0.04, term_index)
        assert len(swap.fixed_leg) == 2
        assert len(swap.floating_leg) == 4
        assert swap.floating_leg[-1].payment_date == date(2025, 1, 17)

    def test_past_fixing(self, flat_curve, term_index):
        """Test a coupon fixed before the reference date uses the stored fixing."""
        swap = VanillaSwap(date(2023, 10, 17), date(2025, 10, 17), 0.04, term_index)
        with pytest.raises(ValidationError):
            swap.floating_leg_npv()

        term_index.add_fixing(date(2023, 10, 13), 0.055)

        first = swap.floating_leg[0]
        assert first.payment_date == date(2024, 1, 17)
        expected = (0.055 * first.year_fraction * flat_curve.discount(first.payment_date)
                    + flat_curve.discount(date(2024, 1, 17)) - flat_curve.discount(date(2025, 10, 17)))
        assert abs(swap.floating_leg_npv() - expected) < 1e-14

    def test_invalid_dates(self, term_index):
        with pytest.raises(ValidationError):
            VanillaSwap(date(2025, 1, 17), date(2024, 1, 17), 0.04, term_index)


class TestOvernightIndexedSwap:
    """Tests for OIS."""

    def test_fair_rate_zero_npv(self, flat_curve):
        index = OvernightIndex("SOFR", forwarding=Handle(flat_curve))
        swap = OvernightIndexedSwap(date(2024, 1, 17), date(2027, 1, 19), 0.05, index)
        swap.fixed_rate = swap.fair_rate()
        assert abs(swap.npv()) < 1e-14

    def test_overnight_leg_telescopes(self, flat_curve):
        index = OvernightIndex("SOFR", forwarding=Handle(flat_curve))
        swap = OvernightIndexedSwap(date(2024, 1, 17), date(2027, 1, 19), 0.05, index)
        expected = flat_curve.discount(date(2024, 1, 17)) - flat_curve.discount(date(2027, 1, 19))
        assert abs(swap.overnight_leg_npv() - expected) < 1e-14


class TestBasisSwap:
    """Tests for term-rate basis swaps."""

    def test_single_curve_basis_is_zero(self, flat_curve):
        short = IborIndex("TERM3M", "3M", forwarding=Handle(flat_curve))
        long = IborIndex("TERM6M", "6M", forwarding=Handle(flat_curve))
        swap = BasisSwap(date(2024, 1, 17), date(2029, 1, 17), long, short)
        assert abs(swap.fair_spread()) < 1e-12

    def test_fair_spread_zero_npv(self, flat_curve):
        short = IborIndex("TERM3M", "3M", forwarding=Handle(FlatForward(REF, 0.035)))
        long = IborIndex("TERM6M", "6M", forwarding=Handle(flat_curve))
        swap = BasisSwap(date(2024, 1, 17), date(2029, 1, 17), long, short,
                         discounting=Handle(flat_curve))
        swap.spread = swap.fair_spread()
        assert swap.spread > 0.0
        assert abs(swap.npv()) < 1e-14


class TestFixedRateBond:
    """Tests for fixed-rate bonds."""

    @pytest.fixture
    def bond(self):
        return FixedRateBond(date(2024, 1, 15), date(2029, 1, 15), 0.04,
                             day_count=DayCount.THIRTY_360)

    def test_cashflows(self, bond):
        flows = bond.cashflows()
        assert len(flows) == 11
        assert flows[0].amount == 2.0
        assert flows[-1].type == "PRINCIPAL"
        assert flows[-1].amount == 100.0
        assert bond.payment_date() == date(2029, 1, 15)

    def test_accrued(self, bond):
        """Test half a coupon period accrues half a coupon."""
        assert abs(bond.accrued_amount(date(2024, 4, 15)) - 1.0) < 1e-12
        assert bond.accrued_amount(date(2024, 1, 15)) == 0.0

    def test_settlement(self, bond):
        assert bond.settlement_date(date(2024, 1, 12)) == date(2024, 1, 15)
        # never before issue
        assert bond.settlement_date(date(2023, 12, 1)) == date(2024, 1, 15)

    def test_par_yield(self):
        """Test a bond at par yields its coupon when no payment rolls."""
        bond = FixedRateBond(date(2024, 1, 15), date(2029, 1, 15), 0.04,
                             day_count=DayCount.THIRTY_360,
                             payment_convention=BusinessDayConvention.UNADJUSTED)
        ytm = bond.yield_to_maturity(100.0, date(2024, 1, 15), frequency=Frequency.SEMIANNUAL)
        assert abs(ytm - 0.04) < 1e-10

    def test_par_yield_with_rolled_payment(self, bond):
        """Test yields discount to adjusted payment dates."""
        # 2028-01-15 and 2028-07-15 fall on Saturdays and are paid on Monday
        assert bond.cashflows()[7].date == date(2028, 1, 17)
        ytm = bond.yield_to_maturity(100.0, date(2024, 1, 15), frequency=Frequency.SEMIANNUAL)
        assert 0.04 - 1e-5 < ytm < 0.04

    def test_yield_off_flat_curve(self, flat_curve):
        """Test the continuous yield of a bond priced off a flat curve."""
        bond = FixedRateBond(date(2023, 7, 15), date(2030, 7, 15), 0.05, day_count=DayCount.ACT_365)
        settlement = bond.settlement_date(REF)
        price = bond.clean_price(flat_curve, settlement)
        ytm = bond.yield_to_maturity(price, settlement, compounding=Compounding.CONTINUOUS)
        assert abs(ytm - 0.04) < 1e-10

    def test_clean_dirty(self, bond, flat_curve):
        settlement = date(2024, 4, 15)
        dirty = bond.dirty_price(flat_curve, settlement)
        clean = bond.clean_price(flat_curve, settlement)
        assert abs(dirty - clean - 1.0) < 1e-12

    def test_duration_single_cashflow(self):
        bond = FixedRateBond(date(2024, 1, 15), date(2025, 1, 15), 0.05, Frequency.ANNUAL,
                             DayCount.THIRTY_360)
        settlement = date(2024, 1, 15)
        continuous = bond.modified_duration(0.05, settlement, Compounding.CONTINUOUS)
        compounded = bond.modified_duration(0.05, settlement, Compounding.COMPOUNDED)
        assert abs(continuous - 1.0) < 1e-12
        assert abs(compounded - 1.0 / 1.05) < 1e-12

    def test_invalid_bond(self):
        with pytest.raises(ValidationError):
            FixedRateBond(date(2024, 1, 15), date(2024, 1, 15), 0.04)
        with pytest.raises(ValidationError):
            FixedRateBond(date(2024, 1, 15), date(2029, 1, 15), 0.04, face_value=0.0)


class TestInflationSwaps:
    """Tests for inflation swaps."""

    @pytest.fixture
    def nominal(self, flat_curve):
        return Handle(flat_curve)

    def test_zero_coupon_fair_rate(self, nominal):
        curve = InterpolatedZeroInflationCurve(
            REF, "3M", dates=[date(2023, 10, 1), date(2026, 10, 1)], rates=[0.025, 0.025]
        )
        index = ZeroInflationIndex("CPI", curve=Handle(curve))
        index.add_fixing(date(2023, 10, 1), 300.0)
        swap = ZeroCouponInflationSwap(REF, date(2026, 1, 15), 0.03, index, "3M",
                                       discounting=nominal)

        assert swap.base_fixing_date() == date(2023, 10, 15)
        assert swap.fixing_date() == date(2025, 10, 15)
        assert abs(swap.fair_rate() - 0.025) < 1e-12
        assert swap.npv() < 0.0

        swap.fixed_rate = swap.fair_rate()
        assert abs(swap.npv()) < 1e-14

    def test_zero_coupon_needs_discounting(self):
        curve = InterpolatedZeroInflationCurve(
            REF, "3M", dates=[date(2023, 10, 1), date(2026, 10, 1)], rates=[0.025, 0.025]
        )
        index = ZeroInflationIndex("CPI", curve=Handle(curve))
        index.add_fixing(date(2023, 10, 1), 300.0)
        swap = ZeroCouponInflationSwap(REF, date(2026, 1, 15), 0.03, index, "3M")
        with pytest.raises(ValidationError):
            swap.npv()

    def test_year_on_year_fair_rate(self, nominal):
        curve = InterpolatedYoYInflationCurve(
            REF, "3M", dates=[date(2023, 10, 1), date(2027, 10, 1)], rates=[0.025, 0.025]
        )
        index = YoYInflationIndex("YOY", curve=Handle(curve))
        swap = YearOnYearInflationSwap(REF, date(2027, 1, 15), 0.02, index, "3M",
                                       discounting=nominal)
        assert len(swap.leg) == 3
        assert abs(swap.fair_rate() - 0.025) < 1e-12
        assert swap.npv() > 0.0
