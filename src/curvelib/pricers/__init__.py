"""
Pricers package - instruments priced off linked curve handles.

Provides:
- FixedRateBond: cashflows, accrued, clean/dirty price, yield, duration
- VanillaSwap, OvernightIndexedSwap, BasisSwap: fair rates and spreads
- ZeroCouponInflationSwap, YearOnYearInflationSwap: fair rates
"""

from .bonds import BondCashflow, FixedRateBond
from .swaps import BASIS_POINT, SwapLegCashflow, VanillaSwap, OvernightIndexedSwap, BasisSwap
from .inflation import ZeroCouponInflationSwap, YearOnYearInflationSwap

__all__ = [
    "BondCashflow",
    "FixedRateBond",
    "BASIS_POINT",
    "SwapLegCashflow",
    "VanillaSwap",
    "OvernightIndexedSwap",
    "BasisSwap",
    "ZeroCouponInflationSwap",
    "YearOnYearInflationSwap",
]
