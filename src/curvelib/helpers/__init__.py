"""
Helpers package - market instruments as bootstrap inputs.

Provides:
- BootstrapHelper / RelativeDateHelper / Pillar: the helper contract
- Rate helpers: deposit, FRA, futures, swap, OIS, FX swap, basis swap
- BondHelper: bond prices for piecewise and fitted curves
- Inflation swap helpers: zero-coupon and year-on-year
"""

from .base import Pillar, BootstrapHelper, RelativeDateHelper
from .rates import (
    DepositRateHelper,
    FraRateHelper,
    FuturesRateHelper,
    SwapRateHelper,
    OISRateHelper,
    FxSwapRateHelper,
    BasisSwapHelper,
)
from .bonds import BondHelper
from .inflation import ZeroCouponInflationSwapHelper, YearOnYearInflationSwapHelper

__all__ = [
    "Pillar",
    "BootstrapHelper",
    "RelativeDateHelper",
    "DepositRateHelper",
    "FraRateHelper",
    "FuturesRateHelper",
    "SwapRateHelper",
    "OISRateHelper",
    "FxSwapRateHelper",
    "BasisSwapHelper",
    "BondHelper",
    "ZeroCouponInflationSwapHelper",
    "YearOnYearInflationSwapHelper",
]
