"""
CurveLib: Piecewise Term-Structure Bootstrapping Library

A modular library for:
- Bootstrapping yield curves node by node from market instruments
  (deposits, FRAs, futures, swaps, OIS, FX swaps, basis swaps, bonds)
- Composing what a curve interpolates (discount, zero, forward) with how
  (linear, log-linear, cubic, B-spline, ...)
- Bootstrapping zero and year-on-year inflation curves from inflation swaps
- Fitting parametric discount functions to bond prices

Scope: curve construction; instruments are priced only as far as the
bootstrap needs them.
"""

__version__ = "0.1.0"

# Core modules
from .conventions import (
    DayCount,
    BusinessDayConvention,
    Compounding,
    Frequency,
    Conventions,
    year_fraction,
)
from .dates import Period, DateUtils, ScheduleInfo
from .errors import (
    CurveLibError,
    ValidationError,
    DuplicateTimeError,
    ExtrapolationError,
    InvalidQuoteError,
    NotSupportedError,
    RootNotBracketedError,
    BootstrapError,
    ConvergenceError,
)
from .settings import CurveLibSettings, get_settings, configure_logging
from .quotes import SimpleQuote, Handle, RelinkableHandle
from .indexes import IborIndex, OvernightIndex, ZeroInflationIndex, YoYInflationIndex

# Math
from .math import (
    Linear,
    LogLinear,
    BackwardFlat,
    Cubic,
    LogCubic,
    BSpline,
    create_interpolator,
    Solver1D,
    EndCriteria,
)

# Curves
from .curves import (
    Discount,
    ZeroYield,
    ForwardRate,
    InterpolatedYieldCurve,
    FlatForward,
    create_flat_curve,
    BootstrapConfig,
    ConvergenceCriterion,
    IterativeBootstrap,
    PiecewiseYieldCurve,
    InterpolatedZeroInflationCurve,
    InterpolatedYoYInflationCurve,
    PiecewiseZeroInflationCurve,
    PiecewiseYoYInflationCurve,
    NelsonSiegelFitting,
    SvenssonFitting,
    ExponentialSplinesFitting,
    CubicBSplinesFitting,
    SimplePolynomialFitting,
    SpreadFittingMethod,
    FittedBondDiscountCurve,
)

# Helpers
from .helpers import (
    Pillar,
    DepositRateHelper,
    FraRateHelper,
    FuturesRateHelper,
    SwapRateHelper,
    OISRateHelper,
    FxSwapRateHelper,
    BasisSwapHelper,
    BondHelper,
    ZeroCouponInflationSwapHelper,
    YearOnYearInflationSwapHelper,
)

# Pricers
from .pricers import (
    FixedRateBond,
    VanillaSwap,
    OvernightIndexedSwap,
    BasisSwap,
    ZeroCouponInflationSwap,
    YearOnYearInflationSwap,
)

__all__ = [
    # Version
    "__version__",
    # Conventions
    "DayCount",
    "BusinessDayConvention",
    "Compounding",
    "Frequency",
    "Conventions",
    "year_fraction",
    # Dates
    "Period",
    "DateUtils",
    "ScheduleInfo",
    # Errors
    "CurveLibError",
    "ValidationError",
    "DuplicateTimeError",
    "ExtrapolationError",
    "InvalidQuoteError",
    "NotSupportedError",
    "RootNotBracketedError",
    "BootstrapError",
    "ConvergenceError",
    # Settings
    "CurveLibSettings",
    "get_settings",
    "configure_logging",
    # Quotes and indexes
    "SimpleQuote",
    "Handle",
    "RelinkableHandle",
    "IborIndex",
    "OvernightIndex",
    "ZeroInflationIndex",
    "YoYInflationIndex",
    # Math
    "Linear",
    "LogLinear",
    "BackwardFlat",
    "Cubic",
    "LogCubic",
    "BSpline",
    "create_interpolator",
    "Solver1D",
    "EndCriteria",
    # Curves
    "Discount",
    "ZeroYield",
    "ForwardRate",
    "InterpolatedYieldCurve",
    "FlatForward",
    "create_flat_curve",
    "BootstrapConfig",
    "ConvergenceCriterion",
    "IterativeBootstrap",
    "PiecewiseYieldCurve",
    "InterpolatedZeroInflationCurve",
    "InterpolatedYoYInflationCurve",
    "PiecewiseZeroInflationCurve",
    "PiecewiseYoYInflationCurve",
    "NelsonSiegelFitting",
    "SvenssonFitting",
    "ExponentialSplinesFitting",
    "CubicBSplinesFitting",
    "SimplePolynomialFitting",
    "SpreadFittingMethod",
    "FittedBondDiscountCurve",
    # Helpers
    "Pillar",
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
    # Pricers
    "FixedRateBond",
    "VanillaSwap",
    "OvernightIndexedSwap",
    "BasisSwap",
    "ZeroCouponInflationSwap",
    "YearOnYearInflationSwap",
]
