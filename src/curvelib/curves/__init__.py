"""
Curves package - term structure construction.

Provides:
- InterpolatedYieldCurve / FlatForward: yield curves from given nodes or a flat rate
- Traits (Discount, ZeroYield, ForwardRate, inflation traits): what a curve interpolates
- IterativeBootstrap / PiecewiseYieldCurve: curves bootstrapped from instrument helpers
- Zero and year-on-year inflation curves, interpolated and piecewise
- FittedBondDiscountCurve: parametric discount functions fitted to bond prices
"""

from .base import LazyObject, TermStructure, YieldTermStructure
from .interpolated import InterpolatedCurve
from .traits import (
    AVG_RATE,
    MAX_RATE,
    AVG_INFLATION,
    MAX_INFLATION,
    BootstrapTraits,
    Discount,
    ZeroYield,
    ForwardRate,
    ZeroInflationTraits,
    YoYInflationTraits,
    create_traits,
)
from .curve import InterpolatedYieldCurve, FlatForward, create_flat_curve
from .bootstrap import ConvergenceCriterion, BootstrapConfig, IterativeBootstrap
from .piecewise import PiecewiseYieldCurve
from .inflation import (
    InflationTermStructure,
    ZeroInflationTermStructure,
    YoYInflationTermStructure,
    InterpolatedZeroInflationCurve,
    InterpolatedYoYInflationCurve,
    PiecewiseZeroInflationCurve,
    PiecewiseYoYInflationCurve,
)
from .fitted import (
    FittingMethod,
    ExponentialSplinesFitting,
    NelsonSiegelFitting,
    SvenssonFitting,
    CubicBSplinesFitting,
    SimplePolynomialFitting,
    SpreadFittingMethod,
    FittedBondDiscountCurve,
)

__all__ = [
    "LazyObject",
    "TermStructure",
    "YieldTermStructure",
    "InterpolatedCurve",
    "AVG_RATE",
    "MAX_RATE",
    "AVG_INFLATION",
    "MAX_INFLATION",
    "BootstrapTraits",
    "Discount",
    "ZeroYield",
    "ForwardRate",
    "ZeroInflationTraits",
    "YoYInflationTraits",
    "create_traits",
    "InterpolatedYieldCurve",
    "FlatForward",
    "create_flat_curve",
    "ConvergenceCriterion",
    "BootstrapConfig",
    "IterativeBootstrap",
    "PiecewiseYieldCurve",
    "InflationTermStructure",
    "ZeroInflationTermStructure",
    "YoYInflationTermStructure",
    "InterpolatedZeroInflationCurve",
    "InterpolatedYoYInflationCurve",
    "PiecewiseZeroInflationCurve",
    "PiecewiseYoYInflationCurve",
    "FittingMethod",
    "ExponentialSplinesFitting",
    "NelsonSiegelFitting",
    "SvenssonFitting",
    "CubicBSplinesFitting",
    "SimplePolynomialFitting",
    "SpreadFittingMethod",
    "FittedBondDiscountCurve",
]
