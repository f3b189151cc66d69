"""
Math package - numerical building blocks for curve construction.

Provides:
- 1-D interpolations and their factories (Linear, LogLinear, Cubic, ...)
- 2-D grid interpolations (bilinear, bicubic spline)
- Solver1D: bracketed root finding
- minimize / EndCriteria: simplex-based least-squares fitting
"""

from .interpolation import (
    Interpolation,
    LinearInterpolation,
    LogLinearInterpolation,
    BackwardFlatInterpolation,
    CubicBoundary,
    CubicInterpolation,
    LogCubicInterpolation,
    BSplineInterpolation,
    Interpolator,
    Linear,
    LogLinear,
    BackwardFlat,
    Cubic,
    LogCubic,
    BSpline,
    create_interpolator,
)
from .interpolation2d import (
    Interpolation2D,
    BilinearInterpolation,
    BicubicSplineInterpolation,
    Bilinear,
    Bicubic,
)
from .solvers import Solver1D, RootResult
from .optimization import EndCriteria, OptimizationResult, minimize

__all__ = [
    "Interpolation",
    "LinearInterpolation",
    "LogLinearInterpolation",
    "BackwardFlatInterpolation",
    "CubicBoundary",
    "CubicInterpolation",
    "LogCubicInterpolation",
    "BSplineInterpolation",
    "Interpolator",
    "Linear",
    "LogLinear",
    "BackwardFlat",
    "Cubic",
    "LogCubic",
    "BSpline",
    "create_interpolator",
    "Interpolation2D",
    "BilinearInterpolation",
    "BicubicSplineInterpolation",
    "Bilinear",
    "Bicubic",
    "Solver1D",
    "RootResult",
    "minimize",
    "EndCriteria",
    "OptimizationResult",
]
