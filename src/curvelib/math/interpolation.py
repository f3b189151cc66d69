"""
Interpolation methods for term structures.

Provides:
- LinearInterpolation: piecewise linear
- LogLinearInterpolation: linear in log(y), i.e. piecewise flat forwards on discounts
- BackwardFlatInterpolation: piecewise constant, right-continuous at nodes
- CubicInterpolation: cubic spline with selectable boundary conditions
- LogCubicInterpolation: cubic spline on log(y)
- BSplineInterpolation: interpolating B-spline of configurable degree

An Interpolation works on views of the caller's arrays. After mutating y
values in place, call ``update()`` so that cached coefficients (slopes,
spline solves, cumulative integrals) are recomputed.

Interpolator objects (Linear, LogLinear, Cubic, ...) are factories: they
carry the scheme's settings, whether it is global and how many points it
needs, and build an Interpolation from (x, y).
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional, Tuple
import sys

import numpy as np
from scipy.integrate import quad
from scipy.interpolate import CubicSpline, make_interp_spline

from ..errors import ExtrapolationError, ValidationError


_EPSILON = sys.float_info.epsilon


def close(x: float, y: float, n: int = 42) -> bool:
    """Floating-point closeness used for range checks."""
    if x == y:
        return True
    diff = abs(x - y)
    tolerance = n * _EPSILON
    if x == 0.0 or y == 0.0:
        return diff < tolerance * tolerance
    return diff <= tolerance * abs(x) and diff <= tolerance * abs(y)


class Interpolation(ABC):
    """
    Base class for 1-D interpolations.

    Subclasses implement the ``_value``/``_derivative``/``_second_derivative``
    /``_primitive`` kernels and refresh their caches in ``update()``.
    """

    required_points = 2
    is_global = False

    def __init__(self, x, y):
        self._x = np.asarray(x, dtype=np.float64)
        self._y = np.asarray(y, dtype=np.float64)
        self._extrapolate = False

        if self._x.ndim != 1 or self._y.ndim != 1:
            raise ValidationError("x and y must be one-dimensional")
        if len(self._x) != len(self._y):
            raise ValidationError(
                f"x and y must have the same length ({len(self._x)} != {len(self._y)})"
            )
        if len(self._x) < self.required_points:
            raise ValidationError(
                f"not enough points to interpolate: at least {self.required_points} "
                f"required, {len(self._x)} provided"
            )
        if np.any(np.diff(self._x) <= 0.0):
            raise ValidationError("x values must be strictly increasing")

        self.update()

    # ------------------------------------------------------------------
    # inspectors

    @property
    def x(self) -> np.ndarray:
        return self._x

    @property
    def y(self) -> np.ndarray:
        return self._y

    def size(self) -> int:
        return len(self._x)

    def x_min(self) -> float:
        return float(self._x[0])

    def x_max(self) -> float:
        return float(self._x[-1])

    def is_in_range(self, x: float) -> bool:
        x1, x2 = self.x_min(), self.x_max()
        return (x1 <= x <= x2) or close(x, x1) or close(x, x2)

    def enable_extrapolation(self, enabled: bool = True) -> None:
        self._extrapolate = enabled

    def allows_extrapolation(self) -> bool:
        return self._extrapolate

    def locate(self, x: float) -> int:
        """Index i of the segment [x_i, x_{i+1}] used for x, clamped to [0, n-2]."""
        i = int(np.searchsorted(self._x, x, side="right")) - 1
        return max(0, min(i, len(self._x) - 2))

    # ------------------------------------------------------------------
    # evaluation

    def _check_range(self, x: float, allow_extrapolation: bool) -> None:
        if not (allow_extrapolation or self._extrapolate or self.is_in_range(x)):
            raise ExtrapolationError(
                f"interpolation range is [{self.x_min()}, {self.x_max()}]: "
                f"extrapolation at {x} not allowed"
            )

    def value(self, x: float, allow_extrapolation: bool = False) -> float:
        self._check_range(x, allow_extrapolation)
        return float(self._value(x))

    def __call__(self, x: float, allow_extrapolation: bool = False) -> float:
        return self.value(x, allow_extrapolation)

    def derivative(self, x: float, allow_extrapolation: bool = False) -> float:
        self._check_range(x, allow_extrapolation)
        return float(self._derivative(x))

    def second_derivative(self, x: float, allow_extrapolation: bool = False) -> float:
        self._check_range(x, allow_extrapolation)
        return float(self._second_derivative(x))

    def primitive(self, x: float, allow_extrapolation: bool = False) -> float:
        """Integral of the interpolant from x_min to x."""
        self._check_range(x, allow_extrapolation)
        return float(self._primitive(x))

    def update(self) -> None:
        """Recompute cached coefficients after the y values changed."""

    @abstractmethod
    def _value(self, x: float) -> float:
        pass

    @abstractmethod
    def _derivative(self, x: float) -> float:
        pass

    @abstractmethod
    def _second_derivative(self, x: float) -> float:
        pass

    @abstractmethod
    def _primitive(self, x: float) -> float:
        pass


class LinearInterpolation(Interpolation):
    """Piecewise linear interpolation, extrapolating along the end segments."""

    def update(self) -> None:
        dx = np.diff(self._x)
        self._slopes = np.diff(self._y) / dx
        segment_areas = dx * (self._y[:-1] + 0.5 * dx * self._slopes)
        self._cumulative = np.concatenate(([0.0], np.cumsum(segment_areas)))

    def _value(self, x):
        i = self.locate(x)
        return self._y[i] + (x - self._x[i]) * self._slopes[i]

    def _derivative(self, x):
        return self._slopes[self.locate(x)]

    def _second_derivative(self, x):
        return 0.0

    def _primitive(self, x):
        i = self.locate(x)
        dx = x - self._x[i]
        return self._cumulative[i] + dx * (self._y[i] + 0.5 * dx * self._slopes[i])


class LogLinearInterpolation(Interpolation):
    """
    Linear interpolation of log(y).

    On discount factors this gives piecewise constant forward rates.
    """

    def update(self) -> None:
        if np.any(self._y <= 0.0):
            raise ValidationError("log-linear interpolation requires positive y values")
        self._log_y = np.log(self._y)
        self._slopes = np.diff(self._log_y) / np.diff(self._x)
        segment_integrals = np.array([
            self._segment_integral(i, self._x[i + 1] - self._x[i])
            for i in range(len(self._x) - 1)
        ])
        self._cumulative = np.concatenate(([0.0], np.cumsum(segment_integrals)))

    def _segment_integral(self, i: int, dx: float) -> float:
        b = self._slopes[i]
        y0 = self._y[i]
        if abs(b * dx) < 1e-12:
            return y0 * dx * (1.0 + 0.5 * b * dx)
        return y0 * np.expm1(b * dx) / b

    def _value(self, x):
        i = self.locate(x)
        return np.exp(self._log_y[i] + (x - self._x[i]) * self._slopes[i])

    def _derivative(self, x):
        i = self.locate(x)
        return self._value(x) * self._slopes[i]

    def _second_derivative(self, x):
        i = self.locate(x)
        return self._value(x) * self._slopes[i] ** 2

    def _primitive(self, x):
        i = self.locate(x)
        return self._cumulative[i] + self._segment_integral(i, x - self._x[i])


class BackwardFlatInterpolation(Interpolation):
    """
    Piecewise constant interpolation.

    On (x_i, x_{i+1}] the value is y_{i+1}; to the left of x_0 it is y_0
    and to the right of the last node it stays at the last value.
    """

    def update(self) -> None:
        dx = np.diff(self._x)
        self._cumulative = np.concatenate(([0.0], np.cumsum(dx * self._y[1:])))

    def _value(self, x):
        if x <= self._x[0]:
            return self._y[0]
        if x >= self._x[-1]:
            return self._y[-1]
        i = self.locate(x)
        if x == self._x[i]:
            return self._y[i]
        return self._y[i + 1]

    def _derivative(self, x):
        return 0.0

    def _second_derivative(self, x):
        return 0.0

    def _primitive(self, x):
        if x <= self._x[0]:
            return (x - self._x[0]) * self._y[0]
        i = self.locate(x)
        return self._cumulative[i] + (x - self._x[i]) * self._y[i + 1]


class CubicBoundary(Enum):
    """Boundary condition of a cubic spline end."""
    NOT_A_KNOT = "not-a-knot"
    FIRST_DERIVATIVE = "first-derivative"
    SECOND_DERIVATIVE = "second-derivative"
    PERIODIC = "periodic"


def _spline_bc(
    left: CubicBoundary, left_value: float,
    right: CubicBoundary, right_value: float
):
    """Translate boundary conditions into scipy's ``bc_type``."""
    if (left == CubicBoundary.PERIODIC) != (right == CubicBoundary.PERIODIC):
        raise ValidationError("periodic boundary condition must be used on both ends")
    if left == CubicBoundary.PERIODIC:
        return "periodic"

    def side(condition, value):
        if condition == CubicBoundary.NOT_A_KNOT:
            return "not-a-knot"
        if condition == CubicBoundary.FIRST_DERIVATIVE:
            return (1, value)
        return (2, value)

    return (side(left, left_value), side(right, right_value))


class CubicInterpolation(Interpolation):
    """
    Cubic spline interpolation.

    The default (second derivative zero at both ends) is the natural spline.
    Changing any node moves the whole curve, so the scheme is global.
    """

    is_global = True

    def __init__(
        self,
        x,
        y,
        left: CubicBoundary = CubicBoundary.SECOND_DERIVATIVE,
        left_value: float = 0.0,
        right: CubicBoundary = CubicBoundary.SECOND_DERIVATIVE,
        right_value: float = 0.0
    ):
        self._bc_type = _spline_bc(left, left_value, right, right_value)
        super().__init__(x, y)

    def _transformed_y(self) -> np.ndarray:
        return self._y

    def update(self) -> None:
        try:
            self._spline = CubicSpline(self._x, self._transformed_y(), bc_type=self._bc_type)
        except ValueError as exc:
            raise ValidationError(f"cubic spline cannot be built: {exc}") from exc

    def _value(self, x):
        return self._spline(x)

    def _derivative(self, x):
        return self._spline(x, 1)

    def _second_derivative(self, x):
        return self._spline(x, 2)

    def _primitive(self, x):
        return self._spline.integrate(self._x[0], x, extrapolate=True)


class LogCubicInterpolation(CubicInterpolation):
    """Cubic spline on log(y); y must be positive."""

    def _transformed_y(self) -> np.ndarray:
        if np.any(self._y <= 0.0):
            raise ValidationError("log-cubic interpolation requires positive y values")
        return np.log(self._y)

    def _value(self, x):
        return np.exp(self._spline(x))

    def _derivative(self, x):
        return self._value(x) * self._spline(x, 1)

    def _second_derivative(self, x):
        d1 = self._spline(x, 1)
        return self._value(x) * (d1 * d1 + self._spline(x, 2))

    def _primitive(self, x):
        result, _ = quad(lambda s: float(self._value(s)), self._x[0], x, limit=200)
        return result


class BSplineInterpolation(Interpolation):
    """Interpolating B-spline of the given degree (not-a-knot end conditions)."""

    is_global = True

    def __init__(self, x, y, degree: int = 3):
        if degree < 1:
            raise ValidationError(f"B-spline degree must be positive, got {degree}")
        self.degree = degree
        self.required_points = degree + 1
        super().__init__(x, y)

    def update(self) -> None:
        self._spline = make_interp_spline(self._x, self._y, k=self.degree)
        self._d1 = self._spline.derivative(1)
        self._d2 = self._spline.derivative(2) if self.degree >= 2 else None
        self._antiderivative = self._spline.antiderivative(1)
        self._origin = float(self._antiderivative(self._x[0]))

    def _value(self, x):
        return self._spline(x, extrapolate=True)

    def _derivative(self, x):
        return self._d1(x, extrapolate=True)

    def _second_derivative(self, x):
        if self._d2 is None:
            return 0.0
        return self._d2(x, extrapolate=True)

    def _primitive(self, x):
        return self._antiderivative(x, extrapolate=True) - self._origin


# ----------------------------------------------------------------------
# Interpolator factories


class Interpolator(ABC):
    """Factory building an Interpolation of a given scheme from (x, y)."""

    is_global = False
    required_points = 2

    @abstractmethod
    def interpolate(self, x, y) -> Interpolation:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Linear(Interpolator):
    def interpolate(self, x, y) -> Interpolation:
        return LinearInterpolation(x, y)


class LogLinear(Interpolator):
    def interpolate(self, x, y) -> Interpolation:
        return LogLinearInterpolation(x, y)


class BackwardFlat(Interpolator):
    def interpolate(self, x, y) -> Interpolation:
        return BackwardFlatInterpolation(x, y)


class Cubic(Interpolator):
    """Cubic spline factory; natural spline by default."""

    is_global = True

    def __init__(
        self,
        left: CubicBoundary = CubicBoundary.SECOND_DERIVATIVE,
        left_value: float = 0.0,
        right: CubicBoundary = CubicBoundary.SECOND_DERIVATIVE,
        right_value: float = 0.0
    ):
        _spline_bc(left, left_value, right, right_value)
        self.left = left
        self.left_value = left_value
        self.right = right
        self.right_value = right_value

    def interpolate(self, x, y) -> Interpolation:
        return CubicInterpolation(x, y, self.left, self.left_value, self.right, self.right_value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(left={self.left.value}, right={self.right.value})"


class LogCubic(Cubic):
    def interpolate(self, x, y) -> Interpolation:
        return LogCubicInterpolation(x, y, self.left, self.left_value, self.right, self.right_value)


class BSpline(Interpolator):
    is_global = True

    def __init__(self, degree: int = 3):
        self.degree = degree
        self.required_points = degree + 1

    def interpolate(self, x, y) -> Interpolation:
        return BSplineInterpolation(x, y, self.degree)

    def __repr__(self) -> str:
        return f"BSpline(degree={self.degree})"


def create_interpolator(method: str) -> Interpolator:
    """
    Factory function to create an interpolator by name.

    Args:
        method: One of "linear", "log_linear", "backward_flat", "cubic_spline",
            "natural_cubic", "not_a_knot_cubic", "log_cubic", "bspline"
    """
    method = method.lower().replace("-", "_").replace(" ", "_")

    if method in ("linear", "lin"):
        return Linear()
    elif method in ("log_linear", "loglinear"):
        return LogLinear()
    elif method in ("backward_flat", "flat"):
        return BackwardFlat()
    elif method in ("cubic_spline", "cubic", "spline", "natural_cubic"):
        return Cubic()
    elif method in ("not_a_knot_cubic", "not_a_knot"):
        return Cubic(CubicBoundary.NOT_A_KNOT, 0.0, CubicBoundary.NOT_A_KNOT, 0.0)
    elif method in ("log_cubic", "logcubic"):
        return LogCubic()
    elif method in ("bspline", "b_spline"):
        return BSpline()
    else:
        raise ValueError(f"Unknown interpolation method: {method}")


__all__ = [
    "close",
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
]
