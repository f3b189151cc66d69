"""
Two-dimensional interpolation on a rectangular grid.

``z`` is indexed as ``z[i, j]`` with ``i`` along ``y`` and ``j`` along ``x``
(rows are y, columns are x), so a surface of shape (len(y), len(x)).
"""

from abc import ABC, abstractmethod

import numpy as np
from scipy.interpolate import RectBivariateSpline

from ..errors import ExtrapolationError, ValidationError
from .interpolation import close


class Interpolation2D(ABC):
    """Base class for 2-D interpolations."""

    def __init__(self, x, y, z):
        self._x = np.asarray(x, dtype=np.float64)
        self._y = np.asarray(y, dtype=np.float64)
        self._z = np.asarray(z, dtype=np.float64)
        self._extrapolate = False

        if len(self._x) < 2 or len(self._y) < 2:
            raise ValidationError("at least two points are required along each axis")
        if self._z.shape != (len(self._y), len(self._x)):
            raise ValidationError(
                f"z shape {self._z.shape} does not match grid ({len(self._y)}, {len(self._x)})"
            )
        if np.any(np.diff(self._x) <= 0.0) or np.any(np.diff(self._y) <= 0.0):
            raise ValidationError("grid coordinates must be strictly increasing")

        self.update()

    def x_min(self) -> float:
        return float(self._x[0])

    def x_max(self) -> float:
        return float(self._x[-1])

    def y_min(self) -> float:
        return float(self._y[0])

    def y_max(self) -> float:
        return float(self._y[-1])

    def enable_extrapolation(self, enabled: bool = True) -> None:
        self._extrapolate = enabled

    def is_in_range(self, x: float, y: float) -> bool:
        in_x = (self.x_min() <= x <= self.x_max()) or close(x, self.x_min()) or close(x, self.x_max())
        in_y = (self.y_min() <= y <= self.y_max()) or close(y, self.y_min()) or close(y, self.y_max())
        return in_x and in_y

    def locate_x(self, x: float) -> int:
        i = int(np.searchsorted(self._x, x, side="right")) - 1
        return max(0, min(i, len(self._x) - 2))

    def locate_y(self, y: float) -> int:
        i = int(np.searchsorted(self._y, y, side="right")) - 1
        return max(0, min(i, len(self._y) - 2))

    def value(self, x: float, y: float, allow_extrapolation: bool = False) -> float:
        if not (allow_extrapolation or self._extrapolate or self.is_in_range(x, y)):
            raise ExtrapolationError(
                f"interpolation range is [{self.x_min()}, {self.x_max()}] x "
                f"[{self.y_min()}, {self.y_max()}]: extrapolation at ({x}, {y}) not allowed"
            )
        return float(self._value(x, y))

    def __call__(self, x: float, y: float, allow_extrapolation: bool = False) -> float:
        return self.value(x, y, allow_extrapolation)

    def update(self) -> None:
        pass

    @abstractmethod
    def _value(self, x: float, y: float) -> float:
        pass


class BilinearInterpolation(Interpolation2D):
    """Bilinear interpolation, extrapolating along the edge cells."""

    def _value(self, x, y):
        i = self.locate_x(x)
        j = self.locate_y(y)
        x1, x2 = self._x[i], self._x[i + 1]
        y1, y2 = self._y[j], self._y[j + 1]
        z11, z21 = self._z[j, i], self._z[j, i + 1]
        z12, z22 = self._z[j + 1, i], self._z[j + 1, i + 1]

        t = (x - x1) / (x2 - x1)
        u = (y - y1) / (y2 - y1)
        return (1.0 - t) * (1.0 - u) * z11 + t * (1.0 - u) * z21 + (1.0 - t) * u * z12 + t * u * z22


class BicubicSplineInterpolation(Interpolation2D):
    """Bicubic spline through every grid point; the degree drops on axes with fewer than 4 points."""

    def update(self) -> None:
        kx = min(3, len(self._x) - 1)
        ky = min(3, len(self._y) - 1)
        # RectBivariateSpline takes z indexed as [x, y]
        self._spline = RectBivariateSpline(self._x, self._y, self._z.T, kx=kx, ky=ky, s=0)

    def _value(self, x, y):
        return self._spline(x, y, grid=False)

    def derivative_x(self, x: float, y: float) -> float:
        return float(self._spline(x, y, dx=1, grid=False))

    def derivative_y(self, x: float, y: float) -> float:
        return float(self._spline(x, y, dy=1, grid=False))


class Bilinear:
    def interpolate(self, x, y, z) -> Interpolation2D:
        return BilinearInterpolation(x, y, z)


class Bicubic:
    def interpolate(self, x, y, z) -> Interpolation2D:
        return BicubicSplineInterpolation(x, y, z)


__all__ = [
    "Interpolation2D",
    "BilinearInterpolation",
    "BicubicSplineInterpolation",
    "Bilinear",
    "Bicubic",
]
