"""
Node storage shared by interpolated curves.

Holds the node dates, their times and the interpolated values, plus the
interpolation built on them. The arrays are owned by the curve and may be
modified in place (the bootstrapper does so node by node); call
``setup_interpolation()`` or ``interpolation.update()`` afterwards.
"""

from datetime import date
from typing import List, Sequence, Tuple

import numpy as np
import pandas as pd

from ..errors import DuplicateTimeError, ValidationError
from ..math.interpolation import Interpolation, Interpolator


class InterpolatedCurve:
    """Mixin giving a term structure a set of interpolated nodes."""

    interpolator: Interpolator = None
    _interpolation: Interpolation = None

    def _init_nodes(self, interpolator: Interpolator) -> None:
        self.interpolator = interpolator
        self._dates: List[date] = []
        self._times = np.zeros(0)
        self._data = np.zeros(0)
        self._interpolation = None
        self._max_date = None

    def _node_time(self, d: date) -> float:
        return self.time_from_reference(d)

    def _ensure_nodes(self) -> None:
        """Hook run before the nodes are read; lazy curves calculate here."""

    def _set_nodes(self, dates: Sequence[date], data: Sequence[float]) -> None:
        """Replace all nodes, checking that dates map to increasing times."""
        if len(dates) != len(data):
            raise ValidationError(
                f"dates/data count mismatch: {len(dates)} dates, {len(data)} values"
            )
        if len(dates) < self.interpolator.required_points:
            raise ValidationError(
                f"not enough nodes: {self.interpolator.required_points} required, "
                f"{len(dates)} provided"
            )
        times = np.array([self._node_time(d) for d in dates], dtype=np.float64)
        for j in range(1, len(dates)):
            if dates[j] <= dates[j - 1]:
                raise ValidationError(
                    f"invalid date ({dates[j]}, vs {dates[j - 1]}): dates must be increasing"
                )
            if times[j] <= times[j - 1]:
                raise DuplicateTimeError(
                    f"dates {dates[j - 1]} and {dates[j]} correspond to the same time "
                    f"under the given day counter ({times[j]})"
                )
        self._dates = list(dates)
        self._times = times
        self._data = np.array(data, dtype=np.float64)
        self._max_date = None

    def setup_interpolation(self) -> None:
        """(Re)build the interpolation on the full node arrays."""
        self._interpolation = self.interpolator.interpolate(self._times, self._data)

    @property
    def interpolation(self) -> Interpolation:
        return self._interpolation

    @property
    def times(self) -> np.ndarray:
        self._ensure_nodes()
        return self._times

    @property
    def data(self) -> np.ndarray:
        self._ensure_nodes()
        return self._data

    @property
    def dates(self) -> List[date]:
        self._ensure_nodes()
        return self._dates

    def nodes(self) -> List[Tuple[date, float]]:
        """(date, value) pairs of the curve nodes."""
        return list(zip(self.dates, (float(v) for v in self.data)))

    def max_date(self) -> date:
        self._ensure_nodes()
        if self._max_date is not None:
            return self._max_date
        return self.dates[-1]

    def nodes_frame(self) -> pd.DataFrame:
        """Nodes as a DataFrame with date, time and value columns."""
        return pd.DataFrame({
            "date": self.dates,
            "time": self.times,
            "value": self.data,
        })


__all__ = ["InterpolatedCurve"]
