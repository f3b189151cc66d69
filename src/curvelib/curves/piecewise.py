"""
Piecewise yield curve.

A lazily bootstrapped InterpolatedYieldCurve: node values are solved so
that each instrument helper reprices to its quote. The curve registers
with its helpers, so a quote change marks it dirty and the next query
re-runs the bootstrap.
"""

from datetime import date
from typing import List, Optional, Sequence, Union

import pandas as pd

from ..conventions import DayCount
from ..math.interpolation import Interpolator
from .base import LazyObject
from .bootstrap import BootstrapConfig, IterativeBootstrap
from .curve import InterpolatedYieldCurve
from .traits import BootstrapTraits


class PiecewiseYieldCurve(LazyObject, InterpolatedYieldCurve):
    """
    Yield curve bootstrapped from market instruments.

    Args:
        reference_date: Curve anchor (t = 0)
        instruments: Bootstrap helpers; sorted by pillar date on calculation
        day_count: Day count for time calculations
        traits: Node quantity (default Discount)
        interpolator: Interpolation scheme (default LogLinear)
        config: Numerical settings of the bootstrap
        bootstrap: Custom bootstrap object (overrides ``config``)

    Example:
        >>> helpers = [DepositRateHelper(0.02, "3M", ref), SwapRateHelper(0.025, "5Y", ...)]
        >>> curve = PiecewiseYieldCurve(ref, helpers, traits=Discount(), interpolator=LogLinear())
        >>> curve.discount(date(2030, 1, 15))
    """

    def __init__(
        self,
        reference_date: date,
        instruments: Sequence,
        day_count: DayCount = DayCount.ACT_365,
        traits: Union[BootstrapTraits, str, None] = None,
        interpolator: Union[Interpolator, str, None] = None,
        config: Optional[BootstrapConfig] = None,
        bootstrap: Optional[IterativeBootstrap] = None
    ):
        super().__init__(reference_date, day_count, traits, interpolator)
        self.instruments: List = list(instruments)
        self.bootstrap = bootstrap if bootstrap is not None else IterativeBootstrap(config)
        self.bootstrap.setup(self)

    def _ensure_nodes(self) -> None:
        self.calculate()

    def perform_calculations(self) -> None:
        self.bootstrap.calculate()

    def bootstrap_report(self) -> pd.DataFrame:
        """
        Repricing diagnostics of the alive instruments.

        Columns: instrument, pillar, time, value, quote, implied, residual
        (quote - implied).
        """
        self.calculate()
        rows = []
        for i, helper in enumerate(self.bootstrap.alive_helpers, start=1):
            quote = helper.quote().current_link().value()
            implied = helper.implied_quote()
            rows.append({
                "instrument": type(helper).__name__,
                "pillar": helper.pillar_date(),
                "time": float(self._times[i]),
                "value": float(self._data[i]),
                "quote": quote,
                "implied": implied,
                "residual": quote - implied,
            })
        return pd.DataFrame(rows)


__all__ = ["PiecewiseYieldCurve"]
