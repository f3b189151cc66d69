"""
Curve bootstrapping engine.

Fills the nodes of a piecewise curve so that every instrument reprices to
its market quote:
1. Sort instruments by pillar date and drop the expired ones
2. Solve for each node value in turn with a bracketed 1-D root solver
3. For global interpolations (or pillars that differ from the instrument's
   last relevant date) repeat full sweeps until the nodes stop moving

A previously calculated curve state is used as the starting point of the
next calculation (warm start). If that fails the bootstrap restarts once
from scratch before reporting an error.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional
import logging

import numpy as np

from ..errors import (
    BootstrapError,
    ConvergenceError,
    CurveLibError,
    DuplicateTimeError,
    InvalidQuoteError,
    RootNotBracketedError,
    ValidationError
)
from ..math.interpolation import Linear
from ..math.solvers import Solver1D
from ..settings import get_settings

logger = logging.getLogger(__name__)


class ConvergenceCriterion(Enum):
    """Exit test of the global re-fit loop."""
    NODE_CHANGE = "node_change"
    RESIDUAL = "residual"


@dataclass
class BootstrapConfig:
    """
    Numerical settings of a bootstrap.

    Attributes:
        accuracy: Solver tolerance on node values (library default if None)
        solver: Root solver name (library default if None)
        max_iterations: Global-loop budget (the trait's budget if None)
        convergence: Exit test of the global loop
        residual_tolerance: Largest accepted |quote - implied| for RESIDUAL
        bracket_widening_attempts: Retries with a wider bracket per node
        max_evaluations: Evaluation budget of each root search
    """
    accuracy: Optional[float] = None
    solver: Optional[str] = None
    max_iterations: Optional[int] = None
    convergence: ConvergenceCriterion = ConvergenceCriterion.NODE_CHANGE
    residual_tolerance: float = 1.0e-10
    bracket_widening_attempts: int = 5
    max_evaluations: int = 100

    def __post_init__(self):
        if self.accuracy is not None and self.accuracy <= 0.0:
            raise ValidationError(f"accuracy must be positive, got {self.accuracy}")
        if self.max_iterations is not None and self.max_iterations < 1:
            raise ValidationError(f"max_iterations must be positive, got {self.max_iterations}")
        if self.residual_tolerance <= 0.0:
            raise ValidationError("residual_tolerance must be positive")
        if self.bracket_widening_attempts < 0:
            raise ValidationError("bracket_widening_attempts cannot be negative")

    def resolved_accuracy(self) -> float:
        if self.accuracy is not None:
            return self.accuracy
        return get_settings().default_accuracy

    def resolved_solver(self) -> str:
        return self.solver or get_settings().default_solver


class IterativeBootstrap:
    """
    Node-by-node bootstrap of an interpolated curve.

    The curve must expose ``instruments``, ``traits``, ``interpolator``,
    the node arrays ``_dates``/``_times``/``_data`` with ``_node_time``,
    and ``_interpolation``/``_max_date`` slots.
    """

    def __init__(self, config: Optional[BootstrapConfig] = None):
        self.config = config or BootstrapConfig()
        self._curve = None
        self._initialized = False
        self._valid_curve = False
        self._loop_required = False
        self._first_alive_helper = 0
        self._alive = 0
        self._previous_data = np.zeros(0)
        self.last_iterations = 0
        self.last_change: Optional[float] = None

    @property
    def alive_helpers(self) -> List:
        return self._curve.instruments[self._first_alive_helper:]

    def setup(self, curve) -> None:
        """Attach to a curve and register it with its instruments."""
        self._curve = curve
        n = len(curve.instruments)
        if n == 0:
            raise ValidationError("no bootstrap helpers given")
        required = curve.interpolator.required_points
        if n + 1 < required:
            raise ValidationError(
                f"not enough instruments: {n} provided, {required - 1} required"
            )
        for helper in curve.instruments:
            helper.register_observer(curve.update)
        # initialization is deferred: quotes may be invalid now but valid
        # by the time the curve is first queried
        self._initialized = False
        self._valid_curve = False
        self._loop_required = curve.interpolator.is_global

    def _initialize(self) -> None:
        curve = self._curve
        traits = curve.traits
        helpers = curve.instruments
        n = len(helpers)

        helpers.sort(key=lambda h: h.pillar_date())

        first_date = traits.initial_date(curve)
        first_alive = 0
        while first_alive < n and helpers[first_alive].pillar_date() <= first_date:
            first_alive += 1
        alive = n - first_alive
        required = curve.interpolator.required_points
        if alive + 1 < required:
            raise ValidationError(
                f"not enough alive instruments: {alive} provided, {required - 1} required"
            )
        if first_alive:
            logger.debug("skipping %s expired instruments", first_alive)

        self._loop_required = curve.interpolator.is_global
        dates = [first_date]
        times = [curve._node_time(first_date)]
        max_date = first_date
        for i, helper in enumerate(helpers[first_alive:], start=1):
            pillar = helper.pillar_date()
            if pillar == dates[-1]:
                raise DuplicateTimeError(f"more than one instrument with pillar {pillar}")
            t = curve._node_time(pillar)
            if t <= times[-1]:
                raise DuplicateTimeError(
                    f"dates {dates[-1]} and {pillar} correspond to the same time "
                    f"under the curve day counter ({t})"
                )
            latest_relevant = helper.latest_relevant_date()
            # pillar-sorted helpers must also extend the curve
            if latest_relevant <= max_date:
                raise ValidationError(
                    f"instrument {first_alive + i} (pillar: {pillar}) has latest relevant date "
                    f"({latest_relevant}) before or equal to previous instrument's "
                    f"latest relevant date ({max_date})"
                )
            max_date = latest_relevant
            if pillar != latest_relevant:
                self._loop_required = True
            dates.append(pillar)
            times.append(t)

        curve._dates = dates
        curve._times = np.array(times, dtype=np.float64)
        curve._max_date = max_date

        # keep the current values as a guess when they fit the new layout
        if not self._valid_curve or len(curve._data) != alive + 1:
            curve._data = np.full(alive + 1, traits.initial_value(curve), dtype=np.float64)
            self._valid_curve = False
        self._previous_data = np.zeros(alive + 1)
        self._first_alive_helper = first_alive
        self._alive = alive
        self._initialized = True

    def calculate(self) -> None:
        """Bootstrap the curve nodes."""
        curve = self._curve
        if curve is None:
            raise ValidationError("bootstrap not set up with a curve")
        # helpers may roll with the evaluation date, so always re-layout
        self._initialize()

        traits = curve.traits
        for j, helper in enumerate(self.alive_helpers, start=self._first_alive_helper + 1):
            quote = helper.quote()
            if quote.empty() or not quote.current_link().is_valid():
                raise InvalidQuoteError(
                    f"instrument {j} (maturity: {helper.maturity_date()}, "
                    f"pillar: {helper.pillar_date()}) has an invalid quote"
                )
            helper.set_term_structure(curve)

        accuracy = self.config.resolved_accuracy()
        solver = Solver1D(self.config.resolved_solver(), self.config.max_evaluations)
        max_iterations = self.config.max_iterations or traits.max_iterations()
        data = curve._data
        times = curve._times

        valid_data = self._valid_curve
        if valid_data:
            curve.setup_interpolation()

        iteration = 0
        change = None
        while True:
            self._previous_data[:] = data
            for i in range(1, self._alive + 1):
                helper = self.alive_helpers[i - 1]
                lo = traits.min_value_after(i, curve, valid_data, self._first_alive_helper)
                hi = traits.max_value_after(i, curve, valid_data, self._first_alive_helper)
                guess = traits.guess(i, curve, valid_data, self._first_alive_helper)
                if guess >= hi:
                    guess = hi - (hi - lo) / 5.0
                elif guess <= lo:
                    guess = lo + (hi - lo) / 5.0

                if not valid_data:
                    # extend the interpolation one point at a time
                    try:
                        curve._interpolation = curve.interpolator.interpolate(
                            times[:i + 1], data[:i + 1]
                        )
                    except ValueError:
                        if not curve.interpolator.is_global:
                            raise
                        # linear until the global scheme has enough points
                        curve._interpolation = Linear().interpolate(times[:i + 1], data[:i + 1])
                    curve._interpolation.update()

                try:
                    value = self._solve_node(i, helper, solver, accuracy, guess, lo, hi)
                except (CurveLibError, ValueError, ArithmeticError) as exc:
                    if self._valid_curve:
                        logger.warning(
                            "warm-started bootstrap failed at pillar %s (%s); restarting from scratch",
                            curve._dates[i], exc
                        )
                        self._valid_curve = False
                        self.calculate()
                        return
                    residual = None
                    if isinstance(exc, RootNotBracketedError):
                        residual = min(abs(exc.f_min), abs(exc.f_max))
                    elif isinstance(exc, ConvergenceError):
                        # the node still holds the last trial point
                        residual = abs(helper.quote_error())
                    raise BootstrapError(
                        f"failed at alive instrument {i} "
                        f"(maturity {helper.maturity_date()}): {exc}",
                        iteration=iteration + 1,
                        helper_index=self._first_alive_helper + i,
                        pillar_date=curve._dates[i],
                        reference_date=curve._dates[0],
                        residual=residual,
                    ) from exc
                logger.debug(
                    "iteration %s: node %s (%s) solved at %.12g",
                    iteration + 1, i, curve._dates[i], value
                )

            if not self._loop_required:
                break

            change = float(np.max(np.abs(data[1:] - self._previous_data[1:])))
            if self.config.convergence == ConvergenceCriterion.RESIDUAL:
                residual = self._max_residual()
                logger.debug(
                    "iteration %s: max node change %.3e, max residual %.3e",
                    iteration + 1, change, residual
                )
                converged = residual <= self.config.residual_tolerance
            else:
                residual = None
                logger.debug("iteration %s: max node change %.3e", iteration + 1, change)
                converged = change <= accuracy
            if converged:
                break
            if iteration + 1 >= max_iterations:
                raise ConvergenceError(
                    f"convergence not reached after {iteration + 1} iterations; "
                    f"last improvement {change:.3e}, required accuracy {accuracy:.3e}",
                    iteration=iteration + 1,
                    reference_date=curve._dates[0],
                    residual=residual,
                )
            valid_data = True
            iteration += 1

        self.last_iterations = iteration + 1
        self.last_change = change
        self._valid_curve = True

    def _solve_node(self, i, helper, solver, accuracy, guess, lo, hi) -> float:
        curve = self._curve
        traits = curve.traits
        data = curve._data

        def error(x: float) -> float:
            traits.update_guess(data, x, i)
            curve._interpolation.update()
            return helper.quote_error()

        attempts = 0
        while True:
            try:
                value = solver.solve(error, accuracy, guess, lo, hi)
                # the last trial point is not necessarily the root
                traits.update_guess(data, value, i)
                curve._interpolation.update()
                return value
            except RootNotBracketedError:
                if attempts >= self.config.bracket_widening_attempts:
                    raise
                new_lo, new_hi = traits.widen_bracket(i, curve, lo, hi)
                if new_lo >= lo and new_hi <= hi:
                    raise
                logger.debug(
                    "node %s: widening bracket [%.6g, %.6g] -> [%.6g, %.6g]",
                    i, lo, hi, new_lo, new_hi
                )
                lo, hi = new_lo, new_hi
                attempts += 1

    def _max_residual(self) -> float:
        return max(abs(h.quote_error()) for h in self.alive_helpers)


__all__ = [
    "ConvergenceCriterion",
    "BootstrapConfig",
    "IterativeBootstrap",
]
