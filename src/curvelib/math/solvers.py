"""
One-dimensional bracketed root solvers.

Thin wrapper over ``scipy.optimize`` bracketing methods with a common
``solve(f, accuracy, guess, x_min, x_max)`` entry point. The guess is
used to narrow the bracket before the scipy routine runs.
"""

from dataclasses import dataclass
from typing import Callable, Optional
import logging
import math

from scipy import optimize

from ..errors import ConvergenceError, RootNotBracketedError, ValidationError

logger = logging.getLogger(__name__)

Func = Callable[[float], float]

_METHODS = {
    "brent": optimize.brentq,
    "brenth": optimize.brenth,
    "bisection": optimize.bisect,
    "ridder": optimize.ridder,
    "toms748": optimize.toms748,
}


@dataclass
class RootResult:
    root: float
    evaluations: int
    method: str


class Solver1D:
    """
    Bracketed 1-D root solver.

    Args:
        method: "brent" (default), "brenth", "bisection", "ridder" or "toms748"
        max_evaluations: Iteration budget handed to the scipy routine
    """

    def __init__(self, method: str = "brent", max_evaluations: int = 100):
        method = method.lower()
        if method not in _METHODS:
            raise ValidationError(
                f"Unknown solver: {method}. Choose from {sorted(_METHODS)}"
            )
        if max_evaluations < 1:
            raise ValidationError("max_evaluations must be positive")
        self.method = method
        self.max_evaluations = max_evaluations
        self.last_result: Optional[RootResult] = None

    def solve(
        self,
        f: Func,
        accuracy: float,
        guess: float,
        x_min: float,
        x_max: float
    ) -> float:
        """
        Find x in [x_min, x_max] with f(x) = 0 to within ``accuracy`` in x.

        Raises:
            RootNotBracketedError: f has the same sign at both ends
            ConvergenceError: the evaluation budget ran out
        """
        if not x_min < x_max:
            raise ValidationError(f"invalid bracket: x_min ({x_min}) >= x_max ({x_max})")

        accuracy = max(accuracy, 1e-15)
        evaluations = 0

        def counted(x: float) -> float:
            nonlocal evaluations
            evaluations += 1
            return f(x)

        f_min = counted(x_min)
        if f_min == 0.0:
            return self._done(x_min, evaluations)
        f_max = counted(x_max)
        if f_max == 0.0:
            return self._done(x_max, evaluations)
        if not (math.isfinite(f_min) and math.isfinite(f_max)) or f_min * f_max > 0.0:
            raise RootNotBracketedError(x_min, x_max, f_min, f_max)

        lo, hi = x_min, x_max
        guess = min(max(guess, x_min), x_max)
        if x_min < guess < x_max:
            f_guess = counted(guess)
            if f_guess == 0.0:
                return self._done(guess, evaluations)
            if math.isfinite(f_guess):
                if f_min * f_guess < 0.0:
                    hi = guess
                else:
                    lo = guess

        routine = _METHODS[self.method]
        try:
            root, info = routine(
                counted, lo, hi, xtol=accuracy, maxiter=self.max_evaluations,
                full_output=True, disp=False
            )
        except RuntimeError as exc:
            raise ConvergenceError(f"{self.method} solver failed: {exc}") from exc

        if not info.converged:
            raise ConvergenceError(
                f"{self.method} solver did not converge in {self.max_evaluations} iterations "
                f"({info.flag})"
            )
        return self._done(root, evaluations)

    def _done(self, root: float, evaluations: int) -> float:
        self.last_result = RootResult(float(root), evaluations, self.method)
        logger.debug("%s root %.12g after %s evaluations", self.method, root, evaluations)
        return float(root)


__all__ = ["RootResult", "Solver1D"]
