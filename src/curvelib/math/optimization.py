"""
Unconstrained minimisation with explicit end criteria.

Wraps ``scipy.optimize.minimize``. The default method is the Nelder-Mead
simplex started from ``x0 + lambda * e_i``; the run stops on tolerance,
on the evaluation budget, or after the best value has not improved for a
given number of iterations (stationary state).
"""

from dataclasses import dataclass
from typing import Callable, Optional
import logging

import numpy as np
from scipy.optimize import minimize as scipy_minimize

from ..errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass
class EndCriteria:
    """
    Stopping rules of an optimisation.

    Attributes:
        max_evaluations: Budget of cost-function evaluations
        max_stationary_state_iterations: Iterations without improvement before stopping
        root_epsilon: Tolerance on the parameters
        function_epsilon: Tolerance on the cost value
        gradient_norm_epsilon: Tolerance on the gradient norm (gradient methods only)
    """
    max_evaluations: int = 10000
    max_stationary_state_iterations: int = 100
    root_epsilon: float = 1.0e-10
    function_epsilon: float = 1.0e-10
    gradient_norm_epsilon: float = 1.0e-10

    def __post_init__(self):
        if self.max_evaluations < 1:
            raise ValidationError("max_evaluations must be positive")
        if self.max_stationary_state_iterations < 1:
            raise ValidationError("max_stationary_state_iterations must be positive")


@dataclass
class OptimizationResult:
    """Outcome of a minimisation."""
    x: np.ndarray
    value: float
    evaluations: int
    iterations: int
    success: bool
    message: str


class _StationaryMonitor:
    """Callback stopping the run when the best value stops improving."""

    def __init__(self, max_stationary: int, function_epsilon: float):
        self.max_stationary = max_stationary
        self.function_epsilon = function_epsilon
        self.best = np.inf
        self.stationary = 0
        self.iterations = 0
        self.triggered = False

    def __call__(self, intermediate_result):
        self.iterations += 1
        value = float(intermediate_result.fun)
        if value < self.best - self.function_epsilon:
            self.best = value
            self.stationary = 0
        else:
            self.stationary += 1
        if self.stationary >= self.max_stationary:
            self.triggered = True
            raise StopIteration


def minimize(
    cost: Callable[[np.ndarray], float],
    x0,
    end_criteria: Optional[EndCriteria] = None,
    method: str = "Nelder-Mead",
    simplex_lambda: float = 1.0
) -> OptimizationResult:
    """
    Minimise ``cost`` starting from ``x0``.

    Args:
        cost: Scalar function of a parameter vector
        x0: Starting parameters
        end_criteria: Stopping rules (defaults to EndCriteria())
        method: Any scipy.optimize.minimize method; "Nelder-Mead" by default
        simplex_lambda: Edge length of the initial simplex

    Returns:
        OptimizationResult
    """
    end_criteria = end_criteria or EndCriteria()
    x0 = np.asarray(x0, dtype=np.float64)
    if x0.ndim != 1 or len(x0) == 0:
        raise ValidationError("x0 must be a non-empty vector")

    monitor = _StationaryMonitor(
        end_criteria.max_stationary_state_iterations,
        end_criteria.function_epsilon
    )

    if method.lower() in ("nelder-mead", "simplex"):
        n = len(x0)
        simplex = np.vstack([x0] + [x0 + simplex_lambda * np.eye(n)[i] for i in range(n)])
        options = {
            "initial_simplex": simplex,
            "maxfev": end_criteria.max_evaluations,
            "maxiter": end_criteria.max_evaluations,
            "xatol": end_criteria.root_epsilon,
            "fatol": end_criteria.function_epsilon,
        }
        method = "Nelder-Mead"
    else:
        options = {"maxiter": end_criteria.max_evaluations}
        if method.upper() in ("BFGS", "CG"):
            options["gtol"] = end_criteria.gradient_norm_epsilon

    result = scipy_minimize(cost, x0, method=method, options=options, callback=monitor)

    success = bool(result.success) or monitor.triggered
    message = "stationary state reached" if monitor.triggered else str(result.message)
    evaluations = int(getattr(result, "nfev", 0))
    if not success:
        logger.warning(
            "%s stopped without meeting tolerances after %s evaluations: %s",
            method, evaluations, message
        )
    logger.debug(
        "%s finished: value=%.6e evaluations=%s iterations=%s",
        method, result.fun, evaluations, monitor.iterations
    )

    return OptimizationResult(
        x=np.asarray(result.x, dtype=np.float64),
        value=float(result.fun),
        evaluations=evaluations,
        iterations=int(getattr(result, "nit", monitor.iterations)),
        success=success,
        message=message,
    )


__all__ = ["EndCriteria", "OptimizationResult", "minimize"]
