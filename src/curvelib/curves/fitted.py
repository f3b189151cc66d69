"""
Fitted bond discount curve.

Instead of one node per instrument, a parametric discount function
d(x, t) is fitted to a set of bond prices by minimising

    sum_i (w_i * (P_i(x) - P_i^market))^2

over the parameter vector x with a simplex search. Bond weights default
to the inverse modified duration of each bond, normalised so that the
squared weights sum to one.

Fitting methods:
- NelsonSiegelFitting (4 parameters)
- SvenssonFitting (6 parameters)
- ExponentialSplinesFitting (9 constrained / 10 unconstrained)
- CubicBSplinesFitting (one coefficient per B-spline basis function)
- SimplePolynomialFitting (polynomial discount function)
- SpreadFittingMethod (a fitting method applied on top of a discount curve)
"""

from datetime import date
from typing import List, Optional, Sequence
import copy
import logging

import numpy as np
import pandas as pd
from scipy.interpolate import BSpline

from ..conventions import Compounding, DayCount, Frequency
from ..errors import InvalidQuoteError, ValidationError
from ..math.optimization import EndCriteria, minimize
from ..quotes import Handle
from .base import LazyObject, YieldTermStructure

logger = logging.getLogger(__name__)

_EPS = np.finfo(float).eps


def _shaped(t, values):
    """Return a float for scalar input, an array otherwise."""
    if np.ndim(t) == 0:
        return float(np.asarray(values).reshape(-1)[0])
    return np.asarray(values, dtype=np.float64)


class FittingMethod:
    """
    Parametric discount function d(x, t) and the fit state.

    Args:
        constrain_at_zero: Whether d(x, 0) = 1 is imposed by the parametrisation
        weights: Bond weights (inverse modified durations if None)
        optimization_method: scipy minimize method ("Nelder-Mead" by default)

    Attributes (after fitting):
        solution: Fitted parameter vector
        minimum_cost_value: Cost at the solution
        number_of_iterations: Cost evaluations spent by the optimiser
    """

    def __init__(
        self,
        constrain_at_zero: bool = True,
        weights: Optional[Sequence[float]] = None,
        optimization_method: str = "Nelder-Mead"
    ):
        self.constrain_at_zero = constrain_at_zero
        self._given_weights = None if weights is None else np.asarray(weights, dtype=np.float64)
        self.weights: Optional[np.ndarray] = self._given_weights
        self.optimization_method = optimization_method
        self.solution: Optional[np.ndarray] = None
        self.minimum_cost_value: Optional[float] = None
        self.number_of_iterations = 0
        self._curve = None

    def size(self) -> int:
        raise NotImplementedError

    def discount_function(self, x: np.ndarray, t):
        raise NotImplementedError

    def discount(self, x, t):
        """Discount factor at time(s) ``t`` for parameters ``x``."""
        return self.discount_function(np.asarray(x, dtype=np.float64), t)

    def init(self, curve: "FittedBondDiscountCurve") -> None:
        """Bind to a curve and set the bond weights."""
        self._curve = curve
        n = curve.number_of_bonds()
        if self._given_weights is None:
            weights = np.array([1.0 / curve._modified_duration(h) for h in curve.bond_helpers])
            self.weights = weights / np.sqrt(np.sum(weights ** 2))
        else:
            self.weights = self._given_weights
        if len(self.weights) != n:
            raise ValidationError(
                f"given weights ({len(self.weights)}) do not cover all bond helpers ({n})"
            )

    def cost_values(self, x: np.ndarray) -> np.ndarray:
        """Squared weighted price errors, one per bond."""
        errors = self._curve._model_prices(self, x) - self._curve._market_prices
        return (self.weights * errors) ** 2

    def cost(self, x: np.ndarray) -> float:
        value = float(np.sum(self.cost_values(x)))
        if not np.isfinite(value):
            return np.inf
        return value

    def calculate(self, guess: Optional[np.ndarray], end_criteria: Optional[EndCriteria],
                  simplex_lambda: float) -> np.ndarray:
        """Minimise the cost from ``guess``; with no end criteria the guess is kept."""
        x0 = np.zeros(self.size()) if guess is None else np.asarray(guess, dtype=np.float64)
        if len(x0) != self.size():
            raise ValidationError(f"guess has {len(x0)} parameters, {self.size()} required")
        if end_criteria is None:
            self.solution = x0
            self.minimum_cost_value = self.cost(x0)
            self.number_of_iterations = 0
            return self.solution
        result = minimize(
            self.cost, x0, end_criteria, self.optimization_method, simplex_lambda
        )
        self.solution = result.x
        self.minimum_cost_value = result.value
        self.number_of_iterations = result.evaluations
        return self.solution


class ExponentialSplinesFitting(FittingMethod):
    """
    d(t) = sum_i c_i exp(-kappa (i + 1) t)

    With ``constrain_at_zero`` the first coefficient is 1 - sum of the
    others, so d(0) = 1, and 9 parameters are fitted instead of 10.
    """

    def size(self) -> int:
        return 9 if self.constrain_at_zero else 10

    def discount_function(self, x, t):
        t = np.asarray(t, dtype=np.float64)
        n = self.size()
        kappa = x[n - 1]
        d = np.zeros_like(t)
        if not self.constrain_at_zero:
            for i in range(n - 1):
                d = d + x[i] * np.exp(-kappa * (i + 1) * t)
        else:
            for i in range(n - 1):
                d = d + x[i] * np.exp(-kappa * (i + 2) * t)
            d = d + (1.0 - np.sum(x[:n - 1])) * np.exp(-kappa * t)
        return _shaped(t, d)


class NelsonSiegelFitting(FittingMethod):
    """
    d(t) = exp(-r(t) t) with the Nelson-Siegel zero rate

        r(t) = x0 + (x1 + x2) (1 - exp(-k t)) / (k t) - x2 exp(-k t)
    """

    def size(self) -> int:
        return 4

    def discount_function(self, x, t):
        t = np.asarray(t, dtype=np.float64)
        kappa = x[3]
        decay = np.exp(-kappa * t)
        zero = (x[0] + (x[1] + x[2]) * (1.0 - decay) / ((kappa + _EPS) * (t + _EPS))
                - x[2] * decay)
        return _shaped(t, np.exp(-zero * t))


class SvenssonFitting(FittingMethod):
    """Nelson-Siegel plus a second hump term with its own decay (x4, x5)."""

    def size(self) -> int:
        return 6

    def discount_function(self, x, t):
        t = np.asarray(t, dtype=np.float64)
        k1, k2 = x[4], x[5]
        d1 = np.exp(-k1 * t)
        d2 = np.exp(-k2 * t)
        zero = (x[0]
                + (x[1] + x[2]) * (1.0 - d1) / ((k1 + _EPS) * (t + _EPS))
                - x[2] * d1
                + x[3] * ((1.0 - d2) / ((k2 + _EPS) * (t + _EPS)) - d2))
        return _shaped(t, np.exp(-zero * t))


class CubicBSplinesFitting(FittingMethod):
    """
    d(t) = sum_i c_i N_i(t) over the cubic B-spline basis on ``knots``.

    With ``constrain_at_zero`` the coefficient of the basis function
    carrying most weight at t = 0 is solved from d(0) = 1.

    Args:
        knots: Knot vector (at least 8 knots; knots[0..3] at or below zero)
    """

    def __init__(
        self,
        knots: Sequence[float],
        constrain_at_zero: bool = True,
        weights: Optional[Sequence[float]] = None,
        optimization_method: str = "Nelder-Mead"
    ):
        super().__init__(constrain_at_zero, weights, optimization_method)
        knots = np.asarray(knots, dtype=np.float64)
        if len(knots) < 8:
            raise ValidationError("at least 8 knots are required")
        if np.any(np.diff(knots) < 0.0):
            raise ValidationError("knots must be non-decreasing")
        self.knots = knots
        self._basis_count = len(knots) - 4
        self._basis = BSpline(knots, np.eye(self._basis_count), 3, extrapolate=False)
        at_zero = self._splines(0.0)[0]
        self._fixed = int(np.argmax(at_zero))
        if constrain_at_zero and at_zero[self._fixed] == 0.0:
            raise ValidationError("no B-spline basis function is nonzero at t = 0")

    def _splines(self, t) -> np.ndarray:
        # basis values are zero outside the knot span
        return np.nan_to_num(self._basis(np.atleast_1d(np.asarray(t, dtype=np.float64))))

    def size(self) -> int:
        return self._basis_count - 1 if self.constrain_at_zero else self._basis_count

    def discount_function(self, x, t):
        basis = self._splines(t)
        if not self.constrain_at_zero:
            return _shaped(t, basis @ x)
        free = [i for i in range(self._basis_count) if i != self._fixed]
        at_zero = self._splines(0.0)[0]
        coeff = (1.0 - at_zero[free] @ x) / at_zero[self._fixed]
        return _shaped(t, basis[:, free] @ x + coeff * basis[:, self._fixed])


class SimplePolynomialFitting(FittingMethod):
    """
    Polynomial discount function of the given degree.

    d(t) = 1 + sum_{i=1..degree} x_{i-1} t^i when constrained at zero,
    sum_{i=0..degree} x_i t^i otherwise.
    """

    def __init__(
        self,
        degree: int,
        constrain_at_zero: bool = True,
        weights: Optional[Sequence[float]] = None,
        optimization_method: str = "Nelder-Mead"
    ):
        super().__init__(constrain_at_zero, weights, optimization_method)
        if degree < 1:
            raise ValidationError(f"polynomial degree must be positive, got {degree}")
        self.degree = degree

    def size(self) -> int:
        return self.degree if self.constrain_at_zero else self.degree + 1

    def discount_function(self, x, t):
        t = np.asarray(t, dtype=np.float64)
        if self.constrain_at_zero:
            d = 1.0 + sum(x[i] * t ** (i + 1) for i in range(self.size()))
        else:
            d = sum(x[i] * t ** i for i in range(self.size()))
        return _shaped(t, d)


class SpreadFittingMethod(FittingMethod):
    """
    Fit a parametric spread on top of an existing discount curve.

    d(x, t) = method.d(x, t) * P_ref(t) / P_ref(reference date of the fitted curve)
    """

    def __init__(self, method: FittingMethod, discount_curve: Handle):
        if discount_curve is None or discount_curve.empty():
            raise ValidationError("discounting term structure required for spread fitting")
        super().__init__(method.constrain_at_zero, method._given_weights, method.optimization_method)
        self.method = method
        self.discount_curve = discount_curve
        self._rebase = 1.0

    def size(self) -> int:
        return self.method.size()

    def init(self, curve: "FittedBondDiscountCurve") -> None:
        super().init(curve)
        self._rebase = self.discount_curve.current_link().discount(curve.reference_date, True)

    def discount_function(self, x, t):
        base = self.discount_curve.current_link()
        times = np.atleast_1d(np.asarray(t, dtype=np.float64))
        reference = np.array([base.discount(float(s), True) for s in times])
        spread = np.atleast_1d(self.method.discount_function(x, times))
        return _shaped(t, spread * reference / self._rebase)


class FittedBondDiscountCurve(LazyObject, YieldTermStructure):
    """
    Discount curve fitted to bond prices.

    Args:
        reference_date: Curve anchor (t = 0)
        bond_helpers: BondHelper list
        day_count: Day count for time calculations
        method: Fitting method
        accuracy: Root, function and gradient tolerance of the optimiser
        max_evaluations: Evaluation budget of the optimiser
        guess: Starting parameters (zeros if None); each successful fit
            is the starting point of the next
        simplex_lambda: Edge length of the initial simplex
        max_stationary_state_iterations: Iterations without improvement before stopping

    Example:
        >>> curve = FittedBondDiscountCurve(ref, helpers, method=NelsonSiegelFitting(),
        ...                                 guess=[0.03, -0.01, 0.0, 0.5])
        >>> curve.fit_results().minimum_cost_value
    """

    def __init__(
        self,
        reference_date: date,
        bond_helpers: Sequence,
        day_count: DayCount = DayCount.ACT_365,
        method: Optional[FittingMethod] = None,
        accuracy: float = 1.0e-10,
        max_evaluations: int = 10000,
        guess: Optional[Sequence[float]] = None,
        simplex_lambda: float = 1.0,
        max_stationary_state_iterations: int = 100
    ):
        super().__init__(reference_date, day_count)
        if method is None:
            raise ValidationError("fitting method required")
        self.bond_helpers: List = list(bond_helpers)
        self.method = method
        self.accuracy = accuracy
        self.max_evaluations = max_evaluations
        self.simplex_lambda = simplex_lambda
        self.max_stationary_state_iterations = max_stationary_state_iterations
        self._guess_solution = None if guess is None else np.asarray(guess, dtype=np.float64)
        self._max_date: Optional[date] = None
        for helper in self.bond_helpers:
            helper.register_observer(self.update)

    def number_of_bonds(self) -> int:
        return len(self.bond_helpers)

    def max_date(self) -> date:
        self.calculate()
        return self._max_date

    def discount_impl(self, t: float) -> float:
        self.calculate()
        return self.method.discount(self.method.solution, t)

    def fit_results(self) -> FittingMethod:
        """Copy of the fitting method holding the solution."""
        self.calculate()
        return copy.copy(self.method)

    def _modified_duration(self, helper) -> float:
        bond = helper.bond
        price = helper.quote().current_link().value()
        ytm = bond.yield_to_maturity(
            price, helper.settlement, helper.use_clean_price,
            Compounding.COMPOUNDED, Frequency.ANNUAL
        )
        return bond.modified_duration(ytm, helper.settlement, Compounding.COMPOUNDED, Frequency.ANNUAL)

    def _prepare(self) -> None:
        if not self.bond_helpers:
            raise ValidationError("no bond helpers given")
        self._max_date = date.min
        self._cashflow_times = []
        self._cashflow_amounts = []
        self._settlement_times = np.zeros(self.number_of_bonds())
        self._accrued = np.zeros(self.number_of_bonds())
        market = []
        for i, helper in enumerate(self.bond_helpers):
            bond = helper.bond
            quote = helper.quote()
            if quote.empty() or not quote.current_link().is_valid():
                raise InvalidQuoteError(
                    f"bond {i + 1} (maturity: {bond.maturity_date}) has an invalid price quote"
                )
            settlement = helper.settlement
            if settlement < self.reference_date:
                raise ValidationError(
                    f"bond {i + 1} settlement date ({settlement}) before curve reference date "
                    f"({self.reference_date})"
                )
            remaining = bond.remaining_cashflows(settlement)
            if not remaining:
                raise ValidationError(
                    f"bond {i + 1} non tradable at {settlement} settlement date "
                    f"(maturity being {bond.maturity_date})"
                )
            scale = 100.0 / bond.face_value
            self._cashflow_times.append(np.array([self.time_from_reference(cf.date) for cf in remaining]))
            self._cashflow_amounts.append(np.array([cf.amount * scale for cf in remaining]))
            self._settlement_times[i] = self.time_from_reference(settlement)
            self._accrued[i] = bond.accrued_amount(settlement) if helper.use_clean_price else 0.0
            market.append(quote.current_link().value())
            self._max_date = max(self._max_date, helper.pillar_date())
            helper.set_term_structure(self)
        self._market_prices = np.array(market)

    def _model_prices(self, method: FittingMethod, x: np.ndarray) -> np.ndarray:
        prices = np.empty(self.number_of_bonds())
        for i, (times, amounts) in enumerate(zip(self._cashflow_times, self._cashflow_amounts)):
            pv = float(np.sum(amounts * method.discount_function(x, times)))
            ts = self._settlement_times[i]
            if ts != 0.0:
                pv /= method.discount_function(x, ts)
            prices[i] = pv - self._accrued[i]
        return prices

    def perform_calculations(self) -> None:
        self._prepare()
        self.method.init(self)
        end_criteria = None
        if self.max_evaluations > 0:
            end_criteria = EndCriteria(
                max_evaluations=self.max_evaluations,
                max_stationary_state_iterations=self.max_stationary_state_iterations,
                root_epsilon=self.accuracy,
                function_epsilon=self.accuracy,
                gradient_norm_epsilon=self.accuracy
            )
        solution = self.method.calculate(self._guess_solution, end_criteria, self.simplex_lambda)
        self._guess_solution = solution
        logger.debug(
            "fitted %s bonds with %s: cost %.6e after %s evaluations",
            self.number_of_bonds(), type(self.method).__name__,
            self.method.minimum_cost_value, self.method.number_of_iterations
        )

    def fit_report(self) -> pd.DataFrame:
        """
        Per-bond fit diagnostics.

        Columns: maturity, settlement, weight, market, model, error (model - market).
        """
        self.calculate()
        model = self._model_prices(self.method, self.method.solution)
        return pd.DataFrame({
            "maturity": [h.bond.maturity_date for h in self.bond_helpers],
            "settlement": [h.settlement for h in self.bond_helpers],
            "weight": self.method.weights,
            "market": self._market_prices,
            "model": model,
            "error": model - self._market_prices,
        })


__all__ = [
    "FittingMethod",
    "ExponentialSplinesFitting",
    "NelsonSiegelFitting",
    "SvenssonFitting",
    "CubicBSplinesFitting",
    "SimplePolynomialFitting",
    "SpreadFittingMethod",
    "FittedBondDiscountCurve",
]
