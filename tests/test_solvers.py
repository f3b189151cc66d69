"""
Unit tests for the 1-D root solvers and the optimiser.
"""

import math

import numpy as np
import pytest

from curvelib.errors import ConvergenceError, RootNotBracketedError, ValidationError
from curvelib.math import EndCriteria, Solver1D, minimize


class TestSolver1D:
    """Tests for bracketed root finding."""

    @pytest.mark.parametrize("method", ["brent", "brenth", "bisection", "ridder", "toms748"])
    def test_square_root(self, method):
        solver = Solver1D(method)
        assert solver.last_result is None
        root = solver.solve(lambda x: x * x - 2.0, 1e-12, 1.0, 0.0, 2.0)
        assert abs(root - math.sqrt(2.0)) < 1e-10
        assert solver.last_result.method == method

    def test_root_at_bracket_end(self):
        solver = Solver1D()
        assert solver.solve(lambda x: x - 1.0, 1e-12, 0.5, 1.0, 3.0) == 1.0

    def test_guess_is_root(self):
        solver = Solver1D()
        assert solver.solve(lambda x: x - 0.5, 1e-12, 0.5, 0.0, 1.0) == 0.5
        assert solver.last_result.evaluations == 3

    def test_not_bracketed(self):
        """Test same sign at both ends."""
        solver = Solver1D()
        with pytest.raises(RootNotBracketedError) as exc_info:
            solver.solve(lambda x: x * x + 1.0, 1e-12, 0.5, -1.0, 2.0)
        assert exc_info.value.f_min == 2.0
        assert exc_info.value.f_max == 5.0

    def test_evaluation_budget(self):
        solver = Solver1D("bisection", max_evaluations=3)
        with pytest.raises(ConvergenceError):
            solver.solve(lambda x: x ** 3 - 2.0, 1e-15, 1.0, 0.0, 10.0)

    def test_invalid_setup(self):
        with pytest.raises(ValidationError):
            Solver1D("newton")
        with pytest.raises(ValidationError):
            Solver1D(max_evaluations=0)
        with pytest.raises(ValidationError):
            Solver1D().solve(lambda x: x, 1e-12, 0.0, 1.0, 1.0)


class TestMinimize:
    """Tests for the simplex optimiser."""

    def test_quadratic(self):
        result = minimize(
            lambda x: (x[0] - 1.0) ** 2 + (x[1] + 2.0) ** 2,
            [0.0, 0.0],
            EndCriteria(max_evaluations=2000),
            simplex_lambda=0.5
        )
        assert result.success
        assert np.allclose(result.x, [1.0, -2.0], atol=1e-4)
        assert result.value < 1e-8

    def test_stationary_state(self):
        """Test the run stops once the best value stalls."""
        result = minimize(
            lambda x: 1.0,
            [0.0, 0.0],
            EndCriteria(max_stationary_state_iterations=5)
        )
        assert result.success
        assert result.message == "stationary state reached"

    def test_gradient_method(self):
        result = minimize(lambda x: (x[0] - 3.0) ** 2, [0.0], method="BFGS")
        assert abs(result.x[0] - 3.0) < 1e-5

    def test_end_criteria_validation(self):
        with pytest.raises(ValidationError):
            EndCriteria(max_evaluations=0)
        with pytest.raises(ValidationError):
            EndCriteria(max_stationary_state_iterations=0)

    def test_empty_start(self):
        with pytest.raises(ValidationError):
            minimize(lambda x: 0.0, [])
