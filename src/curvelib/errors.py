"""
Exception taxonomy.

- ValidationError: malformed terms detected at construction time
- ExtrapolationError: query outside a curve or interpolation range
- InvalidQuoteError: a quote without a usable value
- BootstrapError / ConvergenceError: the bootstrap could not place a node
- NotSupportedError: a curve trait asked for a quantity it does not model
- RootNotBracketedError: a 1-D solver was given a bracket without a sign change
"""

from datetime import date
from typing import Optional


class CurveLibError(Exception):
    """Base class for all library errors."""


class ValidationError(CurveLibError, ValueError):
    """Invalid construction arguments."""


class DuplicateTimeError(ValidationError):
    """Two nodes map to the same curve time (or share a pillar date)."""


class ExtrapolationError(CurveLibError, ValueError):
    """Query outside the allowed range without extrapolation enabled."""


class InvalidQuoteError(CurveLibError, ValueError):
    """Quote has no valid value."""


class NotSupportedError(CurveLibError, NotImplementedError):
    """Quantity not provided by this curve trait."""


class RootNotBracketedError(CurveLibError, ValueError):
    """Solver bracket does not contain a sign change."""

    def __init__(self, x_min: float, x_max: float, f_min: float, f_max: float):
        self.x_min = x_min
        self.x_max = x_max
        self.f_min = f_min
        self.f_max = f_max
        super().__init__(
            f"root not bracketed: f[{x_min:.12g}, {x_max:.12g}] -> "
            f"[{f_min:.6e}, {f_max:.6e}]"
        )


class BootstrapError(CurveLibError, RuntimeError):
    """A curve node could not be solved."""

    def __init__(
        self,
        message: str,
        iteration: Optional[int] = None,
        helper_index: Optional[int] = None,
        pillar_date: Optional[date] = None,
        reference_date: Optional[date] = None,
        residual: Optional[float] = None,
    ):
        self.iteration = iteration
        self.helper_index = helper_index
        self.pillar_date = pillar_date
        self.reference_date = reference_date
        self.residual = residual

        context = []
        if iteration is not None:
            context.append(f"iteration {iteration}")
        if helper_index is not None:
            context.append(f"instrument {helper_index}")
        if pillar_date is not None:
            context.append(f"pillar {pillar_date.isoformat()}")
        if reference_date is not None:
            context.append(f"reference date {reference_date.isoformat()}")
        if residual is not None:
            context.append(f"residual {residual:.6e}")
        prefix = f"[{', '.join(context)}] " if context else ""
        super().__init__(prefix + message)


class ConvergenceError(BootstrapError):
    """The global re-fit loop exhausted its iteration budget."""


__all__ = [
    "CurveLibError",
    "ValidationError",
    "DuplicateTimeError",
    "ExtrapolationError",
    "InvalidQuoteError",
    "NotSupportedError",
    "RootNotBracketedError",
    "BootstrapError",
    "ConvergenceError",
]
