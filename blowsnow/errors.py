"""
Error types raised by the blowing snow kernel.

Fatal errors abort the current flux computation and propagate to the
caller, which decides whether to skip the cell or stop the run.
Recoverable problems never raise; they are substituted with a fallback
value, logged, and recorded as a :class:`Diagnostic` on the result.
"""

from typing import NamedTuple


class BlowingSnowError(Exception):
    """Base class for all blowing snow errors."""


class FatalError(BlowingSnowError):
    """Numerical failure with no sound recovery."""


class BracketError(FatalError):
    """Root solver was given an interval that does not bracket a root."""

    def __init__(self, x1, x2, f1, f2):
        self.x1 = x1
        self.x2 = x2
        self.f1 = f1
        self.f2 = f2
        super().__init__(
            f"Root must be bracketed: f({x1:g})={f1:g}, f({x2:g})={f2:g}"
        )


class ConvergenceError(FatalError):
    """Iterative routine exceeded its iteration cap."""

    def __init__(self, routine, iterations, **params):
        self.routine = routine
        self.iterations = iterations
        self.params = params
        detail = ", ".join(f"{k}={v:g}" for k, v in params.items())
        message = f"Too many steps in routine {routine} ({iterations})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class Diagnostic(NamedTuple):
    """Record of a recoverable substitution made during a step."""
    kind: str
    message: str
