"""Type definitions, result dataclasses and the error taxonomy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .rational import Rational


def _rounded(value: float | None, precision: int | None) -> float | None:
    if value is None or precision is None:
        return value
    return round(value, precision)


@dataclass(frozen=True)
class SignChangeInterval:
    """Sub-interval of a scan where the function changes sign or nearly vanishes."""

    start: float
    end: float
    f_start: float
    f_end: float
    exact_zero_at: float | None = None

    @property
    def is_near_exact(self) -> bool:
        return self.exact_zero_at is not None

    def to_dict(self, precision: int | None = None) -> dict[str, Any]:
        """Convert to dictionary, optionally rounding every value for display."""
        result_dict = {
            "start": _rounded(self.start, precision),
            "end": _rounded(self.end, precision),
            "f_start": _rounded(self.f_start, precision),
            "f_end": _rounded(self.f_end, precision),
        }
        if self.exact_zero_at is not None:
            result_dict["exact_zero_at"] = _rounded(self.exact_zero_at, precision)
        return result_dict


@dataclass(frozen=True)
class IterationRecord:
    """One bisection iteration: the bracket it started from and its midpoint."""

    index: int
    a: float
    b: float
    midpoint: float
    fa: float
    fb: float
    f_mid: float
    bracket_width: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "a": self.a,
            "b": self.b,
            "midpoint": self.midpoint,
            "fa": self.fa,
            "fb": self.fb,
            "f_mid": self.f_mid,
            "bracket_width": self.bracket_width,
        }


@dataclass(frozen=True)
class BisectionResult:
    """Outcome of one bisection run."""

    root: float
    converged: bool
    final_residual: float
    trace: tuple[IterationRecord, ...] = ()

    @property
    def iterations(self) -> int:
        return len(self.trace)

    @property
    def status(self) -> str:
        return "converged" if self.converged else "exhausted"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "root": self.root,
            "converged": self.converged,
            "status": self.status,
            "final_residual": self.final_residual,
            "iterations": self.iterations,
            "trace": [record.to_dict() for record in self.trace],
        }

    def __repr__(self) -> str:
        return (
            f"BisectionResult(root={self.root!r}, converged={self.converged!r}, "
            f"final_residual={self.final_residual!r}, iterations={self.iterations})"
        )


@dataclass(frozen=True)
class RootEstimate:
    """A scanned bracket paired with the bisection run that refined it."""

    interval: SignChangeInterval
    result: BisectionResult | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.result is not None

    def to_dict(self, precision: int | None = None) -> dict[str, Any]:
        result_dict: dict[str, Any] = {
            "ok": self.ok,
            "interval": self.interval.to_dict(precision),
        }
        if self.result is not None:
            result_dict["result"] = self.result.to_dict()
        if self.error is not None:
            result_dict["error"] = self.error
        return result_dict


@dataclass(frozen=True)
class Multiplier:
    """Multiplier applied to one row during an elimination round."""

    row: int
    value: Rational

    def to_dict(self) -> dict[str, Any]:
        return {"row": self.row, "value": str(self.value)}


@dataclass(frozen=True)
class RowSwap:
    """Rows exchanged to bring a nonzero pivot into place."""

    from_row: int
    to_row: int

    def to_dict(self) -> dict[str, Any]:
        return {"from": self.from_row, "to": self.to_row}


@dataclass(frozen=True)
class EliminationStep:
    """State of the system after one elimination round (round 0 is the input)."""

    round: int
    matrix: tuple[tuple[Rational, ...], ...]
    constants: tuple[Rational, ...]
    pivot: Rational | None = None
    multipliers: tuple[Multiplier, ...] = ()
    rows_swapped: RowSwap | None = None
    pivot_row: int | None = None

    @property
    def description(self) -> str:
        if self.pivot is None:
            return f"Round {self.round} (initial system)"
        return f"Round {self.round}, pivot = {self.pivot}"

    def is_upper_triangular(self) -> bool:
        return all(
            self.matrix[i][j].is_zero()
            for i in range(len(self.matrix))
            for j in range(i)
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization (Rationals as strings)."""
        result_dict: dict[str, Any] = {
            "round": self.round,
            "matrix": [[str(value) for value in row] for row in self.matrix],
            "constants": [str(value) for value in self.constants],
            "pivot": str(self.pivot) if self.pivot is not None else None,
            "multipliers": [multiplier.to_dict() for multiplier in self.multipliers],
            "rows_swapped": (
                self.rows_swapped.to_dict() if self.rows_swapped is not None else None
            ),
        }
        if self.pivot_row is not None:
            result_dict["pivot_row"] = self.pivot_row
        return result_dict


class NumerikError(Exception):
    """Base class for every error Numerik reports to its callers."""

    default_code = "NUMERIK_ERROR"

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.default_code
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return {"ok": False, "error": self.message, "code": self.code}


class ValidationError(NumerikError):
    """Raised when caller-supplied input fails validation."""

    default_code = "VALIDATION_ERROR"


class InvalidExpression(ValidationError):
    """Raised when expression text falls outside the supported grammar."""

    default_code = "INVALID_EXPRESSION"


class EvaluationError(NumerikError):
    """Raised when an expression cannot be computed at a specific point."""

    default_code = "EVALUATION_ERROR"

    def __init__(self, message: str, code: str | None = None, x: float | None = None):
        self.x = x
        super().__init__(message, code)


class DivisionByZero(NumerikError, ZeroDivisionError):
    """Raised by Rational construction or division with a zero denominator."""

    default_code = "DIVISION_BY_ZERO"


class NotABracket(NumerikError):
    """Raised when f(a) and f(b) share a strict sign, so no root is bracketed."""

    default_code = "NOT_A_BRACKET"


class SingularSystem(NumerikError):
    """Raised when elimination finds no usable pivot.

    ``steps`` holds the rounds completed before the failure, for display only.
    """

    default_code = "SINGULAR_SYSTEM"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        steps: list[EliminationStep] | None = None,
        column: int | None = None,
    ):
        self.steps = list(steps or [])
        self.column = column
        super().__init__(message, code)


class InvalidRange(NumerikError):
    """Raised for malformed scan or bracket bounds."""

    default_code = "INVALID_RANGE"
