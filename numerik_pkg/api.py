"""Public API for Numerik - returns structured objects, raises NumerikError subclasses."""

from __future__ import annotations

from typing import Any, Sequence

from . import config
from .bisection import bisect as _bisect
from .degree import check_degree as _check_degree
from .degree import classify_degree as _classify_degree
from .gauss import LinearSystem
from .gauss import eliminate as _eliminate
from .logging_config import get_logger
from .parser import ExpressionHandle, compile_expression
from .scanner import scan
from .types import (
    BisectionResult,
    EliminationStep,
    EvaluationError,
    InvalidRange,
    NotABracket,
    RootEstimate,
    SignChangeInterval,
    ValidationError,
)

logger = get_logger("api")


def compile_function(expression: str) -> ExpressionHandle:
    """Compile function text once for repeated evaluation.

    Example:
        >>> from numerik_pkg.api import compile_function
        >>> f = compile_function("x^2 - 4")
        >>> f(3)
        5.0
    """
    return compile_expression(expression)


def classify_degree(expression: str) -> int:
    """Polynomial degree of function text, or -1 when it cannot be classified.

    Example:
        >>> from numerik_pkg.api import classify_degree
        >>> classify_degree("x^3-9x+3")
        3
        >>> classify_degree("5")
        0
    """
    return _classify_degree(expression)


def check_degree(expression: str, max_degree: int | None = None) -> int:
    """Classify and gate function text (see degree.check_degree)."""
    return _check_degree(expression, max_degree)


def validate_expression(expression: str) -> tuple[bool, str | None]:
    """Validate an expression without evaluating it.

    Returns:
        Tuple of (is_valid, error_message)

    Example:
        >>> from numerik_pkg.api import validate_expression
        >>> validate_expression("2x + 1")
        (True, None)
        >>> validate_expression("__import__('os')")[0]
        False
    """
    try:
        compile_expression(expression)
        return True, None
    except ValidationError as e:
        return False, str(e)


def find_brackets(
    expression: str,
    lower: float,
    upper: float,
    step: float | None = None,
    strict: bool = False,
) -> list[SignChangeInterval]:
    """Scan ``[lower, upper]`` for sign changes of the function.

    Example:
        >>> from numerik_pkg.api import find_brackets
        >>> [(round(i.start, 1), round(i.end, 1)) for i in find_brackets("x^2-4", -10, 10, 0.1)]
        [(-2.1, -2.0), (1.9, 2.0)]

    Raises:
        InvalidExpression: If the text is not a valid function
        InvalidRange: If lower >= upper or the step is not positive
    """
    return scan(compile_expression(expression), lower, upper, step, strict=strict)


def bisect(
    expression: str,
    a: float,
    b: float,
    tolerance: float | None = None,
    max_iterations: int | None = None,
) -> BisectionResult:
    """Refine a root of the function inside the bracket ``[a, b]``.

    Example:
        >>> from numerik_pkg.api import bisect
        >>> result = bisect("x^2-4", 1, 3, 1e-6)
        >>> result.converged, result.root
        (True, 2.0)

    Raises:
        InvalidExpression: If the text is not a valid function
        NotABracket: If f(a) and f(b) have the same strict sign
        EvaluationError: If f cannot be evaluated at a visited point
    """
    return _bisect(compile_expression(expression), a, b, tolerance, max_iterations)


def find_roots(
    expression: str,
    lower: float | None = None,
    upper: float | None = None,
    step: float | None = None,
    tolerance: float | None = None,
    max_iterations: int | None = None,
    strict: bool = False,
    max_degree: int | None = None,
) -> list[RootEstimate]:
    """Gate, scan and bisect: one RootEstimate per bracket found.

    A bracket whose bisection fails keeps the error message on its estimate
    instead of aborting the remaining brackets.

    Raises:
        ValidationError: If the function fails the degree gate
        InvalidExpression: If the text is not a valid function
        InvalidRange: If the scan bounds are malformed
    """
    if lower is None:
        lower = config.SCAN_LOWER
    if upper is None:
        upper = config.SCAN_UPPER
    _check_degree(expression, max_degree)
    handle = compile_expression(expression)

    estimates: list[RootEstimate] = []
    for interval in scan(handle, lower, upper, step, strict=strict):
        try:
            result = _bisect(
                handle, interval.start, interval.end, tolerance, max_iterations
            )
        except (EvaluationError, NotABracket, InvalidRange) as e:
            logger.warning(
                "Bisection failed on [%r, %r]: %s", interval.start, interval.end, e
            )
            estimates.append(RootEstimate(interval, error=str(e)))
            continue
        estimates.append(RootEstimate(interval, result=result))
    return estimates


def eliminate(
    coefficients: Sequence[Sequence[Any]] | LinearSystem,
    constants: Sequence[Any] | None = None,
) -> list[EliminationStep]:
    """Triangularize a square linear system with exact rational arithmetic.

    Args:
        coefficients: n x n entries (int, float, "p/q" or decimal text, Rational),
            or a ready LinearSystem
        constants: n right-hand-side entries (omit when passing a LinearSystem)

    Example:
        >>> from numerik_pkg.api import eliminate
        >>> steps = eliminate([[2, 1], [4, 5]], [3, 6])
        >>> [[str(v) for v in row] for row in steps[-1].matrix]
        [['2', '1'], ['0', '3']]

    Raises:
        ValidationError: If the matrix is not square, too large, or holds non-numbers
        SingularSystem: If a column has no usable pivot during elimination
    """
    if isinstance(coefficients, LinearSystem):
        system = coefficients
    else:
        if constants is None:
            raise ValidationError("Constants are required", "MATRIX_SHAPE")
        system = LinearSystem.from_values(coefficients, constants)
    if system.size > config.MAX_MATRIX_SIZE:
        raise ValidationError(
            f"Matrix too large ({system.size}x{system.size} > "
            f"{config.MAX_MATRIX_SIZE}x{config.MAX_MATRIX_SIZE})",
            "MATRIX_TOO_LARGE",
        )
    return _eliminate(system)
