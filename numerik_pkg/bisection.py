"""Bisection root refinement over a sign-change bracket."""

from __future__ import annotations

import math

from . import config
from .logging_config import get_logger
from .parser import ExpressionHandle, evaluate, sign
from .types import (
    BisectionResult,
    InvalidRange,
    IterationRecord,
    NotABracket,
    ValidationError,
)

logger = get_logger("bisection")


def bisect(
    handle: ExpressionHandle,
    a: float,
    b: float,
    tolerance: float | None = None,
    max_iterations: int | None = None,
) -> BisectionResult:
    """Halve ``[a, b]`` until ``|f(midpoint)| < tolerance`` or the iteration cap.

    Args:
        handle: Compiled expression
        a: Left end of the bracket
        b: Right end of the bracket
        tolerance: Residual below which the midpoint is accepted (default: config.DEFAULT_TOLERANCE)
        max_iterations: Iteration cap (default: config.MAX_ITERATIONS)

    Returns:
        BisectionResult; when the cap is reached ``converged`` is False and
        ``root`` is the midpoint of the last bracket

    Raises:
        InvalidRange: If a >= b or a bound is not finite
        ValidationError: If tolerance or max_iterations is not positive
        NotABracket: If f(a) and f(b) have the same strict sign
        EvaluationError: If f cannot be evaluated at a visited point
    """
    if tolerance is None:
        tolerance = config.DEFAULT_TOLERANCE
    if max_iterations is None:
        max_iterations = config.MAX_ITERATIONS
    a, b = float(a), float(b)
    if not (math.isfinite(a) and math.isfinite(b)):
        raise InvalidRange("Bracket bounds must be finite numbers")
    if a >= b:
        raise InvalidRange(f"'a' ({a}) must be less than 'b' ({b})")
    if not tolerance > 0:
        raise ValidationError(
            f"Tolerance must be positive, got {tolerance}", "INVALID_TOLERANCE"
        )
    if max_iterations < 1:
        raise ValidationError(
            f"Maximum iterations must be at least 1, got {max_iterations}",
            "INVALID_MAX_ITERATIONS",
        )

    fa = evaluate(handle, a)
    fb = evaluate(handle, b)
    if sign(fa) * sign(fb) > 0:
        raise NotABracket(
            f"f(a) and f(b) must have opposite signs to guarantee a root in "
            f"[{a}, {b}] (f(a) = {fa!r}, f(b) = {fb!r})"
        )

    trace: list[IterationRecord] = []
    for index in range(1, max_iterations + 1):
        midpoint = (a + b) / 2
        f_mid = evaluate(handle, midpoint)
        trace.append(
            IterationRecord(index, a, b, midpoint, fa, fb, f_mid, abs(b - a))
        )
        if abs(f_mid) < tolerance:
            logger.info("Converged to %r after %d iteration(s)", midpoint, index)
            return BisectionResult(midpoint, True, abs(f_mid), tuple(trace))
        if sign(fa) != sign(f_mid):
            b, fb = midpoint, f_mid
        else:
            a, fa = midpoint, f_mid

    root = (a + b) / 2
    residual = abs(evaluate(handle, root))
    logger.warning(
        "No convergence after %d iteration(s); best estimate %r (|f| = %r)",
        max_iterations,
        root,
        residual,
    )
    return BisectionResult(root, False, residual, tuple(trace))
