"""Sign-change interval detection (discrete Bolzano scan).

Walks ``[lower, upper]`` in fixed steps and reports every sub-interval on
which the function changes sign, so each can be handed to the bisection
solver as a bracket.
"""

from __future__ import annotations

import math

from . import config
from .logging_config import get_logger
from .parser import ExpressionHandle, evaluate, sign
from .types import EvaluationError, InvalidRange, SignChangeInterval

logger = get_logger("scanner")


def validate_range(lower: float, upper: float, step: float) -> int:
    """Check scan bounds and return the number of sub-intervals to sample.

    Raises:
        InvalidRange: For non-finite bounds, lower >= upper, a non-positive
            step, or more than MAX_SCAN_STEPS sub-intervals
    """
    if not all(math.isfinite(value) for value in (lower, upper, step)):
        raise InvalidRange("Scan bounds and step must be finite numbers")
    if lower >= upper:
        raise InvalidRange(
            f"Lower bound ({lower}) must be less than upper bound ({upper})"
        )
    if step <= 0:
        raise InvalidRange(f"Scan step must be positive, got {step}")
    count = math.ceil((upper - lower) / step)
    if count > config.MAX_SCAN_STEPS:
        raise InvalidRange(
            f"Scan would need {count} steps (>{config.MAX_SCAN_STEPS}); "
            "use a larger step or a narrower range"
        )
    return count


def scan(
    handle: ExpressionHandle,
    lower: float,
    upper: float,
    step: float | None = None,
    strict: bool = False,
    epsilon: float | None = None,
) -> list[SignChangeInterval]:
    """Find sub-intervals of ``[lower, upper]`` that bracket a root.

    A sub-interval ``[x1, x2]`` is recorded when ``f(x1)`` and ``f(x2)`` have
    strict opposite signs, or
    when it closes exactly on a zero of ``f`` (grid points that land on a
    root produce a zero product on both sides and would otherwise be lost).
    Sample points where ``f`` cannot be evaluated are skipped.

    Args:
        handle: Compiled expression
        lower: Start of the scan
        upper: End of the scan (the last sub-interval is clipped to it)
        step: Sub-interval width (default: config.SCAN_STEP)
        strict: Also report near-zero samples (|f(x)| < epsilon) as a
            near-exact interval centered on x
        epsilon: Near-zero threshold for strict scans (default: config.NEAR_ZERO_EPSILON)

    Returns:
        Intervals in ascending scan order

    Raises:
        InvalidRange: If the bounds or step are malformed
    """
    if step is None:
        step = config.SCAN_STEP
    if epsilon is None:
        epsilon = config.NEAR_ZERO_EPSILON
    lower, upper, step = float(lower), float(upper), float(step)
    count = validate_range(lower, upper, step)

    intervals: list[SignChangeInterval] = []
    skipped = 0
    for index in range(count):
        x_start = lower + index * step
        if x_start >= upper:
            break
        if index == count - 1:
            x_end = upper
        else:
            x_end = min(lower + (index + 1) * step, upper)
        try:
            f_start = evaluate(handle, x_start)
            f_end = evaluate(handle, x_end)
        except EvaluationError as e:
            skipped += 1
            logger.debug("Skipping sample [%r, %r]: %s", x_start, x_end, e)
            continue

        if sign(f_start) * sign(f_end) < 0:
            intervals.append(SignChangeInterval(x_start, x_end, f_start, f_end))
        elif f_end == 0 and f_start != 0 and (not strict or x_end == upper):
            intervals.append(SignChangeInterval(x_start, x_end, f_start, f_end))
        elif f_start == 0 and f_end != 0 and index == 0 and not strict:
            intervals.append(SignChangeInterval(x_start, x_end, f_start, f_end))
        elif strict and abs(f_start) < epsilon:
            near = _near_exact_interval(handle, x_start, step)
            if near is not None:
                intervals.append(near)

    logger.info(
        "Scanned [%r, %r] step %r: %d interval(s), %d sample(s) skipped",
        lower,
        upper,
        step,
        len(intervals),
        skipped,
    )
    return intervals


def _near_exact_interval(
    handle: ExpressionHandle, x: float, step: float
) -> SignChangeInterval | None:
    half = step / 2
    try:
        f_left = evaluate(handle, x - half)
        f_right = evaluate(handle, x + half)
    except EvaluationError as e:
        logger.debug("Skipping near-zero sample at %r: %s", x, e)
        return None
    return SignChangeInterval(x - half, x + half, f_left, f_right, exact_zero_at=x)
