"""Polynomial degree classification used to gate root-finding input."""

from __future__ import annotations

from . import config
from .config import BARE_VARIABLE_REGEX, NUMERIC_CONSTANT_REGEX, POWER_TERM_REGEX
from .logging_config import get_logger
from .parser import compile_expression
from .types import InvalidExpression, ValidationError

logger = get_logger("degree")

INVALID_DEGREE = -1


def classify_degree(expression_text: str) -> int:
    """Report the polynomial degree of expression text.

    The largest explicit ``x^n`` exponent governs; without one, a bare ``x``
    means degree 1 and a lone numeric literal means degree 0.

    Args:
        expression_text: Raw function text (e.g., "x^3-9x+3")

    Returns:
        The degree, or -1 when the text has no recognizable polynomial term
        and is not a numeric constant, or when it is not a valid
        expression. No upper cap is applied here.
    """
    try:
        normalized = compile_expression(expression_text).normalized
    except InvalidExpression:
        return INVALID_DEGREE

    exponents = [int(exponent) for exponent in POWER_TERM_REGEX.findall(normalized)]
    if exponents:
        return max(exponents)
    if BARE_VARIABLE_REGEX.search(normalized):
        return 1
    if NUMERIC_CONSTANT_REGEX.match(normalized):
        return 0
    return INVALID_DEGREE


def check_degree(expression_text: str, max_degree: int | None = None) -> int:
    """Gate a function before scanning: reject invalid text and high degrees.

    Args:
        expression_text: Raw function text
        max_degree: Highest accepted degree (default: config.MAX_DEGREE)

    Returns:
        The accepted degree

    Raises:
        ValidationError: INVALID_FUNCTION when no degree can be determined,
            DEGREE_TOO_HIGH when it exceeds ``max_degree``
    """
    if max_degree is None:
        max_degree = config.MAX_DEGREE
    degree = classify_degree(expression_text)
    if degree == INVALID_DEGREE:
        raise ValidationError(
            "Invalid function format. Check the syntax.", "INVALID_FUNCTION"
        )
    if degree > max_degree:
        logger.info("Rejected degree %d function (max %d)", degree, max_degree)
        raise ValidationError(
            f"Highest power is x^{degree}; use functions up to degree {max_degree}.",
            "DEGREE_TOO_HIGH",
        )
    return degree
