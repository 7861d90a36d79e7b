"""Centralized configuration for Numerik.

This module defines:
- Input validation limits (length, nesting depth)
- Cache sizes for compiled expressions
- Root-finding policy (degree cap, scan range and step, tolerances, caps)
- Elimination limits
- Default log level
- Regex patterns for expression normalization

Configuration can be overridden via:
- CLI flags (see cli.py)
- Environment variables (prefixed with NUMERIK_)
"""

import os
import re

# Version is defined in pyproject.toml [project] section
try:
    import importlib.metadata

    VERSION = importlib.metadata.version("numerik")
except Exception:
    # Fallback if package not installed
    VERSION = "1.0.0"

# Input validation limits
MAX_INPUT_LENGTH = int(os.getenv("NUMERIK_MAX_INPUT_LENGTH", "1000"))  # characters
MAX_EXPRESSION_DEPTH = int(
    os.getenv("NUMERIK_MAX_EXPRESSION_DEPTH", "50")
)  # parenthesis / unary nesting

# Cache configuration
CACHE_SIZE_PARSE = int(os.getenv("NUMERIK_CACHE_SIZE_PARSE", "256"))

# Degree gate: functions above this degree are rejected before scanning
MAX_DEGREE = int(os.getenv("NUMERIK_MAX_DEGREE", "5"))

# Sign-change scan defaults
SCAN_LOWER = float(os.getenv("NUMERIK_SCAN_LOWER", "-10"))
SCAN_UPPER = float(os.getenv("NUMERIK_SCAN_UPPER", "10"))
SCAN_STEP = float(os.getenv("NUMERIK_SCAN_STEP", "0.1"))
MAX_SCAN_STEPS = int(
    os.getenv("NUMERIK_MAX_SCAN_STEPS", "1000000")
)  # samples per scan
NEAR_ZERO_EPSILON = float(
    os.getenv("NUMERIK_NEAR_ZERO_EPSILON", "1e-4")
)  # |f(x)| below this counts as a zero in strict scans

# Bisection defaults
DEFAULT_TOLERANCE = float(os.getenv("NUMERIK_DEFAULT_TOLERANCE", "1e-6"))
MAX_ITERATIONS = int(os.getenv("NUMERIK_MAX_ITERATIONS", "100"))

# Output formatting
DISPLAY_PRECISION = int(
    os.getenv("NUMERIK_DISPLAY_PRECISION", "4")
)  # decimal places for interval / iteration tables
OUTPUT_PRECISION = int(
    os.getenv("NUMERIK_OUTPUT_PRECISION", "10")
)  # significant digits for roots

# Gaussian elimination
MAX_MATRIX_SIZE = int(os.getenv("NUMERIK_MAX_MATRIX_SIZE", "12"))

# Logging; solver traces are DEBUG records
LOG_LEVEL = os.getenv("NUMERIK_LOG_LEVEL", "WARNING")

VARIABLE_NAME = "x"

SUPERSCRIPT_MAP = {
    "⁰": "0",
    "¹": "1",
    "²": "2",
    "³": "3",
    "⁴": "4",
    "⁵": "5",
    "⁶": "6",
    "⁷": "7",
    "⁸": "8",
    "⁹": "9",
}
SUPERSCRIPT_REGEX = re.compile(f"([{''.join(SUPERSCRIPT_MAP)}]+)")

WHITESPACE_REGEX = re.compile(r"\s+")
DIGIT_VARIABLE_REGEX = re.compile(r"([0-9.])x")
VARIABLE_DIGIT_REGEX = re.compile(r"x([0-9.])")
VARIABLE_PAREN_REGEX = re.compile(r"x\(")
PAREN_VARIABLE_REGEX = re.compile(r"\)x")
DIGIT_PAREN_REGEX = re.compile(r"([0-9.])\(")
PAREN_DIGIT_REGEX = re.compile(r"\)([0-9.])")
PAREN_PAREN_REGEX = re.compile(r"\)\(")
VARIABLE_VARIABLE_REGEX = re.compile(r"x(?=x)")

# Degree classification on normalized text
POWER_TERM_REGEX = re.compile(r"x\*\*([0-9]+)(?![0-9.])")
BARE_VARIABLE_REGEX = re.compile(r"x(?!\*\*)")
NUMERIC_CONSTANT_REGEX = re.compile(r"^[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:e[+-]?[0-9]+)?$")

NUMBER_TOKEN_REGEX = re.compile(r"(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:e[+-]?[0-9]+)?")
