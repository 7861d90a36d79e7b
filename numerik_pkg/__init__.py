"""Numerik package: rational arithmetic, expression evaluation, bisection and Gaussian elimination."""

__all__ = [
    "config",
    "rational",
    "parser",
    "degree",
    "scanner",
    "bisection",
    "gauss",
    "cli",
    "types",
    "api",
    "logging_config",
]

# Public API exports

__api_exports__ = [
    "compile_function",
    "classify_degree",
    "check_degree",
    "validate_expression",
    "find_brackets",
    "bisect",
    "find_roots",
    "eliminate",
]
