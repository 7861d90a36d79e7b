"""Expression normalization, parsing and evaluation module.

This module handles:
- Input validation (length, emptiness, balanced parentheses)
- Normalization (case, Unicode variants, exponents, implicit multiplication)
- Parsing into an expression tree with a closed-grammar recursive-descent parser
- Evaluation of the tree at a numeric point
- Result formatting (superscripts, numbers)

Only the variable ``x``, numeric literals, ``+ - * / ^`` and parentheses are
accepted; nothing in the input is ever executed as host code.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Union

import sympy as sp

from . import config
from .config import (
    CACHE_SIZE_PARSE,
    DIGIT_PAREN_REGEX,
    DIGIT_VARIABLE_REGEX,
    NUMBER_TOKEN_REGEX,
    PAREN_DIGIT_REGEX,
    PAREN_PAREN_REGEX,
    PAREN_VARIABLE_REGEX,
    SUPERSCRIPT_MAP,
    SUPERSCRIPT_REGEX,
    VARIABLE_DIGIT_REGEX,
    VARIABLE_NAME,
    VARIABLE_PAREN_REGEX,
    VARIABLE_VARIABLE_REGEX,
    WHITESPACE_REGEX,
)
from .logging_config import get_logger
from .rational import Rational
from .types import EvaluationError, InvalidExpression

logger = get_logger("parser")


def superscriptify(input_str: str) -> str:
    """Convert numeric string to Unicode superscript characters.

    Args:
        input_str: Input string with digits and '-' (e.g., "123", "-5")

    Returns:
        String with superscript Unicode characters (e.g., "¹²³", "⁻⁵")
    """
    mapping = {digit: sup for sup, digit in SUPERSCRIPT_MAP.items()}
    mapping["-"] = "⁻"
    return "".join(mapping.get(char, char) for char in input_str)


def format_superscript(expr_str: str) -> str:
    """Replace Python power notation (**) with Unicode superscripts.

    Args:
        expr_str: Expression string (e.g., "x**2", "x**-3")

    Returns:
        String with superscripts (e.g., "x²", "x⁻³")
    """
    return re.sub(r"\*\*(\-?\d+)", lambda m: superscriptify(m.group(1)), expr_str)


def format_number(val: Any, precision: int | None = None) -> str:
    """Format a numeric value with the given number of significant digits.

    Args:
        val: Numeric value to format
        precision: Significant digits (default: config.OUTPUT_PRECISION)

    Returns:
        Formatted string representation of the number
    """
    if precision is None:
        precision = config.OUTPUT_PRECISION
    try:
        fmt = "{:." + str(int(precision)) + "g}"
        return fmt.format(float(val))
    except (ValueError, TypeError, OverflowError):
        return str(val)


def is_balanced(input_str: str) -> tuple[bool, int | None]:
    """Check if parentheses are balanced. Returns (is_balanced, error_position)."""
    stack: list[int] = []
    for i, char in enumerate(input_str):
        if char == "(":
            stack.append(i)
        elif char == ")":
            if not stack:
                return False, i
            stack.pop()
    if stack:
        return False, stack[0]
    return True, None


def preprocess(input_str: str) -> str:
    """Normalize expression text for parsing.

    Applies transformations:
    - Validates emptiness and input length
    - Strips all whitespace and lowercases
    - Standardizes Unicode symbols (minus variants, ×, ÷, superscript digits)
    - Converts exponents (^ to **)
    - Inserts implicit multiplication (2x -> 2*x, x(x+1) -> x*(x+1), (x+1)x -> (x+1)*x)
    - Validates balanced parentheses

    Args:
        input_str: Raw input string from user

    Returns:
        Normalized string ready for tokenizing

    Raises:
        InvalidExpression: If the input is empty, too long or unbalanced
    """
    if not isinstance(input_str, str) or not input_str.strip():
        raise InvalidExpression("Input cannot be empty", "EMPTY_INPUT")
    if len(input_str) > config.MAX_INPUT_LENGTH:
        raise InvalidExpression(
            f"Input too long (>{config.MAX_INPUT_LENGTH} characters)", "TOO_LONG"
        )

    processed_str = WHITESPACE_REGEX.sub("", input_str).lower()
    processed_str = processed_str.replace("−", "-").replace("–", "-")
    processed_str = processed_str.replace("×", "*").replace("·", "*")
    processed_str = processed_str.replace("÷", "/").replace(":", "/")

    processed_str = SUPERSCRIPT_REGEX.sub(
        lambda m: "**" + "".join(SUPERSCRIPT_MAP[char] for char in m.group(1)),
        processed_str,
    )
    processed_str = processed_str.replace("^", "**")

    processed_str = DIGIT_VARIABLE_REGEX.sub(r"\1*x", processed_str)
    processed_str = VARIABLE_DIGIT_REGEX.sub(r"x*\1", processed_str)
    processed_str = VARIABLE_VARIABLE_REGEX.sub("x*", processed_str)
    processed_str = VARIABLE_PAREN_REGEX.sub("x*(", processed_str)
    processed_str = PAREN_VARIABLE_REGEX.sub(")*x", processed_str)
    processed_str = DIGIT_PAREN_REGEX.sub(r"\1*(", processed_str)
    processed_str = PAREN_DIGIT_REGEX.sub(r")*\1", processed_str)
    processed_str = PAREN_PAREN_REGEX.sub(")*(", processed_str)

    balanced, error_pos = is_balanced(processed_str)
    if not balanced:
        start = max(0, error_pos - 10)
        context = processed_str[start : error_pos + 10]
        raise InvalidExpression(
            f"Mismatched or unbalanced parentheses at position {error_pos}: ...{context}...",
            "UNBALANCED_PARENS",
        )
    return processed_str


# Expression tree


@dataclass(frozen=True)
class Number:
    value: float
    text: str


@dataclass(frozen=True)
class Variable:
    name: str = VARIABLE_NAME


@dataclass(frozen=True)
class Negate:
    operand: "Node"


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: "Node"
    right: "Node"


Node = Union[Number, Variable, Negate, BinaryOp]

OPERATORS = ("**", "+", "-", "*", "/")


def tokenize(processed_str: str) -> list[tuple[str, str, int]]:
    """Split normalized text into (kind, text, position) tokens.

    Raises:
        InvalidExpression: On any character sequence outside the grammar
    """
    tokens: list[tuple[str, str, int]] = []
    pos = 0
    while pos < len(processed_str):
        char = processed_str[pos]
        number = NUMBER_TOKEN_REGEX.match(processed_str, pos)
        if number:
            tokens.append(("number", number.group(0), pos))
            pos = number.end()
            continue
        if char == VARIABLE_NAME:
            tokens.append(("variable", char, pos))
            pos += 1
            continue
        if char in "()":
            tokens.append((char, char, pos))
            pos += 1
            continue
        operator = next(
            (op for op in OPERATORS if processed_str.startswith(op, pos)), None
        )
        if operator:
            tokens.append(("operator", operator, pos))
            pos += len(operator)
            continue
        word = re.match(r"[a-z_]+", processed_str[pos:])
        bad = word.group(0) if word else char
        logger.debug("Rejected token %r at position %d", bad, pos)
        raise InvalidExpression(
            f"Unsupported token '{bad}' at position {pos}; only x, numbers, "
            "+ - * / ^ and parentheses are allowed"
        )
    return tokens


class _Parser:
    """Recursive-descent parser over the token list.

    expr    := term (("+" | "-") term)*
    term    := unary (("*" | "/") unary)*
    unary   := ("+" | "-") unary | power
    power   := primary ("**" unary)?
    primary := NUMBER | "x" | "(" expr ")"
    """

    def __init__(self, tokens: list[tuple[str, str, int]]):
        self.tokens = tokens
        self.index = 0
        self.depth = 0

    def parse(self) -> Node:
        if not self.tokens:
            raise InvalidExpression("Expression is empty", "EMPTY_INPUT")
        node = self._expr()
        if self.index < len(self.tokens):
            _, text, pos = self.tokens[self.index]
            raise InvalidExpression(f"Unexpected '{text}' at position {pos}")
        return node

    def _peek(self) -> tuple[str, str, int] | None:
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def _accept_operator(self, *ops: str) -> str | None:
        token = self._peek()
        if token and token[0] == "operator" and token[1] in ops:
            self.index += 1
            return token[1]
        return None

    def _enter(self) -> None:
        self.depth += 1
        if self.depth > config.MAX_EXPRESSION_DEPTH:
            raise InvalidExpression(
                f"Expression too deeply nested (>{config.MAX_EXPRESSION_DEPTH} levels)",
                "TOO_DEEP",
            )

    def _expr(self) -> Node:
        node = self._term()
        while True:
            op = self._accept_operator("+", "-")
            if op is None:
                return node
            node = BinaryOp(op, node, self._term())

    def _term(self) -> Node:
        node = self._unary()
        while True:
            op = self._accept_operator("*", "/")
            if op is None:
                return node
            node = BinaryOp(op, node, self._unary())

    def _unary(self) -> Node:
        op = self._accept_operator("+", "-")
        if op is None:
            return self._power()
        self._enter()
        operand = self._unary()
        self.depth -= 1
        return Negate(operand) if op == "-" else operand

    def _power(self) -> Node:
        base = self._primary()
        if self._accept_operator("**") is None:
            return base
        self._enter()
        exponent = self._unary()
        self.depth -= 1
        return BinaryOp("**", base, exponent)

    def _primary(self) -> Node:
        token = self._peek()
        if token is None:
            raise InvalidExpression("Unexpected end of expression")
        kind, text, pos = token
        self.index += 1
        if kind == "number":
            value = float(text)
            if not math.isfinite(value):
                raise InvalidExpression(f"Number '{text}' at position {pos} is out of range")
            return Number(value, text)
        if kind == "variable":
            return Variable()
        if kind == "(":
            self._enter()
            node = self._expr()
            self.depth -= 1
            closing = self._peek()
            if closing is None or closing[0] != ")":
                raise InvalidExpression(f"Missing ')' for '(' at position {pos}")
            self.index += 1
            return node
        raise InvalidExpression(f"Unexpected '{text}' at position {pos}")


@dataclass(frozen=True)
class ExpressionHandle:
    """Compiled single-variable expression, reusable at any number of points."""

    source: str
    normalized: str
    tree: Node

    def __call__(self, x: float) -> float:
        return evaluate(self, x)

    def to_sympy(self) -> sp.Expr:
        """Exact SymPy form of the expression (decimal literals become rationals)."""
        return _to_sympy(self.tree)

    def pretty(self) -> str:
        return format_superscript(str(self.to_sympy()))


@lru_cache(maxsize=CACHE_SIZE_PARSE)
def compile_expression(expression_text: str) -> ExpressionHandle:
    """Normalize and parse expression text into a reusable handle.

    Args:
        expression_text: Raw text such as "x^3 - 9x + 3"

    Returns:
        ExpressionHandle wrapping the parsed tree

    Raises:
        InvalidExpression: If the text is empty, unbalanced, too deep, or
            contains tokens outside the supported grammar
    """
    normalized = preprocess(expression_text)
    tree = _Parser(tokenize(normalized)).parse()
    logger.debug("Compiled %r as %r", expression_text, normalized)
    return ExpressionHandle(expression_text, normalized, tree)


def evaluate(handle: ExpressionHandle, x: float) -> float:
    """Evaluate a compiled expression at ``x``.

    Raises:
        EvaluationError: On division by zero, complex or non-finite results
    """
    x = float(x)
    try:
        value = _evaluate_node(handle.tree, x)
    except ZeroDivisionError:
        raise EvaluationError(f"Division by zero at x = {x!r}", x=x)
    except OverflowError:
        raise EvaluationError(f"Numeric overflow at x = {x!r}", x=x)
    if isinstance(value, complex):
        raise EvaluationError(f"Result is not a real number at x = {x!r}", x=x)
    if not math.isfinite(value):
        raise EvaluationError(f"Result is not finite at x = {x!r}", x=x)
    return value


def sign(value: float) -> int:
    """Sign of an evaluated value: -1, 0 or 1."""
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def _evaluate_node(node: Node, x: float) -> float:
    if isinstance(node, Number):
        return node.value
    if isinstance(node, Variable):
        return x
    if isinstance(node, Negate):
        return -_evaluate_node(node.operand, x)
    left = _evaluate_node(node.left, x)
    right = _evaluate_node(node.right, x)
    if node.op == "+":
        return left + right
    if node.op == "-":
        return left - right
    if node.op == "*":
        return left * right
    if node.op == "/":
        return left / right
    result = left**right
    if isinstance(result, complex):
        raise EvaluationError(f"Result is not a real number at x = {x!r}", x=x)
    return result


def _to_sympy(node: Node) -> sp.Expr:
    if isinstance(node, Number):
        return Rational.parse(node.text).to_sympy()
    if isinstance(node, Variable):
        return sp.Symbol(node.name)
    if isinstance(node, Negate):
        return -_to_sympy(node.operand)
    left = _to_sympy(node.left)
    right = _to_sympy(node.right)
    if node.op == "+":
        return left + right
    if node.op == "-":
        return left - right
    if node.op == "*":
        return left * right
    if node.op == "/":
        return left / right
    return left**right
