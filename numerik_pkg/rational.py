"""Exact rational numbers for the elimination engine.

Values are always stored in lowest terms with a strictly positive
denominator, so equal numbers compare and hash equal structurally.
"""

from __future__ import annotations

import math
import numbers
import re
from decimal import Decimal, InvalidOperation
from fractions import Fraction
from math import gcd
from typing import Any, Union

import sympy as sp

from .types import DivisionByZero, ValidationError

FRACTION_TEXT_RE = re.compile(r"^\s*([+-]?[^/\s]+)\s*/\s*([+-]?[^/\s]+)\s*$")

Operand = Union["Rational", int, float, numbers.Rational]


def _integer_ratio(value: Any) -> tuple[int, int]:
    """Return an exact (numerator, denominator) pair for a supported value."""
    if isinstance(value, Rational):
        return value.numerator, value.denominator
    if isinstance(value, bool):
        return int(value), 1
    if isinstance(value, int):
        return value, 1
    if isinstance(value, numbers.Rational):
        return int(value.numerator), int(value.denominator)
    if isinstance(value, float):
        try:
            return value.as_integer_ratio()
        except (OverflowError, ValueError):
            raise ValidationError(
                f"Cannot represent {value!r} as a rational number", "INVALID_NUMBER"
            )
    if isinstance(value, str):
        parsed = Rational.parse(value)
        return parsed.numerator, parsed.denominator
    raise ValidationError(
        f"Unsupported operand type for Rational: {type(value).__name__}",
        "INVALID_NUMBER",
    )


class Rational:
    """Immutable, always-reduced fraction.

    Args:
        numerator: Integer numerator (other numeric types are converted exactly)
        denominator: Integer denominator, must not be zero (default: 1)

    Raises:
        DivisionByZero: If the denominator is zero
    """

    __slots__ = ("_numerator", "_denominator")

    def __init__(self, numerator: Any = 0, denominator: Any = 1):
        if not (type(numerator) is int and type(denominator) is int):
            num_n, num_d = _integer_ratio(numerator)
            den_n, den_d = _integer_ratio(denominator)
            if den_n == 0:
                raise DivisionByZero("Denominator cannot be zero")
            numerator, denominator = num_n * den_d, num_d * den_n
        if denominator == 0:
            raise DivisionByZero("Denominator cannot be zero")

        if numerator == 0:
            denominator = 1
        else:
            divisor = gcd(numerator, denominator)
            numerator //= divisor
            denominator //= divisor
            if denominator < 0:
                numerator, denominator = -numerator, -denominator

        object.__setattr__(self, "_numerator", numerator)
        object.__setattr__(self, "_denominator", denominator)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Rational is immutable")

    @property
    def numerator(self) -> int:
        return self._numerator

    @property
    def denominator(self) -> int:
        return self._denominator

    @classmethod
    def coerce(cls, value: Operand | str) -> Rational:
        """Promote an int, float, string or rational-like value to a Rational."""
        if isinstance(value, Rational):
            return value
        return cls(*_integer_ratio(value))

    @classmethod
    def parse(cls, text: str) -> Rational:
        """Parse user text exactly: "3", "-3/4", "0.25", "1e-3", "1.5/2".

        Decimal text is read through Decimal, never through a binary float.

        Raises:
            ValidationError: If the text is not a number (code INVALID_NUMBER)
            DivisionByZero: If a fraction has a zero denominator
        """
        if not isinstance(text, str):
            raise ValidationError(
                f"Expected text, got {type(text).__name__}", "INVALID_NUMBER"
            )
        cleaned = text.strip().replace("−", "-")
        match = FRACTION_TEXT_RE.match(cleaned)
        if match:
            return cls(cls._parse_decimal(match.group(1)), cls._parse_decimal(match.group(2)))
        return cls._parse_decimal(cleaned)

    @classmethod
    def _parse_decimal(cls, text: str) -> Rational:
        try:
            value = Decimal(text)
        except InvalidOperation:
            raise ValidationError(f"Invalid number: {text!r}", "INVALID_NUMBER")
        if not value.is_finite():
            raise ValidationError(f"Invalid number: {text!r}", "INVALID_NUMBER")
        return cls(*value.as_integer_ratio())

    def add(self, other: Operand) -> Rational:
        other = Rational.coerce(other)
        return Rational(
            self._numerator * other._denominator + other._numerator * self._denominator,
            self._denominator * other._denominator,
        )

    def subtract(self, other: Operand) -> Rational:
        return self.add(Rational.coerce(other).negate())

    def multiply(self, other: Operand) -> Rational:
        other = Rational.coerce(other)
        return Rational(
            self._numerator * other._numerator, self._denominator * other._denominator
        )

    def divide(self, other: Operand) -> Rational:
        other = Rational.coerce(other)
        if other.is_zero():
            raise DivisionByZero(f"Cannot divide {self} by zero")
        return Rational(
            self._numerator * other._denominator, self._denominator * other._numerator
        )

    def negate(self) -> Rational:
        return Rational(-self._numerator, self._denominator)

    def is_zero(self) -> bool:
        return self._numerator == 0

    def to_decimal(self) -> float:
        """Lossy floating point approximation; magnitudes beyond float range give +-inf."""
        try:
            return self._numerator / self._denominator
        except OverflowError:
            return math.inf if self._numerator > 0 else -math.inf

    def to_display_string(self) -> str:
        if self._denominator == 1:
            return str(self._numerator)
        return f"{self._numerator}/{self._denominator}"

    def to_sympy(self) -> sp.Rational:
        return sp.Rational(self._numerator, self._denominator)

    # Python operator protocol

    def __add__(self, other: Any) -> Rational:
        if not _is_operand(other):
            return NotImplemented
        return self.add(other)

    __radd__ = __add__

    def __sub__(self, other: Any) -> Rational:
        if not _is_operand(other):
            return NotImplemented
        return self.subtract(other)

    def __rsub__(self, other: Any) -> Rational:
        if not _is_operand(other):
            return NotImplemented
        return Rational.coerce(other).subtract(self)

    def __mul__(self, other: Any) -> Rational:
        if not _is_operand(other):
            return NotImplemented
        return self.multiply(other)

    __rmul__ = __mul__

    def __truediv__(self, other: Any) -> Rational:
        if not _is_operand(other):
            return NotImplemented
        return self.divide(other)

    def __rtruediv__(self, other: Any) -> Rational:
        if not _is_operand(other):
            return NotImplemented
        return Rational.coerce(other).divide(self)

    def __neg__(self) -> Rational:
        return self.negate()

    def __pos__(self) -> Rational:
        return self

    def __abs__(self) -> Rational:
        return Rational(abs(self._numerator), self._denominator)

    def __bool__(self) -> bool:
        return not self.is_zero()

    def __float__(self) -> float:
        return self.to_decimal()

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, float):
            if not math.isfinite(other):
                return False
            other = Rational(*other.as_integer_ratio())
        if not _is_operand(other):
            return NotImplemented
        other = Rational.coerce(other)
        return (
            self._numerator == other._numerator
            and self._denominator == other._denominator
        )

    def __lt__(self, other: Any) -> bool:
        if not _is_operand(other):
            return NotImplemented
        other = Rational.coerce(other)
        return self._numerator * other._denominator < other._numerator * self._denominator

    def __le__(self, other: Any) -> bool:
        if not _is_operand(other):
            return NotImplemented
        return self == other or self < other

    def __gt__(self, other: Any) -> bool:
        if not _is_operand(other):
            return NotImplemented
        return not self <= other

    def __ge__(self, other: Any) -> bool:
        if not _is_operand(other):
            return NotImplemented
        return not self < other

    def __hash__(self) -> int:
        # Matches int, float and Fraction hashes for equal values
        return hash(Fraction(self._numerator, self._denominator))

    def __str__(self) -> str:
        return self.to_display_string()

    def __repr__(self) -> str:
        return f"Rational({self._numerator}, {self._denominator})"

    def __reduce__(self):
        return (Rational, (self._numerator, self._denominator))


def _is_operand(value: Any) -> bool:
    return isinstance(value, (Rational, int, float, numbers.Rational))
