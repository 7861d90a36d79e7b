"""Gaussian elimination to upper-triangular form with exact rationals.

Each round zeroes one column below the diagonal. Row updates read from a
snapshot of the system taken before the round, so a row is never combined
with partially updated values. The result is the full list of rounds; no
back-substitution is performed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from .logging_config import get_logger
from .rational import Rational
from .types import EliminationStep, Multiplier, RowSwap, SingularSystem, ValidationError

logger = get_logger("gauss")


@dataclass(frozen=True)
class LinearSystem:
    """Square system ``coefficients * v = constants`` over the rationals."""

    coefficients: tuple[tuple[Rational, ...], ...]
    constants: tuple[Rational, ...]

    def __post_init__(self):
        size = len(self.coefficients)
        if size == 0:
            raise ValidationError("System must have at least one equation", "MATRIX_SHAPE")
        for index, row in enumerate(self.coefficients):
            if len(row) != size:
                raise ValidationError(
                    f"Coefficient matrix must be square: row {index + 1} has "
                    f"{len(row)} entries, expected {size}",
                    "MATRIX_SHAPE",
                )
        if len(self.constants) != size:
            raise ValidationError(
                f"Expected {size} constants, got {len(self.constants)}",
                "MATRIX_SHAPE",
            )

    @classmethod
    def from_values(
        cls, coefficients: Sequence[Sequence[Any]], constants: Sequence[Any]
    ) -> LinearSystem:
        """Build a system from ints, floats, strings ("3/4", "0.5") or Rationals."""
        return cls(
            tuple(tuple(Rational.coerce(value) for value in row) for row in coefficients),
            tuple(Rational.coerce(value) for value in constants),
        )

    @property
    def size(self) -> int:
        return len(self.coefficients)


def _snapshot(
    matrix: list[list[Rational]], constants: list[Rational]
) -> tuple[tuple[tuple[Rational, ...], ...], tuple[Rational, ...]]:
    return tuple(tuple(row) for row in matrix), tuple(constants)


def eliminate(system: LinearSystem) -> list[EliminationStep]:
    """Reduce a square system to upper-triangular form, recording every round.

    Args:
        system: The system to reduce; it is never modified

    Returns:
        Steps in order. ``steps[0]`` is the untouched input; ``steps[k + 1]``
        is the state after zeroing column ``k`` below the diagonal.

    Raises:
        SingularSystem: If a column being eliminated has no nonzero entry
            at or below the diagonal. The rounds completed before the
            failure are attached as ``.steps``. A zero left in the last
            diagonal entry is not checked; the trace is returned as is.
    """
    size = system.size
    matrix = [list(row) for row in system.coefficients]
    constants = list(system.constants)

    initial_matrix, initial_constants = _snapshot(matrix, constants)
    steps = [EliminationStep(round=0, matrix=initial_matrix, constants=initial_constants)]

    for k in range(size - 1):
        rows_swapped = None
        if matrix[k][k].is_zero():
            swap_with = next(
                (i for i in range(k + 1, size) if not matrix[i][k].is_zero()), None
            )
            if swap_with is None:
                logger.info("No pivot available in column %d", k)
                raise SingularSystem(
                    f"System has no unique solution (zero pivot in column {k + 1})",
                    steps=steps,
                    column=k,
                )
            matrix[k], matrix[swap_with] = matrix[swap_with], matrix[k]
            constants[k], constants[swap_with] = constants[swap_with], constants[k]
            rows_swapped = RowSwap(from_row=swap_with, to_row=k)
            logger.debug("Swapped rows %d and %d", k, swap_with)

        pivot = matrix[k][k]
        multipliers = tuple(
            Multiplier(row=i, value=matrix[i][k].divide(pivot).negate())
            for i in range(k + 1, size)
        )

        previous_matrix, previous_constants = _snapshot(matrix, constants)
        for multiplier in multipliers:
            i, m = multiplier.row, multiplier.value
            matrix[i] = [
                previous_matrix[i][j].add(previous_matrix[k][j].multiply(m))
                for j in range(size)
            ]
            constants[i] = previous_constants[i].add(previous_constants[k].multiply(m))

        round_matrix, round_constants = _snapshot(matrix, constants)
        steps.append(
            EliminationStep(
                round=k + 1,
                matrix=round_matrix,
                constants=round_constants,
                pivot=pivot,
                multipliers=multipliers,
                rows_swapped=rows_swapped,
                pivot_row=k,
            )
        )

    logger.info("Eliminated %dx%d system in %d round(s)", size, size, len(steps) - 1)
    return steps
