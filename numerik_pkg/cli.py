from __future__ import annotations

import argparse
import json
import re
from typing import Any

import sympy as sp

from . import api
from .config import VERSION
from .logging_config import get_logger
from .parser import compile_expression, format_number
from .types import NumerikError, SingularSystem, ValidationError

logger = get_logger("cli")

ROW_SEPARATOR_RE = re.compile(r"[;\n]")
ENTRY_SEPARATOR_RE = re.compile(r"[,\s]+")


def parse_vector_text(text: str) -> list[str]:
    """Split one row of matrix text into entries ("1, 2 3/4" -> ["1", "2", "3/4"])."""
    return [entry for entry in ENTRY_SEPARATOR_RE.split(text.strip()) if entry]


def parse_matrix_text(text: str) -> list[list[str]]:
    """Split matrix text into rows of entries; rows are separated by ';' or newlines.

    Raises:
        ValidationError: If the text holds no entries
    """
    rows = [parse_vector_text(row) for row in ROW_SEPARATOR_RE.split(text)]
    rows = [row for row in rows if row]
    if not rows:
        raise ValidationError("Matrix cannot be empty", "EMPTY_INPUT")
    return rows


def _health_check() -> int:
    """Run health check to verify dependencies and basic operations.

    Returns:
        Exit code (0 for success, non-zero for failures)
    """
    checks_passed = 0
    checks_failed = 0

    print("Running Numerik health check...")
    print("-" * 50)

    try:
        print(f"[OK] SymPy {sp.__version__} imported successfully")
        checks_passed += 1
    except AttributeError as e:
        print(f"[FAIL] SymPy check failed: {e}")
        checks_failed += 1

    try:
        value = compile_expression("x^2 - 4")(3)
        if value == 5:
            print("[OK] Expression evaluation works")
            checks_passed += 1
        else:
            print(f"[FAIL] Evaluation failed: expected 5, got {value}")
            checks_failed += 1
    except NumerikError as e:
        print(f"[FAIL] Evaluation check failed: {e}")
        checks_failed += 1

    try:
        result = api.bisect("x^2 - 4", 1, 3, 1e-6)
        if result.converged and abs(result.root - 2) < 1e-6:
            print("[OK] Bisection works")
            checks_passed += 1
        else:
            print(f"[FAIL] Bisection check failed: {result}")
            checks_failed += 1
    except NumerikError as e:
        print(f"[FAIL] Bisection check failed: {e}")
        checks_failed += 1

    try:
        steps = api.eliminate([[0, 1], [2, 3]], [1, 5])
        if steps[-1].is_upper_triangular() and steps[1].rows_swapped is not None:
            print("[OK] Gaussian elimination works")
            checks_passed += 1
        else:
            print(f"[FAIL] Elimination check failed: {steps[-1]}")
            checks_failed += 1
    except NumerikError as e:
        print(f"[FAIL] Elimination check failed: {e}")
        checks_failed += 1

    print("-" * 50)
    print(f"Results: {checks_passed} passed, {checks_failed} failed")

    if checks_failed > 0:
        print("\n[WARN] Some health checks failed. Core functionality may be impaired.")
        return 1

    print("\n[OK] All health checks passed!")
    return 0


def _fixed(value: float | None, precision: int) -> str:
    if value is None:
        return "-"
    return f"{value:.{precision}f}"


def _safe_print(text: str) -> None:
    try:
        print(text)
    except UnicodeEncodeError:
        print(text.encode("ascii", "replace").decode("ascii"))


def _print_augmented(matrix: list[list[str]], constants: list[str]) -> None:
    augmented = sp.Matrix([[sp.Rational(value) for value in row] for row in matrix])
    augmented = augmented.row_join(sp.Matrix([sp.Rational(value) for value in constants]))
    try:
        print(sp.pretty(augmented))
    except UnicodeEncodeError:
        print(sp.pretty(augmented, use_unicode=False))


def print_result_pretty(
    res: dict[str, Any], output_format: str = "human", precision: int = 4
) -> None:
    """Print result in specified format.

    Args:
        res: Result dictionary
        output_format: "json" for JSON output, "human" for human-readable
        precision: Decimal places for interval and iteration tables
    """
    if output_format == "json":
        print(json.dumps(res, indent=2, ensure_ascii=False))
        return
    if not res.get("ok"):
        print("Error:", res.get("error"))
        for step in res.get("steps", []):
            print(f"\nRound k = {step['round']}")
            _print_augmented(step["matrix"], step["constants"])
        return

    typ = res.get("type")
    if "function" in res:
        _safe_print(f"f(x) = {res['function']}")

    if typ == "degree":
        print(f"Degree: {res['degree']}")
        if not res["accepted"]:
            print(f"Rejected: only functions up to degree {res['max_degree']} are accepted")
    elif typ == "brackets":
        intervals = res["intervals"]
        if not intervals:
            print(f"No sign change found in [{res['lower']}, {res['upper']}]")
            return
        print(f"{len(intervals)} interval(s) with a sign change:")
        for index, interval in enumerate(intervals, start=1):
            line = (
                f"  I{index}: [{_fixed(interval['start'], precision)}; "
                f"{_fixed(interval['end'], precision)}]  "
                f"f(a) = {_fixed(interval['f_start'], precision)} | "
                f"f(b) = {_fixed(interval['f_end'], precision)}"
            )
            if "exact_zero_at" in interval:
                line += f"  (near-exact zero at {_fixed(interval['exact_zero_at'], precision)})"
            print(line)
    elif typ == "bisection":
        _print_bisection(res["result"], precision)
    elif typ == "roots":
        estimates = res["estimates"]
        if not estimates:
            print(f"No sign change found in [{res['lower']}, {res['upper']}]")
            return
        for index, estimate in enumerate(estimates, start=1):
            interval = estimate["interval"]
            header = (
                f"I{index}: [{_fixed(interval['start'], precision)}; "
                f"{_fixed(interval['end'], precision)}]"
            )
            if not estimate["ok"]:
                print(f"{header}  Error: {estimate['error']}")
                continue
            result = estimate["result"]
            print(
                f"{header}  x{index} = {format_number(result['root'])} "
                f"({result['status']}, {result['iterations']} iteration(s))"
            )
    elif typ == "elimination":
        for step in res["steps"]:
            if step["pivot"] is None:
                print(f"Round k = {step['round']} (initial system)")
            else:
                print(f"\nRound k = {step['round']}, pivot = {step['pivot']}")
            swap = step["rows_swapped"]
            if swap is not None:
                print(f"Rows {swap['to'] + 1} and {swap['from'] + 1} swapped to avoid a zero pivot")
            _print_augmented(step["matrix"], step["constants"])
            for multiplier in step["multipliers"]:
                row, column = multiplier["row"] + 1, step["pivot_row"] + 1
                print(
                    f"  M{row}{column} = -A({row},{column})/A({column},{column}) "
                    f"= {multiplier['value']}"
                )
        print("\nUpper-triangular form reached.")
        final = res["steps"][-1]["matrix"]
        if any(final[i][i] == "0" for i in range(len(final))):
            print("Zero on the diagonal: the system has no unique solution.")
    else:
        print(res)


def _print_bisection(result: dict[str, Any], precision: int) -> None:
    state = "Converged" if result["converged"] else "Did not converge"
    print(
        f"{state} after {result['iterations']} iteration(s): "
        f"x = {format_number(result['root'])}, |f(x)| = {format_number(result['final_residual'])}"
    )
    headers = ("n", "a", "b", "c", "f(a)", "f(b)", "f(c)", "|b-a|")
    width = precision + 8
    print("  ".join(f"{title:>{width}}" for title in headers))
    for record in result["trace"]:
        cells = [f"{record['index']:>{width}}"] + [
            f"{_fixed(record[key], precision):>{width}}"
            for key in ("a", "b", "midpoint", "fa", "fb", "f_mid", "bracket_width")
        ]
        print("  ".join(cells))


def _run(args: argparse.Namespace) -> dict[str, Any]:
    if args.degree is not None:
        degree = api.classify_degree(args.degree)
        return {
            "ok": True,
            "type": "degree",
            "degree": degree,
            "accepted": 0 <= degree <= args.max_degree,
            "max_degree": args.max_degree,
        }
    if args.scan is not None:
        api.check_degree(args.scan, args.max_degree)
        intervals = api.find_brackets(
            args.scan, args.lower, args.upper, args.step, strict=args.strict
        )
        return {
            "ok": True,
            "type": "brackets",
            "function": compile_expression(args.scan).pretty(),
            "lower": args.lower,
            "upper": args.upper,
            "intervals": [interval.to_dict() for interval in intervals],
        }
    if args.bisect is not None:
        if args.a is None or args.b is None:
            raise ValidationError("--bisect needs both -a and -b", "MISSING_BRACKET")
        result = api.bisect(args.bisect, args.a, args.b, args.tolerance, args.max_iterations)
        return {
            "ok": True,
            "type": "bisection",
            "function": compile_expression(args.bisect).pretty(),
            "result": result.to_dict(),
        }
    if args.roots is not None:
        estimates = api.find_roots(
            args.roots,
            args.lower,
            args.upper,
            args.step,
            args.tolerance,
            args.max_iterations,
            strict=args.strict,
            max_degree=args.max_degree,
        )
        return {
            "ok": True,
            "type": "roots",
            "function": compile_expression(args.roots).pretty(),
            "lower": args.lower,
            "upper": args.upper,
            "estimates": [estimate.to_dict() for estimate in estimates],
        }
    if args.constants is None:
        raise ValidationError("--gauss needs --constants", "MATRIX_SHAPE")
    steps = api.eliminate(
        parse_matrix_text(args.gauss), parse_vector_text(args.constants)
    )
    return {
        "ok": True,
        "type": "elimination",
        "steps": [step.to_dict() for step in steps],
    }


def main_entry(argv: list[str] | None = None) -> int:
    """
    Main entry point for the Numerik CLI.

    Args:
        argv: Optional command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    import numerik_pkg.config as _config

    parser = argparse.ArgumentParser(
        prog="numerik",
        description="Bisection root finding and exact Gaussian elimination",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--degree", type=str, metavar="EXPR", help="Report the polynomial degree")
    mode.add_argument(
        "--scan", type=str, metavar="EXPR", help="Find intervals where f changes sign"
    )
    mode.add_argument(
        "--bisect", type=str, metavar="EXPR", help="Refine a root inside [a, b]"
    )
    mode.add_argument(
        "--roots", type=str, metavar="EXPR", help="Scan, then bisect every interval found"
    )
    mode.add_argument(
        "--gauss",
        type=str,
        metavar="MATRIX",
        help='Triangularize a system, rows separated by ";" (e.g. "2 1; 4 5")',
    )
    parser.add_argument("--constants", type=str, help="Right-hand side for --gauss")
    parser.add_argument("--lower", type=float, help="Scan lower bound (default: -10)")
    parser.add_argument("--upper", type=float, help="Scan upper bound (default: 10)")
    parser.add_argument("--step", type=float, help="Scan step (default: 0.1)")
    parser.add_argument(
        "--strict", action="store_true", help="Also report near-zero samples as intervals"
    )
    parser.add_argument("-a", type=float, help="Left end of the bisection bracket")
    parser.add_argument("-b", type=float, help="Right end of the bisection bracket")
    parser.add_argument("--tolerance", type=float, help="Bisection tolerance (default: 1e-6)")
    parser.add_argument(
        "--max-iterations", type=int, help="Bisection iteration cap (default: 100)"
    )
    parser.add_argument(
        "--max-degree", type=int, help="Highest accepted polynomial degree (default: 5)"
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["json", "human"],
        default="human",
        help="Output format: json (machine-readable) or human (human-readable)",
    )
    parser.add_argument(
        "-p", "--precision", type=int, help="Decimal places in interval and iteration tables"
    )
    parser.add_argument(
        "-v", "--version", action="store_true", help="Show program version"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set logging level (default: NUMERIK_LOG_LEVEL or WARNING)",
    )
    parser.add_argument("--log-file", type=str, help="Write logs to file")
    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Run health check and verify dependencies",
    )
    args = parser.parse_args(argv)

    from .logging_config import setup_logging

    try:
        setup_logging(level=args.log_level, log_file=args.log_file)
    except NumerikError as e:
        print_result_pretty(e.to_dict(), args.format, _config.DISPLAY_PRECISION)
        return 1

    # Apply CLI configuration overrides
    if args.precision is not None and args.precision >= 0:
        _config.DISPLAY_PRECISION = int(args.precision)
    if args.max_degree is None:
        args.max_degree = _config.MAX_DEGREE
    if args.lower is None:
        args.lower = _config.SCAN_LOWER
    if args.upper is None:
        args.upper = _config.SCAN_UPPER

    if args.version:
        print(VERSION)
        return 0
    if args.health_check:
        return _health_check()
    if all(
        getattr(args, name) is None for name in ("degree", "scan", "bisect", "roots", "gauss")
    ):
        parser.print_help()
        return 1

    try:
        res = _run(args)
    except NumerikError as e:
        logger.debug("Request failed: %s (%s)", e, e.code)
        res = e.to_dict()
        if isinstance(e, SingularSystem):
            res["steps"] = [step.to_dict() for step in e.steps]
    print_result_pretty(res, args.format, _config.DISPLAY_PRECISION)
    return 0 if res.get("ok") else 1


if __name__ == "__main__":
    """Allow running the CLI module directly with python -m numerik_pkg.cli"""
    import sys

    sys.exit(main_entry())
