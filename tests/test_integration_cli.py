"""Integration tests for CLI functionality."""

import json
import subprocess
import sys

import pytest

from numerik_pkg.cli import main_entry, parse_matrix_text, parse_vector_text
from numerik_pkg.types import ValidationError


def _run_cli(*args, timeout=30):
    return subprocess.run(
        [sys.executable, "-m", "numerik_pkg.cli", *args],
        capture_output=True,
        text=True,
        timeout=timeout,
    )


def test_cli_version():
    """Test --version flag."""
    result = _run_cli("--version", timeout=10)
    assert result.returncode == 0
    assert result.stdout.strip() != ""


def test_cli_health_check():
    """Test --health-check command."""
    result = _run_cli("--health-check")
    assert result.returncode == 0
    assert "health check" in result.stdout.lower()
    assert "[FAIL]" not in result.stdout


def test_cli_package_entry():
    """Test running the package itself with python -m."""
    result = subprocess.run(
        [sys.executable, "-m", "numerik_pkg", "--degree", "x^3-9x+3"],
        capture_output=True,
        text=True,
        timeout=10,
    )
    assert result.returncode == 0
    assert "Degree: 3" in result.stdout


def test_cli_roots_json():
    """Test root finding with JSON output."""
    result = _run_cli("--roots", "x^2-4", "--format", "json")
    assert result.returncode == 0
    data = json.loads(result.stdout)
    assert data["ok"] is True
    assert data["type"] == "roots"
    roots = [estimate["result"]["root"] for estimate in data["estimates"]]
    assert roots == pytest.approx([-2.0, 2.0], abs=1e-6)


def test_cli_scan_human():
    """Test interval scan with human output."""
    result = _run_cli("--scan", "x^3-9x+3")
    assert result.returncode == 0
    assert "3 interval(s)" in result.stdout
    assert "I1: [-3.2000; -3.1000]" in result.stdout


def test_cli_scan_rejects_high_degree():
    result = _run_cli("--scan", "x^7")
    assert result.returncode == 1
    assert "Error:" in result.stdout


def test_cli_bisect_human():
    result = _run_cli("--bisect", "x^2-4", "-a", "1", "-b", "3")
    assert result.returncode == 0
    assert "Converged after 1 iteration(s)" in result.stdout
    assert "x = 2" in result.stdout


def test_cli_bisect_negative_bound():
    result = _run_cli("--bisect", "x^2-4", "-a", "-3", "-b", "0", "--format", "json")
    assert result.returncode == 0
    data = json.loads(result.stdout)
    assert data["result"]["root"] == pytest.approx(-2.0, abs=1e-6)


def test_cli_bisect_not_a_bracket_json():
    result = _run_cli("--bisect", "x^2+1", "-a", "-1", "-b", "1", "--format", "json")
    assert result.returncode == 1
    data = json.loads(result.stdout)
    assert data == {"ok": False, "error": data["error"], "code": "NOT_A_BRACKET"}


def test_cli_gauss_json():
    result = _run_cli("--gauss", "0 1; 2 3", "--constants", "1 5", "--format", "json")
    assert result.returncode == 0
    data = json.loads(result.stdout)
    assert data["type"] == "elimination"
    assert data["steps"][0]["matrix"] == [["0", "1"], ["2", "3"]]
    assert data["steps"][1]["rows_swapped"] == {"from": 1, "to": 0}
    assert data["steps"][1]["matrix"] == [["2", "3"], ["0", "1"]]


def test_cli_gauss_human():
    result = _run_cli("--gauss", "2 1 -1; -3 -1 2; -2 1 2", "--constants", "8 -11 -3")
    assert result.returncode == 0
    assert "M21 = -A(2,1)/A(1,1) = 3/2" in result.stdout
    assert "M32 = -A(3,2)/A(2,2) = -4" in result.stdout


def test_cli_gauss_singular():
    result = _run_cli("--gauss", "1 1 1; 1 1 2; 2 2 0", "--constants", "1 2 3", "--format", "json")
    assert result.returncode == 1
    data = json.loads(result.stdout)
    assert data["code"] == "SINGULAR_SYSTEM"
    assert len(data["steps"]) == 2


def test_cli_gauss_dependent_rows_human():
    result = _run_cli("--gauss", "1 2; 2 4", "--constants", "3 6")
    assert result.returncode == 0
    assert "no unique solution" in result.stdout


def test_main_entry_without_mode(capsys):
    assert main_entry([]) == 1
    assert "usage" in capsys.readouterr().out.lower()


def test_main_entry_bisect_needs_bounds(capsys):
    assert main_entry(["--bisect", "x^2-4", "-a", "1"]) == 1
    assert "Error:" in capsys.readouterr().out


class TestMatrixText:
    """Test the matrix and vector text parsers."""

    def test_rows_and_entries(self):
        assert parse_matrix_text("1 2; 3/4, 0.5") == [["1", "2"], ["3/4", "0.5"]]
        assert parse_matrix_text("1 2\n3 4\n") == [["1", "2"], ["3", "4"]]

    def test_vector(self):
        assert parse_vector_text(" 1, -2  3 ") == ["1", "-2", "3"]

    def test_empty(self):
        with pytest.raises(ValidationError):
            parse_matrix_text(" ; ")
