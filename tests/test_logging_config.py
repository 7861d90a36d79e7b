"""Tests for the numerik logging setup."""

import logging

import pytest

from numerik_pkg import config
from numerik_pkg.cli import main_entry
from numerik_pkg.logging_config import get_logger, resolve_level, setup_logging
from numerik_pkg.types import ValidationError


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger("numerik")
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


class TestLevels:
    def test_default_comes_from_config(self, monkeypatch):
        monkeypatch.setattr(config, "LOG_LEVEL", "debug")
        assert setup_logging().level == logging.DEBUG

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setattr(config, "LOG_LEVEL", "DEBUG")
        assert setup_logging("error").level == logging.ERROR

    def test_unknown_level_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            resolve_level("LOUD")
        assert exc_info.value.code == "INVALID_LOG_LEVEL"

    def test_cli_reports_bad_environment_level(self, monkeypatch, capsys):
        monkeypatch.setattr(config, "LOG_LEVEL", "LOUD")
        assert main_entry(["--degree", "x^2"]) == 1
        assert "Error:" in capsys.readouterr().out


class TestHandlers:
    def test_file_receives_structured_records(self, tmp_path):
        log_file = tmp_path / "numerik.log"
        setup_logging("INFO", log_file=str(log_file))
        get_logger("scanner").info("found %d interval(s)", 3)
        get_logger("scanner").debug("hidden")
        text = log_file.read_text()
        assert "[INFO] numerik.scanner: found 3 interval(s)" in text
        assert "hidden" not in text

    def test_console_quiet_when_logging_to_file(self, tmp_path):
        logger = setup_logging("DEBUG", log_file=str(tmp_path / "numerik.log"))
        console, file_handler = logger.handlers
        assert console.level == logging.WARNING
        assert file_handler.level == logging.NOTSET

    def test_repeated_setup_replaces_handlers(self):
        setup_logging("INFO")
        logger = setup_logging("INFO")
        assert len(logger.handlers) == 1


class TestNames:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("scanner", "numerik.scanner"),
            ("numerik_pkg.gauss", "numerik.gauss"),
            (None, "numerik"),
        ],
    )
    def test_logger_names(self, name, expected):
        assert get_logger(name).name == expected
