"""Structured logging configuration for Numerik.

All loggers live under the ``numerik`` hierarchy. Solver traces are logged
at DEBUG, so the default level keeps them quiet; ``NUMERIK_LOG_LEVEL`` or the
``--log-level`` flag turns them on.
"""

import logging
import sys
from datetime import datetime
from typing import Optional

from . import config
from .types import ValidationError

ROOT_LOGGER = "numerik"
LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class StructuredFormatter(logging.Formatter):
    """Formatter that outputs structured log entries with timestamp, module, level, and message."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).isoformat()
        return f"{timestamp} [{record.levelname}] {record.name}: {record.getMessage()}"


def resolve_level(level: Optional[str] = None) -> int:
    """Map a level name to its logging constant.

    ``None`` falls back to ``config.LOG_LEVEL``. Unknown names raise
    ValidationError instead of silently logging at some other level.
    """
    name = (level if level is not None else config.LOG_LEVEL).strip().upper()
    if name not in LEVELS:
        raise ValidationError(
            f"Unknown log level '{name}'; expected one of {', '.join(LEVELS)}",
            "INVALID_LOG_LEVEL",
        )
    return getattr(logging, name)


def setup_logging(
    level: Optional[str] = None, log_file: Optional[str] = None
) -> logging.Logger:
    """Set up structured logging for the application.

    Args:
        level: Logging level name; defaults to ``config.LOG_LEVEL``
        log_file: Optional file path that receives every record at ``level``.
            The console then only shows warnings and errors, so stderr stays
            readable next to JSON output on stdout.

    Returns:
        Configured root logger of the numerik hierarchy

    Raises:
        ValidationError: If the level name is not a known logging level.
    """
    resolved = resolve_level(level)
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(resolved)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(StructuredFormatter())
    if log_file:
        console_handler.setLevel(max(resolved, logging.WARNING))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger in the numerik hierarchy.

    Args:
        name: Short component name (``"scanner"``) or a module ``__name__``
            inside the package; ``None`` returns the hierarchy root.
    """
    if not name:
        return logging.getLogger(ROOT_LOGGER)
    short = name.split(".")[-1] if name.startswith("numerik_pkg.") else name
    return logging.getLogger(f"{ROOT_LOGGER}.{short}")
