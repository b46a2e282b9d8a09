"""Logging configuration for ganttkit."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOGGER_NAME = "ganttkit"

# Verbosity level constants for external use
VERBOSITY_SILENT = 0  # Only errors
VERBOSITY_WARNINGS = 1  # Rejected edges, invalid splits
VERBOSITY_INFO = 2  # Commits and cascades
VERBOSITY_DEBUG = 3  # Full algorithm details

_LEVEL_MAP = {
    VERBOSITY_SILENT: logging.ERROR,
    VERBOSITY_WARNINGS: logging.WARNING,
    VERBOSITY_INFO: logging.INFO,
    VERBOSITY_DEBUG: logging.DEBUG,
}


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the package logger, or a child of it when *name* is given."""
    if name:
        return logging.getLogger(f"{LOGGER_NAME}.{name}")
    return logging.getLogger(LOGGER_NAME)


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Configure the ganttkit logger with a verbosity level.

    Can be called multiple times to reconfigure the logger.

    Args:
        verbosity: 0=errors only, 1=warnings, 2=info, 3=debug
        stream: Optional output stream (defaults to sys.stderr, useful for testing)
    """
    logger = get_logger()
    logger.handlers.clear()
    level = _LEVEL_MAP.get(min(max(verbosity, 0), VERBOSITY_DEBUG), logging.ERROR)
    logger.setLevel(level)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False


def reset_logger() -> None:
    """Reset the logger to a clean state (used by tests)."""
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
