"""
Diagnostic logging for react-compat-check.

All loggers hang off the ``react_compat`` logger and write to stderr, so a
JSON report on stdout is never mixed with log lines. Until
:func:`setup_logging` runs, library loggers get a ``NullHandler``.
"""

from __future__ import annotations

import os
import sys
import logging
import threading
from typing import IO, Optional

from react_compat.constants import (
    LOG_DATE_FORMAT,
    LOG_DEFAULT_FORMAT,
    LOG_VERBOSE_FORMAT,
)

ROOT_LOGGER_NAME = "react_compat"

_LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
_RESET = "\033[0m"

_logging_configured: bool = False
_lock = threading.Lock()


class ColoredFormatter(logging.Formatter):
    """Formatter that paints the level name when stderr is a terminal."""

    def __init__(
        self,
        fmt: str,
        *,
        datefmt: Optional[str] = None,
        use_color: bool = True,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        plain = record.levelname
        color = _LEVEL_COLORS.get(plain) if self.use_color and self._should_use_color() else None
        if color:
            record.levelname = f"{color}{plain}{_RESET}"
        try:
            return super().format(record)
        finally:
            # Other handlers may share the record
            record.levelname = plain

    @staticmethod
    def _should_use_color() -> bool:
        if os.environ.get("NO_COLOR") or os.environ.get("CI"):
            return False
        try:
            return sys.stderr.isatty()
        except (AttributeError, OSError):
            return False


def setup_logging(
    *,
    level: int = logging.INFO,
    verbose: bool = False,
    stream: Optional[IO[str]] = None,
) -> None:
    """Install a single stderr handler on the ``react_compat`` logger.

    Calling it again replaces the previous handler. The logger does not
    propagate, so an application's root handlers never see these records.

    Args:
        level: Minimum level emitted.
        verbose: Include timestamps and logger names.
        stream: Destination, ``sys.stderr`` when omitted.
    """
    global _logging_configured

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        ColoredFormatter(
            LOG_VERBOSE_FORMAT if verbose else LOG_DEFAULT_FORMAT,
            datefmt=LOG_DATE_FORMAT,
            use_color=not os.environ.get("NO_COLOR"),
        )
    )

    with _lock:
        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.handlers.clear()
        root.addHandler(handler)
        root.setLevel(level)
        root.propagate = False
        _logging_configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return ``react_compat.<name>``.

    ``name`` may be relative (``"core.manifest"``) or a module's
    ``__name__``; ``None`` returns the package logger itself.
    """
    if not name or name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        qualified = name or ROOT_LOGGER_NAME
    else:
        qualified = f"{ROOT_LOGGER_NAME}.{name}"

    logger = logging.getLogger(qualified)
    parent = logger.parent
    if not logger.handlers and not (parent and parent.handlers):
        logger.addHandler(logging.NullHandler())
    return logger


def is_logging_configured() -> bool:
    return _logging_configured
