"""
Logging utilities for tagwatch.

tagwatch usually runs as a step inside someone else's build, so its log
lines share a terminal with compiler output. Records are therefore tagged
with the program name and colored only on an interactive stderr. Library
use stays silent until :func:`setup_logging` is called.
"""

from __future__ import annotations

import os
import sys
import logging
import threading
from typing import IO, Optional

from tagwatch.constants import (
    LOG_DATE_FORMAT,
    LOG_DEFAULT_FORMAT,
    LOG_VERBOSE_FORMAT,
)

ROOT_LOGGER_NAME = "tagwatch"

_lock = threading.Lock()


class ColoredFormatter(logging.Formatter):
    """Formatter that prefixes records with ``[tagwatch]`` and colors levels."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: str,
        *,
        datefmt: Optional[str] = None,
        use_color: bool = True,
        tag: str = ROOT_LOGGER_NAME,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color
        self.tag = tag

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if self.use_color and self._should_use_color():
            color = self.COLORS.get(levelname)
            if color:
                record.levelname = f"{color}{levelname}{self.RESET}"
        try:
            return f"[{self.tag}] {super().format(record)}"
        finally:
            # Other handlers must see the uncolored level name
            record.levelname = levelname

    @staticmethod
    def _should_use_color() -> bool:
        """Determine whether ANSI colors should be emitted."""
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
    """Install a single stderr handler on the ``tagwatch`` logger.

    Safe to call repeatedly; earlier handlers are replaced.

    Args:
        level: Logging level (e.g., ``logging.INFO``, ``logging.DEBUG``).
        verbose: Include timestamps and logger names.
        stream: Output stream; defaults to ``sys.stderr``.
    """
    with _lock:
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.setLevel(level)

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(
            ColoredFormatter(
                LOG_VERBOSE_FORMAT if verbose else LOG_DEFAULT_FORMAT,
                datefmt=LOG_DATE_FORMAT,
                use_color=not os.environ.get("NO_COLOR"),
            )
        )

        root_logger.addHandler(handler)
        root_logger.propagate = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the ``tagwatch`` hierarchy.

    ``get_logger("probe")`` and ``get_logger("tagwatch.probe")`` return the
    same logger.
    """
    if not name or name == ROOT_LOGGER_NAME:
        logger = logging.getLogger(ROOT_LOGGER_NAME)
    elif name.startswith(f"{ROOT_LOGGER_NAME}."):
        logger = logging.getLogger(name)
    else:
        logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")

    if not logger.handlers and (not logger.parent or not logger.parent.handlers):
        logger.addHandler(logging.NullHandler())

    return logger

