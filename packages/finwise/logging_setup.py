"""Logging configuration for ``finwise``.

- ``configure_logging(...)``: attach one ``StreamHandler`` to the ``finwise``
  package logger. Entrypoints (the CLI) call it once at startup.
- ``get_logger(name)``: what library modules use. Until configuration runs,
  the package logger carries a ``NullHandler`` so embedding applications see
  no "No handler" warnings.

Library modules never attach handlers of their own.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "finwise"
_ENV_LEVEL = "FINWISE_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_configured = False


def resolve_level(level: int | str | None = None) -> int:
    """Map ``level`` (or ``$FINWISE_LOG_LEVEL`` when ``None``) to a logging int.

    Accepts ints, numeric strings, and level names in any case. Unknown names
    fall back to ``INFO``.
    """

    if level is None:
        level = os.getenv(_ENV_LEVEL)
    if isinstance(level, int):
        return level
    if isinstance(level, str) and level.strip():
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        numeric = logging.getLevelName(name)
        if isinstance(numeric, int):
            return numeric
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Configure the package logger once; later calls are no-ops."""

    global _configured
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _configured:
        return logger

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = resolve_level(level)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False

    _configured = True
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return ``logging.getLogger(name)`` with a silent default for library use."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _configured and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "resolve_level"]
