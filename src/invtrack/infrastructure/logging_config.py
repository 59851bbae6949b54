"""Logging setup for the ``invtrack`` logger hierarchy.

Modules only ever call ``logging.getLogger(__name__)``; the entry point
decides where records go by calling ``configure_logging`` once.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from invtrack.infrastructure.config import DEFAULT_LOG_FORMAT

_LOGGER_NAME = "invtrack"
_HANDLER_NAME = "invtrack-console"


def configure_logging(
    level: str | int = logging.WARNING,
    fmt: str = DEFAULT_LOG_FORMAT,
    stream: Any = None,
) -> logging.Logger:
    """Install one stream handler on the ``invtrack`` logger (idempotent).

    Calling it again replaces the handler, so the latest level, format
    and stream win.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level!r}")
        level = resolved

    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    for existing in list(logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logger.removeHandler(existing)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)
    return logger
