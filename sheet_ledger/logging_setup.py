"""Log output for the sheet-ledger command line.

Library modules log through ``logging.getLogger(__name__)`` and never touch
handlers. The CLI picks a level from its ``-q``/``-v`` flags (or the
``SHEET_LEDGER_LOG_LEVEL`` environment variable) and calls
``configure_logging``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

LOGGER_NAME = "sheet_ledger"
LEVEL_ENV_VAR = "SHEET_LEDGER_LOG_LEVEL"
PLAIN_FORMAT = "%(levelname)s: %(message)s"
DEBUG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_handler: logging.Handler | None = None


def level_from_env(default: int = logging.WARNING) -> int:
    value = os.getenv(LEVEL_ENV_VAR, "").strip().upper()
    if not value:
        return default
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value)
    return level if isinstance(level, int) else default


def level_for_flags(quiet: bool = False, verbose: bool = False) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    return level_from_env()


def configure_logging(level: int, stream: IO[str] | None = None) -> logging.Handler:
    """Send package logs at ``level`` and above to ``stream`` (stderr by default).

    A later call replaces the handler of an earlier one, so running the CLI
    several times in one process never duplicates lines.
    """
    global _handler

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if handler is _handler or isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)

    _handler = logging.StreamHandler(stream or sys.stderr)
    _handler.setFormatter(logging.Formatter(DEBUG_FORMAT if level <= logging.DEBUG else PLAIN_FORMAT))
    logger.addHandler(_handler)
    logger.setLevel(level)
    logger.propagate = False
    return _handler
