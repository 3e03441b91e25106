"""Logger setup for nicepivot.

The engine never raises on bad data; it logs instead. Unparseable dates,
skipped non-mapping records and row/column fields that resolved for no
record are reported on loggers under "nicepivot" (one per module, via
get_logger(__name__)). Engine functions also take a ``logger`` argument
that replaces the module logger for that call.

nicepivot modules only ask for loggers. Handlers are the application's
job: the package root adds a NullHandler, and the demo app calls
configure_logging(), which attaches one stderr handler to the "nicepivot"
logger (never the root logger). Set NICEPIVOT_LOG_LEVEL to change the
default level, e.g. ``NICEPIVOT_LOG_LEVEL=DEBUG`` to see per-bucket
patient counts from the demographic cross-tab.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Union

# Default format for nicepivot logs
DEFAULT_FMT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d:%(funcName)s: %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"

LOG_LEVEL_ENV_VAR = "NICEPIVOT_LOG_LEVEL"
ROOT_LOGGER_NAME = "nicepivot"


def _resolve_level(level: Optional[Union[str, int]]) -> int:
    # env vars arrive as strings: "debug", "DEBUG" and "10" all work;
    # anything unrecognized falls back to INFO
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV_VAR, "INFO")
    if isinstance(level, int):
        return level
    text = level.strip()
    if text.isdigit():
        return int(text)
    return getattr(logging, text.upper(), logging.INFO)


def configure_logging(
    level: Optional[Union[str, int]] = None,
    *,
    fmt: Optional[str] = None,
    datefmt: Optional[str] = None,
    force: bool = False,
) -> logging.Logger:
    """
    Send nicepivot log records to stderr (the "nicepivot" logger only, never root).

    Parameters
    ----------
    level:
        Level name or number. Defaults to NICEPIVOT_LOG_LEVEL, else INFO.
    fmt:
        Record format. Defaults to DEFAULT_FMT.
    datefmt:
        Timestamp format. Defaults to DEFAULT_DATEFMT.
    force:
        Drop the logger's existing handlers first. Without it, a second call
        only updates the level when a stderr handler is already attached.

    Returns
    -------
    The configured "nicepivot" logger.
    """
    resolved = _resolve_level(level)
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(resolved)

    if force:
        for h in logger.handlers[:]:
            h.close()
            logger.removeHandler(h)

    for h in logger.handlers:
        if isinstance(h, logging.StreamHandler) and h.stream is sys.stderr:
            h.setLevel(resolved)
            return logger

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(resolved)
    console.setFormatter(logging.Formatter(fmt=fmt or DEFAULT_FMT, datefmt=datefmt or DEFAULT_DATEFMT))
    logger.addHandler(console)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger for name (use __name__), or the "nicepivot" logger if name is None."""
    return logging.getLogger(ROOT_LOGGER_NAME if name is None else name)
