"""Date canonicalization for pivot table columns.

Observation dates arrive as ISO-8601 timestamps, ``M/D/YYYY``, ``M/D/YY``
or ``YYYY-MM-DD`` strings (and, from pandas sources, as date objects).
Every recognized value is rendered as ``M/D/YY`` so that the same calendar
day always lands in the same pivot column.

Values that match none of the recognized formats are passed through as
strings and flagged as unparsed. They never raise; a warning goes to the
caller's logger and the pivot keeps going. Unparsed columns sort after
every parsed date.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

import pandas as pd

from nicepivot.utils.logging import get_logger

logger = get_logger(__name__)

_MDY_LONG = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_MDY_SHORT = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2})$")
_YMD = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_ISO_TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2}T")


@dataclass(frozen=True)
class CanonicalDate:
    """A column label plus the calendar date it was parsed from.

    Attributes:
        display: ``M/D/YY`` for parsed dates, else the raw value as a string.
        parsed: The calendar date, or None if the raw value was not recognized.
    """
    display: str
    parsed: Optional[date] = None

    @property
    def is_parsed(self) -> bool:
        return self.parsed is not None


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_date(raw: Any) -> Optional[date]:
    """Parse a raw date value into a calendar date.

    Recognized, in order:
        1. ISO-8601 timestamps with a ``T`` time component. The calendar
           date as written is kept; no timezone conversion is applied.
        2. ``M/D/YYYY``
        3. ``M/D/YY`` (year 2000 + YY)
        4. ``YYYY-MM-DD``

    date/datetime/pandas.Timestamp values are accepted as-is.

    Returns:
        The parsed date, or None if raw is not a recognized date.
    """
    if raw is pd.NaT:
        return None
    if isinstance(raw, pd.Timestamp):
        return raw.date()
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str):
        return None

    text = raw.strip()
    if _ISO_TIMESTAMP.match(text):
        try:
            ts = pd.Timestamp(text)
        except (ValueError, TypeError, OverflowError):
            return None
        if pd.isna(ts):
            return None
        return date(ts.year, ts.month, ts.day)

    m = _MDY_LONG.match(text)
    if m:
        month, day, year = (int(g) for g in m.groups())
        return _safe_date(year, month, day)

    m = _MDY_SHORT.match(text)
    if m:
        month, day, year = (int(g) for g in m.groups())
        return _safe_date(2000 + year, month, day)

    m = _YMD.match(text)
    if m:
        year, month, day = (int(g) for g in m.groups())
        return _safe_date(year, month, day)

    return None


def has_two_digit_year(raw: Any) -> bool:
    """True if raw is an ``M/D/YY`` string (century assumed by parse_date)."""
    return isinstance(raw, str) and _MDY_SHORT.match(raw.strip()) is not None


def format_display_date(d: date) -> str:
    """Render a date as ``M/D/YY`` (no zero padding on month/day)."""
    return f"{d.month}/{d.day}/{d.year % 100:02d}"


def canonicalize(raw: Any, *, logger: Optional[logging.Logger] = None) -> CanonicalDate:
    """Canonicalize a raw date value into a pivot column label.

    Args:
        raw: Raw date value from a record.
        logger: Diagnostic sink for unparsed values. Defaults to this
            module's logger.

    Returns:
        CanonicalDate with display ``M/D/YY`` when parsed, else the raw
        value as a string with parsed=None.
    """
    parsed = parse_date(raw)
    if parsed is None:
        (logger or get_logger(__name__)).warning(f"Invalid date found: {raw!r}, using as-is")
        return CanonicalDate(display=str(raw))
    return CanonicalDate(display=format_display_date(parsed), parsed=parsed)


def column_sort_key(column: CanonicalDate) -> tuple[int, int, str]:
    """Sort key placing parsed dates chronologically, then unparsed labels.

    Ties between parsed dates (which share one display label anyway) fall
    back to the label text, so the order is total and deterministic.
    """
    if column.parsed is not None:
        return (0, column.parsed.toordinal(), column.display)
    return (1, 0, column.display)