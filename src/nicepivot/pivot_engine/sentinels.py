"""Sentinel conventions for the pivot engine.

Single source of truth for placeholder labels and the "missing value" rule
so the builder, the demographic cross-tab and the adapters stay consistent.
Adding a sentinel for a new row field is a data change to ROW_SENTINELS.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import pandas as pd

# Generic row sentinel; the only label forced to the end of PivotTable.rows.
UNKNOWN_LABEL = "Unknown"

# Age bucket for patients that cannot be placed in any requested bucket.
NO_DATA_BUCKET = "No Data Available"

# Row field -> placeholder label for records with no usable row value.
ROW_SENTINELS: dict[str, str] = {
    "symptom_segment": "Unspecified Symptom",
    "diagnosis": "Unclassified Diagnosis",
    "diagnostic_category": "Other Category",
}

# String spellings that mean "no value" when they leak out of serialized data.
MISSING_STRINGS = frozenset({"null", "undefined"})


def is_missing(value: Any) -> bool:
    """True if value carries no usable data.

    None, NaN/NaT, empty or whitespace-only strings, and the literal
    strings "null"/"undefined" are missing. False and 0 are values.
    """
    if value is None:
        return True
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return True
    if isinstance(value, str):
        text = value.strip()
        return not text or text in MISSING_STRINGS
    return False


def row_sentinel(
    row_field: str,
    sentinels: Optional[Mapping[str, str]] = None,
    default: str = UNKNOWN_LABEL,
) -> str:
    """Placeholder label for a missing value of row_field."""
    table = ROW_SENTINELS if sentinels is None else sentinels
    return table.get(row_field, default)
