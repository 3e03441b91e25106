"""Demographic cross-tab: HRSN indicators by age-range bucket.

Unlike the event-based pivot builder, this works on one flat record per
patient. For each (indicator, age bucket) pair it reports the percentage of
patients in the bucket for whom the indicator is affirmative.

Indicator evaluation depends on the field's type (FIELD_TYPES):
    BOOLEAN      affirmative when the value is True or the string "Yes"
                 (case-insensitive), e.g. housing_insecurity.
    DEMOGRAPHIC  affirmative for any non-missing value, e.g. gender, race
                 (tabulated for coverage, not for a yes/no answer).
    UNKNOWN      never affirmative.

Each patient lands in exactly one bucket, taken from the first usable of:
an ``age_range`` field, a numeric ``age`` banded by AGE_BANDS, or an age
computed from ``date_of_birth``. Anything else goes to "No Data Available",
which is always a column.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional, Sequence

import numpy as np
import pandas as pd

from nicepivot.pivot_engine.date_canonicalizer import has_two_digit_year, parse_date
from nicepivot.pivot_engine.field_resolver import resolve
from nicepivot.pivot_engine.pivot_builder import as_record_list
from nicepivot.pivot_engine.sentinels import NO_DATA_BUCKET, is_missing
from nicepivot.utils.logging import get_logger

logger = get_logger(__name__)

AGE_RANGE_FIELD = "age_range"
AGE_FIELD = "age"
BIRTH_DATE_FIELD = "date_of_birth"

_BUCKET_COL = "__age_bucket__"


class FieldType(Enum):
    """How an indicator field is evaluated."""
    BOOLEAN = "boolean"
    DEMOGRAPHIC = "demographic"
    UNKNOWN = "unknown"


FIELD_TYPES: dict[str, FieldType] = {
    # yes/no indicators
    "housing_insecurity": FieldType.BOOLEAN,
    "food_insecurity": FieldType.BOOLEAN,
    "veteran_status": FieldType.BOOLEAN,
    "access_to_transportation": FieldType.BOOLEAN,
    "has_a_car": FieldType.BOOLEAN,
    # categorical fields counted for presence
    "gender": FieldType.DEMOGRAPHIC,
    "race": FieldType.DEMOGRAPHIC,
    "ethnicity": FieldType.DEMOGRAPHIC,
    "financial_status": FieldType.DEMOGRAPHIC,
    "education_level": FieldType.DEMOGRAPHIC,
    "zip_code": FieldType.DEMOGRAPHIC,
    "transportation": FieldType.DEMOGRAPHIC,
    "age_range": FieldType.DEMOGRAPHIC,
}

# (min_age, max_age inclusive or None, label)
AGE_BANDS: tuple[tuple[int, Optional[int], str], ...] = (
    (0, 17, "Under 18"),
    (18, 25, "18-25"),
    (26, 35, "26-35"),
    (36, 50, "36-50"),
    (51, 65, "51-65"),
    (66, None, "65+"),
)

# Pre-bucketed ranges from older exports -> current bucket labels.
LEGACY_AGE_RANGES: dict[str, str] = {
    "18-29": "18-25",
    "30-39": "26-35",
    "40-49": "36-50",
    "50-64": "51-65",
}


@dataclass(frozen=True)
class DemographicCrossTab:
    """Indicator x age-bucket percentages.

    Attributes:
        rows: Indicator field names, in the requested order.
        columns: Age buckets, in the requested order, "No Data Available" last
            unless the caller placed it.
        data: row -> column -> percentage of the bucket (one decimal).
        max_value: Largest percentage in data (for color scales).
        total_records: Number of patient records grouped.
        counts: row -> column -> number of affirmative patients.
        bucket_sizes: column -> number of patients in the bucket.
    """
    rows: tuple[str, ...]
    columns: tuple[str, ...]
    data: dict[str, dict[str, float]] = field(default_factory=dict)
    max_value: float = 0.0
    total_records: int = 0
    counts: dict[str, dict[str, int]] = field(default_factory=dict)
    bucket_sizes: dict[str, int] = field(default_factory=dict)

    def percentage(self, row: str, column: str) -> float:
        return self.data.get(row, {}).get(column, 0.0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rows": list(self.rows),
            "columns": list(self.columns),
            "data": {r: dict(cols) for r, cols in self.data.items()},
            "maxValue": self.max_value,
            "totalRecords": self.total_records,
        }

    def to_dataframe(self) -> pd.DataFrame:
        """Percentages as an indicators x buckets DataFrame."""
        return pd.DataFrame(
            [[self.percentage(r, c) for c in self.columns] for r in self.rows],
            index=pd.Index(list(self.rows), name="indicator"),
            columns=list(self.columns),
            dtype="float64",
        )


def is_affirmative(field_type: FieldType, value: Any) -> bool:
    """True if value counts toward the indicator for this field type."""
    if field_type is FieldType.BOOLEAN:
        if isinstance(value, (bool, np.bool_)):
            return bool(value)
        return isinstance(value, str) and value.strip().casefold() == "yes"
    if field_type is FieldType.DEMOGRAPHIC:
        return not is_missing(value)
    return False


def _parse_age(raw: Any) -> Optional[int]:
    if is_missing(raw) or isinstance(raw, (bool, np.bool_)):
        return None
    try:
        age = int(float(raw))
    except (TypeError, ValueError, OverflowError):
        return None
    return age if age >= 0 else None


def age_from_birth_date(raw: Any, today: date) -> Optional[int]:
    """Whole years between a birth date and today, or None if unusable.

    One year is subtracted when this year's birthday has not happened yet.
    A two-digit year that would put the birth after today is read as the
    previous century ("3/4/55" is 1955).
    """
    born = parse_date(raw)
    if born is None:
        return None
    if born > today and has_two_digit_year(raw):
        try:
            born = born.replace(year=born.year - 100)
        except ValueError:
            return None
    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    return age if age >= 0 else None


def age_band(
    age: int,
    bands: Sequence[tuple[int, Optional[int], str]] = AGE_BANDS,
) -> Optional[str]:
    """Label of the band containing age, or None."""
    for lo, hi, label in bands:
        if age >= lo and (hi is None or age <= hi):
            return label
    return None


def assign_age_bucket(
    patient: Mapping[str, Any],
    buckets: Sequence[str],
    *,
    today: date,
    synonyms: Optional[Mapping[str, tuple[str, ...]]] = None,
    bands: Sequence[tuple[int, Optional[int], str]] = AGE_BANDS,
) -> str:
    """Place one patient into one of buckets, or NO_DATA_BUCKET."""
    bucket_set = set(buckets)

    raw_range = resolve(patient, AGE_RANGE_FIELD, synonyms)
    if not is_missing(raw_range):
        label = str(raw_range).strip()
        if label in bucket_set:
            return label
        if LEGACY_AGE_RANGES.get(label) in bucket_set:
            return LEGACY_AGE_RANGES[label]

    age = _parse_age(resolve(patient, AGE_FIELD, synonyms))
    if age is None:
        age = age_from_birth_date(resolve(patient, BIRTH_DATE_FIELD, synonyms), today)
    if age is not None:
        label = age_band(age, bands)
        if label in bucket_set:
            return label

    return NO_DATA_BUCKET


def _half_up_one_decimal(values: pd.DataFrame) -> pd.DataFrame:
    return np.floor(values * 10 + 0.5) / 10


def build_demographic_crosstab(
    patient_records: Any,
    indicator_fields: Sequence[str],
    age_range_buckets: Sequence[str],
    *,
    today: Optional[date] = None,
    field_types: Optional[Mapping[str, FieldType]] = None,
    synonyms: Optional[Mapping[str, tuple[str, ...]]] = None,
    bands: Sequence[tuple[int, Optional[int], str]] = AGE_BANDS,
    logger: Optional[logging.Logger] = None,
) -> DemographicCrossTab:
    """Percentage of each age bucket affirmative for each indicator.

    Args:
        patient_records: Iterable of patient mappings (or a DataFrame).
        indicator_fields: Indicator field names; become the rows.
        age_range_buckets: Bucket labels; become the columns. "No Data
            Available" is appended if absent.
        today: Reference date for birth-date ages; defaults to date.today().
        field_types: Field -> FieldType table; defaults to FIELD_TYPES.
        synonyms: Alias table for the field resolver.
        bands: Age bands used for raw and computed ages.
        logger: Diagnostic sink; defaults to this module's logger.

    Returns:
        A new DemographicCrossTab. Percentages are
        ``round_half_up(affirmative / bucket_size * 100, 1)``, and 0.0 for
        empty buckets.

    Raises:
        TypeError: If patient_records is not an iterable collection of records.
    """
    log = logger or get_logger(__name__)
    types = FIELD_TYPES if field_types is None else field_types
    today = today or date.today()

    rows = tuple(dict.fromkeys(str(f) for f in indicator_fields))
    columns = list(dict.fromkeys(str(b) for b in age_range_buckets))
    if NO_DATA_BUCKET not in columns:
        columns.append(NO_DATA_BUCKET)
    columns_t = tuple(columns)

    items = as_record_list(patient_records)
    patients = [p for p in items if isinstance(p, Mapping)]
    if len(patients) != len(items):
        log.warning(f"Skipping {len(items) - len(patients)} non-mapping patient records")

    for f in rows:
        if types.get(f, FieldType.UNKNOWN) is FieldType.UNKNOWN:
            log.debug(f"Indicator {f!r} has no field type; it is never counted as affirmative")

    log.info(f"Creating demographic cross-tab with {len(patients)} patient records")

    if not patients:
        zeros = {r: {c: 0.0 for c in columns_t} for r in rows}
        return DemographicCrossTab(
            rows=rows,
            columns=columns_t,
            data=zeros,
            counts={r: {c: 0 for c in columns_t} for r in rows},
            bucket_sizes={c: 0 for c in columns_t},
        )

    frame = pd.DataFrame({
        _BUCKET_COL: [
            assign_age_bucket(p, columns_t, today=today, synonyms=synonyms, bands=bands)
            for p in patients
        ],
        **{
            f: [is_affirmative(types.get(f, FieldType.UNKNOWN), resolve(p, f, synonyms)) for p in patients]
            for f in rows
        },
    })

    sizes = frame[_BUCKET_COL].value_counts().reindex(columns_t, fill_value=0)
    for bucket, n in sizes.items():
        log.debug(f"age_range {bucket}: {n} patients")

    counts = (
        frame.groupby(_BUCKET_COL)[list(rows)].sum().reindex(columns_t, fill_value=0).astype("int64")
        if rows else pd.DataFrame(index=list(columns_t))
    )
    pct = counts.div(sizes.replace(0, np.nan), axis=0).mul(100).fillna(0.0)
    pct = _half_up_one_decimal(pct)

    data = {r: {c: float(pct.at[c, r]) for c in columns_t} for r in rows}
    max_value = float(pct.to_numpy().max()) if pct.size else 0.0

    return DemographicCrossTab(
        rows=rows,
        columns=columns_t,
        data=data,
        max_value=max_value,
        total_records=len(patients),
        counts={r: {c: int(counts.at[c, r]) for c in columns_t} for r in rows},
        bucket_sizes={c: int(n) for c, n in sizes.items()},
    )
