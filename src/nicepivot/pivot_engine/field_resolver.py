"""Logical field resolution over loosely-typed records.

Observation and patient records arrive with whatever key spelling the
upstream export used (snake_case from the database, camelCase from JSON
APIs, older column names from legacy uploads). ``resolve()`` maps a logical
field name onto a record using one explicit alias table, SYNONYMS, so the
set of recognized spellings is finite and inspectable.

Rules:
    - The logical key itself is tried first.
    - Then the aliases listed for it in SYNONYMS, in declaration order;
      the first alias present on the record wins.
    - Aliases are one level deep: an alias is never looked up in SYNONYMS.
    - A key present with value None counts as absent, as does NaN/NaT
      (pandas fills keys a record lacked that way in a DataFrame).
    - Absence is returned as None; resolve() never raises.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Optional

import pandas as pd

# Logical fields read by the pivot builder and the demographic cross-tab.
_ENGINE_FIELDS = (
    "symptom_segment",
    "symptom_id",
    "diagnosis",
    "diagnostic_category",
    "diagnosis_icd10_code",
    "symp_prob",
    "zcode_hrsn",
    "dos_date",
    "mention_id",
    "patient_id",
    "age_range",
    "date_of_birth",
    "housing_insecurity",
    "food_insecurity",
    "veteran_status",
    "access_to_transportation",
    "has_a_car",
    "financial_status",
    "education_level",
    "zip_code",
    "utilities_insecurity",
)

# Legacy column names, tried after the camelCase spelling.
_LEGACY_ALIASES: dict[str, tuple[str, ...]] = {
    "ZCode_HRSN": ("zCodeHrsn", "zcode_hrsn"),
    "age_range": ("ageRange",),
    "date_of_birth": ("dateOfBirth", "birth_date", "birthDate", "dob"),
    "financial_status": ("financialStatus", "financial_strain"),
    "access_to_transportation": ("accessToTransportation", "transportation_needs"),
    "has_transportation": ("transportation_needs",),
    "has_a_car": ("hasACar", "transportation_needs"),
    "zip_code": ("zipCode", "zip"),
    "utilities_insecurity": ("utilitiesInsecurity", "utility_needs"),
}

_SNAKE_SEGMENT = re.compile(r"_([a-z0-9])")


def _is_absent(value: Any) -> bool:
    return value is None or (pd.api.types.is_scalar(value) and bool(pd.isna(value)))


def to_camel_case(field: str) -> str:
    """snake_case -> camelCase (``symptom_segment`` -> ``symptomSegment``)."""
    return _SNAKE_SEGMENT.sub(lambda m: m.group(1).upper(), field)


def _build_synonyms() -> dict[str, tuple[str, ...]]:
    table: dict[str, tuple[str, ...]] = {}
    for field in _ENGINE_FIELDS:
        camel = to_camel_case(field)
        if camel != field:
            table[field] = (camel,)
    for field, aliases in _LEGACY_ALIASES.items():
        merged = list(table.get(field, ()))
        merged.extend(a for a in aliases if a not in merged and a != field)
        table[field] = tuple(merged)
    return table


# logical field -> ordered alternate keys
SYNONYMS: dict[str, tuple[str, ...]] = _build_synonyms()


def aliases_for(
    field: str,
    synonyms: Optional[Mapping[str, tuple[str, ...]]] = None,
) -> tuple[str, ...]:
    """Lookup order used by resolve(): the logical key, then its aliases."""
    table = SYNONYMS if synonyms is None else synonyms
    return (field, *table.get(field, ()))


def resolve(
    record: Any,
    field: str,
    synonyms: Optional[Mapping[str, tuple[str, ...]]] = None,
) -> Any:
    """Resolve a logical field on a record.

    Args:
        record: A mapping (dict, pandas row as dict, ...). Anything else
            resolves to None for every field.
        field: Logical field name, e.g. "symptom_segment".
        synonyms: Alias table to use instead of SYNONYMS.

    Returns:
        The first non-None, non-NaN value found under the logical key or
        one of its aliases, else None.
    """
    if not isinstance(record, Mapping):
        return None
    for key in aliases_for(field, synonyms):
        value = record.get(key)
        if not _is_absent(value):
            return value
    return None
