# tests/pivot_engine/conftest.py
"""Pytest configuration and fixtures for pivot_engine tests."""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import pytest


def pytest_configure() -> None:
    # Ensure nicepivot package is importable when running tests from repo root.
    repo_root = Path(__file__).resolve().parents[2]
    src_dir = repo_root / "src"
    if src_dir.exists() and str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))


@pytest.fixture
def basic_records() -> list[dict[str, Any]]:
    """Three observations: two Pain on 1/2/24, one Fatigue on 1/3/24."""
    return [
        {"segment": "Pain", "date": "1/2/24"},
        {"segment": "Pain", "date": "1/2/24"},
        {"segment": "Fatigue", "date": "1/3/24"},
    ]


@pytest.fixture
def mixed_records() -> list[dict[str, Any]]:
    """Symptom and problem observations in mixed key spellings and date formats."""
    return [
        {"symp_prob": "Symptom", "symptom_segment": "Headache", "dos_date": "2024-03-04T10:15:00Z", "mention_id": "m1"},
        {"symp_prob": "Symptom", "symptomSegment": "Headache", "dosDate": "3/4/2024"},
        {"symp_prob": "Symptom", "symptom_segment": "fatigue", "dos_date": "3/2/24", "mention_id": "m2"},
        {"symp_prob": "Symptom", "symptom_segment": None, "dos_date": "2024-03-10"},
        {"symp_prob": "Symptom", "symptom_segment": "Headache", "dos_date": ""},
        {"symp_prob": "Symptom", "symptom_segment": "Housing", "dos_date": "3/4/24", "zcode_hrsn": "ZCode/HRSN"},
        {"symp_prob": "Problem", "diagnosis": "Problem: Asthma", "dos_date": "3/2/24"},
        {"symp_prob": "Problem", "diagnosis": "Problem:", "dos_date": "3/3/24", "mention_id": "m3"},
        {"symp_prob": "Problem", "diagnosis": "Hypertension", "dos_date": "not a date"},
    ]


@pytest.fixture
def diag_logger() -> logging.Logger:
    """Dedicated logger injected into engine calls (propagates to caplog)."""
    return logging.getLogger("tests.pivot_engine.diagnostics")
