"""Tests for build_pivot_table and the symptom-only / problem-only variants."""

import logging
import random

import pandas as pd
import pytest

from nicepivot.pivot_engine.date_canonicalizer import parse_date
from nicepivot.pivot_engine.pivot_builder import (
    as_record_list,
    build_pivot_table,
    build_problem_only_pivot,
    build_symptom_only_pivot,
)
from nicepivot.pivot_engine.pivot_options import PivotOptions
from nicepivot.pivot_engine.pivot_table import PivotCell
from nicepivot.pivot_engine.reshape import to_ranked_list


def test_basic_pivot(basic_records):
    t = build_pivot_table(basic_records, "segment", "date")
    assert t.rows == ("Fatigue", "Pain")
    assert t.columns == ("1/2/24", "1/3/24")
    assert t.count("Pain", "1/2/24") == 2
    assert t.count("Fatigue", "1/3/24") == 1
    assert t.count("Pain", "1/3/24") == 0
    assert t.count("Fatigue", "1/2/24") == 0
    assert len(t.cells) == 2


def test_missing_date_dropped():
    t = build_pivot_table([{"segment": "Pain", "date": ""}], "segment", "date")
    assert t.rows == ()
    assert t.columns == ()
    assert t.is_empty


def test_empty_input_is_empty_table():
    assert build_pivot_table([], "segment", "date").is_empty


@pytest.mark.parametrize("records", [None, "segment,date", b"raw", {"segment": "Pain"}, 42])
def test_non_collection_raises_type_error(records):
    with pytest.raises(TypeError):
        build_pivot_table(records, "segment", "date")


def test_empty_field_name_raises_value_error(basic_records):
    with pytest.raises(ValueError):
        build_pivot_table(basic_records, "", "date")


def test_as_record_list_accepts_generators_and_dataframes(basic_records):
    assert as_record_list(r for r in basic_records) == basic_records
    assert as_record_list(pd.DataFrame(basic_records)) == basic_records


def test_dataframe_input_matches_list_input(basic_records):
    from_list = build_pivot_table(basic_records, "segment", "date")
    from_df = build_pivot_table(pd.DataFrame(basic_records), "segment", "date")
    assert from_df == from_list


def test_dataframe_nan_cells_are_missing():
    df = pd.DataFrame([
        {"segment": "Pain", "date": "1/2/24"},
        {"date": "1/2/24"},
        {"segment": "Pain"},
    ])
    t = build_pivot_table(df, "segment", "date")
    assert t.rows == ("Pain", "Unknown")
    assert t.total_count() == 2


def test_non_mapping_items_skipped(basic_records, caplog):
    caplog.set_level(logging.WARNING, logger="nicepivot")
    t = build_pivot_table(basic_records + ["junk", 7], "segment", "date")
    assert t.total_count() == 3
    assert "Skipping non-mapping record" in caplog.text


def test_rows_sorted_with_unknown_last():
    records = [
        {"category": None, "date": "1/1/24"},
        {"category": "Zeta", "date": "1/1/24"},
        {"category": "alpha", "date": "1/1/24"},
        {"category": "Unknown", "date": "1/2/24"},
        {"category": "beta", "date": "1/1/24"},
    ]
    t = build_pivot_table(records, "category", "date")
    assert t.rows == ("alpha", "beta", "Zeta", "Unknown")
    assert t.count("Unknown", "1/1/24") == 1
    assert t.count("Unknown", "1/2/24") == 1


@pytest.mark.parametrize("missing", [None, "", "   ", "null", "undefined"])
def test_missing_row_values_get_field_sentinel(missing):
    t = build_pivot_table([{"symptom_segment": missing, "dos_date": "1/1/24"}], "symptom_segment", "dos_date")
    assert t.rows == ("Unspecified Symptom",)


def test_sentinel_isolation_between_row_fields():
    records = [{"dos_date": "1/1/24", "symptom_segment": "", "diagnosis": None}]
    by_symptom = build_pivot_table(records, "symptom_segment", "dos_date")
    by_diagnosis = build_pivot_table(records, "diagnosis", "dos_date")
    by_category = build_pivot_table(records, "diagnostic_category", "dos_date")
    assert by_symptom.rows == ("Unspecified Symptom",)
    assert by_diagnosis.rows == ("Unclassified Diagnosis",)
    assert by_category.rows == ("Other Category",)


def test_problem_prefix_stripped():
    records = [
        {"diagnosis": "Problem: Asthma", "dos_date": "1/1/24"},
        {"diagnosis": "Asthma", "dos_date": "1/1/24"},
        {"diagnosis": "Problem:", "dos_date": "1/1/24"},
        {"diagnosis": "Problem:   ", "dos_date": "1/1/24"},
    ]
    t = build_pivot_table(records, "diagnosis", "dos_date")
    assert t.rows == ("Asthma", "Unclassified Diagnosis")
    assert t.count("Asthma", "1/1/24") == 2
    assert t.count("Unclassified Diagnosis", "1/1/24") == 2


def test_non_string_row_values_are_labels():
    t = build_pivot_table([{"code": 5, "date": "1/1/24"}, {"code": False, "date": "1/1/24"}], "code", "date")
    assert t.rows == ("5", "False")


def test_columns_chronological_regardless_of_input_order():
    dates = ["2024-01-10", "12/31/23", "1/2/2024", "2024-02-01T00:00:00Z", "1/9/24"]
    t = build_pivot_table([{"s": "x", "d": d} for d in dates], "s", "d")
    assert t.columns == ("12/31/23", "1/2/24", "1/9/24", "1/10/24", "2/1/24")
    parsed = [parse_date(c) for c in t.columns]
    assert parsed == sorted(parsed)


def test_equivalent_dates_share_a_column():
    records = [{"s": "x", "d": d} for d in ("3/4/24", "2024-03-04", "3/4/2024", "2024-03-04T16:00:00Z")]
    t = build_pivot_table(records, "s", "d")
    assert t.columns == ("3/4/24",)
    assert t.count("x", "3/4/24") == 4


def test_unparsed_columns_sort_last(diag_logger, caplog):
    caplog.set_level(logging.WARNING, logger=diag_logger.name)
    records = [{"s": "x", "d": d} for d in ("soon", "2/1/24", "Later", "1/1/24")]
    t = build_pivot_table(records, "s", "d", logger=diag_logger)
    assert t.columns == ("1/1/24", "2/1/24", "Later", "soon")
    warnings = [r.getMessage() for r in caplog.records if r.name == diag_logger.name]
    assert sum("Invalid date found" in m for m in warnings) == 2


def test_mentions_subcount():
    records = [
        {"s": "x", "d": "1/1/24", "mention_id": "m1"},
        {"s": "x", "d": "1/1/24", "mention_id": ""},
        {"s": "x", "d": "1/1/24", "mentionId": "m3"},
        {"s": "y", "d": "1/1/24"},
    ]
    t = build_pivot_table(records, "s", "d")
    assert t.cell("x", "1/1/24") == PivotCell(count=3, mentions=2)
    assert t.cell("y", "1/1/24") == PivotCell(count=1, mentions=None)


def test_categorical_filter(mixed_records):
    t = build_pivot_table(mixed_records, "diagnosis", "dos_date", "Problem")
    assert t.rows == ("Asthma", "Hypertension", "Unclassified Diagnosis")
    assert t.columns == ("3/2/24", "3/3/24", "not a date")
    assert t.total_count() == 3


def test_symptom_only_pivot(mixed_records):
    t = build_symptom_only_pivot(mixed_records, "symptom_segment", "dos_date")
    assert t.rows == ("fatigue", "Headache", "Unspecified Symptom")
    assert t.columns == ("3/2/24", "3/4/24", "3/10/24")
    assert t.cell("Headache", "3/4/24") == PivotCell(count=2, mentions=1)
    assert t.cell("fatigue", "3/2/24") == PivotCell(count=1, mentions=1)
    assert t.cell("Unspecified Symptom", "3/10/24") == PivotCell(count=1)
    # the ZCode/HRSN record and the dateless record contribute nothing
    assert t.total_count() == 4


def test_problem_only_pivot(mixed_records):
    t = build_problem_only_pivot(mixed_records, "diagnosis", "dos_date")
    assert t == build_pivot_table(mixed_records, "diagnosis", "dos_date", "Problem")
    assert t.cell("Unclassified Diagnosis", "3/3/24") == PivotCell(count=1, mentions=1)


def test_custom_options():
    opts = PivotOptions(
        filter_field="kind",
        mention_field="note",
        strip_prefix="Dx:",
        row_sentinels={"dx": "No Dx"},
    )
    records = [
        {"kind": "A", "dx": "Dx: Flu", "when": "1/1/24", "note": "n1"},
        {"kind": "A", "dx": None, "when": "1/1/24"},
        {"kind": "B", "dx": "Cold", "when": "1/1/24"},
    ]
    t = build_pivot_table(records, "dx", "when", "A", options=opts)
    assert t.rows == ("Flu", "No Dx")
    assert t.cell("Flu", "1/1/24") == PivotCell(count=1, mentions=1)


def test_determinism(mixed_records):
    first = build_pivot_table(mixed_records, "symptom_segment", "dos_date")
    second = build_pivot_table(mixed_records, "symptom_segment", "dos_date")
    assert first.to_dict() == second.to_dict()
    assert list(first.cells) == list(second.cells)

    shuffled = list(mixed_records)
    random.Random(7).shuffle(shuffled)
    third = build_pivot_table(shuffled, "symptom_segment", "dos_date")
    assert third.to_dict() == first.to_dict()


def test_count_conservation():
    rng = random.Random(3)
    dates = ["1/1/24", "2024-01-02", "1/3/2024", "", None, "garbage", "2024-01-01T05:00:00Z"]
    segments = ["A", "B", "C", None, "", "Problem: D"]
    records = [{"seg": rng.choice(segments), "dt": rng.choice(dates)} for _ in range(500)]
    expected = sum(1 for r in records if r["dt"] not in ("", None))

    t = build_pivot_table(records, "seg", "dt")
    assert t.total_count() == expected
    assert sum(e["value"] for e in to_ranked_list(t)) == expected
    # no orphan labels
    assert {r for r, _ in t.cells} == set(t.rows)
    assert {c for _, c in t.cells} == set(t.columns)


def test_unresolved_row_field_warns(basic_records, diag_logger, caplog):
    caplog.set_level(logging.INFO, logger=diag_logger.name)
    t = build_pivot_table(basic_records, "segmnet", "date", logger=diag_logger)
    assert t.rows == ("Unknown",)
    assert t.total_count() == 3
    assert any(
        r.levelno == logging.WARNING and "Row field 'segmnet'" in r.getMessage() for r in caplog.records
    )


def test_unresolved_column_field_warns(basic_records, diag_logger, caplog):
    caplog.set_level(logging.INFO, logger=diag_logger.name)
    t = build_pivot_table(basic_records, "segment", "dte", logger=diag_logger)
    assert t.is_empty
    assert any(
        r.levelno == logging.WARNING and "Column field 'dte'" in r.getMessage() for r in caplog.records
    )


def test_info_summary_logged(basic_records, caplog):
    caplog.set_level(logging.INFO, logger="nicepivot")
    build_pivot_table(basic_records, "segment", "date")
    assert "Pivot table created with 2 rows and 2 columns" in caplog.text


def test_dataframe_with_mixed_key_spellings():
    df = pd.DataFrame([
        {"symptom_segment": "Pain", "dos_date": "1/2/24"},
        {"symptomSegment": "Pain", "dosDate": "2024-01-02"},
    ])
    t = build_pivot_table(df, "symptom_segment", "dos_date")
    assert t.rows == ("Pain",)
    assert t.count("Pain", "1/2/24") == 2
