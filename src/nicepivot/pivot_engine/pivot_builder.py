"""Pivot builder: flat observation records -> PivotTable.

The algorithm, per call:

  1. Optionally keep only records whose discriminator (``symp_prob``)
     equals ``categorical_filter``.
  2. Resolve the row value. Missing values become the row field's sentinel
     label (e.g. "Unspecified Symptom"); a leading "Problem:" is stripped.
  3. Resolve the column value. Records without one are dropped.
  4. Canonicalize the column value as a date (``M/D/YY``).
  5. Count records per (row, column), plus records with a mention id.
  6. Sort rows lexicographically ("Unknown" last) and columns
     chronologically (unparsed labels last).

Bad data never raises. Only caller bugs do: a record collection that is not
iterable raises TypeError, an empty field name raises ValueError.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional

import pandas as pd

from nicepivot.pivot_engine.date_canonicalizer import canonicalize, column_sort_key
from nicepivot.pivot_engine.field_resolver import resolve
from nicepivot.pivot_engine.pivot_options import PivotOptions
from nicepivot.pivot_engine.pivot_table import PivotCell, PivotTable
from nicepivot.pivot_engine.sentinels import is_missing
from nicepivot.utils.logging import get_logger

logger = get_logger(__name__)

SYMPTOM = "Symptom"
PROBLEM = "Problem"
ZCODE_HRSN_FIELD = "zcode_hrsn"
ZCODE_HRSN_VALUE = "ZCode/HRSN"


def as_record_list(records: Any) -> list[Any]:
    """Materialize a record collection as a list.

    Accepts any iterable of mappings or a pandas DataFrame.

    Raises:
        TypeError: If records is None, a string, a single mapping, or not iterable.
    """
    if isinstance(records, pd.DataFrame):
        return records.to_dict("records")
    if records is None or isinstance(records, (str, bytes, Mapping)):
        raise TypeError(f"records must be an iterable of mappings, got {type(records).__name__}")
    if not isinstance(records, Iterable):
        raise TypeError(f"records must be an iterable of mappings, got {type(records).__name__}")
    return list(records)


def _row_label(raw: Any, row_field: str, opts: PivotOptions) -> str:
    if is_missing(raw):
        return opts.sentinel_for(row_field)
    label = str(raw)
    if opts.strip_prefix and label.startswith(opts.strip_prefix):
        label = label[len(opts.strip_prefix):].strip()
        if is_missing(label):
            return opts.sentinel_for(row_field)
    return label


def _row_sort_key(label: str, unknown_label: str) -> tuple[bool, str, str]:
    # casefold first so "apple" and "Banana" interleave alphabetically;
    # the raw label breaks ties so the order stays total.
    return (label == unknown_label, label.casefold(), label)


def build_pivot_table(
    records: Any,
    row_field: str,
    column_field: str,
    categorical_filter: Optional[str] = None,
    *,
    options: Optional[PivotOptions] = None,
    logger: Optional[logging.Logger] = None,
) -> PivotTable:
    """Cross-tabulate records into a PivotTable of counts.

    Args:
        records: Iterable of mappings (or a DataFrame), one per observation.
        row_field: Logical row field, e.g. "symptom_segment" or "diagnosis".
        column_field: Logical column field, typically "dos_date".
        categorical_filter: If set, keep only records whose
            ``options.filter_field`` equals this value ("Symptom"/"Problem").
        options: Field names and labels; defaults to PivotOptions().
        logger: Diagnostic sink; defaults to this module's logger.

    Returns:
        A new PivotTable. It is empty when no record had a usable column value.

    Raises:
        TypeError: If records is not an iterable collection of records.
        ValueError: If row_field or column_field is empty.
    """
    log = logger or get_logger(__name__)
    opts = options or PivotOptions()
    if not row_field or not column_field:
        raise ValueError("row_field and column_field must be non-empty strings")

    items = as_record_list(records)
    syn = opts.synonyms
    log.info(
        f"Creating pivot table: {row_field} by {column_field} with {len(items)} records"
        + (f", filtered to {categorical_filter} records only" if categorical_filter is not None else "")
    )

    if categorical_filter is not None:
        n_before = len(items)
        items = [r for r in items if resolve(r, opts.filter_field, syn) == categorical_filter]
        log.info(f"Applied {categorical_filter} filter: {len(items)} records remaining from {n_before}")

    row_labels: list[str] = []
    col_labels: list[str] = []
    has_mention: list[bool] = []
    column_keys: dict[str, tuple[int, int, str]] = {}
    n_mappings = 0
    n_row_resolved = 0
    n_dropped = 0

    for item in items:
        if not isinstance(item, Mapping):
            log.warning(f"Skipping non-mapping record of type {type(item).__name__}")
            continue
        n_mappings += 1

        raw_row = resolve(item, row_field, syn)
        if not is_missing(raw_row):
            n_row_resolved += 1
        row = _row_label(raw_row, row_field, opts)

        raw_col = resolve(item, column_field, syn)
        if is_missing(raw_col):
            n_dropped += 1
            continue

        col = canonicalize(raw_col, logger=log)
        key = column_sort_key(col)
        prev = column_keys.get(col.display)
        if prev is None or key < prev:
            column_keys[col.display] = key

        row_labels.append(row)
        col_labels.append(col.display)
        has_mention.append(not is_missing(resolve(item, opts.mention_field, syn)))

    if n_mappings and n_row_resolved == 0:
        log.warning(
            f"Row field {row_field!r} resolved for none of {n_mappings} records; "
            "every record was relabeled. Check the field name."
        )
    if n_mappings and n_dropped == n_mappings:
        log.warning(
            f"Column field {column_field!r} resolved for none of {n_mappings} records; "
            "the pivot table is empty. Check the field name."
        )
    elif n_dropped:
        log.debug(f"Dropped {n_dropped} records without a {column_field} value")

    if not row_labels:
        log.info("Pivot table created with 0 rows and 0 columns")
        return PivotTable()

    tmp = pd.DataFrame({"row": row_labels, "column": col_labels, "mention": has_mention})
    grp = tmp.groupby(["row", "column"], sort=False)["mention"]
    agg = pd.DataFrame({"count": grp.size(), "mentions": grp.sum()})

    rows = tuple(sorted(set(row_labels), key=lambda r: _row_sort_key(r, opts.unknown_label)))
    columns = tuple(sorted(column_keys, key=column_keys.__getitem__))

    unordered = {
        (r, c): PivotCell(count=int(n), mentions=int(m) if m else None)
        for (r, c), n, m in agg.itertuples(name=None)
    }
    cells = {(r, c): unordered[(r, c)] for r in rows for c in columns if (r, c) in unordered}

    log.info(f"Pivot table created with {len(rows)} rows and {len(columns)} columns")
    return PivotTable(rows=rows, columns=columns, cells=cells)


def build_symptom_only_pivot(
    records: Any,
    row_field: str,
    column_field: str,
    *,
    options: Optional[PivotOptions] = None,
    logger: Optional[logging.Logger] = None,
) -> PivotTable:
    """Pivot over "Symptom" records only, excluding ZCode/HRSN indicators."""
    log = logger or get_logger(__name__)
    opts = options or PivotOptions()
    items = as_record_list(records)
    kept = [
        r for r in items
        if resolve(r, ZCODE_HRSN_FIELD, opts.synonyms) != ZCODE_HRSN_VALUE
    ]
    log.debug(f"Excluded {len(items) - len(kept)} ZCode/HRSN records before symptom pivot")
    return build_pivot_table(kept, row_field, column_field, SYMPTOM, options=opts, logger=log)


def build_problem_only_pivot(
    records: Any,
    row_field: str,
    column_field: str,
    *,
    options: Optional[PivotOptions] = None,
    logger: Optional[logging.Logger] = None,
) -> PivotTable:
    """Pivot over "Problem" records only."""
    return build_pivot_table(records, row_field, column_field, PROBLEM, options=options, logger=logger)
