"""Pivot aggregation engine.

Pure, synchronous transforms from flat clinical records to
cross-tabulations and chart-ready series. No I/O and no shared state:
each call builds its own working frames and returns fresh values.
"""

from nicepivot.pivot_engine.demographic import (
    DemographicCrossTab,
    FieldType,
    build_demographic_crosstab,
)
from nicepivot.pivot_engine.date_canonicalizer import CanonicalDate, canonicalize, parse_date
from nicepivot.pivot_engine.field_resolver import SYNONYMS, resolve
from nicepivot.pivot_engine.pivot_builder import (
    build_pivot_table,
    build_problem_only_pivot,
    build_symptom_only_pivot,
)
from nicepivot.pivot_engine.pivot_options import PivotOptions
from nicepivot.pivot_engine.pivot_table import PivotCell, PivotTable
from nicepivot.pivot_engine.reshape import (
    demographic_heatmap_series,
    to_bar_series,
    to_bubble_points,
    to_heatmap_series,
    to_hierarchy,
    to_pie_series,
    to_ranked_list,
)

__all__ = [
    "CanonicalDate",
    "DemographicCrossTab",
    "FieldType",
    "PivotCell",
    "PivotOptions",
    "PivotTable",
    "SYNONYMS",
    "build_demographic_crosstab",
    "build_pivot_table",
    "build_problem_only_pivot",
    "build_symptom_only_pivot",
    "canonicalize",
    "demographic_heatmap_series",
    "parse_date",
    "resolve",
    "to_bar_series",
    "to_bubble_points",
    "to_heatmap_series",
    "to_hierarchy",
    "to_pie_series",
    "to_ranked_list",
]
