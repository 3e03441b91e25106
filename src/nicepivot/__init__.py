"""
nicepivot: pivot aggregation for clinical observation dashboards.

This package provides:
- build_pivot_table: observation records -> row x date cross-tabulation
- Reshape adapters for heatmap, bar/pie, bubble and hierarchy charts
- build_demographic_crosstab: HRSN indicator percentages by age range
- Plotly figures and a NiceGUI table view over the results (nicepivot.viewer)
- Logging utilities for library and application use

For logging configuration in standalone scripts/demos:
    ```python
    from nicepivot.utils.logging import configure_logging
    configure_logging(level="DEBUG")
    ```

When used as a library, logging is handled by the parent application's
configuration.
"""

import logging

from nicepivot.utils.logging import configure_logging, get_logger

from nicepivot.pivot_engine import (
    DemographicCrossTab,
    PivotOptions,
    PivotTable,
    build_demographic_crosstab,
    build_pivot_table,
    build_problem_only_pivot,
    build_symptom_only_pivot,
    to_bubble_points,
    to_heatmap_series,
    to_hierarchy,
    to_ranked_list,
)

# NullHandler so library logs don't reach the root logger until an
# application calls configure_logging().
_logger = logging.getLogger("nicepivot")
if not _logger.handlers:
    _logger.addHandler(logging.NullHandler())

__all__ = [
    "DemographicCrossTab",
    "PivotOptions",
    "PivotTable",
    "build_demographic_crosstab",
    "build_pivot_table",
    "build_problem_only_pivot",
    "build_symptom_only_pivot",
    "configure_logging",
    "get_logger",
    "to_bubble_points",
    "to_heatmap_series",
    "to_hierarchy",
    "to_ranked_list",
]

__version__ = "0.1.0"
