"""Plotly figures and NiceGUI views over pivot engine results.

figures has no NiceGUI dependency; pivot_table_view and demo_pivot_app do.
"""

from nicepivot.viewer.figures import (
    bar_figure,
    demographic_heatmap_figure,
    heatmap_figure,
    pie_figure,
)

__all__ = [
    "bar_figure",
    "demographic_heatmap_figure",
    "heatmap_figure",
    "pie_figure",
]
