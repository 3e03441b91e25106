"""Plotly figures built from reshape adapter output.

These functions only consume the documented series shapes (heatmap series,
ranked list, demographic cross-tab); they never look inside a PivotTable.
Empty input gives an empty figure rather than an error.
"""

from __future__ import annotations

from typing import Any, Optional

import plotly.graph_objects as go

from nicepivot.pivot_engine.demographic import DemographicCrossTab
from nicepivot.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_COLORSCALE = "Blues"


def _layout(fig: go.Figure, title: Optional[str]) -> go.Figure:
    fig.update_layout(
        title=title,
        margin=dict(l=40, r=20, t=40 if title else 20, b=40),
        template="plotly_white",
    )
    return fig


def heatmap_figure(
    series: list[dict[str, Any]],
    *,
    title: Optional[str] = None,
    colorscale: str = DEFAULT_COLORSCALE,
) -> go.Figure:
    """Heatmap from heatmap series (rows top to bottom in series order).

    Args:
        series: ``[{"id": row, "data": [{"x": col, "y": value}, ...]}, ...]``.
        title: Optional figure title.
        colorscale: Plotly colorscale name.
    """
    fig = go.Figure()
    if not series:
        logger.debug("heatmap_figure: empty series")
        return _layout(fig, title)

    x = [p["x"] for p in series[0]["data"]]
    y = [s["id"] for s in series]
    z = [[p["y"] for p in s["data"]] for s in series]
    fig.add_trace(go.Heatmap(x=x, y=y, z=z, colorscale=colorscale, hoverongaps=False))
    fig.update_yaxes(autorange="reversed", type="category")
    fig.update_xaxes(type="category")
    return _layout(fig, title)


def bar_figure(
    ranked: list[dict[str, Any]],
    *,
    title: Optional[str] = None,
    horizontal: bool = True,
) -> go.Figure:
    """Bar chart from a ranked list, largest bar first."""
    fig = go.Figure()
    if not ranked:
        return _layout(fig, title)
    labels = [e["id"] for e in ranked]
    values = [e["value"] for e in ranked]
    if horizontal:
        fig.add_trace(go.Bar(x=values, y=labels, orientation="h"))
        fig.update_yaxes(autorange="reversed", type="category")
    else:
        fig.add_trace(go.Bar(x=labels, y=values))
        fig.update_xaxes(type="category")
    return _layout(fig, title)


def pie_figure(ranked: list[dict[str, Any]], *, title: Optional[str] = None) -> go.Figure:
    """Pie chart from a ranked list."""
    fig = go.Figure()
    if not ranked:
        return _layout(fig, title)
    fig.add_trace(go.Pie(
        labels=[e["id"] for e in ranked],
        values=[e["value"] for e in ranked],
        sort=False,
    ))
    return _layout(fig, title)


def demographic_heatmap_figure(
    crosstab: DemographicCrossTab,
    *,
    title: Optional[str] = None,
    colorscale: str = DEFAULT_COLORSCALE,
) -> go.Figure:
    """Indicator x age-bucket heatmap of percentages.

    The color scale spans 0..crosstab.max_value so that sparse cohorts
    still show contrast.
    """
    fig = go.Figure()
    if not crosstab.rows:
        return _layout(fig, title)
    df = crosstab.to_dataframe()
    fig.add_trace(go.Heatmap(
        x=list(df.columns),
        y=list(df.index),
        z=df.to_numpy(),
        zmin=0.0,
        zmax=crosstab.max_value or 1.0,
        colorscale=colorscale,
        texttemplate="%{z:.1f}%",
        hovertemplate="%{y} / %{x}: %{z:.1f}%<extra></extra>",
    ))
    fig.update_yaxes(autorange="reversed", type="category")
    fig.update_xaxes(type="category")
    return _layout(fig, title)
