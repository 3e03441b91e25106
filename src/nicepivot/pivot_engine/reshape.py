"""Reshape adapters: PivotTable -> chart-ready record sequences.

Each adapter is a pure function over a PivotTable. They keep the table's
row and column order (except the ranked list, which sorts by total) and
return fresh lists of plain dicts that serialize directly to JSON or CSV.
An empty table yields an empty sequence; for the hierarchy that is a root
node with an empty children list, so tree charts always get a root.

Shapes:
    heatmap series  [{"id": row, "data": [{"x": column, "y": count}, ...]}, ...]
    ranked list     [{"id": row, "value": row_total}, ...]   (descending)
    hierarchy       {"name": ..., "children": [{"name": row, "value": total,
                     "children": [{"name": column, "value": count}, ...]}]}
    bubble points   [{"date": column, "segment": row, "count": count}, ...]
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from nicepivot.pivot_engine.pivot_table import PivotTable

if TYPE_CHECKING:
    from nicepivot.pivot_engine.demographic import DemographicCrossTab


def to_heatmap_series(table: PivotTable) -> list[dict[str, Any]]:
    """One series per row; one point per column, zero-filled, in table order."""
    return [
        {
            "id": row,
            "data": [{"x": col, "y": table.count(row, col)} for col in table.columns],
        }
        for row in table.rows
    ]


def to_ranked_list(table: PivotTable) -> list[dict[str, Any]]:
    """One entry per row with its total across columns, largest first.

    Ties keep the table's row order (sorted() is stable).
    """
    entries = [{"id": row, "value": table.row_total(row)} for row in table.rows]
    return sorted(entries, key=lambda e: e["value"], reverse=True)


# Bar and pie charts take the same ranked shape.
to_bar_series = to_ranked_list
to_pie_series = to_ranked_list


def to_hierarchy(table: PivotTable, name: str = "root") -> dict[str, Any]:
    """Nest positive-count cells under their row.

    Rows with a zero total and zero-count cells are omitted. An empty table
    gives ``{"name": name, "children": []}``.
    """
    children = []
    for row in table.rows:
        leaves = [
            {"name": col, "value": table.count(row, col)}
            for col in table.columns
            if table.count(row, col) > 0
        ]
        if not leaves:
            continue
        children.append({
            "name": row,
            "value": sum(leaf["value"] for leaf in leaves),
            "children": leaves,
        })
    return {"name": name, "children": children}


def to_bubble_points(table: PivotTable) -> list[dict[str, Any]]:
    """Flat (date, segment, count) records for every positive cell, row-major."""
    return [
        {"date": col, "segment": row, "count": table.count(row, col)}
        for row in table.rows
        for col in table.columns
        if table.count(row, col) > 0
    ]


def demographic_heatmap_series(crosstab: "DemographicCrossTab") -> list[dict[str, Any]]:
    """Heatmap series for a demographic cross-tab (y = percentage)."""
    return [
        {
            "id": row,
            "data": [{"x": col, "y": crosstab.percentage(row, col)} for col in crosstab.columns],
        }
        for row in crosstab.rows
    ]
