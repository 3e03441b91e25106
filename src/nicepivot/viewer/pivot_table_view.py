"""Raw-dump table view of a PivotTable.

Shows PivotTable.to_dataframe() in a NiceGUI aggrid: one grid row per pivot
row, one grid column per pivot column, plus a Total column.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import pandas as pd
from nicegui import ui
from nicegui.events import GenericEventArguments

from nicepivot.pivot_engine.pivot_table import ROW_LABEL_COL, PivotTable
from nicepivot.utils.logging import get_logger

logger = get_logger(__name__)

TOTAL_COL = "Total"


def _free_name(name: str, taken: set[str]) -> str:
    while name in taken:
        name = f"_{name}"
    return name


def pivot_table_frame(table: PivotTable, *, include_total: bool = True) -> pd.DataFrame:
    """Flat frame for display/export: row label column, one column per pivot column.

    The row label column comes first. It and the total column are named
    ROW_LABEL_COL and TOTAL_COL, prefixed with "_" until they no longer
    clash with a pivot column label (unparsed dates can be any string).

    Args:
        table: Source pivot table.
        include_total: Append a total column with each row's total.
    """
    df = table.to_dataframe()
    taken = set(table.columns)
    df.index.name = _free_name(ROW_LABEL_COL, taken)
    if include_total:
        totals = df.sum(axis=1).astype("int64")
        df[_free_name(TOTAL_COL, taken | {df.index.name})] = totals
    return df.reset_index()


def column_defs(df: pd.DataFrame) -> list[dict[str, Any]]:
    """aggrid columnDefs; the first (row label) column is pinned left."""
    defs = []
    for i, c in enumerate(df.columns):
        d: dict[str, Any] = {
            "headerName": str(c),
            "field": str(c),
            "sortable": True,
            "resizable": True,
        }
        if i == 0:
            d["pinned"] = "left"
        else:
            d["type"] = "numericColumn"
        defs.append(d)
    return defs


class PivotTableView:
    """aggrid view of a PivotTable with optional row selection.

    Attributes:
        table: The PivotTable shown.
        include_total: Whether a Total column is appended.
        _on_row_selected: Optional callback called with (row_label, row_dict).
        _aggrid: The underlying ui.aggrid widget (set after build()).
        _row_col: Name of the row label column in the grid rows.
    """

    def __init__(
        self,
        table: PivotTable,
        *,
        include_total: bool = True,
        on_row_selected: Optional[Callable[[str, dict[str, Any]], None]] = None,
    ) -> None:
        self.table = table
        self.include_total = include_total
        self._on_row_selected = on_row_selected
        self._aggrid: Optional[ui.aggrid] = None
        self._row_col = ROW_LABEL_COL

    def build(self, *, container: Optional[ui.element] = None) -> None:
        """Build the aggrid table UI.

        Args:
            container: Optional container element to build into. If None,
                widgets are created at the current UI context.
        """
        if container is not None:
            with container:
                self._build_grid()
        else:
            self._build_grid()

    def set_table(self, table: PivotTable) -> None:
        """Replace the displayed table (e.g. after recomputing the pivot)."""
        self.table = table
        if self._aggrid is None:
            return
        df = pivot_table_frame(table, include_total=self.include_total)
        self._row_col = df.columns[0]
        self._aggrid.options["columnDefs"] = column_defs(df)
        self._aggrid.options["rowData"] = df.to_dict("records")
        self._aggrid.update()

    def _build_grid(self) -> None:
        df = pivot_table_frame(self.table, include_total=self.include_total)
        self._row_col = df.columns[0]
        if self.table.is_empty:
            ui.label("No data").classes("text-sm text-gray-500")
        with ui.column().classes("w-full h-full min-h-0"):
            self._aggrid = ui.aggrid({
                "columnDefs": column_defs(df),
                "rowData": df.to_dict("records"),
                "rowSelection": "single",
                "suppressRowClickSelection": False,
            }).classes("w-full")
        if self._on_row_selected is not None:
            self._aggrid.on("rowSelected", self._on_grid_row_selected)
        logger.debug(f"PivotTableView built: {len(df)} rows, {len(df.columns)} columns")

    def _on_grid_row_selected(self, e: GenericEventArguments) -> None:
        row_dict = e.args.get("data") or {}
        if self._on_row_selected is not None:
            self._on_row_selected(str(row_dict.get(self._row_col, "")), row_dict)
