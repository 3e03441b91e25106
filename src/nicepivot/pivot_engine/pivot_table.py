"""Cross-tabulation value types produced by the pivot builder.

A PivotTable holds ordered row and column labels plus a sparse map of
(row, column) -> PivotCell. A missing cell means a count of zero. Tables
are built fresh by build_pivot_table() and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import pandas as pd

ROW_LABEL_COL = "row"


@dataclass(frozen=True)
class PivotCell:
    """Aggregate for one (row, column) pair.

    Attributes:
        count: Number of records that landed in the cell.
        mentions: Number of those records carrying a mention identifier,
            or None if none did.
    """
    count: int = 0
    mentions: Optional[int] = None

    def to_dict(self) -> dict[str, int]:
        d = {"count": self.count}
        if self.mentions is not None:
            d["mentions"] = self.mentions
        return d


EMPTY_CELL = PivotCell()


@dataclass(frozen=True)
class PivotTable:
    """Row category x column category cross-tabulation of counts.

    Invariants:
        - Every label used in a cell key appears in rows/columns and every
          row/column label has at least one cell.
        - rows are sorted lexicographically with "Unknown" last; columns are
          in chronological order with unparsed labels last.

    Attributes:
        rows: Ordered unique row labels.
        columns: Ordered unique column labels.
        cells: Sparse map (row, column) -> PivotCell.
    """
    rows: tuple[str, ...] = ()
    columns: tuple[str, ...] = ()
    cells: dict[tuple[str, str], PivotCell] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """True when there is no data (callers use this as the 'no data' signal)."""
        return len(self.rows) == 0

    def cell(self, row: str, column: str) -> PivotCell:
        """Cell at (row, column); a zero cell when absent."""
        return self.cells.get((row, column), EMPTY_CELL)

    def count(self, row: str, column: str) -> int:
        return self.cell(row, column).count

    def row_total(self, row: str) -> int:
        """Sum of counts across all columns for a row."""
        return sum(self.count(row, col) for col in self.columns)

    def total_count(self) -> int:
        """Sum of all cell counts."""
        return sum(c.count for c in self.cells.values())

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the raw-dump shape.

        Returns:
            ``{"rows": [...], "columns": [...], "data": {row: {column: cell}}}``
            with cells as ``{"count": n}`` plus ``"mentions"`` when tracked.
        """
        data: dict[str, dict[str, dict[str, int]]] = {}
        for row in self.rows:
            for col in self.columns:
                c = self.cells.get((row, col))
                if c is not None:
                    data.setdefault(row, {})[col] = c.to_dict()
        return {
            "rows": list(self.rows),
            "columns": list(self.columns),
            "data": data,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PivotTable":
        """Deserialize a raw dump produced by to_dict().

        Raises:
            ValueError: If a cell references a label missing from rows/columns.
        """
        rows = tuple(str(r) for r in data.get("rows", []))
        columns = tuple(str(c) for c in data.get("columns", []))
        row_set, col_set = set(rows), set(columns)
        cells: dict[tuple[str, str], PivotCell] = {}
        for row, row_cells in (data.get("data") or {}).items():
            for col, raw in row_cells.items():
                if row not in row_set or col not in col_set:
                    raise ValueError(f"Cell ({row!r}, {col!r}) is not in rows/columns")
                mentions = raw.get("mentions")
                cells[(row, col)] = PivotCell(
                    count=int(raw.get("count", 0)),
                    mentions=int(mentions) if mentions is not None else None,
                )
        return cls(rows=rows, columns=columns, cells=cells)

    def to_dataframe(self) -> pd.DataFrame:
        """Counts as a rows x columns DataFrame (zeros filled, order preserved).

        The index is named ROW_LABEL_COL so ``reset_index()`` yields a flat
        table ready for CSV/Excel export.
        """
        df = pd.DataFrame(
            [[self.count(row, col) for col in self.columns] for row in self.rows],
            index=pd.Index(list(self.rows), name=ROW_LABEL_COL),
            columns=list(self.columns),
            dtype="int64",
        )
        return df
