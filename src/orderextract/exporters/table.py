"""Grid handed to spreadsheet exporters."""

from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from ..reconciliation import INTERNAL_CODE_COLUMN, FlatRow


@dataclass
class ExportTable:
    """
    Header labels, data cells and style hints for one export.

    ``flagged_cells`` holds ``(row, column)`` grid coordinates, where row 0
    is the header row.
    """

    columns: list[str] = field(default_factory=list)
    header: list[str] = field(default_factory=list)
    data: list[list[Any]] = field(default_factory=list)
    flagged_cells: set[tuple[int, int]] = field(default_factory=set)

    @property
    def grid(self) -> list[list[Any]]:
        """Header row followed by the data rows."""
        return [self.header, *self.data]


def build_export_table(
    rows: Sequence[FlatRow],
    columns: Sequence[str],
    label_fn: Callable[[str], str],
) -> ExportTable:
    """
    Lay out flat rows for an export sink.

    Args:
        rows: Flat rows in export order
        columns: Column keys to emit, in order
        label_fn: Maps a column key to its header label

    Returns:
        ExportTable with empty strings in place of missing values
    """
    table = ExportTable(columns=list(columns), header=[label_fn(key) for key in columns])

    code_col = table.columns.index(INTERNAL_CODE_COLUMN) if INTERNAL_CODE_COLUMN in table.columns else None

    for row_idx, row in enumerate(rows, start=1):
        table.data.append(["" if row.get(key) is None else row.get(key) for key in table.columns])
        if code_col is not None and row.get("reference_missing"):
            table.flagged_cells.add((row_idx, code_col))

    return table
