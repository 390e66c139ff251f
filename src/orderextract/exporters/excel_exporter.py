"""Excel exporter for order tables."""

import io

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from .base import BaseExporter
from .table import ExportTable


class ExcelExporter(BaseExporter):
    """Export order table to an Excel workbook."""

    SHEET_TITLE = "Encomendas"
    MIN_COLUMN_WIDTH = 8

    # Styles
    HEADER_FILL = PatternFill(start_color="1E3A5F", end_color="1E3A5F", fill_type="solid")
    HEADER_FONT = Font(color="FFFFFF", bold=True)
    FLAG_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
    FLAG_FONT = Font(color="9C0006")

    @property
    def format_name(self) -> str:
        return "Excel"

    @property
    def file_extension(self) -> str:
        return ".xlsx"

    @property
    def mime_type(self) -> str:
        return "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

    def export(self, table: ExportTable) -> bytes:
        """
        Export table to Excel bytes.

        Creates a single sheet with a styled header row; cells listed in
        ``table.flagged_cells`` are highlighted in red.

        Args:
            table: ExportTable to export

        Returns:
            Excel file content as bytes
        """
        wb = Workbook()
        ws = wb.active
        ws.title = self.SHEET_TITLE

        # Header row
        for col, header in enumerate(table.header, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = self.HEADER_FILL
            cell.font = self.HEADER_FONT
            cell.alignment = Alignment(horizontal="center")

        # Data rows
        for row_idx, values in enumerate(table.data, start=2):
            for col, value in enumerate(values, start=1):
                ws.cell(row=row_idx, column=col, value=value)

        # Flagged cells (grid coordinates are 0-based)
        for grid_row, grid_col in table.flagged_cells:
            cell = ws.cell(row=grid_row + 1, column=grid_col + 1)
            cell.fill = self.FLAG_FILL
            cell.font = self.FLAG_FONT

        self._fit_columns(ws, table)

        output = io.BytesIO()
        wb.save(output)
        output.seek(0)
        return output.read()

    def _fit_columns(self, ws, table: ExportTable) -> None:
        """Size each column to its longest cell."""
        for col, header in enumerate(table.header, start=1):
            width = max(
                [len(str(header)), self.MIN_COLUMN_WIDTH]
                + [len(str(values[col - 1])) for values in table.data]
            )
            ws.column_dimensions[get_column_letter(col)].width = width
