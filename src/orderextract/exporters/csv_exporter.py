"""CSV exporter for order tables."""

import csv
import io

from .base import BaseExporter
from .table import ExportTable


class CSVExporter(BaseExporter):
    """Export order table to CSV format. Cell flags are not representable."""

    def __init__(self, delimiter: str = ";"):
        # Semicolon opens cleanly in Excel with a comma decimal separator
        self.delimiter = delimiter

    @property
    def format_name(self) -> str:
        return "CSV"

    @property
    def file_extension(self) -> str:
        return ".csv"

    @property
    def mime_type(self) -> str:
        return "text/csv"

    def export(self, table: ExportTable) -> str:
        """
        Export table to CSV string.

        Args:
            table: ExportTable to export

        Returns:
            CSV content as string
        """
        output = io.StringIO()
        writer = csv.writer(output, delimiter=self.delimiter)
        writer.writerow(table.header)
        writer.writerows(table.data)
        return output.getvalue()
