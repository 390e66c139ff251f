"""Order table exporters."""

from .base import BaseExporter
from .csv_exporter import CSVExporter
from .excel_exporter import ExcelExporter
from .table import ExportTable, build_export_table

__all__ = ["BaseExporter", "CSVExporter", "ExcelExporter", "ExportTable", "build_export_table"]
