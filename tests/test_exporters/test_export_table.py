"""Tests for the export grid."""

from orderextract.exporters import build_export_table
from orderextract.reconciliation import active_columns, flatten, label_function


class TestBuildExportTable:
    """Test cases for build_export_table."""

    def test_header_uses_label_function(self, order_extraction):
        result = flatten([order_extraction], [])
        columns = active_columns(result.rows, result.max_delivery_count)

        table = build_export_table(result.rows, columns, label_function("en"))

        assert table.header[0] == "File"
        assert table.header[-2:] == ["Delivery 2 Date", "Delivery 2 Quantity"]
        assert table.grid[0] == table.header

    def test_missing_values_become_empty_strings(self, order_extraction):
        result = flatten([order_extraction], [])

        table = build_export_table(result.rows, ["description", "total_incl_vat"], str)

        assert table.data == [["Parafuso M6", ""], ["Luva nitrilo azul tamanho M", "504.30"]]

    def test_flags_internal_code_of_missing_rows(self, order_extraction, plain_extraction, sample_catalog):
        result = flatten([order_extraction, plain_extraction], sample_catalog)
        columns = active_columns(result.rows, result.max_delivery_count)

        table = build_export_table(result.rows, columns, str)

        assert table.flagged_cells == {(3, columns.index("internal_code"))}

    def test_no_flags_without_internal_code_column(self, order_extraction):
        result = flatten([order_extraction], [])
        columns = active_columns(result.rows, result.max_delivery_count)

        table = build_export_table(result.rows, columns, str)

        assert "internal_code" not in table.columns
        assert table.flagged_cells == set()
