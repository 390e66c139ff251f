"""Tests for catalog ingestion."""

import io

import pytest
from openpyxl import Workbook

from orderextract.catalog import CatalogStore, load_catalog_file, parse_catalog, parse_catalog_grid
from orderextract.core.exceptions import CatalogParseError
from orderextract.core.models import CatalogEntry


def _pairs(entries: list[CatalogEntry]) -> list[tuple[str, str]]:
    return [(entry.internal_code, entry.description) for entry in entries]


def _xlsx_bytes(rows: list[list]) -> bytes:
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


class TestParseCatalog:
    """Test cases for parse_catalog."""

    def test_mixed_delimiters_quotes_and_blank_lines(self):
        text = (
            "Ref;Designacao\r\n"
            '"P-100";"Parafuso M6 inox"\r\n'
            "P-200,Porca M6\r\n"
            "\r\n"
            "P-300\tAnilha\r\n"
        )

        assert _pairs(parse_catalog(text)) == [
            ("P-100", "Parafuso M6 inox"),
            ("P-200", "Porca M6"),
            ("P-300", "Anilha"),
        ]

    def test_rows_with_empty_fields_are_dropped(self):
        text = "Ref;Designacao\n;sem codigo\nP-400;\nP-500;  \nP-600;Cola\n"

        assert _pairs(parse_catalog(text)) == [("P-600", "Cola")]

    def test_first_line_is_always_header(self):
        assert _pairs(parse_catalog("P-100;Parafuso\nP-200;Porca")) == [("P-200", "Porca")]

    def test_every_delimiter_splits(self):
        # Only the first two columns are used
        entries = parse_catalog("Ref;Designacao;Preco\nT-1;Tinta, branca;9.90\n")

        assert _pairs(entries) == [("T-1", "Tinta")]

    def test_header_only(self):
        assert parse_catalog("Ref;Designacao\n") == []
        assert parse_catalog("") == []

    def test_text_without_delimiters_is_rejected(self):
        with pytest.raises(CatalogParseError):
            parse_catalog("Referencias\nP-100 Parafuso\nP-200 Porca\n")

    def test_non_text_is_rejected(self):
        with pytest.raises(CatalogParseError):
            parse_catalog(b"Ref;Designacao\nP-100;Parafuso")


class TestParseCatalogGrid:
    """Test cases for parse_catalog_grid."""

    def test_trims_stringifies_and_drops(self):
        grid = [
            ["Ref", "Designacao"],
            ["A1", "Tinta"],
            [1234.0, "Cola branca"],
            [None, "Sem codigo"],
            ["B2"],
            ["  C3 ", "  Verniz "],
            [],
        ]

        assert _pairs(parse_catalog_grid(grid)) == [
            ("A1", "Tinta"),
            ("1234", "Cola branca"),
            ("C3", "Verniz"),
        ]

    def test_zero_is_a_valid_code(self):
        grid = [["Ref", "Designacao"], [0, "Amostra"], [0.0, "Outra"]]

        assert _pairs(parse_catalog_grid(grid)) == [("0", "Amostra"), ("0", "Outra")]

    def test_only_header_row_is_skipped(self):
        grid = [["A1", "Tinta"], ["A2", "Cola"]]

        assert _pairs(parse_catalog_grid(grid)) == [("A2", "Cola")]


class TestLoadCatalogFile:
    """Test cases for load_catalog_file."""

    def test_xlsx(self):
        content = _xlsx_bytes([["Ref", "Designacao"], ["P-100", "Parafuso M6 inox"], [2040, "Porca"]])

        entries = load_catalog_file(content, "referencias.xlsx")

        assert _pairs(entries) == [("P-100", "Parafuso M6 inox"), ("2040", "Porca")]

    def test_latin1_csv(self):
        content = "Ref;Designação\nP-100;Anilha çapata\n".encode("latin-1")

        entries = load_catalog_file(content, "refs.CSV")

        assert _pairs(entries) == [("P-100", "Anilha çapata")]

    def test_utf8_bom_csv(self):
        content = "Ref;Designação\nP-100;Anilha\n".encode("utf-8-sig")

        assert _pairs(load_catalog_file(content, "refs.csv")) == [("P-100", "Anilha")]

    def test_corrupt_spreadsheet(self):
        with pytest.raises(CatalogParseError):
            load_catalog_file(b"not a zip file", "refs.xlsx")

    def test_unsupported_extension(self):
        with pytest.raises(CatalogParseError):
            load_catalog_file(b"%PDF-1.4", "refs.pdf")


class TestCatalogStore:
    """Test cases for CatalogStore."""

    def setup_method(self):
        self.store = CatalogStore()
        self.store.load(b"Ref;Designacao\nP-100;Parafuso\n", "v1.csv")

    def test_load_replaces_catalog(self):
        count = self.store.load(b"Ref;Designacao\nP-200;Porca\nP-300;Anilha\n", "v2.csv")

        assert count == 2
        assert self.store.source_name == "v2.csv"
        assert _pairs(list(self.store.entries)) == [("P-200", "Porca"), ("P-300", "Anilha")]

    def test_failed_load_keeps_previous_catalog(self):
        with pytest.raises(CatalogParseError):
            self.store.load(b"broken", "v2.xlsx")

        assert self.store.source_name == "v1.csv"
        assert _pairs(list(self.store.entries)) == [("P-100", "Parafuso")]

    def test_clear(self):
        self.store.clear()

        assert len(self.store) == 0
        assert not self.store
        assert self.store.source_name is None
