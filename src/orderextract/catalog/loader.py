"""Load the internal reference catalog from CSV text or spreadsheets."""

import io
import logging
import re
from pathlib import Path
from typing import Any, Iterable, Sequence

from openpyxl import load_workbook

from ..core.exceptions import CatalogParseError
from ..core.models import CatalogEntry

logger = logging.getLogger(__name__)

_DELIMITERS = re.compile(r"[;,\t]")
_ENCLOSING_QUOTES = re.compile(r'^"|"$')

TEXT_EXTENSIONS = {".csv", ".txt", ".tsv"}
TEXT_ENCODINGS = ("utf-8-sig", "latin-1", "cp1252")


def _clean_field(value: str) -> str:
    return _ENCLOSING_QUOTES.sub("", value.strip()).strip()


def _cell_to_text(cell: Any) -> str:
    """Render a spreadsheet cell the way it reads on screen."""
    if cell is None:
        return ""
    if isinstance(cell, float):
        if cell != cell:  # NaN from pandas
            return ""
        if cell.is_integer():
            return str(int(cell))
    return str(cell)


def _entries(pairs: Iterable[tuple[str, str]]) -> list[CatalogEntry]:
    entries = []
    dropped = 0
    for code, description in pairs:
        if code and description:
            entries.append(CatalogEntry(internal_code=code, description=description))
        else:
            dropped += 1
    if dropped:
        logger.warning(f"Dropped {dropped} catalog row(s) with an empty code or description")
    return entries


def parse_catalog(text: str) -> list[CatalogEntry]:
    """
    Parse a two-column delimited catalog.

    The first non-blank line is a header and is skipped. Columns are split on
    ``;``, ``,`` or tab; only the first two are used.

    Args:
        text: Raw catalog text

    Returns:
        Catalog entries in file order

    Raises:
        CatalogParseError: If the input is not text or has no delimited rows
    """
    if not isinstance(text, str):
        raise CatalogParseError(f"Catalog source must be text, got {type(text).__name__}")

    lines = [line for line in text.split("\n") if line.strip()]
    data_lines = lines[1:]

    if data_lines and not any(_DELIMITERS.search(line) for line in data_lines):
        raise CatalogParseError("Catalog has no delimited columns (expected ';', ',' or tab)")

    pairs = []
    for line in data_lines:
        parts = _DELIMITERS.split(line)
        code = _clean_field(parts[0])
        description = _clean_field(parts[1]) if len(parts) > 1 else ""
        pairs.append((code, description))

    return _entries(pairs)


def parse_catalog_grid(grid: Sequence[Sequence[Any]]) -> list[CatalogEntry]:
    """
    Parse a pre-read grid of cells (first row is the header).

    Args:
        grid: Rows of cell values, e.g. from a spreadsheet reader

    Returns:
        Catalog entries in row order
    """
    pairs = []
    for row in list(grid)[1:]:
        cells = list(row) if row is not None else []
        code = _cell_to_text(cells[0] if len(cells) > 0 else None).strip()
        description = _cell_to_text(cells[1] if len(cells) > 1 else None).strip()
        pairs.append((code, description))
    return _entries(pairs)


def _decode(content: bytes) -> str:
    for encoding in TEXT_ENCODINGS:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise CatalogParseError("Could not decode catalog with any supported encoding")


def _read_xlsx(content: bytes) -> list[tuple[Any, ...]]:
    wb = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    try:
        sheet = wb[wb.sheetnames[0]]
        return [row for row in sheet.iter_rows(values_only=True)]
    finally:
        wb.close()


def _read_xls(content: bytes) -> list[list[Any]]:
    # Legacy .xls needs pandas (xlrd); imported lazily to keep startup light
    import pandas as pd

    df = pd.read_excel(io.BytesIO(content), sheet_name=0, header=None)
    return df.values.tolist()


def load_catalog_file(content: bytes, filename: str) -> list[CatalogEntry]:
    """
    Load a catalog from an uploaded file.

    Args:
        content: File bytes
        filename: Original filename, used to pick the reader

    Returns:
        Catalog entries

    Raises:
        CatalogParseError: If the file cannot be read as a table
    """
    suffix = Path(filename).suffix.lower()

    if suffix in TEXT_EXTENSIONS:
        return parse_catalog(_decode(content))

    if suffix not in (".xlsx", ".xls"):
        raise CatalogParseError(f"Unsupported catalog file type: {suffix or filename}")

    try:
        grid = _read_xlsx(content) if suffix == ".xlsx" else _read_xls(content)
    except Exception as e:
        raise CatalogParseError(f"Could not read spreadsheet {filename}: {e}") from e

    return parse_catalog_grid(grid)


class CatalogStore:
    """
    The catalog currently in use.

    A load replaces the catalog only after the new source parsed cleanly.
    """

    def __init__(self, entries: Sequence[CatalogEntry] = (), source_name: str | None = None):
        self._entries: tuple[CatalogEntry, ...] = tuple(entries)
        self.source_name = source_name

    @property
    def entries(self) -> tuple[CatalogEntry, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def load(self, content: bytes, filename: str) -> int:
        """Parse a catalog file and make it current. Returns the entry count."""
        entries = load_catalog_file(content, filename)
        self.replace(entries, filename)
        return len(entries)

    def replace(self, entries: Sequence[CatalogEntry], source_name: str | None = None) -> None:
        self._entries = tuple(entries)
        self.source_name = source_name
        logger.info(f"Loaded {len(self._entries)} catalog entries from {source_name or 'memory'}")

    def clear(self) -> None:
        self._entries = ()
        self.source_name = None
