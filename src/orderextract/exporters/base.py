"""Base exporter interface."""

import logging
from abc import ABC, abstractmethod

from .table import ExportTable

logger = logging.getLogger(__name__)


class BaseExporter(ABC):
    """
    Turns an ExportTable into a downloadable file.

    Subclasses implement ``export``; callers that need bytes on disk or on the
    wire use ``render`` and ``filename``.
    """

    # Excel only detects UTF-8 in CSV files that start with a BOM
    text_encoding = "utf-8-sig"

    @abstractmethod
    def export(self, table: ExportTable) -> str | bytes:
        """Render the table. Text formats return str, binary formats bytes."""

    @property
    @abstractmethod
    def format_name(self) -> str:
        pass

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Extension including the leading dot."""

    @property
    @abstractmethod
    def mime_type(self) -> str:
        pass

    def filename(self, stem: str) -> str:
        return f"{stem}{self.file_extension}"

    def render(self, table: ExportTable) -> bytes:
        """
        Export the table as bytes ready to be written or streamed.

        Args:
            table: ExportTable to export

        Returns:
            File content; text output is encoded with ``text_encoding``
        """
        content = self.export(table)
        if isinstance(content, str):
            content = content.encode(self.text_encoding)
        logger.info(f"Rendered {len(table.data)} row(s) as {self.format_name} ({len(content)} bytes)")
        return content
