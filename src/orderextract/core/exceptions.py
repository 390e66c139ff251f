"""Error types raised by the extraction and reconciliation pipeline."""


class OrderExtractError(Exception):
    """Base class for orderextract errors."""


class ExtractionError(OrderExtractError):
    """The extraction service failed or returned unusable content."""

    def __init__(self, message: str, document_id: str | None = None):
        super().__init__(message)
        self.message = message
        self.document_id = document_id


class CatalogParseError(OrderExtractError):
    """A catalog source could not be read as a two-column table."""
