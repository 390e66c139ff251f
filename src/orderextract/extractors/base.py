"""Base extractor interface."""

from abc import ABC, abstractmethod
from typing import Any

SUPPORTED_MEDIA_TYPES = {
    "application/pdf",
    "image/png",
    "image/jpeg",
}


class BaseExtractor(ABC):
    """Abstract base class for purchase-order extractors."""

    @abstractmethod
    async def extract(
        self,
        content: bytes,
        media_type: str,
        filename: str | None = None,
    ) -> dict[str, Any]:
        """
        Read a purchase-order document into extraction JSON.

        Args:
            content: Raw file bytes
            media_type: MIME type of the document
            filename: Original filename (optional, for logging)

        Returns:
            Decoded JSON object with header fields and ``linhas``

        Raises:
            ExtractionError: If the document could not be read
        """
        pass

    def supports_media_type(self, media_type: str) -> bool:
        """Check if this extractor accepts the given MIME type."""
        return media_type in SUPPORTED_MEDIA_TYPES
