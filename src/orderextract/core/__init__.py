"""Core module - models and errors."""

from .exceptions import CatalogParseError, ExtractionError, OrderExtractError
from .models import (
    CatalogEntry,
    Delivery,
    DocumentStatus,
    Extraction,
    LineItem,
    MatchResult,
    MatchTier,
    OrderHeader,
)

__all__ = [
    "CatalogEntry",
    "CatalogParseError",
    "Delivery",
    "DocumentStatus",
    "Extraction",
    "ExtractionError",
    "LineItem",
    "MatchResult",
    "MatchTier",
    "OrderExtractError",
    "OrderHeader",
]
