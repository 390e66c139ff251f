"""Purchase-order extractors."""

from .base import SUPPORTED_MEDIA_TYPES, BaseExtractor
from .llm import OrderExtractor, parse_extraction_text, repair_truncated_json, strip_code_fences

__all__ = [
    "SUPPORTED_MEDIA_TYPES",
    "BaseExtractor",
    "OrderExtractor",
    "parse_extraction_text",
    "repair_truncated_json",
    "strip_code_fences",
]
