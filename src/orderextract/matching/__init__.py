"""Reference matching against the internal catalog."""

from .matcher import (
    DEFAULT_THRESHOLD,
    STRATEGIES,
    IndexedEntry,
    ReferenceMatcher,
    index_catalog,
    match,
    match_description_overlap,
    match_exact_ref,
    match_ref_in_description,
    normalize_text,
    word_overlap_score,
)

__all__ = [
    "DEFAULT_THRESHOLD",
    "STRATEGIES",
    "IndexedEntry",
    "ReferenceMatcher",
    "index_catalog",
    "match",
    "match_description_overlap",
    "match_exact_ref",
    "match_ref_in_description",
    "normalize_text",
    "word_overlap_score",
]
