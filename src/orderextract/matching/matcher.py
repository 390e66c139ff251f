"""Match extracted line items to internal reference codes."""

import logging
import re
import unicodedata
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from ..core.models import CatalogEntry, MatchResult, MatchTier

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.45

# Shorter codes produce spurious substring hits inside descriptions
MIN_CODE_LENGTH_IN_DESCRIPTION = 4

# Words of this length or shorter are ignored by the overlap score
MAX_NOISE_WORD_LENGTH = 2

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(value: Any) -> str:
    """
    Normalize text for comparison.

    Lower-cases, strips diacritics, replaces anything outside ``[a-z0-9\\s]``
    with a space and collapses whitespace.
    """
    if value is None:
        return ""
    text = str(value).lower()
    text = unicodedata.normalize("NFD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = _NON_ALNUM.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


def _word_set(normalized: str) -> set[str]:
    return {word for word in normalized.split(" ") if len(word) > MAX_NOISE_WORD_LENGTH}


def _overlap(words_a: set[str], words_b: set[str]) -> float:
    if not words_a or not words_b:
        return 0.0
    return len(words_a & words_b) / max(len(words_a), len(words_b))


def word_overlap_score(a: Any, b: Any) -> float:
    """Share of significant words two texts have in common (0-1)."""
    return _overlap(_word_set(normalize_text(a)), _word_set(normalize_text(b)))


@dataclass(frozen=True)
class IndexedEntry:
    """Catalog entry with its comparison keys computed once."""

    entry: CatalogEntry
    code: str
    words: frozenset[str]


def index_catalog(catalog: Sequence[CatalogEntry]) -> list[IndexedEntry]:
    """Precompute normalized codes and description words for a catalog."""
    return [
        IndexedEntry(
            entry=entry,
            code=normalize_text(entry.internal_code),
            words=frozenset(_word_set(normalize_text(entry.description))),
        )
        for entry in catalog
    ]


def match_exact_ref(
    description: Any,
    supplier_ref: Any,
    catalog: Sequence[IndexedEntry],
    threshold: float = DEFAULT_THRESHOLD,
) -> MatchResult | None:
    """Supplier reference equal to an internal code."""
    if supplier_ref is None:
        return None
    ref = normalize_text(supplier_ref)
    if not ref:
        return None
    for item in catalog:
        if item.code == ref:
            return MatchResult(entry=item.entry, score=1.0, tier=MatchTier.EXACT_REF)
    return None


def match_ref_in_description(
    description: Any,
    supplier_ref: Any,
    catalog: Sequence[IndexedEntry],
    threshold: float = DEFAULT_THRESHOLD,
) -> MatchResult | None:
    """Internal code written somewhere inside the line description."""
    if description is None:
        return None
    text = normalize_text(description)
    for item in catalog:
        if len(item.code) >= MIN_CODE_LENGTH_IN_DESCRIPTION and item.code in text:
            return MatchResult(entry=item.entry, score=1.0, tier=MatchTier.REF_IN_DESCRIPTION)
    return None


def match_description_overlap(
    description: Any,
    supplier_ref: Any,
    catalog: Sequence[IndexedEntry],
    threshold: float = DEFAULT_THRESHOLD,
) -> MatchResult | None:
    """Catalog description sharing the most words with the line description."""
    if description is None:
        return None
    words = _word_set(normalize_text(description))

    best: IndexedEntry | None = None
    best_score = 0.0
    for item in catalog:
        score = _overlap(words, item.words)
        # Strict comparison keeps the first entry on ties
        if score > best_score:
            best_score = score
            best = item

    if best is None or best_score < threshold:
        return None
    return MatchResult(entry=best.entry, score=best_score, tier=MatchTier.DESCRIPTION_OVERLAP)


MatchStrategy = Callable[[Any, Any, Sequence[IndexedEntry], float], MatchResult | None]

# Tried in order; the first strategy returning a result wins
STRATEGIES: tuple[MatchStrategy, ...] = (
    match_exact_ref,
    match_ref_in_description,
    match_description_overlap,
)


class ReferenceMatcher:
    """
    Find the internal reference code for extracted line items.

    The catalog is normalized once on construction, so a single matcher can
    be reused for every line of an export batch.
    """

    def __init__(
        self,
        catalog: Sequence[CatalogEntry],
        threshold: float = DEFAULT_THRESHOLD,
        strategies: Sequence[MatchStrategy] = STRATEGIES,
    ):
        self.threshold = threshold
        self.strategies = tuple(strategies)
        self._catalog = index_catalog(catalog)

    def __len__(self) -> int:
        return len(self._catalog)

    def match(self, description: Any, supplier_ref: Any) -> MatchResult | None:
        """
        Match one line item.

        Args:
            description: Free-text description of the line
            supplier_ref: Reference printed by the customer for the article

        Returns:
            MatchResult from the first strategy that succeeds, or None
        """
        if not self._catalog or (description is None and supplier_ref is None):
            return None

        for strategy in self.strategies:
            result = strategy(description, supplier_ref, self._catalog, self.threshold)
            if result is not None:
                logger.debug(
                    f"Matched {supplier_ref!r} / {description!r} to {result.internal_code} "
                    f"via {result.tier.value} ({result.score:.2f})"
                )
                return result
        return None


def match(
    description: Any,
    supplier_ref: Any,
    catalog: Sequence[CatalogEntry],
    threshold: float = DEFAULT_THRESHOLD,
) -> MatchResult | None:
    """Match a single line item against a catalog."""
    return ReferenceMatcher(catalog, threshold).match(description, supplier_ref)
