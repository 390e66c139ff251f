"""Flatten extracted purchase orders into uniform export rows."""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from ..core.models import CatalogEntry, Extraction, LineItem
from ..matching import DEFAULT_THRESHOLD, ReferenceMatcher

logger = logging.getLogger(__name__)

FlatRow = dict[str, Any]

DOCUMENT_COLUMN = "source_file"
INTERNAL_CODE_COLUMN = "internal_code"

HEADER_COLUMNS: tuple[str, ...] = (
    "client",
    "order_number",
    "order_date",
    "commitment",
    "budget_line",
    "contract_number",
    "client_tax_id",
    "delivery_address",
)

LINE_COLUMNS: tuple[str, ...] = (
    INTERNAL_CODE_COLUMN,
    "item_code",
    "supplier_ref",
    "description",
    "total_quantity",
    "unit",
    "unit_price",
    "vat_rate",
    "total_excl_vat",
    "total_incl_vat",
)

# Row keys that are never emitted as columns
METADATA_KEYS: tuple[str, ...] = ("match_tier", "match_score", "reference_missing")

_DELIVERY_KEY = re.compile(r"^delivery_(\d+)_(date|quantity)$")

COLUMN_LABELS: dict[str, dict[str, str]] = {
    "pt": {
        "source_file": "Ficheiro",
        "client": "Cliente",
        "order_number": "Nº Encomenda",
        "order_date": "Data Encomenda",
        "commitment": "Compromisso",
        "budget_line": "Cabimento",
        "contract_number": "Nº Concurso",
        "client_tax_id": "NIF Cliente",
        "delivery_address": "Morada Entrega",
        "internal_code": "Ref. Interna",
        "item_code": "Cód. Artigo Cliente",
        "supplier_ref": "Ref. Cliente",
        "description": "Designação",
        "total_quantity": "Qtd Total",
        "unit": "Unidade",
        "unit_price": "Preço Unit. s/IVA",
        "vat_rate": "IVA (%)",
        "total_excl_vat": "Total s/IVA",
        "total_incl_vat": "Total c/IVA",
    },
    "en": {
        "source_file": "File",
        "client": "Client",
        "order_number": "Order No.",
        "order_date": "Order Date",
        "commitment": "Commitment",
        "budget_line": "Budget Line",
        "contract_number": "Contract No.",
        "client_tax_id": "Client Tax ID",
        "delivery_address": "Delivery Address",
        "internal_code": "Internal Ref.",
        "item_code": "Client Item Code",
        "supplier_ref": "Client Ref.",
        "description": "Description",
        "total_quantity": "Total Qty",
        "unit": "Unit",
        "unit_price": "Unit Price excl. VAT",
        "vat_rate": "VAT (%)",
        "total_excl_vat": "Total excl. VAT",
        "total_incl_vat": "Total incl. VAT",
    },
}

DELIVERY_LABELS: dict[str, dict[str, str]] = {
    "pt": {"date": "Entrega {n} Data", "quantity": "Entrega {n} Qtd"},
    "en": {"date": "Delivery {n} Date", "quantity": "Delivery {n} Quantity"},
}


@dataclass
class FlattenResult:
    """Rows produced from a batch of extractions."""

    rows: list[FlatRow] = field(default_factory=list)
    max_delivery_count: int = 0


def delivery_columns(max_delivery_count: int) -> list[str]:
    """Delivery date/quantity keys for positions 1..max_delivery_count."""
    keys = []
    for position in range(1, max_delivery_count + 1):
        keys.append(f"delivery_{position}_date")
        keys.append(f"delivery_{position}_quantity")
    return keys


def canonical_columns(max_delivery_count: int) -> list[str]:
    """Every export column in its fixed order."""
    return [
        DOCUMENT_COLUMN,
        *HEADER_COLUMNS,
        *LINE_COLUMNS,
        *delivery_columns(max_delivery_count),
    ]


def is_delivery_column(key: str) -> bool:
    return _DELIVERY_KEY.match(key) is not None


def is_header_column(key: str) -> bool:
    return key == DOCUMENT_COLUMN or key in HEADER_COLUMNS


def column_label(key: str, locale: str = "pt") -> str:
    """
    Human-readable label for a column key.

    Delivery columns are labelled by position; unknown keys are returned
    unchanged.
    """
    labels = COLUMN_LABELS.get(locale, COLUMN_LABELS["pt"])
    if key in labels:
        return labels[key]

    delivery = _DELIVERY_KEY.match(key)
    if delivery:
        templates = DELIVERY_LABELS.get(locale, DELIVERY_LABELS["pt"])
        return templates[delivery.group(2)].format(n=delivery.group(1))

    return key


def label_function(locale: str) -> Callable[[str], str]:
    """Bind column_label to a locale."""
    return lambda key: column_label(key, locale)


def compute_max_deliveries(extractions: Sequence[Extraction]) -> int:
    """Largest number of deliveries on any line item of the batch."""
    return max(
        (len(line.deliveries) for extraction in extractions for line in extraction.lines),
        default=0,
    )


def _line_values(line: LineItem) -> dict[str, Any]:
    return {
        "item_code": line.item_code,
        "supplier_ref": line.supplier_ref,
        "description": line.description,
        "total_quantity": line.total_quantity,
        "unit": line.unit,
        "unit_price": line.unit_price,
        "vat_rate": line.vat_rate,
        "total_excl_vat": line.total_excl_vat,
        "total_incl_vat": line.total_incl_vat,
    }


def flatten(
    extractions: Sequence[Extraction],
    catalog: Sequence[CatalogEntry],
    threshold: float = DEFAULT_THRESHOLD,
) -> FlattenResult:
    """
    Flatten extractions into one row per line item.

    The delivery width is measured over the whole batch before any row is
    built, so every row carries the same delivery keys.

    Args:
        extractions: Extractions in export order
        catalog: Internal reference catalog (may be empty)
        threshold: Minimum score for description-overlap matches

    Returns:
        FlattenResult with rows in extraction x line order
    """
    max_delivery_count = compute_max_deliveries(extractions)
    matcher = ReferenceMatcher(catalog, threshold) if catalog else None

    rows: list[FlatRow] = []
    for extraction in extractions:
        header = extraction.header
        header_values = {
            DOCUMENT_COLUMN: extraction.source_file,
            **{key: getattr(header, key) for key in HEADER_COLUMNS},
        }

        for line in extraction.lines:
            result = matcher.match(line.description, line.supplier_ref) if matcher else None

            row: FlatRow = {
                **header_values,
                INTERNAL_CODE_COLUMN: result.internal_code if result else None,
                **_line_values(line),
                "match_tier": result.tier if result else None,
                "match_score": result.score if result else None,
                "reference_missing": result is None,
            }

            for position in range(max_delivery_count):
                delivery = line.deliveries[position] if position < len(line.deliveries) else None
                row[f"delivery_{position + 1}_date"] = delivery.date if delivery else None
                row[f"delivery_{position + 1}_quantity"] = delivery.quantity if delivery else None

            rows.append(row)

    logger.info(
        f"Flattened {len(extractions)} extraction(s) into {len(rows)} row(s), "
        f"{max_delivery_count} delivery column pair(s)"
    )
    return FlattenResult(rows=rows, max_delivery_count=max_delivery_count)


def _has_value(value: Any) -> bool:
    return value is not None and value != ""


def active_columns(rows: Sequence[FlatRow], max_delivery_count: int) -> list[str]:
    """Canonical columns holding at least one non-empty value."""
    return [
        key
        for key in canonical_columns(max_delivery_count)
        if any(_has_value(row.get(key)) for row in rows)
    ]


def missing_reference_count(rows: Sequence[FlatRow]) -> int:
    """Number of rows without an internal reference."""
    return sum(1 for row in rows if row.get("reference_missing"))
