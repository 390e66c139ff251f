"""Row flattening and column selection for exports."""

from .flattener import (
    DOCUMENT_COLUMN,
    HEADER_COLUMNS,
    INTERNAL_CODE_COLUMN,
    LINE_COLUMNS,
    FlatRow,
    FlattenResult,
    active_columns,
    canonical_columns,
    column_label,
    compute_max_deliveries,
    delivery_columns,
    flatten,
    is_delivery_column,
    is_header_column,
    label_function,
    missing_reference_count,
)

__all__ = [
    "DOCUMENT_COLUMN",
    "HEADER_COLUMNS",
    "INTERNAL_CODE_COLUMN",
    "LINE_COLUMNS",
    "FlatRow",
    "FlattenResult",
    "active_columns",
    "canonical_columns",
    "column_label",
    "compute_max_deliveries",
    "delivery_columns",
    "flatten",
    "is_delivery_column",
    "is_header_column",
    "label_function",
    "missing_reference_count",
]
