"""Purchase-order extraction and reference reconciliation."""

__version__ = "0.1.0"
