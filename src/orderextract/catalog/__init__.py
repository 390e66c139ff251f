"""Internal reference catalog ingestion."""

from .loader import CatalogStore, load_catalog_file, parse_catalog, parse_catalog_grid

__all__ = ["CatalogStore", "load_catalog_file", "parse_catalog", "parse_catalog_grid"]
