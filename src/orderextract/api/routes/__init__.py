"""API routes."""

from .catalog import router as catalog_router
from .documents import router as documents_router
from .exports import router as exports_router
from .health import router as health_router

__all__ = ["catalog_router", "documents_router", "exports_router", "health_router"]
