"""Shared state for API routes."""

from functools import lru_cache

from ..core.pipeline import OrderSession


@lru_cache
def get_session() -> OrderSession:
    """Get the process-wide document session."""
    return OrderSession()
