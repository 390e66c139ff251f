"""API middleware."""

from .error_handler import setup_error_handlers

__all__ = ["setup_error_handlers"]
