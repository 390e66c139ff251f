"""Health check endpoint."""

from fastapi import APIRouter

from ...config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict:
    """
    Health check endpoint.

    Returns service status and version.
    """
    from orderextract import __version__

    return {
        "status": "healthy",
        "version": __version__,
        "service": "orderextract",
    }


@router.get("/ready")
async def readiness_check() -> dict:
    """Readiness check: extraction needs an API key configured."""
    checks = {
        "api": True,
        "openai_api_key": bool(get_settings().openai_api_key),
    }

    return {
        "ready": all(checks.values()),
        "checks": checks,
    }
