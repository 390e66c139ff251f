"""Error handling middleware."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ...core.exceptions import CatalogParseError, ExtractionError

logger = logging.getLogger(__name__)


def setup_error_handlers(app: FastAPI) -> None:
    """Setup exception handlers for the FastAPI app."""

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "Validation error", "detail": str(exc)},
        )

    @app.exception_handler(KeyError)
    async def key_error_handler(request: Request, exc: KeyError) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"error": "Not found", "detail": exc.args[0] if exc.args else "Not found"},
        )

    @app.exception_handler(CatalogParseError)
    async def catalog_error_handler(request: Request, exc: CatalogParseError) -> JSONResponse:
        logger.warning(f"Catalog rejected on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid catalog", "detail": str(exc)},
        )

    @app.exception_handler(ExtractionError)
    async def extraction_error_handler(request: Request, exc: ExtractionError) -> JSONResponse:
        return JSONResponse(
            status_code=502,
            content={"error": "Extraction failed", "detail": exc.message, "document_id": exc.document_id},
        )
