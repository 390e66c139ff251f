"""Reference catalog endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile

from ...core.pipeline import OrderSession
from ..dependencies import get_session

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/catalog", tags=["catalog"])

SessionDep = Annotated[OrderSession, Depends(get_session)]


@router.post("")
async def upload_catalog(
    session: SessionDep,
    file: Annotated[UploadFile, File(description="Two-column catalog (CSV, XLSX or XLS)")],
) -> dict:
    """
    Load the internal reference catalog.

    The first row is a header. A file that cannot be read leaves the
    current catalog in place.
    """
    filename = file.filename or "catalog.csv"
    content = await file.read()
    count = session.catalog.load(content, filename)
    return {"status": "loaded", "source": filename, "entries": count}


@router.get("")
async def get_catalog(session: SessionDep, limit: int = 50) -> dict:
    """Catalog summary with its first entries."""
    catalog = session.catalog
    return {
        "source": catalog.source_name,
        "entries": len(catalog),
        "sample": [entry.model_dump() for entry in catalog.entries[:limit]],
    }


@router.delete("")
async def clear_catalog(session: SessionDep) -> dict:
    """Forget the loaded catalog; every row will then be flagged as missing."""
    session.catalog.clear()
    return {"status": "cleared"}
