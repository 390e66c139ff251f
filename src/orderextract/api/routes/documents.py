"""Document submission and processing endpoints."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel

from ...core.models import DocumentStatus
from ...core.pipeline import DocumentSlot, OrderSession
from ...reconciliation import (
    active_columns,
    column_label,
    is_delivery_column,
    is_header_column,
    missing_reference_count,
)
from ..dependencies import get_session

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/documents", tags=["documents"])

# Browsers sometimes send application/octet-stream for dropped files
EXTENSION_TO_MEDIA_TYPE: dict[str, str] = {
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}

SessionDep = Annotated[OrderSession, Depends(get_session)]


class DocumentResponse(BaseModel):
    """Processing state of one submitted document."""

    document_id: str
    filename: str
    media_type: str
    status: DocumentStatus
    error_message: str | None
    line_count: int | None
    submitted_at: datetime
    processing_time_ms: int | None
    extraction: dict | None = None


class ColumnResponse(BaseModel):
    """An active export column."""

    key: str
    label: str
    group: str  # header, line or delivery


class RowsResponse(BaseModel):
    """Preview of the export table."""

    columns: list[ColumnResponse]
    rows: list[dict[str, Any]]
    max_delivery_count: int
    missing_reference_count: int


def _to_response(slot: DocumentSlot, include_extraction: bool = False) -> DocumentResponse:
    extraction = slot.extraction
    return DocumentResponse(
        document_id=slot.document_id,
        filename=slot.filename,
        media_type=slot.media_type,
        status=slot.status,
        error_message=slot.error_message,
        line_count=len(extraction.lines) if extraction else None,
        submitted_at=slot.submitted_at,
        processing_time_ms=slot.processing_time_ms,
        extraction=extraction.model_dump(mode="json") if extraction and include_extraction else None,
    )


def _media_type(upload: UploadFile) -> str:
    ext = Path(upload.filename or "").suffix.lower()
    if upload.content_type in EXTENSION_TO_MEDIA_TYPE.values():
        return upload.content_type
    return EXTENSION_TO_MEDIA_TYPE.get(ext, upload.content_type or "application/octet-stream")


def _column_group(key: str) -> str:
    if is_header_column(key):
        return "header"
    if is_delivery_column(key):
        return "delivery"
    return "line"


@router.post("", response_model=list[DocumentResponse])
async def submit_documents(
    session: SessionDep,
    files: Annotated[list[UploadFile], File(description="Purchase orders (PDF, PNG, JPEG)")],
) -> list[DocumentResponse]:
    """
    Submit purchase-order documents for extraction.

    Documents wait until ``/documents/process`` is called.
    """
    submitted = []
    for upload in files:
        content = await upload.read()
        slot = session.submit(
            content=content,
            filename=upload.filename or "document",
            media_type=_media_type(upload),
        )
        submitted.append(_to_response(slot))
    return submitted


@router.get("", response_model=list[DocumentResponse])
async def list_documents(session: SessionDep) -> list[DocumentResponse]:
    """List submitted documents in submission order."""
    return [_to_response(slot) for slot in session.slots]


@router.delete("")
async def clear_documents(session: SessionDep) -> dict:
    """Remove every document and extraction."""
    count = len(session.slots)
    session.clear()
    return {"status": "cleared", "removed": count}


@router.post("/process", response_model=list[DocumentResponse])
async def process_documents(session: SessionDep) -> list[DocumentResponse]:
    """
    Extract every waiting document.

    Failed documents are reported individually; the others still complete.
    """
    processed = await session.process_pending()
    return [_to_response(slot) for slot in processed]


@router.get("/rows", response_model=RowsResponse)
async def preview_rows(session: SessionDep, locale: str | None = None) -> RowsResponse:
    """Flattened rows with reference matches, as they will be exported."""
    result = session.build_rows()
    keys = active_columns(result.rows, result.max_delivery_count) if result.rows else []
    label_locale = locale or session.locale

    return RowsResponse(
        columns=[
            ColumnResponse(key=key, label=column_label(key, label_locale), group=_column_group(key))
            for key in keys
        ],
        rows=[
            {**row, "match_tier": row["match_tier"].value if row["match_tier"] else None}
            for row in result.rows
        ],
        max_delivery_count=result.max_delivery_count,
        missing_reference_count=missing_reference_count(result.rows),
    )


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(session: SessionDep, document_id: str) -> DocumentResponse:
    """Get one document with its extraction."""
    return _to_response(session.get(document_id), include_extraction=True)


@router.post("/{document_id}/retry", response_model=DocumentResponse)
async def retry_document(session: SessionDep, document_id: str) -> DocumentResponse:
    """Queue a document for extraction again."""
    return _to_response(session.requeue(document_id))


@router.delete("/{document_id}")
async def delete_document(session: SessionDep, document_id: str) -> dict:
    """Remove a document and its extraction."""
    session.remove(document_id)
    return {"status": "deleted", "document_id": document_id}
