"""Export endpoints for different formats."""

import io
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from ...core.pipeline import OrderSession
from ...exporters import BaseExporter, CSVExporter, ExcelExporter
from ..dependencies import get_session

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/exports", tags=["exports"])

SessionDep = Annotated[OrderSession, Depends(get_session)]

EXPORT_FILENAME = "encomendas"

EXPORTERS: dict[str, type[BaseExporter]] = {
    "xlsx": ExcelExporter,
    "excel": ExcelExporter,
    "csv": CSVExporter,
}


@router.get("/{format}")
async def export_rows(session: SessionDep, format: str, locale: str | None = None) -> StreamingResponse:
    """
    Export every extracted line to the specified format.

    Supported formats:
    - xlsx: Excel workbook, missing internal references highlighted
    - csv: Semicolon-separated values
    """
    exporter_cls = EXPORTERS.get(format.lower())
    if exporter_cls is None:
        logger.warning(f"Rejected export request for format {format}")
        raise HTTPException(status_code=400, detail=f"Unsupported export format: {format}")

    table = session.export_table(locale)
    if not table.data:
        raise HTTPException(status_code=404, detail="No extracted rows to export")

    exporter = exporter_cls()
    content = exporter.render(table)

    return StreamingResponse(
        io.BytesIO(content),
        media_type=exporter.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{exporter.filename(EXPORT_FILENAME)}"'},
    )
