"""Document session: submit, extract, reconcile and export purchase orders."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4

from pydantic import ValidationError

from ..catalog import CatalogStore
from ..config import get_settings
from ..exporters import ExportTable, build_export_table
from ..extractors import SUPPORTED_MEDIA_TYPES, BaseExtractor, OrderExtractor
from ..reconciliation import FlattenResult, active_columns, flatten, label_function
from .exceptions import ExtractionError
from .models import DocumentStatus, Extraction

logger = logging.getLogger(__name__)


@dataclass
class DocumentSlot:
    """A submitted document and the outcome of its latest extraction."""

    document_id: str
    filename: str
    media_type: str
    content: bytes = field(repr=False)
    status: DocumentStatus = DocumentStatus.WAITING
    error_message: str | None = None
    extraction: Extraction | None = None
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    processing_time_ms: int | None = None


class OrderSession:
    """
    In-memory batch of purchase-order documents.

    Orchestrates: Submit -> Extract (per document) -> Flatten -> Export

    Each document owns one slot keyed by its ``document_id``. Extractions
    run concurrently up to ``max_concurrency``; a finished extraction
    replaces its slot's previous one in a single step, so row building
    always sees complete extractions.
    """

    def __init__(
        self,
        extractor: BaseExtractor | None = None,
        catalog: CatalogStore | None = None,
        max_concurrency: int | None = None,
        match_threshold: float | None = None,
        locale: str | None = None,
    ):
        """
        Initialize session.

        If not provided, creates default instances from settings.
        """
        settings = get_settings()

        self._extractor = extractor
        self.catalog = catalog if catalog is not None else CatalogStore()
        self.max_concurrency = max_concurrency or settings.max_concurrent_extractions
        self.match_threshold = match_threshold if match_threshold is not None else settings.match_threshold
        self.locale = locale or settings.export_locale
        self.max_file_size_bytes = settings.max_file_size_bytes

        self._slots: dict[str, DocumentSlot] = {}
        self._lock = asyncio.Lock()

    @property
    def extractor(self) -> BaseExtractor:
        """Lazy load the OpenAI extractor on first use."""
        if self._extractor is None:
            self._extractor = OrderExtractor()
        return self._extractor

    @property
    def slots(self) -> list[DocumentSlot]:
        """Slots in submission order."""
        return list(self._slots.values())

    def submit(
        self,
        content: bytes,
        filename: str,
        media_type: str,
        document_id: str | None = None,
    ) -> DocumentSlot:
        """
        Add a document to the session.

        Args:
            content: File bytes
            filename: Original filename
            media_type: MIME type (PDF, PNG or JPEG)
            document_id: Caller-supplied identifier; a UUID is generated if None

        Returns:
            The new slot, waiting for processing

        Raises:
            ValueError: If the type is unsupported or the file too large
        """
        if media_type not in SUPPORTED_MEDIA_TYPES:
            raise ValueError(f"Unsupported document type {media_type} for {filename}")
        if len(content) > self.max_file_size_bytes:
            raise ValueError(
                f"File size {len(content)} bytes exceeds maximum "
                f"{self.max_file_size_bytes} bytes"
            )

        slot = DocumentSlot(
            document_id=document_id or str(uuid4()),
            filename=filename,
            media_type=media_type,
            content=content,
        )
        self._slots[slot.document_id] = slot
        logger.info(f"Submitted {filename} as {slot.document_id}")
        return slot

    def get(self, document_id: str) -> DocumentSlot:
        """Raises KeyError for an unknown document."""
        if document_id not in self._slots:
            raise KeyError(f"Document {document_id} not found")
        return self._slots[document_id]

    def remove(self, document_id: str) -> None:
        self.get(document_id)
        del self._slots[document_id]

    def clear(self) -> None:
        self._slots.clear()

    def requeue(self, document_id: str) -> DocumentSlot:
        """Mark a document for extraction again; its extraction is kept until replaced."""
        slot = self.get(document_id)
        if slot.status == DocumentStatus.PROCESSING:
            raise ValueError(f"Document {document_id} is being processed")
        slot.status = DocumentStatus.WAITING
        slot.error_message = None
        return slot

    async def process_pending(self) -> list[DocumentSlot]:
        """
        Extract every waiting document.

        Failures are recorded on the failing slot and never stop the others.

        Returns:
            The slots that were processed
        """
        async with self._lock:
            pending = [slot for slot in self._slots.values() if slot.status == DocumentStatus.WAITING]
            if not pending:
                return []

            for slot in pending:
                slot.status = DocumentStatus.PROCESSING

            semaphore = asyncio.Semaphore(self.max_concurrency)

            async def run(slot: DocumentSlot) -> None:
                async with semaphore:
                    await self._process_slot(slot)

            await asyncio.gather(*(run(slot) for slot in pending))

        done = sum(1 for slot in pending if slot.status == DocumentStatus.DONE)
        logger.info(f"Processed {len(pending)} document(s): {done} done, {len(pending) - done} failed")
        return pending

    async def _process_slot(self, slot: DocumentSlot) -> None:
        start_time = time.time()
        logger.info(f"Processing {slot.filename} ({slot.media_type})")

        try:
            payload = await self.extractor.extract(slot.content, slot.media_type, slot.filename)
            try:
                extraction = Extraction.from_payload(payload, slot.document_id, slot.filename)
            except ValidationError as e:
                raise ExtractionError(f"Extraction has an unexpected shape: {e}", slot.document_id) from e
        except ExtractionError as e:
            slot.status = DocumentStatus.ERROR
            slot.error_message = e.message
            logger.error(f"Extraction failed for {slot.filename}: {e.message}")
            return
        except Exception as e:
            slot.status = DocumentStatus.ERROR
            slot.error_message = str(e) or type(e).__name__
            logger.exception(f"Unexpected error processing {slot.filename}: {e}")
            return
        finally:
            slot.processing_time_ms = int((time.time() - start_time) * 1000)

        if self._slots.get(slot.document_id) is not slot:
            logger.info(f"Discarding extraction for removed document {slot.document_id}")
            return

        slot.extraction = extraction
        slot.status = DocumentStatus.DONE
        slot.error_message = None
        logger.info(f"Extracted {len(extraction.lines)} line(s) from {slot.filename}")

    def extractions(self) -> list[Extraction]:
        """Latest successful extraction of each document, in submission order."""
        return [slot.extraction for slot in self._slots.values() if slot.extraction is not None]

    def build_rows(self) -> FlattenResult:
        """Flatten the successful extractions against the current catalog."""
        return flatten(self.extractions(), self.catalog.entries, self.match_threshold)

    def export_table(self, locale: str | None = None) -> ExportTable:
        """Rows laid out for an exporter, restricted to active columns."""
        result = self.build_rows()
        columns = active_columns(result.rows, result.max_delivery_count)
        return build_export_table(result.rows, columns, label_function(locale or self.locale))
