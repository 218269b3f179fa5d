"""Upload intake: extract, parse, record, merge and score one document.

Extraction for different documents runs concurrently. Record updates for
a single application are serialized by a per-application lock so two
uploads for the same traveler cannot lose each other's merged fields.
An OCR failure never blocks the upload: the document is still marked
received, only without extracted fields.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

from src.applications.models import Document, DocumentStatus
from src.applications.service import ApplicationService
from src.exceptions import ExtractionFailed
from src.extraction.fields import ExtractedFields
from src.extraction.merge import merge_extracted_data
from src.ocr.text_extractor import TextExtractor
from src.scoring.approval import ApprovalScore, compute_approval_score
from src.utils.config import ScoringConfig
from src.utils.logger import get_logger

from .extractors import parser_for

logger = get_logger(__name__)


@dataclass
class IntakeResult:
    """What one upload cycle produced."""

    document: Document
    extracted_fields: ExtractedFields | None
    score: ApprovalScore
    extraction_error: str | None = None


class IntakePipeline:
    """Runs the extract, parse, merge and score cycle for uploads.

    Args:
        service: Application and document records.
        extractor: Text extractor for uploaded images.
        scoring: Tier thresholds and date tolerance.
    """

    def __init__(
        self,
        service: ApplicationService,
        extractor: TextExtractor,
        scoring: ScoringConfig | None = None,
    ) -> None:
        self.service = service
        self.extractor = extractor
        self.scoring = scoring or ScoringConfig()
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @asynccontextmanager
    async def _application_lock(self, application_id: str):
        """Hold the application's lock; drop it once no upload holds or awaits it."""
        lock = self._locks.setdefault(application_id, asyncio.Lock())
        self._lock_users[application_id] = self._lock_users.get(application_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[application_id] -= 1
            if not self._lock_users[application_id]:
                del self._lock_users[application_id]
                del self._locks[application_id]

    async def process_upload(
        self,
        document_id: str,
        image: Path | bytes,
        url: str | None = None,
    ) -> IntakeResult:
        """Handle one uploaded file for a document slot.

        Args:
            document_id: The document slot being uploaded.
            image: Uploaded image or PDF, as a path or raw bytes.
            url: Where the upload transport stored the file, if anywhere.

        Returns:
            The updated document, its parsed fields and the new score.

        Raises:
            DocumentNotFound: If the document id is unknown.
        """
        document = self.service.get_document(document_id)
        fields, error = await self._extract(document, image)

        application_id = document.application_id
        async with self._application_lock(application_id):
            current = self.service.get_document(document_id)
            if current.status != DocumentStatus.PENDING:
                self.service.set_document_status(document_id, DocumentStatus.PENDING)
            updated = self.service.set_document_status(
                document_id, DocumentStatus.RECEIVED, fields, url
            )

            if fields is not None:
                application = self.service.get_application(application_id)
                merged = merge_extracted_data(
                    application.extracted_data, fields, fields.document_type
                )
                self.service.set_application_extracted_data(application_id, merged)

            score = self.score(application_id)

        return IntakeResult(
            document=updated,
            extracted_fields=fields,
            score=score,
            extraction_error=error,
        )

    async def _extract(
        self, document: Document, image: Path | bytes
    ) -> tuple[ExtractedFields | None, str | None]:
        parser = parser_for(document.type)
        if parser is None:
            logger.debug("No field parser for %s documents", document.type)
            return None, None

        try:
            text = await self.extractor.extract_async(image, document.name)
        except ExtractionFailed as exc:
            logger.warning(
                "Extraction failed for document %s (%s): %s",
                document.id,
                document.type,
                exc,
            )
            return None, str(exc)

        return parser(text), None

    def score(self, application_id: str) -> ApprovalScore:
        """Score an application from its current records.

        Raises:
            ApplicationNotFound: If the application id is unknown.
        """
        application = self.service.get_application(application_id)
        return compute_approval_score(
            self.service.get_documents(application_id),
            self.service.get_checklist(application_id),
            application,
            self.scoring,
        )
