"""Application and document records on top of a key-value store.

Creates applications with one document slot per checklist entry and
tracks document and application status. All state lives in the injected
``RecordStore``.
"""

import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from src.exceptions import ApplicationNotFound, DocumentNotFound
from src.extraction.fields import ApplicationExtractedData, ExtractedFields
from src.storage.record_store import RecordStore
from src.utils.logger import get_logger

from .catalog import DocumentCatalog
from .models import (
    ApplicationStatus,
    Document,
    DocumentStatus,
    RequiredDocumentSpec,
    VisaApplication,
)

logger = get_logger(__name__)

_APPLICATION = "application:"
_DOCUMENT = "document:"
_APPLICATION_DOCUMENTS = "application_documents:"


class ApplicationService:
    """Record-store hooks for applications and their documents.

    Args:
        store: Key-value store holding all records.
        catalog: Required-document checklists.
        clock: Source of timestamps for status changes.
    """

    def __init__(
        self,
        store: RecordStore,
        catalog: DocumentCatalog,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.catalog = catalog
        self.clock = clock

    def create_application(
        self,
        customer_name: str,
        start_date: datetime,
        end_date: datetime,
        visa_type: str = "UAE",
    ) -> VisaApplication:
        """Create an application and a pending document per checklist entry.

        Raises:
            ValueError: If the visa window ends before it starts.
            KeyError: If the visa type has no checklist.
        """
        if end_date < start_date:
            raise ValueError("Visa end date is before start date")
        checklist = self.catalog.get_required_documents_for_type(visa_type)

        now = self.clock()
        application = VisaApplication(
            id=str(uuid.uuid4()),
            customer_name=customer_name,
            start_date=start_date,
            end_date=end_date,
            visa_type=visa_type.upper(),
            created=now,
            updated=now,
            share_token=uuid.uuid4().hex[:8],
        )
        self.store.set(_APPLICATION + application.id, application)

        document_ids = []
        for spec in checklist:
            document = Document(
                id=str(uuid.uuid4()),
                application_id=application.id,
                type=spec.type,
                name=spec.name,
            )
            self.store.set(_DOCUMENT + document.id, document)
            document_ids.append(document.id)
        self.store.set(_APPLICATION_DOCUMENTS + application.id, document_ids)

        logger.info(
            "Created %s application %s with %d documents",
            application.visa_type,
            application.id,
            len(document_ids),
        )
        return application

    def get_application(self, application_id: str) -> VisaApplication:
        application = self.store.get(_APPLICATION + application_id)
        if application is None:
            raise ApplicationNotFound(application_id)
        return application

    def list_applications(self) -> list[VisaApplication]:
        return [self.store.get(key) for key in self.store.keys(_APPLICATION)]

    def get_application_by_token(self, token: str) -> VisaApplication:
        for application in self.list_applications():
            if application.share_token == token:
                return application
        raise ApplicationNotFound(token)

    def get_checklist(self, application_id: str) -> list[RequiredDocumentSpec]:
        application = self.get_application(application_id)
        return self.catalog.get_required_documents_for_type(application.visa_type)

    def get_document(self, document_id: str) -> Document:
        document = self.store.get(_DOCUMENT + document_id)
        if document is None:
            raise DocumentNotFound(document_id)
        return document

    def get_documents(self, application_id: str) -> list[Document]:
        self.get_application(application_id)
        ids = self.store.get(_APPLICATION_DOCUMENTS + application_id) or []
        return [self.get_document(document_id) for document_id in ids]

    def set_document_status(
        self,
        document_id: str,
        status: DocumentStatus,
        extracted_fields: ExtractedFields | None = None,
        url: str | None = None,
    ) -> Document:
        """Update a document's status and, when given, its extracted fields.

        Marking the last pending document received moves the application
        to ``documents_received``.

        Raises:
            DocumentNotFound: If the document id is unknown.
        """
        document = self.get_document(document_id)
        updated = replace(document, status=status)
        if url is not None:
            updated.url = url
        if status == DocumentStatus.RECEIVED:
            updated.uploaded_at = self.clock()
        if extracted_fields is not None:
            updated.extracted_fields = extracted_fields
        # a re-upload starts over from an empty slot
        if status == DocumentStatus.PENDING:
            updated.extracted_fields = None
        self.store.set(_DOCUMENT + document_id, updated)
        logger.info("Document %s (%s) is now %s", document_id, document.type, status)

        if status == DocumentStatus.RECEIVED:
            self._mark_if_complete(document.application_id)
        return updated

    def _mark_if_complete(self, application_id: str) -> None:
        documents = self.get_documents(application_id)
        if all(d.status == DocumentStatus.RECEIVED for d in documents):
            self.set_application_status(
                application_id, ApplicationStatus.DOCUMENTS_RECEIVED
            )

    def set_application_status(
        self, application_id: str, status: ApplicationStatus
    ) -> VisaApplication:
        application = replace(
            self.get_application(application_id), status=status, updated=self.clock()
        )
        self.store.set(_APPLICATION + application_id, application)
        logger.info("Application %s is now %s", application_id, status)
        return application

    def set_application_extracted_data(
        self, application_id: str, merged: ApplicationExtractedData
    ) -> VisaApplication:
        application = replace(
            self.get_application(application_id),
            extracted_data=merged,
            updated=self.clock(),
        )
        self.store.set(_APPLICATION + application_id, application)
        return application

    def record_customer_contact(
        self, token: str, email: str, phone: str | None = None
    ) -> VisaApplication:
        """Store the traveler's contact details after they open the link.

        Raises:
            ApplicationNotFound: If no application has this share token.
        """
        application = replace(
            self.get_application_by_token(token),
            customer_email=email,
            customer_phone=phone,
            status=ApplicationStatus.DOCUMENTS_REQUESTED,
            updated=self.clock(),
        )
        self.store.set(_APPLICATION + application.id, application)
        logger.info("Recorded contact details for application %s", application.id)
        return application
