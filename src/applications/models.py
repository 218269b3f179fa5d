"""Domain records for visa applications and their documents."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from src.extraction.fields import ApplicationExtractedData, ExtractedFields


class DocumentType(StrEnum):
    """Document kinds an application can require."""

    PASSPORT = "passport"
    PHOTO = "photo"
    FLIGHT_TICKET = "flight_ticket"
    HOTEL_BOOKING = "hotel_booking"
    BANK_STATEMENT = "bank_statement"
    SELFIE = "selfie"
    TAX_ID_CARD = "tax_id_card"
    OTHER = "other"


class DocumentStatus(StrEnum):
    PENDING = "pending"
    RECEIVED = "received"
    REJECTED = "rejected"


class ApplicationStatus(StrEnum):
    PENDING = "pending"
    DOCUMENTS_REQUESTED = "documents_requested"
    DOCUMENTS_RECEIVED = "documents_received"
    IN_PROCESS = "in_process"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class RequiredDocumentSpec:
    """One checklist entry for a visa type."""

    type: DocumentType
    name: str
    description: str
    required: bool = True


@dataclass
class Document:
    """A document slot of an application and its upload state."""

    id: str
    application_id: str
    type: DocumentType
    name: str
    status: DocumentStatus = DocumentStatus.PENDING
    uploaded_at: datetime | None = None
    url: str | None = None
    extracted_fields: ExtractedFields | None = None


@dataclass
class VisaApplication:
    """A visa application and its validity window."""

    id: str
    customer_name: str
    start_date: datetime
    end_date: datetime
    visa_type: str = "UAE"
    status: ApplicationStatus = ApplicationStatus.PENDING
    created: datetime = field(default_factory=datetime.now)
    updated: datetime = field(default_factory=datetime.now)
    share_token: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    extracted_data: ApplicationExtractedData | None = None

    @property
    def shareable_link(self) -> str | None:
        if self.share_token is None:
            return None
        return f"/upload/{self.share_token}"
