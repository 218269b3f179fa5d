"""Pydantic request/response schemas for the FastAPI endpoints."""

from datetime import datetime

from pydantic import BaseModel


class RequiredDocumentResponse(BaseModel):
    """One checklist entry."""

    type: str
    name: str
    description: str
    required: bool


class VisaTypesResponse(BaseModel):
    visa_types: list[str]


class ChecklistResponse(BaseModel):
    visa_type: str
    documents: list[RequiredDocumentResponse]


class CreateApplicationRequest(BaseModel):
    """Request body for creating a visa application."""

    customer_name: str
    start_date: datetime
    end_date: datetime
    visa_type: str = "UAE"


class ContactRequest(BaseModel):
    """Traveler contact details submitted from the shared link."""

    email: str
    phone: str | None = None


class ExtractedDataResponse(BaseModel):
    """Merged extracted data with the document type behind each field."""

    values: dict[str, str]
    sources: dict[str, str]


class ApplicationResponse(BaseModel):
    """Response schema for a visa application."""

    id: str
    customer_name: str
    visa_type: str
    start_date: datetime
    end_date: datetime
    status: str
    shareable_link: str | None = None
    created: datetime
    updated: datetime
    extracted_data: ExtractedDataResponse | None = None


class DocumentResponse(BaseModel):
    """Response schema for a document slot."""

    id: str
    application_id: str
    type: str
    name: str
    status: str
    uploaded_at: datetime | None = None
    extracted_fields: dict[str, str] | None = None


class DateCheckResponse(BaseModel):
    match: bool
    message: str


class ScoreResponse(BaseModel):
    """Approval-likelihood score for an application."""

    score: int
    tier: str
    message: str
    date_check: DateCheckResponse | None = None


class UploadResponse(BaseModel):
    """Result of uploading one document."""

    document: DocumentResponse
    score: ScoreResponse
    extraction_error: str | None = None


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    tesseract_available: bool
