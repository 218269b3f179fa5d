"""FastAPI application for the visa document intake API.

Provides endpoints to create applications, upload documents through the
intake pipeline, read the merged extracted data, and fetch the approval
score.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from src.applications.catalog import DocumentCatalog
from src.applications.models import Document, VisaApplication
from src.applications.service import ApplicationService
from src.exceptions import RecordNotFound
from src.extraction.fields import fields_to_dict
from src.ocr.text_extractor import TextExtractor
from src.pipeline.intake import IntakePipeline
from src.scoring.approval import ApprovalScore
from src.storage.record_store import InMemoryRecordStore
from src.utils.config import load_config
from src.utils.logger import get_logger

from .schemas import (
    ApplicationResponse,
    ChecklistResponse,
    ContactRequest,
    CreateApplicationRequest,
    DateCheckResponse,
    DocumentResponse,
    ExtractedDataResponse,
    HealthResponse,
    RequiredDocumentResponse,
    ScoreResponse,
    UploadResponse,
    VisaTypesResponse,
)

logger = get_logger(__name__)

API_VERSION = "1.0.0"

app = FastAPI(
    title="Visa Document Intake API",
    description="Collect visa documents, extract their fields, and score applications",
    version=API_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/tiff",
    "application/pdf",
    "application/octet-stream",
}


@dataclass
class Components:
    """Shared services behind the API."""

    service: ApplicationService
    pipeline: IntakePipeline
    extractor: TextExtractor


_components: Components | None = None


def _get_components() -> Components:
    """Build the shared services on first use and return them."""
    global _components
    if _components is None:
        config = load_config()
        catalog = DocumentCatalog(Path(config.catalog.required_documents_path))
        service = ApplicationService(InMemoryRecordStore(), catalog)
        extractor = TextExtractor(config)
        _components = Components(
            service=service,
            pipeline=IntakePipeline(service, extractor, config.scoring),
            extractor=extractor,
        )
    return _components


def _application_response(application: VisaApplication) -> ApplicationResponse:
    extracted = None
    data = application.extracted_data
    if data is not None and not data.is_empty():
        extracted = ExtractedDataResponse(
            values={k: v for k, v in data.values().items() if v},
            sources=dict(data.sources),
        )
    return ApplicationResponse(
        id=application.id,
        customer_name=application.customer_name,
        visa_type=application.visa_type,
        start_date=application.start_date,
        end_date=application.end_date,
        status=application.status,
        shareable_link=application.shareable_link,
        created=application.created,
        updated=application.updated,
        extracted_data=extracted,
    )


def _document_response(document: Document) -> DocumentResponse:
    return DocumentResponse(
        id=document.id,
        application_id=document.application_id,
        type=document.type,
        name=document.name,
        status=document.status,
        uploaded_at=document.uploaded_at,
        extracted_fields=(
            fields_to_dict(document.extracted_fields)
            if document.extracted_fields is not None
            else None
        ),
    )


def _score_response(score: ApprovalScore) -> ScoreResponse:
    return ScoreResponse(
        score=score.score,
        tier=score.tier,
        message=score.message,
        date_check=(
            DateCheckResponse(
                match=score.date_check.match, message=score.date_check.message
            )
            if score.date_check is not None
            else None
        ),
    )


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return system health status."""
    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        tesseract_available=_get_components().extractor.engine.check_available(),
    )


@app.get("/checklist", response_model=VisaTypesResponse)
async def list_visa_types() -> VisaTypesResponse:
    """List the visa types that have a document checklist."""
    return VisaTypesResponse(visa_types=_get_components().service.catalog.visa_types())


@app.get("/checklist/{visa_type}", response_model=ChecklistResponse)
async def get_checklist(visa_type: str) -> ChecklistResponse:
    """List the documents required for a visa type."""
    try:
        specs = _get_components().service.catalog.get_required_documents_for_type(
            visa_type
        )
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc.args[0])) from exc

    return ChecklistResponse(
        visa_type=visa_type.upper(),
        documents=[
            RequiredDocumentResponse(
                type=spec.type,
                name=spec.name,
                description=spec.description,
                required=spec.required,
            )
            for spec in specs
        ],
    )


@app.post("/applications", response_model=ApplicationResponse, status_code=201)
async def create_application(body: CreateApplicationRequest) -> ApplicationResponse:
    """Create an application with one pending document per checklist entry."""
    try:
        application = _get_components().service.create_application(
            body.customer_name, body.start_date, body.end_date, body.visa_type
        )
    except KeyError as exc:
        raise HTTPException(status_code=400, detail=str(exc.args[0])) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _application_response(application)


@app.get("/applications/{application_id}", response_model=ApplicationResponse)
async def get_application(application_id: str) -> ApplicationResponse:
    """Return an application with its merged extracted data."""
    try:
        application = _get_components().service.get_application(application_id)
    except RecordNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _application_response(application)


@app.post("/upload/{token}/contact", response_model=ApplicationResponse)
async def submit_contact(token: str, body: ContactRequest) -> ApplicationResponse:
    """Record the traveler's contact details from the shared link."""
    try:
        application = _get_components().service.record_customer_contact(
            token, body.email, body.phone
        )
    except RecordNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _application_response(application)


@app.get(
    "/applications/{application_id}/documents",
    response_model=list[DocumentResponse],
)
async def list_documents(application_id: str) -> list[DocumentResponse]:
    """List an application's documents and their upload status."""
    try:
        documents = _get_components().service.get_documents(application_id)
    except RecordNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return [_document_response(d) for d in documents]


@app.post(
    "/applications/{application_id}/documents/{document_id}",
    response_model=UploadResponse,
)
async def upload_document(
    application_id: str,
    document_id: str,
    file: Annotated[UploadFile, File(...)],
) -> UploadResponse:
    """Upload a document and run it through the intake pipeline.

    An OCR failure does not fail the upload; it is reported in
    ``extraction_error`` and the document is still marked received.
    """
    if file.content_type and file.content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {file.content_type}",
        )

    components = _get_components()
    try:
        document = components.service.get_document(document_id)
    except RecordNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    if document.application_id != application_id:
        raise HTTPException(
            status_code=404,
            detail=f"Document {document_id} does not belong to {application_id}",
        )

    content = await file.read()
    result = await components.pipeline.process_upload(
        document_id, content, url=file.filename
    )
    return UploadResponse(
        document=_document_response(result.document),
        score=_score_response(result.score),
        extraction_error=result.extraction_error,
    )


@app.get("/applications/{application_id}/score", response_model=ScoreResponse)
async def get_score(application_id: str) -> ScoreResponse:
    """Return the current approval-likelihood score."""
    try:
        score = _get_components().pipeline.score(application_id)
    except RecordNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _score_response(score)
