"""Tests for the FastAPI REST endpoints."""

import io
from unittest.mock import AsyncMock, MagicMock

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

import src.api.app as api_module
from src.api.app import Components, app
from src.applications.service import ApplicationService
from src.exceptions import ExtractionFailed
from src.extraction.fields import ApplicationExtractedData
from src.pipeline.intake import IntakePipeline


def _make_test_image_bytes() -> bytes:
    """Create a minimal PNG image as bytes."""
    img = Image.fromarray(np.zeros((100, 200, 3), dtype=np.uint8))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def extractor() -> MagicMock:
    """Text extractor stand-in; recognized text is set per test."""
    mock = MagicMock()
    mock.engine.check_available.return_value = True
    mock.extract_async = AsyncMock(return_value="")
    return mock


@pytest.fixture
def client(
    service: ApplicationService,
    extractor: MagicMock,
    monkeypatch: pytest.MonkeyPatch,
) -> TestClient:
    """Create a FastAPI test client over fresh in-memory state."""
    components = Components(
        service=service,
        pipeline=IntakePipeline(service, extractor),
        extractor=extractor,
    )
    monkeypatch.setattr(api_module, "_components", components)
    return TestClient(app)


def _create(client: TestClient, **overrides) -> dict:
    body = {
        "customer_name": "Rahul Sharma",
        "start_date": "2025-03-12T00:00:00",
        "end_date": "2025-03-20T00:00:00",
    }
    body.update(overrides)
    response = client.post("/applications", json=body)
    assert response.status_code == 201
    return response.json()


def _document_id(client: TestClient, application_id: str, doc_type: str) -> str:
    documents = client.get(f"/applications/{application_id}/documents").json()
    return next(d["id"] for d in documents if d["type"] == doc_type)


def _upload(client: TestClient, application_id: str, document_id: str, **kwargs):
    return client.post(
        f"/applications/{application_id}/documents/{document_id}",
        files={"file": ("scan.png", _make_test_image_bytes(), "image/png")},
        **kwargs,
    )


class TestHealthEndpoint:
    """Tests for the /health endpoint."""

    def test_health_returns_ok(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert data["tesseract_available"] is True


class TestChecklistEndpoint:
    def test_uae_checklist(self, client: TestClient) -> None:
        response = client.get("/checklist/uae")
        assert response.status_code == 200
        data = response.json()
        assert data["visa_type"] == "UAE"
        assert len(data["documents"]) == 7
        assert data["documents"][0]["type"] == "passport"

    def test_unknown_visa_type(self, client: TestClient) -> None:
        assert client.get("/checklist/atlantis").status_code == 404

    def test_lists_visa_types(self, client: TestClient) -> None:
        response = client.get("/checklist")
        assert response.status_code == 200
        assert response.json() == {"visa_types": ["UAE"]}


class TestApplicationEndpoints:
    def test_create_application(self, client: TestClient) -> None:
        data = _create(client)
        assert data["status"] == "pending"
        assert data["visa_type"] == "UAE"
        assert data["shareable_link"].startswith("/upload/")
        assert data["extracted_data"] is None

    def test_create_with_inverted_window(self, client: TestClient) -> None:
        response = client.post(
            "/applications",
            json={
                "customer_name": "Rahul Sharma",
                "start_date": "2025-03-20T00:00:00",
                "end_date": "2025-03-12T00:00:00",
            },
        )
        assert response.status_code == 400

    def test_create_with_unknown_visa_type(self, client: TestClient) -> None:
        response = client.post(
            "/applications",
            json={
                "customer_name": "Rahul Sharma",
                "start_date": "2025-03-12T00:00:00",
                "end_date": "2025-03-20T00:00:00",
                "visa_type": "atlantis",
            },
        )
        assert response.status_code == 400

    def test_create_missing_fields(self, client: TestClient) -> None:
        assert client.post("/applications", json={}).status_code == 422

    def test_get_application(self, client: TestClient) -> None:
        created = _create(client)
        response = client.get(f"/applications/{created['id']}")
        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

    def test_empty_extracted_data_is_omitted(
        self, client: TestClient, service: ApplicationService
    ) -> None:
        created = _create(client)
        service.set_application_extracted_data(created["id"], ApplicationExtractedData())
        response = client.get(f"/applications/{created['id']}")
        assert response.json()["extracted_data"] is None

    def test_get_unknown_application(self, client: TestClient) -> None:
        response = client.get("/applications/missing")
        assert response.status_code == 404
        assert "Application not found" in response.json()["detail"]

    def test_list_documents(self, client: TestClient) -> None:
        created = _create(client)
        documents = client.get(f"/applications/{created['id']}/documents").json()
        assert len(documents) == 7
        assert all(d["status"] == "pending" for d in documents)

    def test_submit_contact(self, client: TestClient) -> None:
        created = _create(client)
        token = created["shareable_link"].rsplit("/", 1)[-1]
        response = client.post(
            f"/upload/{token}/contact", json={"email": "rahul@example.com"}
        )
        assert response.status_code == 200
        assert response.json()["status"] == "documents_requested"

    def test_submit_contact_unknown_token(self, client: TestClient) -> None:
        response = client.post("/upload/nope/contact", json={"email": "a@example.com"})
        assert response.status_code == 404


class TestUploadEndpoint:
    def test_upload_passport(
        self, client: TestClient, extractor: MagicMock, passport_text: str
    ) -> None:
        extractor.extract_async.return_value = passport_text
        created = _create(client)
        document_id = _document_id(client, created["id"], "passport")

        response = _upload(client, created["id"], document_id)

        assert response.status_code == 200
        data = response.json()
        assert data["extraction_error"] is None
        assert data["document"]["status"] == "received"
        assert data["document"]["extracted_fields"]["passport_number"] == "P1234567"
        assert data["score"]["score"] == 14
        assert data["score"]["tier"] == "Low"

        application = client.get(f"/applications/{created['id']}").json()
        assert application["extracted_data"]["values"]["passport_number"] == "P1234567"
        assert application["extracted_data"]["sources"]["full_name"] == "passport"

    def test_upload_with_extraction_failure(
        self, client: TestClient, extractor: MagicMock
    ) -> None:
        extractor.extract_async.side_effect = ExtractionFailed("Unreadable image")
        created = _create(client)
        document_id = _document_id(client, created["id"], "tax_id_card")

        response = _upload(client, created["id"], document_id)

        assert response.status_code == 200
        data = response.json()
        assert data["extraction_error"] == "Unreadable image"
        assert data["document"]["status"] == "received"
        assert data["document"]["extracted_fields"] is None

    def test_upload_unsupported_type(self, client: TestClient) -> None:
        created = _create(client)
        document_id = _document_id(client, created["id"], "passport")
        response = client.post(
            f"/applications/{created['id']}/documents/{document_id}",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 400

    def test_upload_unknown_document(self, client: TestClient) -> None:
        created = _create(client)
        assert _upload(client, created["id"], "missing").status_code == 404

    def test_upload_document_of_other_application(self, client: TestClient) -> None:
        first = _create(client)
        second = _create(client)
        document_id = _document_id(client, first["id"], "passport")
        assert _upload(client, second["id"], document_id).status_code == 404


class TestScoreEndpoint:
    def test_score_for_new_application(self, client: TestClient) -> None:
        created = _create(client)
        response = client.get(f"/applications/{created['id']}/score")
        assert response.status_code == 200
        data = response.json()
        assert data["score"] == 0
        assert data["tier"] == "Low"
        assert data["date_check"] is None

    def test_score_with_flight_ticket(
        self, client: TestClient, extractor: MagicMock, flight_text: str
    ) -> None:
        extractor.extract_async.return_value = flight_text
        created = _create(client)
        document_id = _document_id(client, created["id"], "flight_ticket")
        _upload(client, created["id"], document_id)

        data = client.get(f"/applications/{created['id']}/score").json()
        assert data["score"] == 25
        assert data["date_check"]["match"] is True

    def test_score_unknown_application(self, client: TestClient) -> None:
        assert client.get("/applications/missing/score").status_code == 404
