"""Shared test fixtures for the visa document intake test suite."""

from datetime import datetime
from pathlib import Path

import numpy as np
import pytest
from hypothesis import settings

from src.applications.catalog import DocumentCatalog
from src.applications.service import ApplicationService
from src.storage.record_store import InMemoryRecordStore

settings.register_profile("default", max_examples=100)
settings.register_profile("dev", max_examples=10)
settings.load_profile("default")

PASSPORT_TEXT = (
    "REPUBLIC OF INDIA\n"
    "Passport No: P1234567\n"
    "Surname: SHARMA\n"
    "Given Names: RAHUL\n"
    "Nationality: INDIAN\n"
    "Date of Birth: 14/08/1990\n"
    "Date of Issue: 02/03/2018\n"
    "Date of Expiry: 01/03/2028\n"
)

TAX_ID_TEXT = "INCOME TAX DEPARTMENT\nName: Jane Doe\nPAN ABCDE1234F\nDOB: 01/02/1990"

FLIGHT_TEXT = (
    "E-TICKET RECEIPT\n"
    "Departure: 12/03/2025 BOM -> DXB\n"
    "Return: 20/03/2025 DXB -> BOM\n"
)


@pytest.fixture
def sample_image() -> np.ndarray:
    """Create a simple synthetic grayscale test image."""
    image = np.zeros((200, 300), dtype=np.uint8)
    image[50:150, 50:250] = 255
    return image


@pytest.fixture
def sample_color_image() -> np.ndarray:
    """Create a simple synthetic RGB test image."""
    image = np.zeros((200, 300, 3), dtype=np.uint8)
    image[50:150, 50:250] = (255, 255, 255)
    return image


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def catalog() -> DocumentCatalog:
    """Catalog with the built-in UAE checklist."""
    return DocumentCatalog(Path("/nonexistent/required_documents.yaml"))


@pytest.fixture
def service(catalog: DocumentCatalog) -> ApplicationService:
    """Application service over an empty in-memory store."""
    return ApplicationService(InMemoryRecordStore(), catalog)


@pytest.fixture
def visa_window() -> tuple[datetime, datetime]:
    return datetime(2025, 3, 12), datetime(2025, 3, 20)


@pytest.fixture
def passport_text() -> str:
    return PASSPORT_TEXT


@pytest.fixture
def tax_id_text() -> str:
    return TAX_ID_TEXT


@pytest.fixture
def flight_text() -> str:
    return FLIGHT_TEXT
