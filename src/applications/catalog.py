"""Required-document checklists per visa type.

Checklists are loaded once from a YAML file, falling back to the
built-in UAE checklist when no file is available.
"""

from pathlib import Path

import yaml

from src.utils.logger import get_logger

from .models import DocumentType, RequiredDocumentSpec

logger = get_logger(__name__)

UAE_REQUIRED_DOCUMENTS: tuple[RequiredDocumentSpec, ...] = (
    RequiredDocumentSpec(
        DocumentType.PASSPORT,
        "Passport Scan",
        "Clear scan of passport bio page. Must be valid for at least 6 months "
        "after planned return date.",
    ),
    RequiredDocumentSpec(
        DocumentType.PHOTO,
        "Passport Photo",
        "Recent passport-sized photograph with white background (3.5 x 4.5 cm).",
    ),
    RequiredDocumentSpec(
        DocumentType.SELFIE,
        "Selfie Photo",
        "Selfie taken with a webcam, sized to 45mm x 45mm.",
    ),
    RequiredDocumentSpec(
        DocumentType.TAX_ID_CARD,
        "PAN Card",
        "Clear scan of the national tax-ID (PAN) card.",
    ),
    RequiredDocumentSpec(
        DocumentType.FLIGHT_TICKET,
        "Flight Tickets",
        "Confirmed return flight tickets to and from UAE.",
    ),
    RequiredDocumentSpec(
        DocumentType.HOTEL_BOOKING,
        "Hotel Booking",
        "Confirmed hotel reservations for the entire duration of stay in UAE.",
    ),
    RequiredDocumentSpec(
        DocumentType.BANK_STATEMENT,
        "Bank Statement",
        "Last 3 months bank statements showing sufficient funds for travel.",
    ),
)


class DocumentCatalog:
    """Static lookup of required documents by visa type.

    Args:
        catalog_path: YAML file mapping visa types to checklist entries.
    """

    def __init__(
        self, catalog_path: Path = Path("configs/required_documents.yaml")
    ) -> None:
        self.checklists = self._load_checklists(catalog_path)

    def _load_checklists(self, path: Path) -> dict[str, tuple[RequiredDocumentSpec, ...]]:
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f)
            if data:
                logger.info("Loaded document checklists from %s", path)
                return {
                    visa_type.upper(): tuple(self._parse_entry(e) for e in entries)
                    for visa_type, entries in data.items()
                }
        logger.debug("Using default UAE document checklist")
        return {"UAE": UAE_REQUIRED_DOCUMENTS}

    @staticmethod
    def _parse_entry(entry: dict) -> RequiredDocumentSpec:
        return RequiredDocumentSpec(
            type=DocumentType(entry["type"]),
            name=entry["name"],
            description=entry.get("description", ""),
            required=bool(entry.get("required", True)),
        )

    def visa_types(self) -> list[str]:
        return sorted(self.checklists)

    def get_required_documents_for_type(
        self, visa_type: str
    ) -> list[RequiredDocumentSpec]:
        """Return the checklist for ``visa_type``.

        Raises:
            KeyError: If the visa type has no checklist.
        """
        key = visa_type.upper()
        if key not in self.checklists:
            raise KeyError(f"No document checklist for visa type: {visa_type}")
        return list(self.checklists[key])
