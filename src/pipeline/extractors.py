"""Per-document-type extraction: recognized text run through its parser."""

from collections.abc import Callable
from pathlib import Path

from src.applications.models import DocumentType
from src.extraction.fields import (
    ExtractedFields,
    FlightTicketFields,
    PassportFields,
    TaxIdFields,
)
from src.extraction.flight_ticket_parser import parse_flight_ticket_text
from src.extraction.passport_parser import parse_passport_text
from src.extraction.tax_id_parser import parse_tax_id_text
from src.ocr.text_extractor import TextExtractor

PARSERS: dict[DocumentType, Callable[[str], ExtractedFields]] = {
    DocumentType.PASSPORT: parse_passport_text,
    DocumentType.TAX_ID_CARD: parse_tax_id_text,
    DocumentType.FLIGHT_TICKET: parse_flight_ticket_text,
}


def parser_for(document_type: DocumentType) -> Callable[[str], ExtractedFields] | None:
    """Parser for a document type, or ``None`` for types with no fields."""
    return PARSERS.get(document_type)


async def extract_passport_data(
    image: Path | bytes, extractor: TextExtractor
) -> PassportFields:
    """Recognize a passport scan and parse its fields.

    Raises:
        ExtractionFailed: If recognition fails.
    """
    return parse_passport_text(await extractor.extract_async(image, "passport"))


async def extract_tax_id_data(
    image: Path | bytes, extractor: TextExtractor
) -> TaxIdFields:
    """Recognize a tax-ID card scan and parse its fields.

    Raises:
        ExtractionFailed: If recognition fails.
    """
    return parse_tax_id_text(await extractor.extract_async(image, "tax_id_card"))


async def extract_flight_ticket_data(
    image: Path | bytes, extractor: TextExtractor
) -> FlightTicketFields:
    """Recognize a flight ticket and parse its travel dates.

    Raises:
        ExtractionFailed: If recognition fails.
    """
    return parse_flight_ticket_text(
        await extractor.extract_async(image, "flight_ticket")
    )
