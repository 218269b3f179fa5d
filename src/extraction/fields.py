"""Typed records produced by the document field parsers.

Each parser returns its own variant with a fixed ``document_type``
discriminant; the merge policy folds them into an
``ApplicationExtractedData`` record scoped to one application.
"""

from dataclasses import asdict, dataclass, field, fields
from typing import Literal


@dataclass
class PassportFields:
    """Fields read from a passport bio page."""

    document_type: Literal["passport"] = "passport"
    full_name: str | None = None
    date_of_birth: str | None = None
    date_of_issue: str | None = None
    date_of_expiry: str | None = None
    document_number: str | None = None
    passport_number: str | None = None
    nationality: str | None = None


@dataclass
class TaxIdFields:
    """Fields read from a national tax-ID card."""

    document_type: Literal["tax_id"] = "tax_id"
    tax_id: str | None = None
    full_name: str | None = None
    date_of_birth: str | None = None


@dataclass
class FlightTicketFields:
    """Travel dates read from a flight ticket."""

    document_type: Literal["flight_ticket"] = "flight_ticket"
    departure_date: str | None = None
    return_date: str | None = None


ExtractedFields = PassportFields | TaxIdFields | FlightTicketFields

_VARIANTS: dict[str, type] = {
    "passport": PassportFields,
    "tax_id": TaxIdFields,
    "flight_ticket": FlightTicketFields,
}


@dataclass
class ApplicationExtractedData:
    """Merged extracted data for one application.

    ``sources`` maps each populated field to the document type that
    supplied its current value.
    """

    full_name: str | None = None
    date_of_birth: str | None = None
    date_of_issue: str | None = None
    date_of_expiry: str | None = None
    document_number: str | None = None
    passport_number: str | None = None
    nationality: str | None = None
    tax_id: str | None = None
    departure_date: str | None = None
    return_date: str | None = None
    sources: dict[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not any(self.values().values())

    def values(self) -> dict[str, str | None]:
        """Return the field values without provenance."""
        return {
            f.name: getattr(self, f.name) for f in fields(self) if f.name != "sources"
        }


def populated(record: ExtractedFields) -> dict[str, str]:
    """Return the non-empty value fields of a parser record."""
    return {
        name: value
        for name, value in asdict(record).items()
        if name != "document_type" and value
    }


def fields_to_dict(record: ExtractedFields) -> dict[str, str]:
    """Serialize a parser record, keeping the discriminant and set fields."""
    return {"document_type": record.document_type, **populated(record)}


def fields_from_dict(data: dict) -> ExtractedFields:
    """Rebuild a parser record from its serialized form.

    Raises:
        ValueError: If the discriminant names no known variant.
    """
    document_type = data.get("document_type")
    variant = _VARIANTS.get(document_type)
    if variant is None:
        raise ValueError(f"Unknown extracted fields type: {document_type}")
    known = {f.name for f in fields(variant)}
    return variant(**{k: v for k, v in data.items() if k in known})
