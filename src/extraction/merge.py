"""Precedence-based merge of per-document records into application data.

When two documents supply the same logical field, the value from the
higher-precedence document type wins. Equal precedence (a re-upload of
the same document type) overwrites. Empty values never overwrite. A value
with no recorded source (set by hand, or loaded without provenance) ranks
with the highest document type, so only a passport replaces it.
"""

from dataclasses import replace

from src.utils.logger import get_logger

from .fields import ApplicationExtractedData, ExtractedFields, populated

logger = get_logger(__name__)

SOURCE_PRECEDENCE: dict[str, int] = {
    "passport": 3,
    "tax_id": 2,
    "tax_id_card": 2,
    "flight_ticket": 1,
}


def precedence(source_type: str | None) -> int:
    """Rank of a document type; unknown types only fill gaps."""
    return SOURCE_PRECEDENCE.get(source_type or "", 0)


UNSOURCED_PRECEDENCE = max(SOURCE_PRECEDENCE.values())


def merge_extracted_data(
    existing: ApplicationExtractedData | None,
    incoming: ExtractedFields,
    source_type: str | None = None,
) -> ApplicationExtractedData:
    """Fold a parser record into the application's merged data.

    Args:
        existing: Current merged record, or ``None`` for a fresh application.
        incoming: Record produced by one of the field parsers.
        source_type: Document type that produced ``incoming``. Defaults to
            the record's own discriminant.

    Returns:
        A new merged record; ``existing`` is not modified.
    """
    source = source_type or incoming.document_type
    rank = precedence(source)
    base = existing or ApplicationExtractedData()
    merged = replace(base, sources=dict(base.sources))

    values = populated(incoming)
    # document_number and passport_number are aliases on passports
    if "document_number" in values and "passport_number" not in values:
        values["passport_number"] = values["document_number"]

    for name, value in values.items():
        current = getattr(merged, name)
        current_source = merged.sources.get(name)
        if current_source is None:
            current_rank = UNSOURCED_PRECEDENCE
        else:
            current_rank = precedence(current_source)
        if current and rank < current_rank:
            logger.debug("Kept %s from %s over %s", name, current_source, source)
            continue
        setattr(merged, name, value)
        merged.sources[name] = source

    return merged
