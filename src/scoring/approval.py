"""Approval-likelihood score for a visa application.

The score is the share of required documents received, with one bonus
point in the denominator for a received flight ticket that is earned
only when its dates agree with the visa window.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

from src.applications.models import (
    Document,
    DocumentStatus,
    DocumentType,
    RequiredDocumentSpec,
    VisaApplication,
)
from src.extraction.fields import FlightTicketFields
from src.utils.config import ScoringConfig
from src.utils.logger import get_logger

from .date_check import DateCheckResult, check_flight_dates

logger = get_logger(__name__)


class Tier(StrEnum):
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"


TIER_MESSAGES: dict[Tier, str] = {
    Tier.LOW: "Several required documents are missing.",
    Tier.MODERATE: "More documents needed for higher chances.",
    Tier.HIGH: "Your documentation is nearly complete.",
}


@dataclass
class ApprovalScore:
    """Score, tier and explanations for one application."""

    score: int
    tier: Tier
    message: str
    date_check: DateCheckResult | None = None


def tier_for(score: int, config: ScoringConfig | None = None) -> Tier:
    """Map a score to its tier; each band includes its lower bound."""
    config = config or ScoringConfig()
    if score < config.moderate_threshold:
        return Tier.LOW
    if score < config.high_threshold:
        return Tier.MODERATE
    return Tier.HIGH


def percentage(earned: int, total: int) -> int:
    """``round(100 * earned / total)`` with halves rounded up, in [0, 100]."""
    if total <= 0:
        return 0
    score = (200 * earned + total) // (2 * total)
    return max(0, min(100, score))


def _is_received(documents: Sequence[Document], document_type: DocumentType) -> bool:
    return any(
        d.type == document_type and d.status == DocumentStatus.RECEIVED
        for d in documents
    )


def _flight_dates(
    documents: Sequence[Document], application: VisaApplication
) -> tuple[str | None, str | None]:
    for document in documents:
        if (
            document.type == DocumentType.FLIGHT_TICKET
            and document.status == DocumentStatus.RECEIVED
            and isinstance(document.extracted_fields, FlightTicketFields)
        ):
            fields = document.extracted_fields
            if fields.departure_date or fields.return_date:
                return fields.departure_date, fields.return_date

    merged = application.extracted_data
    if merged is not None:
        return merged.departure_date, merged.return_date
    return None, None


def compute_approval_score(
    documents: Sequence[Document],
    checklist: Sequence[RequiredDocumentSpec],
    application: VisaApplication | None = None,
    config: ScoringConfig | None = None,
) -> ApprovalScore:
    """Score an application's completeness and date consistency.

    Args:
        documents: The application's documents with their status.
        checklist: Required-document entries for the visa type.
        application: The application record; without it the score is 0.
        config: Tier thresholds and date tolerance.

    Returns:
        The score in [0, 100], its tier, the tier message, and the
        flight date check when a flight ticket has been received.
    """
    config = config or ScoringConfig()

    if application is None:
        return ApprovalScore(score=0, tier=Tier.LOW, message=TIER_MESSAGES[Tier.LOW])

    required = [spec for spec in checklist if spec.required]
    total_points = len(required)
    earned_points = sum(1 for spec in required if _is_received(documents, spec.type))

    date_check: DateCheckResult | None = None
    if _is_received(documents, DocumentType.FLIGHT_TICKET):
        total_points += 1
        departure, return_ = _flight_dates(documents, application)
        date_check = check_flight_dates(
            departure,
            return_,
            application.start_date,
            application.end_date,
            config.date_tolerance_ms,
        )
        if date_check.match:
            earned_points += 1

    score = percentage(earned_points, total_points)
    tier = tier_for(score, config)
    logger.info(
        "Application %s scored %d (%s): %d/%d points",
        application.id,
        score,
        tier,
        earned_points,
        total_points,
    )
    return ApprovalScore(
        score=score, tier=tier, message=TIER_MESSAGES[tier], date_check=date_check
    )
