"""Consistency check between flight dates and the visa validity window.

Ticket dates are parsed day-first, the way they are printed on tickets
issued outside the US. Both the departure and the return must fall
within the tolerance of the visa start and end respectively.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from src.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TOLERANCE_MS = 86_400_000

NUMERIC_FORMATS: list[str] = ["%d/%m/%Y", "%d/%m/%y"]
TEXT_FORMATS: list[str] = [
    "%Y-%m-%d",
    "%d %b %Y",
    "%d %B %Y",
    "%d %b %y",
    "%d %B %y",
]

NOT_DETECTED_MESSAGE = "Flight dates were not detected on the ticket."
MATCH_MESSAGE = "Flight dates match the visa window."

_NUMERIC = re.compile(r"^(\d{1,2})\s*[.\-/]\s*(\d{1,2})\s*[.\-/]\s*(\d{2,4})$")
_COMPACT_MONTH = re.compile(r"^(\d{1,2})\s*([A-Za-z]{3,9})\s*(\d{2,4})$")


@dataclass
class DateCheckResult:
    """Outcome of the flight/visa date comparison."""

    match: bool
    message: str


def parse_document_date(value: str | datetime | None) -> datetime | None:
    """Parse a date string as printed on a travel document.

    Accepts ``DD/MM/YYYY`` with ``/``, ``-`` or ``.`` separators, two-digit
    years, ISO ``YYYY-MM-DD`` and ``12 Mar 2025`` style dates.

    Returns:
        The parsed datetime, or ``None`` when the value is missing or
        not a recognizable date.
    """
    if value is None or isinstance(value, datetime):
        return value

    text = value.strip()
    numeric = _NUMERIC.match(text)
    if numeric:
        text = "/".join(numeric.groups())
        formats = NUMERIC_FORMATS
    else:
        compact = _COMPACT_MONTH.match(text)
        if compact:
            text = " ".join(compact.groups())
        formats = TEXT_FORMATS

    for fmt in formats:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    logger.debug("Unrecognized document date: %r", value)
    return None


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def within_tolerance(
    first: datetime, second: datetime, tolerance_ms: int = DEFAULT_TOLERANCE_MS
) -> bool:
    """Whether two instants are at most ``tolerance_ms`` apart (inclusive)."""
    delta = abs(_naive_utc(first) - _naive_utc(second))
    return delta <= timedelta(milliseconds=tolerance_ms)


def format_window(start: datetime, end: datetime) -> str:
    return f"{start:%d %b %Y} - {end:%d %b %Y}"


def check_flight_dates(
    departure: str | datetime | None,
    return_: str | datetime | None,
    visa_start: datetime,
    visa_end: datetime,
    tolerance_ms: int = DEFAULT_TOLERANCE_MS,
) -> DateCheckResult:
    """Compare extracted flight dates with the visa validity window.

    Args:
        departure: Extracted outbound date.
        return_: Extracted return date.
        visa_start: First day of the visa window.
        visa_end: Last day of the visa window.
        tolerance_ms: Allowed difference for each pair, inclusive.

    Returns:
        A match only when both dates are present, parseable, and within
        tolerance; otherwise a non-match with an explanatory message.
    """
    departure_at = parse_document_date(departure)
    return_at = parse_document_date(return_)
    if departure_at is None or return_at is None:
        return DateCheckResult(match=False, message=NOT_DETECTED_MESSAGE)

    if within_tolerance(departure_at, visa_start, tolerance_ms) and within_tolerance(
        return_at, visa_end, tolerance_ms
    ):
        return DateCheckResult(match=True, message=MATCH_MESSAGE)

    logger.info(
        "Flight dates %s/%s outside visa window %s",
        departure,
        return_,
        format_window(visa_start, visa_end),
    )
    return DateCheckResult(
        match=False,
        message=(
            "Flight dates do not match the visa window "
            f"({format_window(visa_start, visa_end)})."
        ),
    )
