"""Flight ticket parser for outbound and return travel dates.

Lines carrying a departure or return keyword are classified first. When
keywords find nothing, the first and last distinct dates on the ticket
stand in for departure and return.
"""

import re

from src.utils.logger import get_logger

from .fields import FlightTicketFields
from .rules import ISO_DATE, MONTH_NAME_DATE, NUMERIC_DATE, split_lines

logger = get_logger(__name__)

_ANY_DATE = re.compile(
    rf"(?:{ISO_DATE}|{MONTH_NAME_DATE}|{NUMERIC_DATE})", re.IGNORECASE
)
_DEPARTURE_KEYWORDS = re.compile(r"depart|outbound|onward", re.IGNORECASE)
_RETURN_KEYWORDS = re.compile(r"return|inbound|arrival\s*back", re.IGNORECASE)


def find_dates(text: str) -> list[str]:
    """Return every date token in ``text`` in reading order."""
    return [m.group(0).strip() for m in _ANY_DATE.finditer(text)]


def parse_flight_ticket_text(text: str) -> FlightTicketFields:
    """Parse travel dates from raw OCR text of a flight ticket.

    Args:
        text: Recognized text, possibly empty.

    Returns:
        A ``FlightTicketFields`` record; unmatched dates stay ``None``.
    """
    result = FlightTicketFields()

    for line in split_lines(text):
        dates = find_dates(line)
        if not dates:
            continue
        departs = bool(_DEPARTURE_KEYWORDS.search(line))
        returns = bool(_RETURN_KEYWORDS.search(line))

        # "Depart 12/03/2025 Return 20/03/2025" on a single line
        if departs and returns and len(dates) >= 2:
            result.departure_date = result.departure_date or dates[0]
            result.return_date = result.return_date or dates[1]
        elif departs and result.departure_date is None:
            result.departure_date = dates[0]
        elif returns and result.return_date is None:
            result.return_date = dates[0]

    if result.departure_date is None and result.return_date is None:
        distinct = list(dict.fromkeys(find_dates(text)))
        if len(distinct) >= 2:
            result.departure_date = distinct[0]
            result.return_date = distinct[-1]
            logger.debug("Flight dates taken from first and last date on ticket")

    logger.info(
        "Flight ticket parse: departure=%s return=%s",
        result.departure_date,
        result.return_date,
    )
    return result
