"""Passport bio-page field parser.

Scans OCR text line by line. Each field keeps the first value found;
the scan continues so later lines can fill fields that are still empty.
"""

import re

from src.utils.logger import get_logger

from .fields import PassportFields
from .rules import (
    NUMERIC_DATE,
    ExtractionRule,
    first_match,
    rule,
    split_lines,
    trailing_segment,
)

logger = get_logger(__name__)

# Tiers for the passport number. The strict rule is tried over every line
# before any fallback; the first tier with a hit wins.
PASSPORT_NUMBER_RULES: list[ExtractionRule] = [
    rule("strict_letter_7_digits", r"[A-Z][0-9]{7}"),
    rule("letter_7_8_digits", r"[A-Z][0-9]{7,8}"),
    rule(
        "passport_no_marker",
        r"Passport No\.?\s*([A-Z][0-9]{7,8})",
        re.IGNORECASE,
        group=1,
    ),
    rule("no_marker", r"No\.?\s*([A-Z][0-9]{7,8})", re.IGNORECASE, group=1),
    rule(
        "document_no_marker",
        r"Document No\.?\s*([A-Z][0-9]{7,8})",
        re.IGNORECASE,
        group=1,
    ),
]

_NAME_KEYWORDS = re.compile(r"surname|given\s*names?|name", re.IGNORECASE)
_NATIONALITY_KEYWORDS = re.compile(r"nationality|nation", re.IGNORECASE)
_DATE = re.compile(NUMERIC_DATE)

# Keyword priority when several co-occur on one line: birth > expiry > issue.
_DATE_KEYWORDS: list[tuple[str, re.Pattern]] = [
    ("date_of_birth", re.compile(r"birth|dob", re.IGNORECASE)),
    ("date_of_expiry", re.compile(r"expiry|expiration|exp", re.IGNORECASE)),
    ("date_of_issue", re.compile(r"issue|issued", re.IGNORECASE)),
]


def classify_date_line(line: str) -> tuple[str, str] | None:
    """Return ``(field_name, date)`` for a dated line with a date keyword."""
    match = _DATE.search(line)
    if not match:
        return None
    for field_name, keywords in _DATE_KEYWORDS:
        if keywords.search(line):
            return field_name, match.group(0)
    return None


def _keyword_value(line: str, keywords: re.Pattern) -> str | None:
    if not keywords.search(line):
        return None
    return trailing_segment(line)


def parse_passport_text(text: str) -> PassportFields:
    """Parse passport fields from raw OCR text.

    Args:
        text: Multi-line recognized text, possibly empty.

    Returns:
        A ``PassportFields`` record; unmatched fields stay ``None``.
    """
    result = PassportFields()
    lines = split_lines(text)

    number = first_match(PASSPORT_NUMBER_RULES, lines)
    if number:
        rule_name, value = number
        result.document_number = value
        result.passport_number = value
        logger.debug("Passport number found by rule '%s'", rule_name)

    for line in lines:
        if result.full_name is None:
            result.full_name = _keyword_value(line, _NAME_KEYWORDS)

        if result.nationality is None:
            result.nationality = _keyword_value(line, _NATIONALITY_KEYWORDS)

        dated = classify_date_line(line)
        if dated:
            field_name, value = dated
            if getattr(result, field_name) is None:
                setattr(result, field_name, value)

    logger.info(
        "Passport parse: number=%s name=%s",
        "found" if result.passport_number else "missing",
        "found" if result.full_name else "missing",
    )
    return result
