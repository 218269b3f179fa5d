"""Named regex extraction rules shared by the document field parsers.

A field is described by an ordered list of ``ExtractionRule`` objects.
Rules are tried in order and the first one that yields a value wins, so
the fallback chain for each field reads top to bottom.
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from src.utils.logger import get_logger

logger = get_logger(__name__)

# Numeric day/month/year dates as printed on ID documents.
NUMERIC_DATE = r"\d{1,2}\s*[.\-/]\s*\d{1,2}\s*[.\-/]\s*\d{2,4}"
COMPACT_NUMERIC_DATE = r"\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}"
ISO_DATE = r"\d{4}-\d{2}-\d{2}"
MONTH_NAME_DATE = (
    r"\d{1,2}\s*(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\s*\d{2,4}"
)

_TRAILING_SEGMENT = re.compile(r"[:<]")


@dataclass(frozen=True)
class ExtractionRule:
    """A single named pattern for one field.

    Args:
        name: Identifier used in logs and tests.
        pattern: Compiled regex searched against the input.
        group: Capture group holding the value (0 for the whole match).
    """

    name: str
    pattern: re.Pattern
    group: int = 0

    def apply(self, text: str) -> str | None:
        """Return the trimmed captured value, or ``None`` on no match."""
        match = self.pattern.search(text)
        if not match:
            return None
        value = match.group(self.group)
        if value is None:
            return None
        return value.strip() or None


def rule(name: str, pattern: str, flags: int = 0, group: int = 0) -> ExtractionRule:
    """Build an ``ExtractionRule`` from a pattern string."""
    return ExtractionRule(name=name, pattern=re.compile(pattern, flags), group=group)


def first_match(
    rules: Sequence[ExtractionRule], lines: Iterable[str]
) -> tuple[str, str] | None:
    """Try each rule over all lines, in rule order.

    Args:
        rules: Ordered fallback chain for one field.
        lines: Text lines to scan.

    Returns:
        ``(rule_name, value)`` for the first rule matching any line,
        or ``None`` when no rule matches.
    """
    lines = list(lines)
    for extraction_rule in rules:
        for line in lines:
            value = extraction_rule.apply(line)
            if value:
                logger.debug("Rule '%s' matched %r", extraction_rule.name, value)
                return extraction_rule.name, value
    return None


def trailing_segment(line: str) -> str | None:
    """Return the text after the last ``:`` or ``<`` delimiter, trimmed.

    Lines without a delimiter carry no value segment.
    """
    parts = _TRAILING_SEGMENT.split(line)
    if len(parts) < 2:
        return None
    return parts[-1].strip() or None


def split_lines(text: str) -> list[str]:
    """Split OCR output into lines, tolerating Windows line endings."""
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
