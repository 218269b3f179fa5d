"""National tax-ID card field parser.

Single pattern per field, searched over the whole text. There are no
fallback tiers for this document type.
"""

import re

from src.utils.logger import get_logger

from .fields import TaxIdFields
from .rules import COMPACT_NUMERIC_DATE, ExtractionRule, rule

logger = get_logger(__name__)

# Five letters, four digits, one check letter, e.g. ABCDE1234F.
TAX_ID_RULE: ExtractionRule = rule("tax_id_10_char", r"[A-Z]{5}[0-9]{4}[A-Z]")
NAME_RULE: ExtractionRule = rule(
    "name_label", r"name\s*[:\s]\s*([A-Za-z \t]+)", re.IGNORECASE, group=1
)
DOB_RULE: ExtractionRule = rule(
    "dob_label", rf"DOB\s*[:\s]\s*({COMPACT_NUMERIC_DATE})", re.IGNORECASE, group=1
)


def parse_tax_id_text(text: str) -> TaxIdFields:
    """Parse tax-ID card fields from raw OCR text.

    Args:
        text: Recognized text, possibly empty.

    Returns:
        A ``TaxIdFields`` record; unmatched fields stay ``None``.
    """
    result = TaxIdFields(
        tax_id=TAX_ID_RULE.apply(text),
        full_name=NAME_RULE.apply(text),
        date_of_birth=DOB_RULE.apply(text),
    )
    logger.info("Tax-ID parse: number=%s", "found" if result.tax_id else "missing")
    return result
