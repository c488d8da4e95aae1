"""Number parsing for scraped rates.

One convention only: `,` separates thousands and `.` is the decimal point.
Pages using the opposite convention are not detected.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

from .exceptions import ParseError

THOUSANDS_SEPARATOR = ","

# First signed decimal in the cleaned text; symbols and codes around it are skipped.
_NUMBER_RE = re.compile(r"-?(?:\d+(?:\.\d+)?|\.\d+)")


def clean_text(text: str) -> str:
    """Drop thousands separators and surrounding whitespace."""
    return text.replace(THOUSANDS_SEPARATOR, "").strip()


def parse_rate(text: str) -> Decimal:
    """Parse scraped text such as ``"$1,234.56 USD"`` into an exact Decimal.

    Raises:
        ParseError: If no number remains after cleaning.
    """
    match = _NUMBER_RE.search(clean_text(text))
    if match is None:
        raise ParseError(
            f"Not a number: {text!r}",
            {"raw_text": text, "reason": "not_a_number"},
        )
    try:
        return Decimal(match.group(0))
    except InvalidOperation as exc:
        raise ParseError(
            f"Not a number: {text!r}",
            {"raw_text": text, "reason": "not_a_number"},
        ) from exc
