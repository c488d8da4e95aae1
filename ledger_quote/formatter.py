from datetime import datetime
from decimal import Decimal

from .settings import QuoteSpec

DEFAULT_TIMESTAMP_FORMAT = "%Y/%m/%d"


def format_rate(rate: Decimal) -> str:
    # positional notation, keeps every parsed digit
    return format(rate, "f")


def format_price(
    timestamp: datetime,
    spec: QuoteSpec,
    rate: Decimal,
    fmt: str = DEFAULT_TIMESTAMP_FORMAT,
) -> str:
    """
    Render a ledger price directive: `P <timestamp> <from> <rate> <to>`.
    """
    return f"P {timestamp.strftime(fmt)} {spec.from_} {format_rate(rate)} {spec.to}"
