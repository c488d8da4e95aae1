from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from .exceptions import QuoteError
from .settings import QuoteSpec


class Stage(str, Enum):
    """Pipeline stage at which a quote failed."""

    FETCH = "fetch"
    EXTRACT = "extract"
    PARSE = "parse"


@dataclass(frozen=True)
class QuoteSuccess:
    """
    A quote that made it through the whole pipeline.

    Fields:
        spec       : The spec this quote was produced from.
        timestamp  : When the quote was formatted (sampled per spec).
        rate       : Exact parsed rate.
        line       : Rendered ledger price directive.
    """
    spec: QuoteSpec
    timestamp: datetime
    rate: Decimal
    line: str

    ok = True


@dataclass(frozen=True)
class QuoteFailure:
    """
    A quote that failed at one stage of the pipeline.

    Fields:
        spec   : The spec this failure belongs to.
        stage  : fetch, extract or parse.
        cause  : The stage's exception.
    """
    spec: QuoteSpec
    stage: Stage
    cause: QuoteError

    ok = False

    @property
    def message(self) -> str:
        return str(self.cause)


QuoteResult = QuoteSuccess | QuoteFailure
