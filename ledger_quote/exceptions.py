"""Exception hierarchy for ledger-quote.

Every exception carries an optional `context` dict so the CLI can log
structured details without parsing the message.
"""

from typing import Any


class LedgerQuoteError(Exception):
    """Base exception for all ledger-quote errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigError(LedgerQuoteError):
    """Invalid or missing configuration.

    Raised by load_quote_specs() before any fetch. Fatal for the whole run.

    Context keys:
        path: str : the file being loaded
        errors: list[str] : every problem found, one entry per field
    """


class QuoteError(LedgerQuoteError):
    """A single quote could not be produced.

    Policy: convert to a QuoteFailure and keep going with the other specs.
    """


class FetchError(QuoteError):
    """HTTP request failed, timed out or returned a non-2xx status.

    Context keys:
        url: str : the URL that was requested
        status: int | None : HTTP status, when a response arrived
    """


class SelectorError(QuoteError):
    """Selector is invalid or matched nothing in the page.

    Context keys:
        selector: str : the CSS selector
        reason: str : "invalid" or "no_match"
    """


class ParseError(QuoteError):
    """Extracted text does not contain a number.

    Context keys:
        raw_text: str : the text as extracted from the page
        reason: str : "not_a_number"
    """
