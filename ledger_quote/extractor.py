"""CSS-selector text extraction from fetched pages."""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup
from soupsieve import SelectorSyntaxError

from .exceptions import SelectorError
from .http_scraper import Page

logger = logging.getLogger(__name__)


def parse_document(document: Page | str | bytes) -> BeautifulSoup:
    """Parse HTML into a tree with lxml, recovering from malformed markup.

    A Page is decoded with its declared charset when there is one; otherwise
    BeautifulSoup detects the encoding from meta tags, BOM or content.
    """
    if isinstance(document, Page):
        return BeautifulSoup(document.body, "lxml", from_encoding=document.encoding)
    return BeautifulSoup(document, "lxml")


def select_text(soup: BeautifulSoup, selector: str) -> str:
    """Return the stripped text of the first element matching `selector`.

    Matches after the first one are ignored.

    Raises:
        SelectorError: If the selector is invalid or matches nothing.
    """
    try:
        element = soup.select_one(selector)
    except SelectorSyntaxError as exc:
        raise SelectorError(
            f"Cannot parse html selector {selector!r}: {exc}",
            {"selector": selector, "reason": "invalid"},
        ) from exc

    if element is None:
        raise SelectorError(
            f"Selector {selector!r} matched no element",
            {"selector": selector, "reason": "no_match"},
        )

    text = element.get_text().strip()
    logger.debug("Selector %r matched %r", selector, text)
    return text


def extract(document: Page | str | bytes, selector: str) -> str:
    """Parse `document` and return the first match's text for `selector`."""
    return select_text(parse_document(document), selector)
