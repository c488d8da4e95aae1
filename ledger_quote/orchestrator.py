"""Concurrent fetch → extract → parse → format pipeline over all quote specs."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Protocol

from .exceptions import FetchError, ParseError, SelectorError
from .extractor import extract
from .formatter import format_price
from .http_scraper import HttpScraper, Page, make_session
from .parser import parse_rate
from .results import QuoteFailure, QuoteResult, QuoteSuccess, Stage
from .settings import DEFAULT_SCRAPE_CONFIG, QuoteSpec, ScrapeConfig

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    async def fetch(self, url: str) -> Page | str | bytes: ...


def default_clock(config: ScrapeConfig) -> Callable[[], datetime]:
    if config.use_utc:
        return lambda: datetime.now(timezone.utc)
    return lambda: datetime.now().astimezone()


async def run_one(
    spec: QuoteSpec,
    fetcher: Fetcher,
    clock: Callable[[], datetime],
    config: ScrapeConfig = DEFAULT_SCRAPE_CONFIG,
) -> QuoteResult:
    """Run the pipeline for a single spec.

    Stage errors become a QuoteFailure; anything else propagates.
    """
    try:
        document = await fetcher.fetch(spec.url)
    except FetchError as exc:
        return QuoteFailure(spec=spec, stage=Stage.FETCH, cause=exc)

    try:
        text = extract(document, spec.select)
    except SelectorError as exc:
        return QuoteFailure(spec=spec, stage=Stage.EXTRACT, cause=exc)

    try:
        rate = parse_rate(text)
    except ParseError as exc:
        return QuoteFailure(spec=spec, stage=Stage.PARSE, cause=exc)

    timestamp = clock()
    line = format_price(timestamp, spec, rate, config.timestamp_format)
    return QuoteSuccess(spec=spec, timestamp=timestamp, rate=rate, line=line)


async def run(
    specs: Sequence[QuoteSpec],
    config: ScrapeConfig = DEFAULT_SCRAPE_CONFIG,
    fetcher: Fetcher | None = None,
    clock: Callable[[], datetime] | None = None,
) -> list[QuoteResult]:
    """Run every spec concurrently and return one result per spec.

    Concurrency is bounded by `config.http_concurrency`. Each task returns
    its own result, so nothing shared is written while tasks run. Callers
    should match results to specs through `result.spec`.

    When no fetcher is given an HttpScraper is created on a session that
    lives for the duration of the batch.
    """
    if not specs:
        return []

    clock = clock or default_clock(config)
    semaphore = asyncio.Semaphore(max(1, config.http_concurrency))

    async def _bounded(spec: QuoteSpec, active: Fetcher) -> QuoteResult:
        async with semaphore:
            result = await run_one(spec, active, clock, config)
        if isinstance(result, QuoteFailure):
            logger.info("%s failed at %s stage: %s", spec.url, result.stage.value, result.message)
        else:
            logger.debug("%s -> %s", spec.url, result.line)
        return result

    async def _gather(active: Fetcher) -> list[QuoteResult]:
        return list(await asyncio.gather(*(_bounded(spec, active) for spec in specs)))

    logger.info("Fetching %d quotes (concurrency %d)", len(specs), config.http_concurrency)
    if fetcher is not None:
        return await _gather(fetcher)

    async with make_session(config) as session:
        return await _gather(HttpScraper(session, config))


def run_quotes(
    specs: Sequence[QuoteSpec],
    config: ScrapeConfig = DEFAULT_SCRAPE_CONFIG,
    fetcher: Fetcher | None = None,
    clock: Callable[[], datetime] | None = None,
) -> list[QuoteResult]:
    """Synchronous entry point for `run`."""
    return asyncio.run(run(specs, config, fetcher=fetcher, clock=clock))
