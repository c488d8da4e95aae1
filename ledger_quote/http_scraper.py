import asyncio
import logging
import time
from dataclasses import dataclass

import aiohttp

from .exceptions import FetchError
from .settings import ScrapeConfig

logger = logging.getLogger(__name__)


DEFAULT_HTTP_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
}


@dataclass(frozen=True)
class Page:
    """
    Raw fetched document.

    Fields:
        url       : The URL that was requested.
        body      : Response body, undecoded.
        encoding  : Charset declared by the server, or None to let the
                    HTML parser detect it.
        status    : HTTP status code.
    """
    url: str
    body: bytes
    encoding: str | None
    status: int


def make_session(config: ScrapeConfig) -> aiohttp.ClientSession:
    """
    One session per batch: shared connection pool capped at
    `http_concurrency`, timeouts from ScrapeConfig.
    """
    timeout = aiohttp.ClientTimeout(
        total=config.http_total_timeout_s,
        connect=config.http_connect_timeout_s,
        sock_read=config.http_sock_read_timeout_s,
    )
    connector = aiohttp.TCPConnector(limit=config.http_concurrency)
    return aiohttp.ClientSession(timeout=timeout, connector=connector)


class HttpScraper:
    """
    Page fetcher built on aiohttp.

    - One GET per call, redirects followed, no retries
    - Non-2xx status, transport errors and timeouts raise FetchError
    - Body is returned as bytes together with the declared charset
    """
    name = "http"

    def __init__(self, session: aiohttp.ClientSession, config: ScrapeConfig):
        self.session = session
        self.config = config

    async def fetch(self, url: str) -> Page:
        t0 = time.perf_counter()
        headers = {**DEFAULT_HTTP_HEADERS, "User-Agent": self.config.user_agent}

        try:
            async with self.session.get(url, headers=headers, allow_redirects=True) as resp:
                if not 200 <= resp.status < 300:
                    raise FetchError(
                        f"HTTP {resp.status} from {url}",
                        {"url": url, "status": resp.status},
                    )
                body = await resp.read()
                encoding = resp.charset
                status = resp.status
        except asyncio.TimeoutError as e:
            raise FetchError(f"Timed out fetching {url}", {"url": url, "status": None}) from e
        except aiohttp.ClientError as e:
            raise FetchError(
                f"Cannot read url {url}: {type(e).__name__}: {e}",
                {"url": url, "status": None},
            ) from e

        logger.debug("Fetched %s (%d bytes, status %d) in %.3fs", url, len(body), status, time.perf_counter() - t0)
        return Page(url=url, body=body, encoding=encoding, status=status)
