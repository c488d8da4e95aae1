import asyncio

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from ledger_quote.exceptions import FetchError
from ledger_quote.http_scraper import HttpScraper, make_session
from ledger_quote.settings import ScrapeConfig


def make_app() -> web.Application:
    async def rate(request: web.Request) -> web.Response:
        return web.Response(text='<span id="rate">0.9123</span>', content_type="text/html")

    async def cyrillic(request: web.Request) -> web.Response:
        return web.Response(
            body="<p>курс 91,25</p>".encode("cp1251"),
            headers={"Content-Type": "text/html; charset=windows-1251"},
        )

    async def missing(request: web.Request) -> web.Response:
        return web.Response(status=404, text="not found")

    async def slow(request: web.Request) -> web.Response:
        await asyncio.sleep(2)
        return web.Response(text="late")

    async def echo_ua(request: web.Request) -> web.Response:
        return web.Response(text=request.headers.get("User-Agent", ""))

    app = web.Application()
    app.router.add_get("/rate", rate)
    app.router.add_get("/cyrillic", cyrillic)
    app.router.add_get("/missing", missing)
    app.router.add_get("/slow", slow)
    app.router.add_get("/ua", echo_ua)
    return app


@pytest.mark.asyncio
async def test_fetch_returns_body_and_charset():
    cfg = ScrapeConfig()
    async with TestServer(make_app()) as server:
        async with make_session(cfg) as session:
            page = await HttpScraper(session, cfg).fetch(str(server.make_url("/rate")))

    assert page.status == 200
    assert page.body == b'<span id="rate">0.9123</span>'
    assert page.encoding == "utf-8"


@pytest.mark.asyncio
async def test_fetch_keeps_declared_charset():
    cfg = ScrapeConfig()
    async with TestServer(make_app()) as server:
        async with make_session(cfg) as session:
            page = await HttpScraper(session, cfg).fetch(str(server.make_url("/cyrillic")))

    assert page.encoding == "windows-1251"
    assert page.body.decode(page.encoding) == "<p>курс 91,25</p>"


@pytest.mark.asyncio
async def test_sends_configured_user_agent():
    cfg = ScrapeConfig(user_agent="quote-test/1.0")
    async with TestServer(make_app()) as server:
        async with make_session(cfg) as session:
            page = await HttpScraper(session, cfg).fetch(str(server.make_url("/ua")))

    assert page.body == b"quote-test/1.0"


@pytest.mark.asyncio
async def test_non_2xx_is_fetch_error():
    cfg = ScrapeConfig()
    async with TestServer(make_app()) as server:
        url = str(server.make_url("/missing"))
        async with make_session(cfg) as session:
            with pytest.raises(FetchError) as excinfo:
                await HttpScraper(session, cfg).fetch(url)

    assert excinfo.value.context == {"url": url, "status": 404}


@pytest.mark.asyncio
async def test_timeout_is_fetch_error():
    cfg = ScrapeConfig(http_total_timeout_s=0.2, http_sock_read_timeout_s=0.2)
    async with TestServer(make_app()) as server:
        async with make_session(cfg) as session:
            with pytest.raises(FetchError) as excinfo:
                await HttpScraper(session, cfg).fetch(str(server.make_url("/slow")))

    assert excinfo.value.context["status"] is None


@pytest.mark.asyncio
async def test_connection_failure_is_fetch_error():
    cfg = ScrapeConfig(http_connect_timeout_s=1.0)
    async with TestServer(make_app()) as server:
        url = str(server.make_url("/rate"))
    # server is closed now
    async with make_session(cfg) as session:
        with pytest.raises(FetchError) as excinfo:
            await HttpScraper(session, cfg).fetch(url)

    assert isinstance(excinfo.value.__cause__, (aiohttp.ClientError, asyncio.TimeoutError))
