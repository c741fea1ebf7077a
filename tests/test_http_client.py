from __future__ import annotations

import asyncio

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from latestvideos.http_client import FetchResult, fetch_text


async def _echo_user_agent(request: web.Request) -> web.Response:
    return web.Response(text=request.headers.get("User-Agent", ""))


async def _missing(request: web.Request) -> web.Response:
    return web.Response(status=404, text="no such channel")


async def _redirect(request: web.Request) -> web.Response:
    raise web.HTTPFound(location="/channel/UCredirected1")


async def _landing(request: web.Request) -> web.Response:
    return web.Response(text="landed")


async def _slow(request: web.Request) -> web.Response:
    await asyncio.sleep(2)
    return web.Response(text="too late")


def _upstream_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/ua", _echo_user_agent)
    app.router.add_get("/missing", _missing)
    app.router.add_get("/@handle", _redirect)
    app.router.add_get("/channel/UCredirected1", _landing)
    app.router.add_get("/slow", _slow)
    return app


def _fetch(path: str, user_agent: str = "Mozilla/5.0 test", timeout: float = 5.0) -> tuple[FetchResult, str]:
    async def run():
        async with TestServer(_upstream_app()) as server:
            url = str(server.make_url(path))
            result = await fetch_text(url, user_agent=user_agent, timeout=timeout)
            return result, url

    return asyncio.run(run())


def test_user_agent_header_is_sent() -> None:
    result, url = _fetch("/ua", user_agent="Mozilla/5.0 (X11; Linux) Chrome/119.0")
    assert result == FetchResult(status=200, text="Mozilla/5.0 (X11; Linux) Chrome/119.0", final_url=url)
    assert result.ok


def test_non_2xx_is_returned_not_raised() -> None:
    result, _ = _fetch("/missing")
    assert result.status == 404
    assert not result.ok
    assert result.text == "no such channel"


def test_final_url_follows_redirects() -> None:
    result, _ = _fetch("/@handle")
    assert result.ok
    assert result.text == "landed"
    assert result.final_url.endswith("/channel/UCredirected1")


def test_slow_upstream_times_out() -> None:
    with pytest.raises(asyncio.TimeoutError):
        _fetch("/slow", timeout=0.2)
