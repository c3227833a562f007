from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import test_utils, web

from pyelevation._transport import HttpTransport
from pyelevation.exceptions import ElevationTransportError
from pyelevation.sources.network import OpenMeteoElevationSource


async def _elevation(request: web.Request) -> web.Response:
    latitude = float(request.query["latitude"])
    return web.json_response({"latitude": [latitude], "elevation": [1609.0]})


async def _server_error(_request: web.Request) -> web.Response:
    return web.Response(status=503, text="maintenance")


async def _not_json(_request: web.Request) -> web.Response:
    return web.Response(status=200, text="<html>captive portal</html>", content_type="text/html")


async def _not_utf8(_request: web.Request) -> web.Response:
    return web.Response(status=200, body=b'{"elevation": [\xff\xfe1]}', content_type="application/json")


async def _slow(_request: web.Request) -> web.Response:
    await asyncio.sleep(1.0)
    return web.json_response({"elevation": [1.0]})


@pytest_asyncio.fixture
async def server() -> AsyncIterator[test_utils.TestServer]:
    app = web.Application()
    app.router.add_get("/v1/elevation", _elevation)
    app.router.add_get("/down", _server_error)
    app.router.add_get("/html", _not_json)
    app.router.add_get("/slow", _slow)
    app.router.add_get("/undecodable", _not_utf8)
    test_server = test_utils.TestServer(app)
    await test_server.start_server()
    try:
        yield test_server
    finally:
        await test_server.close()


@pytest_asyncio.fixture
async def http_session() -> AsyncIterator[aiohttp.ClientSession]:
    async with aiohttp.ClientSession() as session:
        yield session


@pytest.mark.asyncio
async def test_get_json_sends_query_and_decodes(
    server: test_utils.TestServer,
    http_session: aiohttp.ClientSession,
) -> None:
    transport = HttpTransport(http_session, timeout=2.0)

    url = str(server.make_url("/v1/elevation"))
    payload = await transport.get_json(url, {"latitude": 39.7392, "longitude": 1})

    assert payload == {"latitude": [39.7392], "elevation": [1609.0]}


@pytest.mark.asyncio
async def test_non_200_raises_with_status(
    server: test_utils.TestServer,
    http_session: aiohttp.ClientSession,
) -> None:
    transport = HttpTransport(http_session, timeout=2.0)
    url = str(server.make_url("/down"))

    with pytest.raises(ElevationTransportError) as exc_info:
        await transport.get_json(url, {})

    assert exc_info.value.status_code == 503
    assert exc_info.value.url == url


@pytest.mark.asyncio
async def test_invalid_json_raises(
    server: test_utils.TestServer,
    http_session: aiohttp.ClientSession,
) -> None:
    transport = HttpTransport(http_session, timeout=2.0)

    with pytest.raises(ElevationTransportError, match="Invalid JSON"):
        await transport.get_json(str(server.make_url("/html")), {})


@pytest.mark.asyncio
async def test_timeout_raises(
    server: test_utils.TestServer,
    http_session: aiohttp.ClientSession,
) -> None:
    transport = HttpTransport(http_session, timeout=0.1)

    with pytest.raises(ElevationTransportError, match="timed out"):
        await transport.get_json(str(server.make_url("/slow")), {})


@pytest.mark.asyncio
async def test_open_meteo_end_to_end(
    server: test_utils.TestServer,
    http_session: aiohttp.ClientSession,
) -> None:
    transport = HttpTransport(http_session, timeout=2.0)
    source = OpenMeteoElevationSource(transport, str(server.make_url("/v1/elevation")))

    sample = await source.fetch(39.7392, -104.9903)

    assert sample is not None
    assert sample.elevation == 1609.0
    assert sample.accuracy == 10.0


@pytest.mark.asyncio
async def test_open_meteo_unreachable_host_is_unavailable(http_session: aiohttp.ClientSession) -> None:
    transport = HttpTransport(http_session, timeout=1.0)
    source = OpenMeteoElevationSource(transport, "http://127.0.0.1:9/v1/elevation")

    assert await source.fetch(1.0, 2.0) is None


@pytest.mark.asyncio
async def test_undecodable_body_raises(
    server: test_utils.TestServer,
    http_session: aiohttp.ClientSession,
) -> None:
    transport = HttpTransport(http_session, timeout=2.0)

    with pytest.raises(ElevationTransportError, match="Invalid JSON"):
        await transport.get_json(str(server.make_url("/undecodable")), {})


@pytest.mark.asyncio
async def test_open_meteo_undecodable_body_is_unavailable(
    server: test_utils.TestServer,
    http_session: aiohttp.ClientSession,
) -> None:
    transport = HttpTransport(http_session, timeout=2.0)
    source = OpenMeteoElevationSource(transport, str(server.make_url("/undecodable")))

    assert await source.fetch(40.0, -105.0) is None
