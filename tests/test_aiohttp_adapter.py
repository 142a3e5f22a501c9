import asyncio

import aiohttp
import pytest
from aioresponses import aioresponses
from yarl import URL

from glow.adapters.aiohttp_client_adapter import AioHttpClientAdapter
from glow.core.exceptions import UpstreamException

"""
Tests for AioHttpClientAdapter behavior.

Each test verifies how the adapter maps upstream responses and transport
errors into UpstreamException:
- Non-JSON GET responses are invalid upstream content -> 502.
- GET error statuses keep the upstream status and surface its `detail`.
- Timeouts -> 504, connection errors -> 502.
- POST never raises on HTTP status; it returns status, headers and body so the
  caller can read error bodies returned with 4xx/5xx.
"""


@pytest.mark.asyncio
async def test_get_json_response():
    url = "http://example.test/predictions/abc"
    with aioresponses() as m:
        m.get(url, payload={"id": "abc", "status": "processing"}, status=200)

        async with AioHttpClientAdapter() as client:
            data = await client.get(url, headers={"Authorization": "Bearer t"})

        assert data == {"id": "abc", "status": "processing"}
        call = m.requests[("GET", URL(url))][0]
        assert call.kwargs["headers"] == {"Authorization": "Bearer t"}
        assert isinstance(call.kwargs["timeout"], aiohttp.ClientTimeout)


@pytest.mark.asyncio
async def test_get_non_json_response_raises_502():
    url = "http://example.test/bad"
    with aioresponses() as m:
        m.get(url, body="<html>error</html>", status=200, headers={"Content-Type": "text/html"})

        async with AioHttpClientAdapter() as client:
            with pytest.raises(UpstreamException) as excinfo:
                await client.get(url)
        assert excinfo.value.response.status == 502
        assert excinfo.value.response.title == "Invalid Response Content"


@pytest.mark.asyncio
async def test_get_error_status_keeps_upstream_detail():
    url = "http://example.test/predictions/missing"
    with aioresponses() as m:
        m.get(url, payload={"detail": "Not found."}, status=404)

        async with AioHttpClientAdapter() as client:
            with pytest.raises(UpstreamException) as excinfo:
                await client.get(url)
        assert excinfo.value.response.status == 404
        assert excinfo.value.response.detail == "Not found."
        assert not excinfo.value.response.is_transient


@pytest.mark.asyncio
async def test_get_non_json_error_status():
    url = "http://example.test/predictions/oops"
    with aioresponses() as m:
        m.get(url, body="Bad Gateway", status=502, headers={"Content-Type": "text/plain"})

        async with AioHttpClientAdapter() as client:
            with pytest.raises(UpstreamException) as excinfo:
                await client.get(url)
        assert excinfo.value.response.status == 502
        assert excinfo.value.response.is_transient


@pytest.mark.asyncio
async def test_timeout_maps_to_504():
    url = "http://example.test/slow"
    with aioresponses() as m:
        m.get(url, exception=asyncio.TimeoutError())

        async with AioHttpClientAdapter() as client:
            with pytest.raises(UpstreamException) as excinfo:
                await client.get(url)
        assert excinfo.value.response.status == 504


@pytest.mark.asyncio
async def test_post_returns_error_body_without_raising():
    url = "http://example.test/predictions"
    with aioresponses() as m:
        m.post(url, payload={"detail": "Invalid token"}, status=401)

        async with AioHttpClientAdapter() as client:
            resp = await client.post(url, json={"version": "v"})
        assert resp["status"] == 401
        assert resp["body"] == {"detail": "Invalid token"}


@pytest.mark.asyncio
async def test_post_text_body():
    url = "http://example.test/predictions"
    with aioresponses() as m:
        m.post(url, status=500, body="Server Error", headers={"Content-Type": "text/plain"})

        async with AioHttpClientAdapter() as client:
            resp = await client.post(url, json={})
        assert resp["status"] == 500
        assert resp["body"] == "Server Error"


@pytest.mark.asyncio
async def test_post_connection_error_maps_to_502():
    url = "http://example.test/predictions"
    with aioresponses() as m:
        m.post(url, exception=aiohttp.ClientConnectionError("refused"))

        async with AioHttpClientAdapter() as client:
            with pytest.raises(UpstreamException) as excinfo:
                await client.post(url, json={})
        assert excinfo.value.response.status == 502


@pytest.mark.asyncio
async def test_requires_context_manager():
    client = AioHttpClientAdapter()
    with pytest.raises(RuntimeError):
        await client.get("http://example.test/")
