"""Tests for RestTransport against a local aiohttp server."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

import aiohttp
import pytest
from aiohttp import test_utils, web

from crowdsense._constants import USER_AGENT
from crowdsense._transport import RestTransport
from crowdsense.config import CrowdSenseConfig
from crowdsense.exceptions import CrowdSenseTransportError, StoreReadFailedError
from crowdsense.models.scan import Coordinate, ScanTally
from crowdsense.store import RestRecordStore
from crowdsense.submission import submit_tally

ENDPOINT = "/rest/v1/WhereTheCrowdAt"

ROW = {
    "ID": 7,
    "people_count": 1,
    "Latitude": 39.95,
    "Longitude": -75.16,
    "created_at": "2026-01-01T12:00:00+00:00",
}


@dataclass
class TableServer:
    """Serves one PostgREST table with switchable responses."""

    get_body: bytes = b"[]"
    get_status: int = 200
    delete_status: int = 204
    get_delay: float = 0.0
    requests: list[dict[str, Any]] = field(default_factory=list)

    async def handle(self, request: web.Request) -> web.StreamResponse:
        self.requests.append(
            {
                "method": request.method,
                "headers": dict(request.headers),
                "query": dict(request.query),
                "body": await request.text(),
            }
        )
        if request.method == "POST":
            return web.json_response([ROW], status=201)
        if request.method == "GET":
            if self.get_delay:
                await asyncio.sleep(self.get_delay)
            return web.Response(
                status=self.get_status,
                body=self.get_body,
                content_type="application/json",
                charset="utf-8",
            )
        if self.delete_status == 204:
            return web.Response(status=204)
        return web.json_response({"message": "not found"}, status=self.delete_status)


@contextlib.asynccontextmanager
async def _serve(table: TableServer, *, request_timeout: float = 5.0) -> AsyncIterator[RestTransport]:
    app = web.Application()
    app.router.add_route("*", ENDPOINT, table.handle)
    async with test_utils.TestServer(app) as server, aiohttp.ClientSession() as http:
        config = CrowdSenseConfig(
            store_url=str(server.make_url("")),
            store_key="anon-key",
            request_timeout=request_timeout,
        )
        yield RestTransport(config, http)


@pytest.mark.asyncio
async def test_request_sends_store_credentials_and_extra_headers() -> None:
    table = TableServer()
    async with _serve(table) as transport:
        result = await transport.request(
            "POST",
            ENDPOINT,
            json_body=[{"people_count": 1}],
            headers={"prefer": "return=representation"},
        )

    assert result == [ROW]
    sent = table.requests[0]
    assert sent["headers"]["apikey"] == "anon-key"
    assert sent["headers"]["Authorization"] == "Bearer anon-key"
    assert sent["headers"]["Prefer"] == "return=representation"
    assert sent["headers"]["User-Agent"] == USER_AGENT
    assert sent["body"] == '[{"people_count":1}]'


@pytest.mark.asyncio
async def test_empty_delete_body_decodes_as_none() -> None:
    table = TableServer()
    async with _serve(table) as transport:
        assert await transport.request("DELETE", ENDPOINT, params={"ID": "eq.7"}) is None
    assert table.requests[0]["query"] == {"ID": "eq.7"}


@pytest.mark.asyncio
async def test_error_status_carries_status_code() -> None:
    table = TableServer(delete_status=404)
    async with _serve(table) as transport:
        with pytest.raises(CrowdSenseTransportError) as exc_info:
            await transport.request("DELETE", ENDPOINT, params={"ID": "eq.7"})

    assert exc_info.value.status_code == 404
    assert exc_info.value.endpoint == ENDPOINT


@pytest.mark.asyncio
async def test_delete_of_missing_row_is_not_an_error() -> None:
    table = TableServer(delete_status=404)
    async with _serve(table) as transport:
        await RestRecordStore(transport).delete(7)


@pytest.mark.asyncio
async def test_invalid_json_raises_transport_error() -> None:
    table = TableServer(get_body=b"<html>oops</html>")
    async with _serve(table) as transport:
        with pytest.raises(CrowdSenseTransportError, match="Invalid JSON"):
            await transport.request("GET", ENDPOINT, params={"select": "*"})


@pytest.mark.asyncio
async def test_undecodable_body_raises_transport_error() -> None:
    table = TableServer(get_body=b"\xff\xfe garbage")
    async with _serve(table) as transport:
        with pytest.raises(CrowdSenseTransportError):
            await transport.request("GET", ENDPOINT, params={"select": "*"})
        with pytest.raises(StoreReadFailedError):
            await RestRecordStore(transport).select_all()


@pytest.mark.asyncio
async def test_undecodable_fetch_after_insert_skips_reconciliation() -> None:
    table = TableServer(get_body=b"\xff\xfe garbage")
    tally = ScanTally(
        total_count=0,
        unknown_count=0,
        location=Coordinate(latitude=39.95, longitude=-75.16),
    )
    async with _serve(table) as transport:
        result = await submit_tally(RestRecordStore(transport), tally)

    assert result.record.id == 7
    assert result.reconciled is False
    assert [r["method"] for r in table.requests] == ["POST", "GET"]


@pytest.mark.asyncio
async def test_request_timeout_raises_transport_error() -> None:
    table = TableServer(get_delay=0.5)
    async with _serve(table, request_timeout=0.05) as transport:
        with pytest.raises(CrowdSenseTransportError) as exc_info:
            await transport.request("GET", ENDPOINT, params={"select": "*"})

    assert exc_info.value.status_code is None
