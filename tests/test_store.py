"""Tests for the PostgREST record store mapping."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest

from crowdsense.exceptions import (
    CrowdSenseTransportError,
    StoreDeleteFailedError,
    StoreReadFailedError,
    StoreWriteFailedError,
)
from crowdsense.store import InMemoryRecordStore, RestRecordStore

ENDPOINT = "/rest/v1/WhereTheCrowdAt"

ROW = {
    "ID": 7,
    "people_count": 3,
    "Latitude": 39.95,
    "Longitude": -75.16,
    "created_at": "2026-01-01T12:00:00.123456+00:00",
}


@dataclass
class FakeTransport:
    responses: list[Any] = field(default_factory=list)
    calls: list[dict[str, Any]] = field(default_factory=list)

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        self.calls.append(
            {"method": method, "endpoint": endpoint, "params": params, "json_body": json_body, "headers": headers}
        )
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.mark.asyncio
async def test_insert_posts_row_and_parses_representation() -> None:
    transport = FakeTransport(responses=[[ROW]])
    store = RestRecordStore(transport)

    record = await store.insert(3, 39.95, -75.16)

    call = transport.calls[0]
    assert call["method"] == "POST"
    assert call["endpoint"] == ENDPOINT
    assert call["json_body"] == [{"people_count": 3, "Latitude": 39.95, "Longitude": -75.16}]
    assert call["headers"] == {"prefer": "return=representation"}
    assert record.id == 7
    assert record.created_at is not None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        CrowdSenseTransportError("HTTP 500", status_code=500, endpoint=ENDPOINT),
        [],
        None,
        [{"ID": "not-an-int"}],
    ],
)
async def test_insert_failures_raise_write_failed(response: Any) -> None:
    store = RestRecordStore(FakeTransport(responses=[response]))
    with pytest.raises(StoreWriteFailedError):
        await store.insert(1, 0.0, 0.0)


@pytest.mark.asyncio
async def test_select_all_keeps_malformed_timestamps_and_drops_broken_rows() -> None:
    rows = [
        ROW,
        {**ROW, "ID": 8, "created_at": "last tuesday"},
        {"ID": 9, "people_count": 1},
    ]
    transport = FakeTransport(responses=[rows])
    store = RestRecordStore(transport, table="Crowds")

    records = await store.select_all()

    assert transport.calls[0]["endpoint"] == "/rest/v1/Crowds"
    assert transport.calls[0]["params"] == {"select": "*"}
    assert [r.id for r in records] == [7, 8]
    assert records[1].created_at is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [CrowdSenseTransportError("boom", endpoint=ENDPOINT), {"message": "not a list"}],
)
async def test_select_failures_raise_read_failed(response: Any) -> None:
    store = RestRecordStore(FakeTransport(responses=[response]))
    with pytest.raises(StoreReadFailedError):
        await store.select_all()


@pytest.mark.asyncio
async def test_delete_filters_by_id_and_tolerates_missing_rows() -> None:
    transport = FakeTransport(
        responses=[None, CrowdSenseTransportError("HTTP 404", status_code=404, endpoint=ENDPOINT)]
    )
    store = RestRecordStore(transport)

    await store.delete(5)
    await store.delete(6)

    assert transport.calls[0]["method"] == "DELETE"
    assert transport.calls[0]["params"] == {"ID": "eq.5"}


@pytest.mark.asyncio
async def test_delete_failure_carries_record_id() -> None:
    error = CrowdSenseTransportError("HTTP 503", status_code=503, endpoint=ENDPOINT)
    store = RestRecordStore(FakeTransport(responses=[error]))

    with pytest.raises(StoreDeleteFailedError) as excinfo:
        await store.delete(11)
    assert excinfo.value.record_id == 11


@pytest.mark.asyncio
async def test_in_memory_store_assigns_ids_and_ignores_missing_deletes() -> None:
    store = InMemoryRecordStore()
    first = await store.insert(1, 0.0, 0.0)
    second = await store.insert(2, 1.0, 1.0)

    assert (first.id, second.id) == (1, 2)
    assert first.created_at is not None

    await store.delete(first.id)
    await store.delete(first.id)
    await store.delete(999)
    assert [r.id for r in await store.select_all()] == [2]
