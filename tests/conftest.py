from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from crowdsense.exceptions import StoreDeleteFailedError, StoreReadFailedError, StoreWriteFailedError
from crowdsense.models.record import CrowdRecord
from crowdsense.scan.sensor import DiscoverySink
from crowdsense.store import InMemoryRecordStore

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


class FakeSensor:
    """Discovery sensor double: tests push events with :meth:`emit`."""

    def __init__(self, *, ready: bool = True) -> None:
        self.ready = ready
        self.sink: DiscoverySink | None = None
        self.attach_calls = 0

    @property
    def is_ready(self) -> bool:
        return self.ready

    def attach(self, sink: DiscoverySink) -> None:
        self.attach_calls += 1
        self.sink = sink

    def detach(self, sink: DiscoverySink) -> None:
        if self.sink == sink:
            self.sink = None

    def emit(self, device_key: str, name: str | None, rssi: int) -> None:
        if self.sink is not None:
            self.sink(device_key, name, rssi)


class FlakyStore:
    """Wraps :class:`InMemoryRecordStore` with switchable failures."""

    def __init__(self, inner: InMemoryRecordStore) -> None:
        self.inner = inner
        self.fail_insert = False
        self.fail_select = False
        self.fail_delete_ids: set[int] = set()
        self.select_calls = 0
        self.deleted: list[int] = []

    async def insert(self, people_count: int, latitude: float, longitude: float) -> CrowdRecord:
        if self.fail_insert:
            raise StoreWriteFailedError("insert refused")
        return await self.inner.insert(people_count, latitude, longitude)

    async def select_all(self) -> list[CrowdRecord]:
        self.select_calls += 1
        if self.fail_select:
            raise StoreReadFailedError("select refused")
        return await self.inner.select_all()

    async def delete(self, record_id: int) -> None:
        if record_id in self.fail_delete_ids:
            raise StoreDeleteFailedError("delete refused", record_id=record_id)
        self.deleted.append(record_id)
        await self.inner.delete(record_id)


def make_record(
    record_id: int,
    *,
    lat: float = 0.0,
    lon: float = 0.0,
    age_minutes: float = 0.0,
    now: datetime = NOW,
    created_at: str | None = None,
    people_count: int = 2,
) -> CrowdRecord:
    """Build a record as the store would return it (wire names, ISO timestamp)."""
    stamp = created_at if created_at is not None else (now - timedelta(minutes=age_minutes)).isoformat()
    return CrowdRecord.model_validate(
        {
            "ID": record_id,
            "people_count": people_count,
            "Latitude": lat,
            "Longitude": lon,
            "created_at": stamp,
        }
    )


@pytest.fixture
def sensor() -> FakeSensor:
    return FakeSensor()
