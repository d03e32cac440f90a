"""Record store clients.

The shared table is only ever touched through three operations: insert
one row, select every row, delete a row by id.  There is no update path;
staleness and supersession are expressed purely through deletion.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any, Protocol

from pydantic import ValidationError

from crowdsense._constants import DEFAULT_TABLE, REST_PREFIX
from crowdsense._transport import Transport
from crowdsense.exceptions import (
    CrowdSenseTransportError,
    StoreDeleteFailedError,
    StoreError,
    StoreReadFailedError,
    StoreWriteFailedError,
)
from crowdsense.models.record import CrowdRecord

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class RecordStore(Protocol):
    """Operations the core needs from the shared record store."""

    async def insert(self, people_count: int, latitude: float, longitude: float) -> CrowdRecord:
        """Insert a row; the store assigns ``id`` and ``created_at``."""
        ...

    async def select_all(self) -> list[CrowdRecord]:
        ...

    async def delete(self, record_id: int) -> None:
        """Delete a row. Deleting an absent id succeeds."""
        ...


def parse_records(rows: Any, *, endpoint: str = "") -> list[CrowdRecord]:
    """Validate a list of store rows, dropping rows that are not records at all.

    Rows with an unparseable ``created_at`` are kept; callers decide how
    to treat them.
    """
    if not isinstance(rows, list):
        raise StoreReadFailedError(f"Expected a list of rows from {endpoint}, got {type(rows).__name__}", endpoint=endpoint)
    records: list[CrowdRecord] = []
    for row in rows:
        try:
            records.append(CrowdRecord.model_validate(row))
        except ValidationError as exc:
            _logger.warning("Dropping undecodable row from %s: %s", endpoint, exc.errors(include_url=False))
    return records


async def delete_many(store: RecordStore, record_ids: Iterable[int]) -> tuple[set[int], set[int]]:
    """Best-effort delete of *record_ids*.

    Returns ``(deleted, failed)``.  Individual failures are logged and
    never raised.
    """
    deleted: set[int] = set()
    failed: set[int] = set()
    for record_id in sorted(record_ids):
        try:
            await store.delete(record_id)
        except StoreError as exc:
            _logger.warning("Delete of record %d failed, leaving it for the next pass: %s", record_id, exc)
            failed.add(record_id)
        else:
            deleted.add(record_id)
    return deleted, failed


class RestRecordStore:
    """Record store backed by a PostgREST (Supabase) table."""

    def __init__(self, transport: Transport, *, table: str = DEFAULT_TABLE) -> None:
        self._transport = transport
        self._table = table

    @property
    def endpoint(self) -> str:
        return f"{REST_PREFIX}/{self._table}"

    async def insert(self, people_count: int, latitude: float, longitude: float) -> CrowdRecord:
        endpoint = self.endpoint
        row = {"people_count": people_count, "Latitude": latitude, "Longitude": longitude}
        try:
            response = await self._transport.request(
                "POST",
                endpoint,
                json_body=[row],
                headers={"prefer": "return=representation"},
            )
        except CrowdSenseTransportError as exc:
            raise StoreWriteFailedError(f"Insert into {self._table} failed: {exc}", endpoint=endpoint) from exc

        if not isinstance(response, list) or not response:
            raise StoreWriteFailedError(f"Insert into {self._table} returned no row", endpoint=endpoint)
        try:
            record = CrowdRecord.model_validate(response[0])
        except ValidationError as exc:
            raise StoreWriteFailedError(f"Insert into {self._table} returned an undecodable row", endpoint=endpoint) from exc
        _logger.debug("Inserted record %d", record.id)
        return record

    async def select_all(self) -> list[CrowdRecord]:
        endpoint = self.endpoint
        try:
            rows = await self._transport.request("GET", endpoint, params={"select": "*"})
        except CrowdSenseTransportError as exc:
            raise StoreReadFailedError(f"Select from {self._table} failed: {exc}", endpoint=endpoint) from exc
        return parse_records(rows, endpoint=endpoint)

    async def delete(self, record_id: int) -> None:
        endpoint = self.endpoint
        try:
            await self._transport.request("DELETE", endpoint, params={"ID": f"eq.{record_id}"})
        except CrowdSenseTransportError as exc:
            if exc.status_code == 404:
                return
            raise StoreDeleteFailedError(
                f"Delete of record {record_id} from {self._table} failed: {exc}",
                record_id=record_id,
                endpoint=endpoint,
            ) from exc


class InMemoryRecordStore:
    """Process-local store with the same contract as the shared table."""

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._rows: dict[int, CrowdRecord] = {}
        self._next_id = 1

    async def insert(self, people_count: int, latitude: float, longitude: float) -> CrowdRecord:
        record = CrowdRecord(
            id=self._next_id,
            people_count=people_count,
            latitude=latitude,
            longitude=longitude,
            created_at=self._clock(),
        )
        self._next_id += 1
        self._rows[record.id] = record
        return record

    async def select_all(self) -> list[CrowdRecord]:
        return [self._rows[key] for key in sorted(self._rows)]

    async def delete(self, record_id: int) -> None:
        self._rows.pop(record_id, None)

    def add(self, record: CrowdRecord) -> None:
        """Seed a record as-is (id and timestamp included)."""
        self._rows[record.id] = record
        self._next_id = max(self._next_id, record.id + 1)

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._rows
