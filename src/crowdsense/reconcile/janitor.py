"""Store-wide staleness sweep, independent of submissions."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from crowdsense._constants import STALE_AFTER_S, SWEEP_INTERVAL_S
from crowdsense.exceptions import MalformedRecordError, StoreReadFailedError
from crowdsense.models.record import CrowdRecord
from crowdsense.reconcile.policy import is_stale
from crowdsense.store import RecordStore, delete_many

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def sweep(
    now: datetime,
    records: Iterable[CrowdRecord],
    *,
    stale_after: float = STALE_AFTER_S,
) -> set[int]:
    """Return ids of every record older than *stale_after* seconds.

    No spatial component.  Records with unparseable timestamps are
    skipped for this pass.
    """
    doomed: set[int] = set()
    for record in records:
        try:
            created_at = record.require_created_at()
        except MalformedRecordError as exc:
            _logger.warning("Skipping record during sweep: %s", exc)
            continue
        if is_stale(now, created_at, stale_after=stale_after):
            doomed.add(record.id)
    return doomed


class Janitor:
    """Periodically purges stale records from a shared store.

    Usage::

        janitor = Janitor(store)
        janitor.start()
        ...
        await janitor.stop()
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        interval: float = SWEEP_INTERVAL_S,
        stale_after: float = STALE_AFTER_S,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._interval = interval
        self._stale_after = stale_after
        self._clock = clock
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> set[int]:
        """One sweep pass. Returns the ids actually deleted.

        A failed fetch skips the pass; the next cycle tries again.
        """
        try:
            records = await self._store.select_all()
        except StoreReadFailedError as exc:
            _logger.warning("Janitor fetch failed, skipping this cycle: %s", exc)
            return set()

        doomed = sweep(self._clock(), records, stale_after=self._stale_after)
        if not doomed:
            return set()
        deleted, failed = await delete_many(self._store, doomed)
        _logger.info("Janitor removed %d stale records (%d failed)", len(deleted), len(failed))
        return deleted

    def start(self) -> None:
        """Run :meth:`run_once` every interval on the current event loop."""
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run_forever())

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run_forever(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception:
                _logger.warning("Janitor pass failed", exc_info=True)
            await asyncio.sleep(self._interval)
