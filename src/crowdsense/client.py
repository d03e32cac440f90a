"""High-level async client for the shared crowd record store."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from crowdsense._transport import RestTransport
from crowdsense.config import CrowdSenseConfig
from crowdsense.exceptions import CrowdSenseError
from crowdsense.models.record import CrowdRecord
from crowdsense.models.scan import ScanTally
from crowdsense.models.submission import SubmissionResult
from crowdsense.reconcile.janitor import Janitor
from crowdsense.store import RestRecordStore
from crowdsense.submission import submit_tally

_logger = logging.getLogger(__name__)


class CrowdClient:
    """Async client for submitting and maintaining crowd records.

    Usage::

        async with CrowdClient(CrowdSenseConfig.from_env()) as client:
            result = await client.submit(tally)
    """

    def __init__(
        self,
        config: CrowdSenseConfig,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        config.validate()
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._store: RestRecordStore | None = None
        self._janitor: Janitor | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> CrowdClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        transport = RestTransport(self._config, self._http_session)
        self._store = RestRecordStore(transport, table=self._config.table)
        self._janitor = Janitor(
            self._store,
            interval=self._config.sweep_interval,
            stale_after=self._config.stale_after,
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        try:
            if self._janitor is not None:
                await self._janitor.stop()
        finally:
            self._janitor = None
            self._store = None
            if not self._external_session and self._http_session is not None:
                await self._http_session.close()
                self._http_session = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_store(self) -> RestRecordStore:
        if self._store is None:
            raise CrowdSenseError("Client not initialized. Use 'async with CrowdClient(...) as client:'")
        return self._store

    def _require_janitor(self) -> Janitor:
        if self._janitor is None:
            raise CrowdSenseError("Client not initialized. Use 'async with CrowdClient(...) as client:'")
        return self._janitor

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @property
    def store(self) -> RestRecordStore:
        return self._require_store()

    async def submit(self, tally: ScanTally) -> SubmissionResult:
        """Estimate, insert and reconcile. See :func:`crowdsense.submission.submit_tally`."""
        return await submit_tally(
            self._require_store(),
            tally,
            distance_threshold=self._config.supersede_distance,
            stale_after=self._config.stale_after,
        )

    async def fetch_records(self) -> list[CrowdRecord]:
        """Every live record in the shared table."""
        return await self._require_store().select_all()

    async def sweep(self) -> set[int]:
        """Run one janitor pass now."""
        return await self._require_janitor().run_once()

    def start_janitor(self) -> None:
        """Sweep every ``config.sweep_interval`` seconds until the client closes."""
        janitor = self._require_janitor()
        janitor.start()
        _logger.debug("Janitor started (interval=%.0fs)", self._config.sweep_interval)

    async def stop_janitor(self) -> None:
        if self._janitor is not None:
            await self._janitor.stop()
