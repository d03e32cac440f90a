"""Per-client scan coordinator."""

from __future__ import annotations

import logging

from crowdsense.config import CrowdSenseConfig
from crowdsense.exceptions import CrowdSenseError, ScanInProgressError
from crowdsense.models.scan import Coordinate, ScanIdle, ScanInProgress, ScanResults, ScanState, ScanTally
from crowdsense.scan.sensor import DiscoverySensor, LocationProvider
from crowdsense.scan.session import ScanSession

_logger = logging.getLogger(__name__)


class Scanner:
    """Owns the sensor and location collaborators for one client.

    At most one :class:`ScanSession` is open at a time.  ``state`` moves
    idle -> scanning -> results, and back to idle on :meth:`reset`
    (starting a new scan from results passes through idle).

    Usage::

        scanner = Scanner(sensor, location)
        tally = await scanner.scan()
    """

    def __init__(
        self,
        sensor: DiscoverySensor,
        location: LocationProvider,
        *,
        config: CrowdSenseConfig | None = None,
    ) -> None:
        self._sensor = sensor
        self._location = location
        self._config = config or CrowdSenseConfig()
        self._state: ScanState = ScanIdle()
        self._session: ScanSession | None = None
        self._closed = False

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def session(self) -> ScanSession | None:
        """The currently open session, if any."""
        return self._session

    def start_scan(self) -> ScanSession:
        """Open a new session.

        Raises
        ------
        ScanInProgressError
            A session is already open.
        SensorUnavailableError
            The sensor is not ready.
        """
        if self._closed:
            raise CrowdSenseError("Scanner is closed")
        if isinstance(self._state, ScanInProgress):
            raise ScanInProgressError("A scan is already in progress")
        if isinstance(self._state, ScanResults):
            self.reset()

        config = self._config
        session = ScanSession.open(
            sensor=self._sensor,
            location=self._location,
            duration=config.scan_duration,
            rssi_threshold=config.rssi_threshold,
            default_location=Coordinate(latitude=config.default_latitude, longitude=config.default_longitude),
            on_close=self._on_session_closed,
        )
        self._session = session
        self._state = ScanInProgress()
        return session

    async def scan(self) -> ScanTally:
        """Run one full session and return its tally.

        Raises :class:`ScanDiscardedError` if :meth:`close` tears the
        session down first.
        """
        session = self.start_scan()
        return await session.wait_closed()

    def _on_session_closed(self, session: ScanSession, tally: ScanTally) -> None:
        # A discarded or superseded session must not move the state.
        if session is not self._session:
            _logger.debug("Ignoring close signal from a stale scan session")
            return
        self._session = None
        self._state = ScanResults(tally=tally)

    def reset(self) -> None:
        """Return to idle after results have been consumed."""
        if isinstance(self._state, ScanInProgress):
            raise ScanInProgressError("Cannot reset while a scan is in progress")
        self._state = ScanIdle()

    def close(self) -> None:
        """Discard any open session and refuse further scans."""
        self._closed = True
        session = self._session
        self._session = None
        if session is not None:
            session.discard()
        self._state = ScanIdle()
