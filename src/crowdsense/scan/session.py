"""A single bounded discovery window."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable

from crowdsense._constants import DEFAULT_LATITUDE, DEFAULT_LONGITUDE, RSSI_THRESHOLD, SCAN_DURATION_S
from crowdsense.exceptions import ScanDiscardedError, SensorUnavailableError
from crowdsense.models.scan import Coordinate, DiscoveryEvent, ScanTally
from crowdsense.scan.sensor import DiscoverySensor, LocationProvider

_logger = logging.getLogger(__name__)


class ScanSession:
    """Collects unique discoveries until its close timer fires.

    Use :meth:`open` rather than the constructor.  The window closes
    exactly ``duration`` seconds after opening, on the event loop that
    opened it; :meth:`wait_closed` returns the resulting tally.

    ``observe`` may be called from any thread.  Session state (the
    unique-device set and counters) is only touched while holding the
    session lock, and the close step takes the same lock, so no event is
    counted twice or lost against a concurrent close.  Events that arrive
    once closing has begun are discarded.
    """

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        sensor: DiscoverySensor,
        location: LocationProvider,
        rssi_threshold: int = RSSI_THRESHOLD,
        default_location: Coordinate | None = None,
        on_close: Callable[[ScanSession, ScanTally], None] | None = None,
    ) -> None:
        self._loop = loop
        self._sensor = sensor
        self._location = location
        self._rssi_threshold = rssi_threshold
        self._default_location = default_location or Coordinate(
            latitude=DEFAULT_LATITUDE,
            longitude=DEFAULT_LONGITUDE,
        )
        self._on_close = on_close
        self._lock = threading.Lock()
        self._seen: set[str] = set()
        self._unknown_count = 0
        self._closing = False
        self._timer: asyncio.TimerHandle | None = None
        self._tally: ScanTally | None = None
        self._done: asyncio.Future[ScanTally] = loop.create_future()

    @classmethod
    def open(
        cls,
        *,
        sensor: DiscoverySensor,
        location: LocationProvider,
        duration: float = SCAN_DURATION_S,
        rssi_threshold: int = RSSI_THRESHOLD,
        default_location: Coordinate | None = None,
        on_close: Callable[[ScanSession, ScanTally], None] | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> ScanSession:
        """Open a collection window on *sensor*.

        Raises
        ------
        SensorUnavailableError
            The sensor is not ready; no session is created.
        """
        if not sensor.is_ready:
            raise SensorUnavailableError("Cannot scan, discovery sensor is not ready")
        loop = loop or asyncio.get_running_loop()
        session = cls(
            loop=loop,
            sensor=sensor,
            location=location,
            rssi_threshold=rssi_threshold,
            default_location=default_location,
            on_close=on_close,
        )
        sensor.attach(session._on_discovery)
        session._timer = loop.call_later(duration, session._close)
        _logger.info("Starting %.1f-second scan", duration)
        return session

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------

    def observe(self, device_key: str, has_name: bool, rssi: int) -> bool:
        """Record one discovery event.

        Returns ``True`` when the event added a new unique device.
        Signal strength only decides admission; once a key has been
        counted, later events for it are no-ops whatever their RSSI.
        """
        if rssi <= self._rssi_threshold:
            return False
        with self._lock:
            if self._closing or device_key in self._seen:
                return False
            self._seen.add(device_key)
            if not has_name:
                self._unknown_count += 1
        _logger.debug("Found device %s named=%s rssi=%d", device_key, has_name, rssi)
        return True

    def observe_event(self, event: DiscoveryEvent) -> bool:
        return self.observe(event.device_key, event.has_name, event.rssi)

    def _on_discovery(self, device_key: str, name: str | None, rssi: int) -> None:
        self.observe(device_key, name is not None, rssi)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        with self._lock:
            return not self._closing

    @property
    def total_count(self) -> int:
        with self._lock:
            return len(self._seen)

    @property
    def unknown_count(self) -> int:
        with self._lock:
            return self._unknown_count

    @property
    def tally(self) -> ScanTally | None:
        """The final tally, or ``None`` until the window has closed."""
        return self._tally

    def _close(self) -> None:
        with self._lock:
            if self._closing:
                return
            self._closing = True
            total_count = len(self._seen)
            unknown_count = self._unknown_count
        self._timer = None
        self._sensor.detach(self._on_discovery)

        try:
            current = self._location.current_location()
        except Exception:
            _logger.warning("Location lookup failed, using default coordinate", exc_info=True)
            current = None
        tally = ScanTally(
            total_count=total_count,
            unknown_count=unknown_count,
            location=current or self._default_location,
            location_is_fallback=current is None,
        )
        self._tally = tally
        _logger.info("Scan finished. Found %d unique devices (%d unknown)", total_count, unknown_count)

        if not self._done.done():
            self._done.set_result(tally)
        if self._on_close is not None:
            try:
                self._on_close(self, tally)
            except Exception:
                _logger.warning("on_close callback failed", exc_info=True)

    def discard(self) -> None:
        """Tear the session down without producing a tally.

        Cancels the close timer so it can never fire into a later
        session, and fails pending :meth:`wait_closed` calls with
        :class:`ScanDiscardedError`.  Must be called from the event loop
        thread.  No-op once closing has begun.
        """
        with self._lock:
            if self._closing:
                return
            self._closing = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._sensor.detach(self._on_discovery)
        if not self._done.done():
            self._done.cancel()
        _logger.debug("Scan session discarded")

    async def wait_closed(self) -> ScanTally:
        """Wait for the window to close and return its tally.

        Raises
        ------
        ScanDiscardedError
            The session was discarded before its window closed.
        """
        try:
            return await asyncio.shield(self._done)
        except asyncio.CancelledError:
            task = asyncio.current_task()
            if self._done.cancelled() and (task is None or not task.cancelling()):
                raise ScanDiscardedError("Scan session was discarded before it closed") from None
            raise
