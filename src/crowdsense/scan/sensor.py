"""Boundaries to the discovery sensor and the location source."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from crowdsense.models.scan import Coordinate

DiscoverySink = Callable[[str, str | None, int], None]
"""Callback receiving ``(device_key, display_name_or_None, rssi)``."""


class DiscoverySensor(Protocol):
    """Structural interface of a wireless-discovery sensor.

    The sensor may invoke the attached sink from any thread.
    """

    @property
    def is_ready(self) -> bool:
        ...

    def attach(self, sink: DiscoverySink) -> None:
        ...

    def detach(self, sink: DiscoverySink) -> None:
        """Stop delivering to *sink*; no-op if another sink is attached."""
        ...


class LocationProvider(Protocol):
    """Best-effort latest location. Must never block."""

    def current_location(self) -> Coordinate | None:
        ...


class LatestLocation:
    """Holds the most recent coordinate pushed by a location source."""

    def __init__(self, coordinate: Coordinate | None = None) -> None:
        self._coordinate = coordinate

    def update(self, latitude: float, longitude: float) -> None:
        self._coordinate = Coordinate(latitude=latitude, longitude=longitude)

    def clear(self) -> None:
        self._coordinate = None

    def current_location(self) -> Coordinate | None:
        return self._coordinate
