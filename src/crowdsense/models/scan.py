"""Scan-side models: discovery events, tallies and scan state."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    """A latitude/longitude pair in degrees."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class DiscoveryEvent(BaseModel):
    """One sensed device, as reported by the discovery sensor.

    ``device_key`` is opaque and only stable within a single session.
    """

    model_config = ConfigDict(frozen=True)

    device_key: str
    has_name: bool
    rssi: int


class ScanTally(BaseModel):
    """Raw per-session discovery counts.

    Parameters
    ----------
    total_count : int
        Unique devices admitted during the session.
    unknown_count : int
        Unique admitted devices without an advertised name.
    location : Coordinate
        Location read when the session closed.
    location_is_fallback : bool
        ``True`` when no location was available and the default
        coordinate was used instead.
    """

    model_config = ConfigDict(frozen=True)

    total_count: int = Field(ge=0)
    unknown_count: int = Field(ge=0)
    location: Coordinate
    location_is_fallback: bool = False


class ScanIdle(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["idle"] = "idle"


class ScanInProgress(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["scanning"] = "scanning"


class ScanResults(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["results"] = "results"
    tally: ScanTally


ScanState = Annotated[ScanIdle | ScanInProgress | ScanResults, Field(discriminator="kind")]
"""Scanner state. Transitions are idle -> scanning -> results -> idle."""
