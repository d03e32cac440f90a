"""Client configuration for crowdsense."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from crowdsense._constants import (
    DEFAULT_LATITUDE,
    DEFAULT_LONGITUDE,
    DEFAULT_TABLE,
    RSSI_THRESHOLD,
    SCAN_DURATION_S,
    STALE_AFTER_S,
    SUPERSEDE_DISTANCE_DEG,
    SWEEP_INTERVAL_S,
)
from crowdsense.exceptions import CrowdSenseConfigError


@dataclasses.dataclass(frozen=True)
class CrowdSenseConfig:
    """Client configuration.

    Parameters
    ----------
    store_url : str
        Base URL of the shared record store (a Supabase project URL).
    store_key : str
        API key sent as ``apikey`` and bearer token on every request.
    table : str
        Name of the crowd record table.
    scan_duration : float
        Length of one scan window in seconds.
    rssi_threshold : int
        Discovery events at or below this RSSI are ignored.
    supersede_distance : float
        Planar distance in raw degrees under which a new record
        supersedes an existing one.
    stale_after : float
        Age in seconds after which a record is purged.
    sweep_interval : float
        Seconds between janitor sweeps.
    default_latitude : float
        Latitude reported when no location was ever acquired.
    default_longitude : float
        Longitude reported when no location was ever acquired.
    request_timeout : float
        Total timeout in seconds for a single store request.
    """

    store_url: str = ""
    store_key: str = ""
    table: str = DEFAULT_TABLE
    scan_duration: float = SCAN_DURATION_S
    rssi_threshold: int = RSSI_THRESHOLD
    supersede_distance: float = SUPERSEDE_DISTANCE_DEG
    stale_after: float = STALE_AFTER_S
    sweep_interval: float = SWEEP_INTERVAL_S
    default_latitude: float = DEFAULT_LATITUDE
    default_longitude: float = DEFAULT_LONGITUDE
    request_timeout: float = 10.0

    def validate(self) -> None:
        """Raise :class:`CrowdSenseConfigError` when the store cannot be reached with this config."""
        if not self.store_url.strip():
            raise CrowdSenseConfigError("store_url is required (set CROWDSENSE_STORE_URL)")
        if not self.store_key.strip():
            raise CrowdSenseConfigError("store_key is required (set CROWDSENSE_STORE_KEY)")
        for name in ("scan_duration", "stale_after", "sweep_interval", "request_timeout"):
            if getattr(self, name) <= 0:
                raise CrowdSenseConfigError(f"{name} must be positive, got {getattr(self, name)}")
        if self.supersede_distance < 0:
            raise CrowdSenseConfigError(f"supersede_distance must not be negative, got {self.supersede_distance}")

    @classmethod
    def from_env(cls, **overrides: Any) -> CrowdSenseConfig:
        """Create configuration from environment variables.

        Reads ``CROWDSENSE_STORE_URL``, ``CROWDSENSE_STORE_KEY`` and the
        optional ``CROWDSENSE_*`` policy variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        CrowdSenseConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "CROWDSENSE_STORE_URL": "store_url",
            "CROWDSENSE_STORE_KEY": "store_key",
            "CROWDSENSE_TABLE": "table",
        }
        _ENV_FLOAT_MAP = {
            "CROWDSENSE_SCAN_DURATION": "scan_duration",
            "CROWDSENSE_SUPERSEDE_DISTANCE": "supersede_distance",
            "CROWDSENSE_STALE_AFTER": "stale_after",
            "CROWDSENSE_SWEEP_INTERVAL": "sweep_interval",
            "CROWDSENSE_DEFAULT_LATITUDE": "default_latitude",
            "CROWDSENSE_DEFAULT_LONGITUDE": "default_longitude",
            "CROWDSENSE_REQUEST_TIMEOUT": "request_timeout",
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val.strip()

        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = float(val)
            except ValueError as exc:
                raise CrowdSenseConfigError(f"{env_key} must be a number, got {val!r}") from exc

        # rssi_threshold is an integer dBm value, handle separately
        rssi_env = env.get("CROWDSENSE_RSSI_THRESHOLD")
        if rssi_env is not None and "rssi_threshold" not in overrides:
            try:
                config_kwargs["rssi_threshold"] = int(rssi_env)
            except ValueError as exc:
                raise CrowdSenseConfigError(f"CROWDSENSE_RSSI_THRESHOLD must be an integer, got {rssi_env!r}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
