"""Custom exception hierarchy for crowdsense."""

from __future__ import annotations


class CrowdSenseError(Exception):
    """Base exception for all crowdsense errors."""


class CrowdSenseConfigError(CrowdSenseError):
    """Invalid or missing configuration."""


class CrowdSenseTransportError(CrowdSenseError):
    """HTTP-level failure (network, non-2xx, undecodable or invalid JSON body)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class SensorUnavailableError(CrowdSenseError):
    """The discovery sensor is not ready; no session was opened."""


class ScanInProgressError(CrowdSenseError):
    """A scan session is already open on this scanner."""


class ScanDiscardedError(CrowdSenseError):
    """The scan session was torn down before its window closed."""


class StoreError(CrowdSenseError):
    """Record store operation failed."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class StoreWriteFailedError(StoreError):
    """Insert failed. The submission fails and no reconciliation runs."""


class StoreReadFailedError(StoreError):
    """Fetching records failed.

    Callers treat this as "try again next cycle": the reconciliation or
    sweep pass is skipped, never retried inline.
    """


class StoreDeleteFailedError(StoreError):
    """Deleting a single record failed.

    Deletion is best effort; the next submission or janitor sweep will
    pick the record up again.
    """

    def __init__(self, message: str, *, record_id: int, endpoint: str = "") -> None:
        self.record_id = record_id
        super().__init__(message, endpoint=endpoint)


class MalformedRecordError(CrowdSenseError):
    """A fetched record carries a timestamp that cannot be parsed.

    The record is skipped for the current reconciliation or sweep pass
    only; it is neither deleted nor treated as live-and-fresh.
    """

    def __init__(self, message: str, *, record_id: int | None = None) -> None:
        self.record_id = record_id
        super().__init__(message)
