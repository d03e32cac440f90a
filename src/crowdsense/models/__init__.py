"""Data models for scans, estimates and stored crowd records."""

from crowdsense.models._base import StoreTimestamp, parse_store_timestamp
from crowdsense.models.estimate import CrowdEstimate, CrowdLevel
from crowdsense.models.record import CrowdRecord
from crowdsense.models.scan import (
    Coordinate,
    DiscoveryEvent,
    ScanIdle,
    ScanInProgress,
    ScanResults,
    ScanState,
    ScanTally,
)
from crowdsense.models.submission import SubmissionResult

__all__ = [
    "Coordinate",
    "CrowdEstimate",
    "CrowdLevel",
    "CrowdRecord",
    "DiscoveryEvent",
    "ScanIdle",
    "ScanInProgress",
    "ScanResults",
    "ScanState",
    "ScanTally",
    "StoreTimestamp",
    "SubmissionResult",
    "parse_store_timestamp",
]
