"""crowdsense - crowd density estimation from nearby device discovery."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("crowdsense")
except PackageNotFoundError:
    __version__ = "0+local"
from crowdsense.client import CrowdClient
from crowdsense.config import CrowdSenseConfig
from crowdsense.estimator import crowd_level, estimate
from crowdsense.exceptions import (
    CrowdSenseConfigError,
    CrowdSenseError,
    CrowdSenseTransportError,
    MalformedRecordError,
    ScanDiscardedError,
    ScanInProgressError,
    SensorUnavailableError,
    StoreDeleteFailedError,
    StoreError,
    StoreReadFailedError,
    StoreWriteFailedError,
)
from crowdsense.models import (
    Coordinate,
    CrowdEstimate,
    CrowdLevel,
    CrowdRecord,
    ScanIdle,
    ScanInProgress,
    ScanResults,
    ScanState,
    ScanTally,
    SubmissionResult,
)
from crowdsense.reconcile import Janitor, reconcile, sweep
from crowdsense.scan import LatestLocation, Scanner, ScanSession
from crowdsense.store import InMemoryRecordStore, RecordStore, RestRecordStore
from crowdsense.submission import submit_tally

__all__ = [
    "__version__",
    "Coordinate",
    "CrowdClient",
    "CrowdEstimate",
    "CrowdLevel",
    "CrowdRecord",
    "CrowdSenseConfig",
    "CrowdSenseConfigError",
    "CrowdSenseError",
    "CrowdSenseTransportError",
    "InMemoryRecordStore",
    "Janitor",
    "LatestLocation",
    "MalformedRecordError",
    "RecordStore",
    "RestRecordStore",
    "ScanDiscardedError",
    "ScanIdle",
    "ScanInProgress",
    "ScanInProgressError",
    "ScanResults",
    "ScanSession",
    "ScanState",
    "ScanTally",
    "Scanner",
    "SensorUnavailableError",
    "StoreDeleteFailedError",
    "StoreError",
    "StoreReadFailedError",
    "StoreWriteFailedError",
    "SubmissionResult",
    "crowd_level",
    "estimate",
    "reconcile",
    "submit_tally",
    "sweep",
]
