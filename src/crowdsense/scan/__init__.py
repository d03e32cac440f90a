"""Scan layer.

A :class:`Scanner` owns the discovery sensor and location collaborators
and opens at most one :class:`ScanSession` at a time.  Each session
collects unique discoveries for a fixed window and yields a
:class:`~crowdsense.models.scan.ScanTally`.
"""

from crowdsense.scan.scanner import Scanner
from crowdsense.scan.sensor import DiscoverySensor, DiscoverySink, LatestLocation, LocationProvider
from crowdsense.scan.session import ScanSession

__all__ = [
    "DiscoverySensor",
    "DiscoverySink",
    "LatestLocation",
    "LocationProvider",
    "ScanSession",
    "Scanner",
]
