"""Tally to crowd estimate conversion.

Only unnamed devices count towards the estimate: named devices are more
likely to belong to the observer or to known hardware in range.
"""

from __future__ import annotations

from crowdsense._constants import DEVICES_PER_PERSON
from crowdsense.models.estimate import CrowdEstimate, CrowdLevel
from crowdsense.models.scan import ScanTally


def people_from_unknown(unknown_count: int) -> int:
    """People estimate for *unknown_count* unnamed devices (always >= 1)."""
    if unknown_count < 0:
        raise ValueError(f"unknown_count must not be negative, got {unknown_count}")
    return unknown_count // DEVICES_PER_PERSON + 1


def crowd_level(people_count: int) -> CrowdLevel:
    if people_count < 5:
        return CrowdLevel.LOW
    if people_count < 15:
        return CrowdLevel.MEDIUM
    if people_count < 30:
        return CrowdLevel.HIGH
    return CrowdLevel.VERY_HIGH


def estimate(tally: ScanTally) -> CrowdEstimate:
    """Derive the people count and level for *tally*."""
    people_count = people_from_unknown(tally.unknown_count)
    return CrowdEstimate(people_count=people_count, level=crowd_level(people_count))
