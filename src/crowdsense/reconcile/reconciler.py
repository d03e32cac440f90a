"""Post-insert reconciliation against the rest of the store."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from crowdsense._constants import STALE_AFTER_S, SUPERSEDE_DISTANCE_DEG
from crowdsense.exceptions import MalformedRecordError
from crowdsense.models.record import CrowdRecord
from crowdsense.reconcile.policy import is_stale, is_superseded, planar_distance

_logger = logging.getLogger(__name__)


def reconcile(
    new_record_id: int,
    new_lat: float,
    new_lon: float,
    now: datetime,
    records: Iterable[CrowdRecord],
    *,
    distance_threshold: float = SUPERSEDE_DISTANCE_DEG,
    stale_after: float = STALE_AFTER_S,
) -> set[int]:
    """Return ids of records the new submission makes obsolete.

    A record is selected when it lies within *distance_threshold* degrees
    of the new reading (whatever its age) or is older than *stale_after*
    seconds (whatever its distance).  The new record itself is never
    selected, and records whose timestamp cannot be parsed are skipped
    for this pass rather than deleted.
    """
    doomed: set[int] = set()
    for record in records:
        if record.id == new_record_id:
            continue
        try:
            created_at = record.require_created_at()
        except MalformedRecordError as exc:
            _logger.warning("Skipping record during reconciliation: %s", exc)
            continue

        distance = planar_distance(new_lat, new_lon, record.latitude, record.longitude)
        if is_superseded(distance, threshold=distance_threshold):
            _logger.debug("Record %d superseded (distance=%.5f)", record.id, distance)
            doomed.add(record.id)
        elif is_stale(now, created_at, stale_after=stale_after):
            _logger.debug("Record %d stale (created_at=%s)", record.id, created_at.isoformat())
            doomed.add(record.id)
    return doomed
