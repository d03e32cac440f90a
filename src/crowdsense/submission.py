"""Submit a tally: estimate, insert, then reconcile the rest of the store."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from crowdsense._constants import STALE_AFTER_S, SUPERSEDE_DISTANCE_DEG
from crowdsense.estimator import estimate
from crowdsense.exceptions import StoreReadFailedError
from crowdsense.models.scan import ScanTally
from crowdsense.models.submission import SubmissionResult
from crowdsense.reconcile.reconciler import reconcile
from crowdsense.store import RecordStore, delete_many

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


async def submit_tally(
    store: RecordStore,
    tally: ScanTally,
    *,
    distance_threshold: float = SUPERSEDE_DISTANCE_DEG,
    stale_after: float = STALE_AFTER_S,
    clock: Callable[[], datetime] = _utcnow,
) -> SubmissionResult:
    """Insert a crowd record for *tally* and delete what it makes obsolete.

    The submission succeeds once the insert succeeds.  Everything after
    that is best effort: a failed fetch skips reconciliation for this
    cycle, and failed deletes are reported in the result.  Nothing here
    is transactional; a concurrent submission elsewhere is reconciled on
    the next pass.

    Raises
    ------
    StoreWriteFailedError
        The insert failed; no reconciliation was attempted.
    """
    crowd = estimate(tally)
    location = tally.location
    record = await store.insert(crowd.people_count, location.latitude, location.longitude)
    _logger.info(
        "Inserted record %d: %d people (%s) at %.5f,%.5f",
        record.id,
        crowd.people_count,
        crowd.level,
        location.latitude,
        location.longitude,
    )

    try:
        others = await store.select_all()
    except StoreReadFailedError as exc:
        _logger.warning("Reconciliation skipped for record %d: %s", record.id, exc)
        return SubmissionResult(record=record, estimate=crowd, reconciled=False)

    doomed = reconcile(
        record.id,
        location.latitude,
        location.longitude,
        clock(),
        others,
        distance_threshold=distance_threshold,
        stale_after=stale_after,
    )
    deleted, failed = await delete_many(store, doomed)
    if deleted or failed:
        _logger.info("Reconciliation for record %d removed %d records (%d failed)", record.id, len(deleted), len(failed))
    return SubmissionResult(
        record=record,
        estimate=crowd,
        reconciled=True,
        deleted_ids=frozenset(deleted),
        failed_deletes=frozenset(failed),
    )
