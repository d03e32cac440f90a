"""Deterministic supersession and staleness policy.

This module contains *no* store access.  Timestamps reach it already
parsed; records with unparseable timestamps are filtered out by callers.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta

from crowdsense._constants import STALE_AFTER_S, SUPERSEDE_DISTANCE_DEG


def planar_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Euclidean distance in raw degrees.

    Not geodesic: one degree of longitude shrinks with latitude, so this
    is only a city-scale approximation.
    """
    return math.hypot(lat2 - lat1, lon2 - lon1)


def is_superseded(distance: float, *, threshold: float = SUPERSEDE_DISTANCE_DEG) -> bool:
    return distance < threshold


def is_stale(now: datetime, created_at: datetime, *, stale_after: float = STALE_AFTER_S) -> bool:
    """Strictly older than *stale_after* seconds."""
    return now - created_at > timedelta(seconds=stale_after)
