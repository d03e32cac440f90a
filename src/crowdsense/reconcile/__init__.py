"""Reconciliation layer.

Decides which stored crowd records are superseded by a fresher nearby
reading and which have gone stale.  Deletion is the only way records
leave the shared store, so these decisions are what keep it live.
"""

from crowdsense.reconcile.janitor import Janitor, sweep
from crowdsense.reconcile.policy import is_stale, is_superseded, planar_distance
from crowdsense.reconcile.reconciler import reconcile

__all__ = [
    "Janitor",
    "is_stale",
    "is_superseded",
    "planar_distance",
    "reconcile",
    "sweep",
]
