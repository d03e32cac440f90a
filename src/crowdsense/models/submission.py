"""Submission outcome model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from crowdsense.models.estimate import CrowdEstimate
from crowdsense.models.record import CrowdRecord


class SubmissionResult(BaseModel):
    """Outcome of one submit: the insert always succeeded if this exists.

    ``reconciled`` is ``False`` when the post-insert fetch failed and no
    supersession pass ran this cycle.
    """

    model_config = ConfigDict(frozen=True)

    record: CrowdRecord
    estimate: CrowdEstimate
    reconciled: bool
    deleted_ids: frozenset[int] = Field(default_factory=frozenset)
    failed_deletes: frozenset[int] = Field(default_factory=frozenset)
