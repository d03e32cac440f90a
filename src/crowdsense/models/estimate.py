"""Crowd estimate models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class CrowdLevel(StrEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    VERY_HIGH = "Very High"

    @property
    def range_label(self) -> str:
        """Human-readable people range for this level."""
        return _RANGE_LABELS[self]


_RANGE_LABELS: dict[CrowdLevel, str] = {
    CrowdLevel.LOW: "(< 5 People)",
    CrowdLevel.MEDIUM: "(5-14 People)",
    CrowdLevel.HIGH: "(15-29 People)",
    CrowdLevel.VERY_HIGH: "(30+ People)",
}


class CrowdEstimate(BaseModel):
    """People count and qualitative level derived from a tally."""

    model_config = ConfigDict(frozen=True)

    people_count: int = Field(ge=1)
    level: CrowdLevel
