"""Crowd record model (one row of the shared table)."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from crowdsense.exceptions import MalformedRecordError
from crowdsense.models._base import StoreTimestamp
from crowdsense.models.scan import Coordinate


class CrowdRecord(BaseModel):
    """A live crowd estimate stored in the shared table.

    Records are never updated in place: the store assigns ``id`` and
    ``created_at`` on insert and the only other transition is deletion.

    Parameters
    ----------
    id : int
        Store-assigned identifier (``ID`` column).
    people_count : int
        Estimated people at the location.
    latitude : float
        Latitude in degrees (``Latitude`` column).
    longitude : float
        Longitude in degrees (``Longitude`` column).
    created_at : datetime or None
        Store-assigned creation time, ``None`` when the stored value
        could not be parsed.
    raw : dict
        Row as returned by the store.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    id: int = Field(validation_alias=AliasChoices("ID", "id"))
    people_count: int = Field(validation_alias=AliasChoices("people_count", "peopleCount"))
    latitude: float = Field(validation_alias=AliasChoices("Latitude", "latitude", "lat"))
    longitude: float = Field(validation_alias=AliasChoices("Longitude", "longitude", "lon", "lng"))
    created_at: StoreTimestamp = Field(default=None, validation_alias=AliasChoices("created_at", "createdAt"))
    raw: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        if not isinstance(values, dict) or "raw" in values:
            return values
        merged = dict(values)
        merged["raw"] = dict(values)
        return merged

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)

    def require_created_at(self) -> datetime:
        """Return ``created_at`` or raise :class:`MalformedRecordError`."""
        if self.created_at is None:
            raise MalformedRecordError(
                f"Record {self.id} has an unparseable created_at: {self.raw.get('created_at')!r}",
                record_id=self.id,
            )
        return self.created_at

    def age(self, now: datetime) -> timedelta:
        """Time elapsed between creation and *now*."""
        return now - self.require_created_at()
