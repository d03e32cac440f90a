"""Shared validators for store payloads.

The record store hands back ISO-8601 strings for ``created_at``.  They
are parsed into timezone-aware UTC datetimes; anything unparseable
becomes ``None`` so the owning record can be reported as malformed
instead of failing the whole fetch.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BeforeValidator


def parse_store_timestamp(value: Any) -> datetime | None:
    """Convert a store timestamp to an aware UTC datetime.

    Naive values are assumed to be UTC.  Returns ``None`` when the value
    is missing or cannot be parsed.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


StoreTimestamp = Annotated[datetime | None, BeforeValidator(parse_store_timestamp)]
"""Annotated type that coerces store ISO-8601 strings to UTC datetimes (``None`` when unparseable)."""
