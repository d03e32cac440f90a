"""Helpers for safe debug logging.

Store requests carry the project API key in both the ``apikey`` and
``authorization`` headers.  Everything logged at DEBUG goes through
:func:`redact_for_log` first.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_SECRET_KEYS: frozenset[str] = frozenset(
    {
        "apikey",
        "api_key",
        "authorization",
        "store_key",
        "token",
        "access_token",
        "refresh_token",
        "password",
        "cookie",
    }
)


def redact_for_log(value: Any, *, max_string: int = 512) -> Any:
    """Return a copy of a JSON-shaped *value* with secrets masked.

    Mapping keys are matched case-insensitively, so HTTP header dicts and
    row payloads share one code path.  Strings longer than *max_string*
    are truncated.
    """
    if isinstance(value, str):
        if len(value) <= max_string:
            return value
        return f"{value[:max_string]}...<truncated>"
    if isinstance(value, Mapping):
        return {
            str(key): "<redacted>"
            if str(key).lower() in _SECRET_KEYS
            else redact_for_log(item, max_string=max_string)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact_for_log(item, max_string=max_string) for item in value]
    return value
