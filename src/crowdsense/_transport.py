"""HTTP transport for the PostgREST-style record store."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from crowdsense._constants import USER_AGENT
from crowdsense._redact import redact_for_log
from crowdsense.config import CrowdSenseConfig
from crowdsense.exceptions import CrowdSenseTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the record store.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`RestTransport`) concrete.
    """

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        ...


class RestTransport:
    """Authenticated JSON-over-HTTP transport."""

    def __init__(self, config: CrowdSenseConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def _build_headers(self, extra: Mapping[str, str] | None) -> dict[str, str]:
        headers: dict[str, str] = {
            "apikey": self._config.store_key,
            "authorization": f"Bearer {self._config.store_key}",
            "content-type": "application/json",
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        if extra:
            headers.update(extra)
        return headers

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (``None`` when empty)."""
        url = f"{self._config.store_url.rstrip('/')}{endpoint}"
        request_headers = self._build_headers(headers)
        body = json.dumps(json_body, separators=(",", ":")) if json_body is not None else None

        _logger.debug(
            "%s %s params=%s headers=%s body=%s",
            method,
            url,
            dict(params or {}),
            redact_for_log(request_headers),
            redact_for_log(json_body),
        )

        try:
            async with self._http.request(
                method,
                url,
                params=params,
                data=body,
                headers=request_headers,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                if resp.status >= 300:
                    raise CrowdSenseTransportError(
                        f"HTTP {resp.status} from {method} {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except CrowdSenseTransportError:
            raise
        except (aiohttp.ClientError, TimeoutError, UnicodeDecodeError, LookupError) as exc:
            raise CrowdSenseTransportError(
                f"Request {method} {endpoint} failed: {exc!r}",
                endpoint=endpoint,
            ) from exc

        if not text.strip():
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise CrowdSenseTransportError(
                f"Invalid JSON from {method} {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc
