"""HTTP transport for elevation services."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyelevation._constants import NETWORK_TIMEOUT_S, USER_AGENT
from pyelevation.exceptions import ElevationTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the network sources.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, url: str, params: Mapping[str, Any]) -> Any:
        ...


class HttpTransport:
    """Single-shot JSON GET over a shared aiohttp session."""

    def __init__(
        self,
        http_session: aiohttp.ClientSession,
        *,
        timeout: float = NETWORK_TIMEOUT_S,
        user_agent: str = USER_AGENT,
    ) -> None:
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._headers = {
            "accept": "application/json",
            "user-agent": user_agent,
        }

    async def get_json(self, url: str, params: Mapping[str, Any]) -> Any:
        """GET *url* and return the decoded JSON body.

        Raises
        ------
        ElevationTransportError
            On connection failure, timeout, non-200 status or a body that
            is not JSON.
        """
        query = {key: str(value) for key, value in params.items()}
        _logger.debug("GET %s params=%s", url, query)

        try:
            async with self._http.get(url, params=query, headers=self._headers, timeout=self._timeout) as resp:
                body = await resp.read()
                status = resp.status
        except asyncio.TimeoutError as exc:
            raise ElevationTransportError(
                f"Request to {url} timed out after {self._timeout.total}s",
                url=url,
            ) from exc
        except aiohttp.ClientError as exc:
            raise ElevationTransportError(
                f"Request to {url} failed: {exc}",
                url=url,
            ) from exc

        if status != 200:
            raise ElevationTransportError(
                f"HTTP {status} from {url}: {body[:200]!r}",
                status_code=status,
                url=url,
            )

        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise ElevationTransportError(
                f"Invalid JSON from {url}: {body[:200]!r}",
                status_code=200,
                url=url,
            ) from exc
