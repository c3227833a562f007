"""Network elevation sources.

Every provider honours the same contract: one request per call, and any
failure (timeout, non-success status, malformed payload) yields ``None``
rather than an exception or partial data.

Providers:
  - Open-Meteo elevation API (primary, no API key)
  - USGS Elevation Point Query Service (US only, secondary)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any, Protocol

from pydantic import ValidationError

from pyelevation._constants import NETWORK_ACCURACY_M, OPEN_METEO_URL, USGS_EPQS_URL
from pyelevation._normalize import first_number, safe_float
from pyelevation._transport import Transport
from pyelevation.exceptions import ElevationTransportError
from pyelevation.models.sample import ElevationSample, ElevationSource

_logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class NetworkElevationSource(Protocol):
    """What the resolution cascade needs from a network provider."""

    async def fetch(self, latitude: float, longitude: float) -> ElevationSample | None:
        ...


class _HttpElevationSource:
    """Shared request/parse flow for JSON elevation endpoints."""

    name = "elevation"

    def __init__(
        self,
        transport: Transport,
        url: str,
        *,
        accuracy: float = NETWORK_ACCURACY_M,
    ) -> None:
        self._transport = transport
        self._url = url
        self._accuracy = accuracy

    def _build_params(self, latitude: float, longitude: float) -> dict[str, Any]:
        raise NotImplementedError

    def _parse_elevation(self, payload: Any) -> float | None:
        raise NotImplementedError

    async def fetch(self, latitude: float, longitude: float) -> ElevationSample | None:
        try:
            payload = await self._transport.get_json(self._url, self._build_params(latitude, longitude))
        except ElevationTransportError as exc:
            _logger.warning("%s request failed: %s", self.name, exc)
            return None

        elevation = self._parse_elevation(payload)
        if elevation is None:
            _logger.warning("%s returned unexpected data: %.200r", self.name, payload)
            return None

        try:
            sample = ElevationSample(
                elevation=elevation,
                latitude=latitude,
                longitude=longitude,
                accuracy=self._accuracy,
                source=ElevationSource.NETWORK,
                observed_at=_now_ms(),
            )
        except ValidationError:
            _logger.warning("%s produced an invalid sample", self.name, exc_info=True)
            return None

        _logger.debug("%s elevation result: %.1f m", self.name, sample.elevation)
        return sample


class OpenMeteoElevationSource(_HttpElevationSource):
    """Open-Meteo elevation API.

    ``GET /v1/elevation?latitude=..&longitude=..`` answers
    ``{"elevation": [<meters>]}``; the first element is used.
    """

    name = "open-meteo"

    def __init__(
        self,
        transport: Transport,
        url: str = OPEN_METEO_URL,
        *,
        accuracy: float = NETWORK_ACCURACY_M,
    ) -> None:
        super().__init__(transport, url, accuracy=accuracy)

    def _build_params(self, latitude: float, longitude: float) -> dict[str, Any]:
        return {"latitude": latitude, "longitude": longitude}

    def _parse_elevation(self, payload: Any) -> float | None:
        if not isinstance(payload, Mapping):
            return None
        return first_number(payload.get("elevation"))


class UsgsElevationSource(_HttpElevationSource):
    """USGS Elevation Point Query Service.

    ``GET /v1/json?x=<lon>&y=<lat>&units=Meters&wkid=4326`` answers
    ``{"value": <meters>}``.  Points outside coverage come back with the
    service's no-data value, which the plausibility check later rejects.
    """

    name = "usgs-epqs"

    def __init__(
        self,
        transport: Transport,
        url: str = USGS_EPQS_URL,
        *,
        accuracy: float = NETWORK_ACCURACY_M,
    ) -> None:
        super().__init__(transport, url, accuracy=accuracy)

    def _build_params(self, latitude: float, longitude: float) -> dict[str, Any]:
        return {"x": longitude, "y": latitude, "units": "Meters", "wkid": 4326}

    def _parse_elevation(self, payload: Any) -> float | None:
        if not isinstance(payload, Mapping):
            return None
        # EPQS serializes the value as a string in some responses.
        return safe_float(payload.get("value"))


class ChainedElevationSource:
    """Try several providers in order; the first sample wins."""

    def __init__(self, *sources: NetworkElevationSource) -> None:
        if not sources:
            raise ValueError("at least one source is required")
        self._sources = sources

    async def fetch(self, latitude: float, longitude: float) -> ElevationSample | None:
        for index, source in enumerate(self._sources):
            sample = await source.fetch(latitude, longitude)
            if sample is None:
                continue
            if not sample.is_plausible:
                _logger.warning("Provider #%d returned implausible elevation %.1f m", index, sample.elevation)
                continue
            if index:
                _logger.debug("Elevation served by fallback provider #%d", index)
            return sample
        return None
