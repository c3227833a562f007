"""High-level async client for elevation resolution."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from typing import Any

import aiohttp

from pyelevation._transport import HttpTransport
from pyelevation.cache import SpatialCache
from pyelevation.cascade import ElevationResolver, ProgressCallback
from pyelevation.config import ElevationConfig
from pyelevation.exceptions import ElevationError
from pyelevation.location import LocationProvider, UnsupportedLocationProvider
from pyelevation.models.result import ElevationResult, Resolution
from pyelevation.sources.device import DeviceAltitudeSource
from pyelevation.sources.network import (
    ChainedElevationSource,
    NetworkElevationSource,
    OpenMeteoElevationSource,
    UsgsElevationSource,
)
from pyelevation.storage.base import KeyValueStore
from pyelevation.storage.memory import MemoryKeyValueStore
from pyelevation.storage.sqlite import SqliteKeyValueStore

_logger = logging.getLogger(__name__)


def _now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


class ElevationClient:
    """Async client that owns the cache store and HTTP session.

    The store is opened once on entry and closed on exit.  Pass ``store``
    or ``session`` to share externally managed instances; those are left
    open.

    Usage::

        async with ElevationClient(config, location) as client:
            outcome = await client.resolve()
    """

    def __init__(
        self,
        config: ElevationConfig | None = None,
        location: LocationProvider | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        store: KeyValueStore | None = None,
        network: NetworkElevationSource | None = None,
        clock: Callable[[], int] = _now_ms,
        rng: Callable[[], float] = random.random,
    ) -> None:
        self._config = config or ElevationConfig()
        self._location: LocationProvider = location or UnsupportedLocationProvider()
        self._external_session = session is not None
        self._http_session = session
        self._external_store = store is not None
        self._store = store
        self._network_override = network
        self._clock = clock
        self._rng = rng
        self._cache: SpatialCache | None = None
        self._resolver: ElevationResolver | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ElevationClient:
        config = self._config
        if self._store is None:
            self._store = self._open_store()

        network = self._network_override
        if network is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            network = self._build_network_source(self._http_session)

        self._cache = SpatialCache(
            self._store,
            tolerance=config.cache_tolerance,
            validity_ms=config.cache_validity_ms,
            retention_ms=config.cache_retention_ms,
            sweep_probability=config.sweep_probability,
            clock=self._clock,
            rng=self._rng,
        )
        device = DeviceAltitudeSource(
            self._location,
            timeout=config.device_timeout,
            default_accuracy=config.default_device_accuracy,
        )
        self._resolver = ElevationResolver(
            self._location,
            device,
            self._cache,
            network,
            position_timeout=config.position_timeout,
            device_accuracy_threshold=config.device_accuracy_threshold,
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if not self._external_store and self._store is not None:
            self._store.close()
            self._store = None
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._cache = None
        self._resolver = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _open_store(self) -> KeyValueStore:
        path = self._config.cache_path
        if path:
            return SqliteKeyValueStore(path)
        _logger.debug("No cache_path configured; elevation cache is in-memory")
        return MemoryKeyValueStore()

    def _build_network_source(self, http_session: aiohttp.ClientSession) -> NetworkElevationSource:
        config = self._config
        transport = HttpTransport(
            http_session,
            timeout=config.network_timeout,
            user_agent=config.user_agent,
        )
        primary = OpenMeteoElevationSource(transport, config.api_url, accuracy=config.network_accuracy)
        if not config.use_fallback_provider:
            return primary
        secondary = UsgsElevationSource(transport, config.fallback_api_url, accuracy=config.network_accuracy)
        return ChainedElevationSource(primary, secondary)

    def _require_resolver(self) -> ElevationResolver:
        if self._resolver is None:
            raise ElevationError("Client not initialized. Use 'async with ElevationClient(...) as client:'")
        return self._resolver

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def cache(self) -> SpatialCache:
        """The spatial cache backing this client."""
        if self._cache is None:
            raise ElevationError("Client not initialized. Use 'async with ElevationClient(...) as client:'")
        return self._cache

    async def resolve(self) -> Resolution:
        """Resolve the current elevation.

        Returns
        -------
        ElevationResult or ResolutionFailure
            ``outcome.ok`` tells which one.
        """
        return await self._require_resolver().resolve()

    async def resolve_with_progress(self, on_progress: ProgressCallback) -> Resolution:
        """Resolve the current elevation, reporting each step to *on_progress*."""
        return await self._require_resolver().resolve_with_progress(on_progress)

    async def resolve_or_raise(self) -> ElevationResult:
        """Resolve the current elevation, raising on failure."""
        return await self._require_resolver().resolve_or_raise()
