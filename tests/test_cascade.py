from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

import pytest

from pyelevation.cache import SpatialCache
from pyelevation.cascade import ElevationResolver
from pyelevation.exceptions import (
    ElevationStoreError,
    ElevationUnavailableError,
    LocationPermissionDeniedError,
    LocationTimeoutError,
    LocationUnavailableError,
)
from pyelevation.models.position import PositionFix
from pyelevation.models.result import ElevationResult, FailureKind, ResolutionFailure
from pyelevation.models.sample import CacheEntry, ElevationSample, ElevationSource
from pyelevation.sources.device import DeviceAltitudeSource
from pyelevation.sources.network import OpenMeteoElevationSource
from pyelevation.storage.memory import MemoryKeyValueStore

NOW = 1_767_225_600_000
DAY_MS = 24 * 60 * 60 * 1000
LAT, LON = 40.0150, -105.2705


class FakePlatform:
    """Location capability double.

    Coarse requests return the position; high-accuracy requests return the
    device fix (or raise ``device_error``).
    """

    def __init__(
        self,
        *,
        position_error: Exception | None = None,
        altitude: float | None = None,
        altitude_accuracy: float | None = None,
        device_error: Exception | None = None,
        position_delay: float = 0.0,
    ) -> None:
        self.position_error = position_error
        self.altitude = altitude
        self.altitude_accuracy = altitude_accuracy
        self.device_error = device_error
        self.position_delay = position_delay
        self.calls: list[bool] = []

    async def get_current_coordinates(
        self,
        *,
        high_accuracy: bool,
        timeout: float,
        maximum_age: float = 0,
    ) -> PositionFix:
        self.calls.append(high_accuracy)
        if not high_accuracy:
            if self.position_delay:
                await asyncio.sleep(self.position_delay)
            if self.position_error is not None:
                raise self.position_error
            return PositionFix(latitude=LAT, longitude=LON, timestamp=NOW)
        if self.device_error is not None:
            raise self.device_error
        return PositionFix(
            latitude=LAT,
            longitude=LON,
            altitude=self.altitude,
            altitude_accuracy=self.altitude_accuracy,
            timestamp=NOW,
        )


class FakeElevationApi:
    def __init__(self, elevation: float | None = None) -> None:
        self.elevation = elevation
        self.requests: list[dict[str, Any]] = []

    async def get_json(self, _url: str, params: Mapping[str, Any]) -> Any:
        self.requests.append(dict(params))
        if self.elevation is None:
            return {"reason": "no data"}
        return {"elevation": [self.elevation]}


class BrokenStore(MemoryKeyValueStore):
    def get(self, key: str) -> CacheEntry | None:
        raise ElevationStoreError("disk unavailable")

    def put(self, entry: CacheEntry) -> None:
        raise ElevationStoreError("disk unavailable")


def _build(
    platform: FakePlatform,
    api: FakeElevationApi,
    store: MemoryKeyValueStore | None = None,
    **kwargs: Any,
) -> tuple[ElevationResolver, SpatialCache, MemoryKeyValueStore]:
    store = store if store is not None else MemoryKeyValueStore()
    cache = SpatialCache(store, clock=lambda: NOW, rng=lambda: 1.0)
    resolver = ElevationResolver(
        platform,
        DeviceAltitudeSource(platform, timeout=1.0),
        cache,
        OpenMeteoElevationSource(api),
        **kwargs,
    )
    return resolver, cache, store


def _cached(latitude: float, longitude: float, elevation: float, *, age_days: float = 1.0) -> CacheEntry:
    sample = ElevationSample(
        elevation=elevation,
        latitude=latitude,
        longitude=longitude,
        accuracy=10.0,
        source=ElevationSource.NETWORK,
        observed_at=int(NOW - age_days * DAY_MS),
    )
    return CacheEntry.from_sample(sample, stored_at=sample.observed_at)


@pytest.mark.asyncio
async def test_accurate_device_altitude_wins_and_is_cached() -> None:
    api = FakeElevationApi(elevation=999.0)
    resolver, cache, _store = _build(FakePlatform(altitude=1600.0, altitude_accuracy=8.0), api)

    outcome = await resolver.resolve()

    assert isinstance(outcome, ElevationResult)
    assert outcome.source == ElevationSource.DEVICE
    assert outcome.elevation == 1600.0
    assert outcome.accuracy == 8.0
    assert outcome.served_from_cache is False
    assert api.requests == []

    cached = await cache.get(LAT, LON)
    assert cached is not None
    assert cached.elevation == 1600.0
    assert cached.source == ElevationSource.DEVICE


@pytest.mark.asyncio
async def test_network_used_when_device_unavailable_and_cache_empty() -> None:
    api = FakeElevationApi(elevation=210.0)
    resolver, cache, store = _build(FakePlatform(altitude=None), api)

    outcome = await resolver.resolve()

    assert isinstance(outcome, ElevationResult)
    assert outcome.source == ElevationSource.NETWORK
    assert outcome.elevation == 210.0
    assert outcome.accuracy == 10.0
    assert api.requests == [{"latitude": LAT, "longitude": LON}]
    assert len(store) == 1
    cached = await cache.get(LAT, LON)
    assert cached is not None
    assert cached.elevation == 210.0


@pytest.mark.asyncio
async def test_coarse_device_reading_falls_back_to_nearby_cache() -> None:
    store = MemoryKeyValueStore()
    nearby = _cached(LAT + 0.004, LON, 1655.0, age_days=2)
    store.put(nearby)
    api = FakeElevationApi(elevation=999.0)
    resolver, _cache, _ = _build(FakePlatform(altitude=1500.0, altitude_accuracy=80.0), api, store)

    outcome = await resolver.resolve()

    assert isinstance(outcome, ElevationResult)
    assert outcome.source == ElevationSource.CACHE
    assert outcome.served_from_cache is True
    assert outcome.elevation == 1655.0
    assert outcome.accuracy == 10.0
    assert outcome.observed_at == nearby.observed_at
    assert api.requests == []
    # The rejected device value was not written anywhere.
    assert store.get_all() == [nearby]


@pytest.mark.asyncio
async def test_permission_denied_stops_before_any_source() -> None:
    platform = FakePlatform(position_error=LocationPermissionDeniedError(), altitude=1600.0, altitude_accuracy=5.0)
    api = FakeElevationApi(elevation=210.0)
    resolver, _cache, store = _build(platform, api)

    outcome = await resolver.resolve()

    assert isinstance(outcome, ResolutionFailure)
    assert outcome.kind == FailureKind.PERMISSION_DENIED
    assert "permission denied" in outcome.message.lower()
    assert platform.calls == [False]
    assert api.requests == []
    assert len(store) == 0


@pytest.mark.asyncio
async def test_position_unavailable_maps_to_failure_kind() -> None:
    resolver, _cache, _store = _build(
        FakePlatform(position_error=LocationUnavailableError("no satellites")),
        FakeElevationApi(),
    )

    outcome = await resolver.resolve()

    assert outcome == ResolutionFailure(kind=FailureKind.POSITION_UNAVAILABLE, message="no satellites")


@pytest.mark.asyncio
async def test_unexpected_provider_error_becomes_position_unavailable() -> None:
    api = FakeElevationApi(elevation=210.0)
    resolver, _cache, _store = _build(FakePlatform(position_error=OSError("location daemon socket closed")), api)

    outcome = await resolver.resolve()

    assert isinstance(outcome, ResolutionFailure)
    assert outcome.kind == FailureKind.POSITION_UNAVAILABLE
    assert api.requests == []
    with pytest.raises(LocationUnavailableError):
        await resolver.resolve_or_raise()


@pytest.mark.asyncio
async def test_slow_position_fix_times_out() -> None:
    resolver, _cache, _store = _build(
        FakePlatform(position_delay=5.0),
        FakeElevationApi(elevation=210.0),
        position_timeout=0.01,
    )

    outcome = await resolver.resolve()

    assert isinstance(outcome, ResolutionFailure)
    assert outcome.kind == FailureKind.TIMEOUT


@pytest.mark.asyncio
async def test_position_wait_does_not_exceed_configured_timeout() -> None:
    resolver, _cache, _store = _build(FakePlatform(position_delay=5.0), FakeElevationApi(), position_timeout=0.05)
    loop = asyncio.get_running_loop()

    started = loop.time()
    await resolver.resolve()

    assert loop.time() - started < 0.4


@pytest.mark.asyncio
async def test_all_sources_exhausted_is_elevation_unavailable() -> None:
    resolver, _cache, store = _build(FakePlatform(device_error=RuntimeError("sensor")), FakeElevationApi())

    outcome = await resolver.resolve()

    assert isinstance(outcome, ResolutionFailure)
    assert outcome.kind == FailureKind.ELEVATION_UNAVAILABLE
    assert len(store) == 0


@pytest.mark.asyncio
async def test_threshold_is_strict() -> None:
    api = FakeElevationApi(elevation=210.0)
    resolver, _cache, _store = _build(FakePlatform(altitude=1600.0, altitude_accuracy=50.0), api)

    outcome = await resolver.resolve()

    assert isinstance(outcome, ElevationResult)
    assert outcome.source == ElevationSource.NETWORK


@pytest.mark.asyncio
async def test_implausible_device_altitude_is_rejected() -> None:
    api = FakeElevationApi(elevation=210.0)
    resolver, _cache, store = _build(FakePlatform(altitude=15000.0, altitude_accuracy=3.0), api)

    outcome = await resolver.resolve()

    assert isinstance(outcome, ElevationResult)
    assert outcome.source == ElevationSource.NETWORK
    assert [entry.sample.elevation for entry in store.get_all()] == [210.0]


@pytest.mark.asyncio
async def test_implausible_network_value_is_not_surfaced() -> None:
    resolver, _cache, store = _build(FakePlatform(), FakeElevationApi(elevation=-12000.0))

    outcome = await resolver.resolve()

    assert isinstance(outcome, ResolutionFailure)
    assert outcome.kind == FailureKind.ELEVATION_UNAVAILABLE
    assert len(store) == 0


@pytest.mark.asyncio
async def test_stale_cache_entry_is_skipped_for_network() -> None:
    store = MemoryKeyValueStore()
    store.put(_cached(LAT, LON, 1500.0, age_days=8))
    api = FakeElevationApi(elevation=1620.0)
    resolver, _cache, _ = _build(FakePlatform(), api, store)

    outcome = await resolver.resolve()

    assert isinstance(outcome, ElevationResult)
    assert outcome.source == ElevationSource.NETWORK
    assert outcome.elevation == 1620.0


@pytest.mark.asyncio
async def test_store_errors_do_not_abort_resolution() -> None:
    api = FakeElevationApi(elevation=210.0)
    resolver, _cache, _store = _build(FakePlatform(), api, BrokenStore())

    outcome = await resolver.resolve()

    assert isinstance(outcome, ElevationResult)
    assert outcome.source == ElevationSource.NETWORK


@pytest.mark.asyncio
async def test_each_resolve_recomputes_from_scratch() -> None:
    platform = FakePlatform()
    api = FakeElevationApi(elevation=210.0)
    resolver, _cache, _store = _build(platform, api)

    first = await resolver.resolve()
    second = await resolver.resolve()

    assert isinstance(first, ElevationResult)
    assert isinstance(second, ElevationResult)
    assert first.source == ElevationSource.NETWORK
    assert second.source == ElevationSource.CACHE
    assert len(api.requests) == 1
    # coarse + device per resolve, nothing else
    assert platform.calls == [False, True, False, True]


@pytest.mark.asyncio
async def test_progress_messages_follow_network_path() -> None:
    messages: list[str] = []
    resolver, _cache, _store = _build(FakePlatform(), FakeElevationApi(elevation=210.0))

    outcome = await resolver.resolve_with_progress(messages.append)

    assert outcome.ok
    assert messages == [
        "Requesting location permission...",
        "Location acquired. Detecting elevation...",
        "Checking cached data...",
        "Fetching elevation from network...",
        "Elevation retrieved from network",
    ]


@pytest.mark.asyncio
async def test_progress_messages_on_device_path() -> None:
    messages: list[str] = []
    resolver, _cache, _store = _build(FakePlatform(altitude=1600.0, altitude_accuracy=4.0), FakeElevationApi())

    await resolver.resolve_with_progress(messages.append)

    assert messages == [
        "Requesting location permission...",
        "Location acquired. Detecting elevation...",
        "Device altitude detected!",
    ]


@pytest.mark.asyncio
async def test_failing_progress_callback_does_not_change_outcome() -> None:
    def _explode(_message: str) -> None:
        raise RuntimeError("ui went away")

    resolver, _cache, _store = _build(FakePlatform(), FakeElevationApi(elevation=210.0))

    with_progress = await resolver.resolve_with_progress(_explode)

    assert isinstance(with_progress, ElevationResult)
    assert with_progress.source == ElevationSource.NETWORK


@pytest.mark.asyncio
async def test_resolve_or_raise() -> None:
    denied, _cache, _store = _build(FakePlatform(position_error=LocationPermissionDeniedError()), FakeElevationApi())
    with pytest.raises(LocationPermissionDeniedError):
        await denied.resolve_or_raise()

    exhausted, _cache, _store = _build(FakePlatform(), FakeElevationApi())
    with pytest.raises(ElevationUnavailableError):
        await exhausted.resolve_or_raise()

    slow, _cache, _store = _build(FakePlatform(position_delay=5.0), FakeElevationApi(), position_timeout=0.01)
    with pytest.raises(LocationTimeoutError):
        await slow.resolve_or_raise()

    ok, _cache, _store = _build(FakePlatform(), FakeElevationApi(elevation=5.0))
    result = await ok.resolve_or_raise()
    assert result.elevation == 5.0
