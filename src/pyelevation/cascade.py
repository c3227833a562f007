"""Elevation resolution cascade.

Resolution walks a fixed sequence of states::

    ACQUIRING_POSITION -> TRYING_DEVICE -> CHECKING_CACHE -> QUERYING_NETWORK

and leaves it for RESOLVED as soon as a source is accepted, or for FAILED
when position acquisition fails or the network step is rejected too.
Each source is consulted at most once per request and only after the
previous one was rejected.  A rejected source is never surfaced to the
caller; only position failures and total exhaustion are.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from pyelevation._constants import DEVICE_ACCURACY_THRESHOLD_M, POSITION_TIMEOUT_S
from pyelevation.cache import SpatialCache
from pyelevation.exceptions import (
    ElevationStoreError,
    ElevationUnavailableError,
    LocationError,
    LocationTimeoutError,
    LocationUnavailableError,
)
from pyelevation.location import LocationProvider
from pyelevation.models.position import PositionFix
from pyelevation.models.result import (
    ElevationResult,
    FailureKind,
    Resolution,
    ResolutionFailure,
    ResolutionStatus,
)
from pyelevation.models.sample import ElevationSample, ElevationSource
from pyelevation.policy import accept_device_sample, accept_network_sample
from pyelevation.sources.device import DeviceAltitudeSource
from pyelevation.sources.network import NetworkElevationSource

_logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]

_MSG_REQUESTING_LOCATION = "Requesting location permission..."
_MSG_LOCATION_ACQUIRED = "Location acquired. Detecting elevation..."
_MSG_DEVICE_ACCEPTED = "Device altitude detected!"
_MSG_CHECKING_CACHE = "Checking cached data..."
_MSG_CACHE_HIT = "Using cached elevation data"
_MSG_FETCHING_NETWORK = "Fetching elevation from network..."
_MSG_NETWORK_ACCEPTED = "Elevation retrieved from network"
_MSG_UNAVAILABLE = "Unable to determine elevation"


class _Progress:
    """Forward status messages to an optional observer.

    Observer failures are logged and otherwise ignored so that reporting
    can never change a resolution outcome.
    """

    def __init__(self, callback: ProgressCallback | None) -> None:
        self._callback = callback

    def __call__(self, status: ResolutionStatus, message: str) -> None:
        _logger.debug("[%s] %s", status, message)
        if self._callback is None:
            return
        try:
            self._callback(message)
        except Exception:  # noqa: BLE001
            _logger.warning("Progress callback raised", exc_info=True)


class ElevationResolver:
    """Resolve the current elevation from device, cache, then network.

    The resolver holds no per-request state; everything that persists
    between calls lives in the :class:`SpatialCache`.

    Usage::

        resolver = ElevationResolver(location, device, cache, network)
        outcome = await resolver.resolve()
        if outcome.ok:
            print(outcome.elevation, outcome.source)
    """

    def __init__(
        self,
        location: LocationProvider,
        device: DeviceAltitudeSource,
        cache: SpatialCache,
        network: NetworkElevationSource,
        *,
        position_timeout: float = POSITION_TIMEOUT_S,
        device_accuracy_threshold: float = DEVICE_ACCURACY_THRESHOLD_M,
    ) -> None:
        self._location = location
        self._device = device
        self._cache = cache
        self._network = network
        self._position_timeout = position_timeout
        self._device_accuracy_threshold = device_accuracy_threshold

    async def resolve(self) -> Resolution:
        """Run the cascade once and return the result or the terminal failure."""
        return await self._run(_Progress(None))

    async def resolve_with_progress(self, on_progress: ProgressCallback) -> Resolution:
        """Like :meth:`resolve`, reporting a status message at each step."""
        return await self._run(_Progress(on_progress))

    async def resolve_or_raise(self) -> ElevationResult:
        """Like :meth:`resolve`, raising the matching exception on failure.

        Raises
        ------
        LocationError
            Position acquisition failed (subclass names the reason).
        ElevationUnavailableError
            Every source was exhausted.
        """
        outcome = await self.resolve()
        if isinstance(outcome, ResolutionFailure):
            outcome.raise_error()
        return outcome

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _run(self, progress: _Progress) -> Resolution:
        progress(ResolutionStatus.ACQUIRING_POSITION, _MSG_REQUESTING_LOCATION)
        try:
            position = await self._acquire_position()
        except LocationError as exc:
            _logger.warning("Position acquisition failed (%s): %s", exc.kind, exc)
            progress(ResolutionStatus.FAILED, str(exc))
            return ResolutionFailure(kind=exc.kind, message=str(exc))

        progress(ResolutionStatus.TRYING_DEVICE, _MSG_LOCATION_ACQUIRED)
        device_sample = await self._device.sample()
        if accept_device_sample(device_sample, accuracy_threshold=self._device_accuracy_threshold):
            assert device_sample is not None  # noqa: S101
            await self._remember(device_sample)
            progress(ResolutionStatus.RESOLVED, _MSG_DEVICE_ACCEPTED)
            return ElevationResult.from_sample(device_sample, source=ElevationSource.DEVICE)
        if device_sample is not None:
            _logger.info(
                "Device altitude rejected: accuracy=%.1f m plausible=%s",
                device_sample.accuracy,
                device_sample.is_plausible,
            )

        progress(ResolutionStatus.CHECKING_CACHE, _MSG_CHECKING_CACHE)
        cached = await self._lookup(position)
        if cached is not None:
            progress(ResolutionStatus.RESOLVED, _MSG_CACHE_HIT)
            return ElevationResult.from_sample(cached, source=ElevationSource.CACHE)

        progress(ResolutionStatus.QUERYING_NETWORK, _MSG_FETCHING_NETWORK)
        network_sample = await self._network.fetch(position.latitude, position.longitude)
        if accept_network_sample(network_sample):
            assert network_sample is not None  # noqa: S101
            await self._remember(network_sample)
            progress(ResolutionStatus.RESOLVED, _MSG_NETWORK_ACCEPTED)
            return ElevationResult.from_sample(network_sample, source=ElevationSource.NETWORK)

        progress(ResolutionStatus.FAILED, _MSG_UNAVAILABLE)
        return ResolutionFailure(
            kind=FailureKind.ELEVATION_UNAVAILABLE,
            message=str(ElevationUnavailableError()),
        )

    async def _acquire_position(self) -> PositionFix:
        try:
            return await asyncio.wait_for(
                self._location.get_current_coordinates(
                    high_accuracy=False,
                    timeout=self._position_timeout,
                    maximum_age=0,
                ),
                timeout=self._position_timeout,
            )
        except LocationError:
            raise
        except asyncio.TimeoutError as exc:
            raise LocationTimeoutError() from exc
        except Exception as exc:  # noqa: BLE001
            _logger.warning("Location provider failed unexpectedly", exc_info=True)
            raise LocationUnavailableError() from exc

    async def _lookup(self, position: PositionFix) -> ElevationSample | None:
        try:
            return await self._cache.get(position.latitude, position.longitude)
        except ElevationStoreError:
            _logger.warning("Failed to get cached elevation", exc_info=True)
            return None

    async def _remember(self, sample: ElevationSample) -> None:
        try:
            await self._cache.put(sample)
        except ElevationStoreError:
            _logger.warning("Failed to cache elevation", exc_info=True)
