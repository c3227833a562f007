"""Live device altitude source."""

from __future__ import annotations

import asyncio
import logging

from pydantic import ValidationError

from pyelevation._constants import DEFAULT_DEVICE_ACCURACY_M, DEVICE_TIMEOUT_S
from pyelevation.exceptions import LocationError
from pyelevation.location import LocationProvider
from pyelevation.models.sample import ElevationSample, ElevationSource

_logger = logging.getLogger(__name__)


class DeviceAltitudeSource:
    """Read altitude from a fresh high-accuracy fix.

    :meth:`sample` never raises: an unsupported platform, a fix without
    altitude, a provider error and a timeout all come back as ``None``.
    """

    def __init__(
        self,
        location: LocationProvider,
        *,
        timeout: float = DEVICE_TIMEOUT_S,
        default_accuracy: float = DEFAULT_DEVICE_ACCURACY_M,
    ) -> None:
        self._location = location
        self._timeout = timeout
        self._default_accuracy = default_accuracy

    async def sample(self) -> ElevationSample | None:
        try:
            fix = await asyncio.wait_for(
                self._location.get_current_coordinates(
                    high_accuracy=True,
                    timeout=self._timeout,
                    maximum_age=0,
                ),
                timeout=self._timeout,
            )
        except LocationError as exc:
            _logger.warning("Device position error: %s", exc)
            return None
        except asyncio.TimeoutError:
            _logger.warning("Device altitude timed out after %.1fs", self._timeout)
            return None
        except Exception:  # noqa: BLE001
            _logger.warning("Device altitude request failed", exc_info=True)
            return None

        if fix.altitude is None:
            _logger.info("Device altitude not available from fix")
            return None

        # A zero accuracy is what sensors report when they have none.
        accuracy = fix.altitude_accuracy or self._default_accuracy

        try:
            return ElevationSample(
                elevation=fix.altitude,
                latitude=fix.latitude,
                longitude=fix.longitude,
                accuracy=accuracy,
                source=ElevationSource.DEVICE,
                observed_at=fix.timestamp,
            )
        except ValidationError:
            _logger.warning("Device fix produced an invalid sample", exc_info=True)
            return None
