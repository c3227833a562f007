"""Client configuration for pyelevation."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from pyelevation._constants import (
    CACHE_RETENTION_MS,
    CACHE_TOLERANCE_DEG,
    CACHE_VALIDITY_MS,
    DEFAULT_DEVICE_ACCURACY_M,
    DEVICE_ACCURACY_THRESHOLD_M,
    DEVICE_TIMEOUT_S,
    NETWORK_ACCURACY_M,
    NETWORK_TIMEOUT_S,
    OPEN_METEO_URL,
    POSITION_TIMEOUT_S,
    SWEEP_PROBABILITY,
    USER_AGENT,
    USGS_EPQS_URL,
)
from pyelevation.exceptions import ElevationConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(env: Mapping[str, str], key: str) -> float | None:
    raw = env.get(key)
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ElevationConfigError(f"{key} must be a number, got {raw!r}") from exc


@dataclasses.dataclass(frozen=True)
class ElevationConfig:
    """Client configuration.

    Parameters
    ----------
    api_url : str
        Primary elevation endpoint (Open-Meteo compatible).
    fallback_api_url : str
        Secondary elevation endpoint (USGS EPQS compatible).
    use_fallback_provider : bool
        Chain the secondary provider after the primary one.
    cache_path : str or None
        SQLite file backing the spatial cache.  ``None`` keeps the cache
        in memory for the life of the client.
    position_timeout : float
        Seconds allowed for the coarse position fix.
    device_timeout : float
        Seconds allowed for the high-accuracy altitude fix.
    network_timeout : float
        Seconds allowed for one elevation API request.  With
        ``use_fallback_provider`` the network step may issue two requests,
        so a resolution waits at most ``position_timeout + device_timeout
        + 2 * network_timeout`` (plus cache I/O).
    device_accuracy_threshold : float
        Device altitude is used only when its accuracy is strictly
        better (smaller) than this, in meters.
    default_device_accuracy : float
        Accuracy assigned to device fixes that do not report one.
    network_accuracy : float
        Accuracy assigned to elevation API results.
    cache_tolerance : float
        Nearest-match radius in degrees.
    cache_validity_ms : int
        Cached samples older than this are not served.
    cache_retention_ms : int
        Cached samples older than this are deleted by the sweep.
    sweep_probability : float
        Chance that a cache write triggers a sweep.
    user_agent : str
        User-Agent sent to elevation services.
    """

    api_url: str = OPEN_METEO_URL
    fallback_api_url: str = USGS_EPQS_URL
    use_fallback_provider: bool = False
    cache_path: str | None = None
    position_timeout: float = POSITION_TIMEOUT_S
    device_timeout: float = DEVICE_TIMEOUT_S
    network_timeout: float = NETWORK_TIMEOUT_S
    device_accuracy_threshold: float = DEVICE_ACCURACY_THRESHOLD_M
    default_device_accuracy: float = DEFAULT_DEVICE_ACCURACY_M
    network_accuracy: float = NETWORK_ACCURACY_M
    cache_tolerance: float = CACHE_TOLERANCE_DEG
    cache_validity_ms: int = CACHE_VALIDITY_MS
    cache_retention_ms: int = CACHE_RETENTION_MS
    sweep_probability: float = SWEEP_PROBABILITY
    user_agent: str = USER_AGENT

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise :class:`ElevationConfigError` for inconsistent settings."""
        for name in ("position_timeout", "device_timeout", "network_timeout"):
            if getattr(self, name) <= 0:
                raise ElevationConfigError(f"{name} must be positive")
        if self.device_accuracy_threshold <= 0:
            raise ElevationConfigError("device_accuracy_threshold must be positive")
        if self.default_device_accuracy < 0 or self.network_accuracy < 0:
            raise ElevationConfigError("accuracy figures must be non-negative")
        if self.cache_tolerance < 0:
            raise ElevationConfigError("cache_tolerance must be non-negative")
        if self.cache_validity_ms <= 0 or self.cache_retention_ms <= 0:
            raise ElevationConfigError("cache horizons must be positive")
        if self.cache_retention_ms < self.cache_validity_ms:
            raise ElevationConfigError("cache_retention_ms must not be shorter than cache_validity_ms")
        if not 0.0 <= self.sweep_probability <= 1.0:
            raise ElevationConfigError("sweep_probability must be within [0, 1]")
        if not self.api_url:
            raise ElevationConfigError("api_url must be set")

    @classmethod
    def from_env(cls, **overrides: Any) -> ElevationConfig:
        """Create configuration from environment variables.

        Reads optional ``ELEVATION_*`` variables.  Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        ElevationConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "ELEVATION_API_URL": "api_url",
            "ELEVATION_FALLBACK_API_URL": "fallback_api_url",
            "ELEVATION_CACHE_PATH": "cache_path",
            "ELEVATION_USER_AGENT": "user_agent",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_FLOAT_MAP = {
            "ELEVATION_POSITION_TIMEOUT": "position_timeout",
            "ELEVATION_DEVICE_TIMEOUT": "device_timeout",
            "ELEVATION_NETWORK_TIMEOUT": "network_timeout",
            "ELEVATION_SWEEP_PROBABILITY": "sweep_probability",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            parsed = _env_float(env, env_key)
            if parsed is not None and field_name not in overrides:
                config_kwargs[field_name] = parsed

        if "use_fallback_provider" not in overrides:
            config_kwargs["use_fallback_provider"] = _env_bool(env.get("ELEVATION_USE_FALLBACK"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
