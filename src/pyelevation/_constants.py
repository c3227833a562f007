"""Internal constants shared across the library."""

OPEN_METEO_URL = "https://api.open-meteo.com/v1/elevation"
USGS_EPQS_URL = "https://epqs.nationalmap.gov/v1/json"
USER_AGENT = "pyelevation/0.1"

# ------------------------------------------------------------------
# Plausibility window (Dead Sea shore ~-430 m, Everest ~8849 m)
# ------------------------------------------------------------------

MIN_PLAUSIBLE_ELEVATION_M = -500.0
MAX_PLAUSIBLE_ELEVATION_M = 9000.0

# ------------------------------------------------------------------
# Source accuracy figures (meters)
# ------------------------------------------------------------------

#: Used when the device fix carries no altitude accuracy.
DEFAULT_DEVICE_ACCURACY_M = 50.0
#: Device samples are accepted only when strictly better than this.
DEVICE_ACCURACY_THRESHOLD_M = 50.0
#: Remote services do not report accuracy; this is their nominal figure.
NETWORK_ACCURACY_M = 10.0

# ------------------------------------------------------------------
# Timeouts (seconds)
# ------------------------------------------------------------------

POSITION_TIMEOUT_S = 15.0
DEVICE_TIMEOUT_S = 10.0
NETWORK_TIMEOUT_S = 5.0

# ------------------------------------------------------------------
# Spatial cache
# ------------------------------------------------------------------

_DAY_MS = 24 * 60 * 60 * 1000

CACHE_KEY_DECIMALS = 4
#: Nearest-match radius in degrees (~1 km at the equator).
CACHE_TOLERANCE_DEG = 0.01
CACHE_VALIDITY_MS = 7 * _DAY_MS
CACHE_RETENTION_MS = 30 * _DAY_MS
SWEEP_PROBABILITY = 0.01
