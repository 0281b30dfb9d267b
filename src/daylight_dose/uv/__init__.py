"""UV time-series cache and the offline/fallback coordinator.

Public API:
  - cache: UVTimeSeriesCache, CacheKey, LocationKey, FetchDaily
  - coordinator: OfflineCoordinator, UVSnapshot, DisplayValues
"""

from daylight_dose.uv.cache import (
    DEFAULT_FRESHNESS,
    CacheKey,
    FetchDaily,
    LocationKey,
    UVTimeSeriesCache,
)
from daylight_dose.uv.coordinator import DisplayValues, OfflineCoordinator, UVSnapshot

__all__ = [
    "DEFAULT_FRESHNESS",
    "CacheKey",
    "DisplayValues",
    "FetchDaily",
    "LocationKey",
    "OfflineCoordinator",
    "UVSnapshot",
    "UVTimeSeriesCache",
]
