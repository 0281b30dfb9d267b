"""Open-Meteo UV data source.

Fetches hourly UV index and cloud cover plus daily sunrise, sunset and peak
UV from the Open-Meteo Forecast API (free, no API key).

Public API:
  - daily_uv: fetch_daily_uv (blocking), parse_daily_uv (payload -> record)
  - provider: OpenMeteoUVProvider (async adapter for the UV cache)
  - client: API URL and variable lists
"""

from daylight_dose.datasources.open_meteo.client import (
    DAILY_VARS,
    FORECAST_API,
    HOURLY_VARS,
    SOURCE_NAME,
)
from daylight_dose.datasources.open_meteo.daily_uv import fetch_daily_uv, parse_daily_uv
from daylight_dose.datasources.open_meteo.provider import OpenMeteoUVProvider

__all__ = [
    "DAILY_VARS",
    "FORECAST_API",
    "HOURLY_VARS",
    "SOURCE_NAME",
    "OpenMeteoUVProvider",
    "fetch_daily_uv",
    "parse_daily_uv",
]
