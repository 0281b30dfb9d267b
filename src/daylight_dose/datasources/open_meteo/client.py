"""Open-Meteo API constants.

API docs: https://open-meteo.com/en/docs
"""

FORECAST_API = "https://api.open-meteo.com/v1/forecast"

# Hourly variables: all-sky UV index and total cloud cover (%)
HOURLY_VARS = ["uv_index", "cloud_cover"]

# Daily variables: local sun times and the day's peak UV
DAILY_VARS = ["sunrise", "sunset", "uv_index_max"]

SOURCE_NAME = "open-meteo.com"
