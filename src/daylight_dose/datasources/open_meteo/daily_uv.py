"""One day of hourly UV and cloud cover from the Open-Meteo Forecast API."""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
from typing import Any
from zoneinfo import ZoneInfo

from daylight_dose.datasources.open_meteo.client import DAILY_VARS, FORECAST_API, HOURLY_VARS
from daylight_dose.schemas import HOURS_PER_DAY, DailyUVRecord
from daylight_dose.services.http import session


def fetch_daily_uv(
    lat: float,
    lon: float,
    day: date,
    timezone: str = "auto",
) -> DailyUVRecord:
    """
    Fetch hourly UV index and cloud cover for a single local date.

    Args:
        lat: Latitude
        lon: Longitude
        day: Local calendar date to fetch (today or up to 15 days ahead)
        timezone: Timezone name, or "auto" to use the location's own zone

    Returns:
        DailyUVRecord stamped with the fetch time

    Raises:
        requests.RequestException: On transport or HTTP errors.
        ValueError, KeyError: If the payload is malformed.
    """
    params: dict[str, str | float | list[str]] = {
        "latitude": lat,
        "longitude": lon,
        "hourly": HOURLY_VARS,
        "daily": DAILY_VARS,
        "timezone": timezone,
        "start_date": day.isoformat(),
        "end_date": day.isoformat(),
    }

    resp = session.get(FORECAST_API, params=params)
    resp.raise_for_status()
    data: dict[str, Any] = resp.json()
    return parse_daily_uv(data, lat, lon, day)


def _hourly_by_hour(times: list[str], values: list[float | None], day: date) -> list[float]:
    """Place values into 24 local-hour buckets.

    DST days have 23 or 25 entries; a repeated hour keeps the later value and
    a skipped hour borrows the previous one.
    """
    buckets: list[float | None] = [None] * HOURS_PER_DAY
    for time_str, value in zip(times, values, strict=False):
        stamp = datetime.fromisoformat(time_str)
        if stamp.date() != day:
            continue
        buckets[stamp.hour] = float(value) if value is not None else 0.0

    filled: list[float] = []
    previous = 0.0
    for value in buckets:
        previous = value if value is not None else previous
        filled.append(previous)
    return filled


def _sun_time(value: str | None, day: date, tz: ZoneInfo, fallback: time) -> datetime:
    if not value:
        return datetime.combine(day, fallback, tzinfo=tz)
    return datetime.fromisoformat(value).replace(tzinfo=tz)


def parse_daily_uv(
    data: dict[str, Any],
    lat: float,
    lon: float,
    day: date,
    fetched_at: datetime | None = None,
) -> DailyUVRecord:
    """Convert an Open-Meteo forecast payload into a ``DailyUVRecord``."""
    tz = ZoneInfo(data.get("timezone") or "UTC")

    hourly = data.get("hourly", {})
    times = hourly.get("time", [])
    uv = _hourly_by_hour(times, hourly.get("uv_index", []), day) if times else []
    clouds = _hourly_by_hour(times, hourly.get("cloud_cover", []), day) if times else []

    daily = data.get("daily", {})
    dates = daily.get("time", [])
    index = dates.index(day.isoformat())
    max_uv = daily.get("uv_index_max", [None] * len(dates))[index]
    if max_uv is None:
        max_uv = max(uv, default=0.0)

    # Polar day/night: missing sun times mean all-day or no daylight
    polar_end = time.max if max_uv > 0 else time.min
    sunrise = _sun_time(daily.get("sunrise", [None] * len(dates))[index], day, tz, time.min)
    sunset = _sun_time(daily.get("sunset", [None] * len(dates))[index], day, tz, polar_end)
    if sunset == datetime.combine(day, time.max, tzinfo=tz):
        sunset = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)

    return DailyUVRecord(
        latitude=lat,
        longitude=lon,
        date=day,
        timezone=str(tz.key),
        hourly_uv=tuple(uv),
        hourly_cloud_cover=tuple(clouds),
        max_uv=float(max_uv),
        sunrise=sunrise,
        sunset=sunset,
        last_updated=fetched_at or datetime.now(UTC),
        elevation_m=data.get("elevation"),
    )
