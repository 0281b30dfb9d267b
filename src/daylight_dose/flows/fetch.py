"""
Prefect flow for pre-fetching UV records into the local archive.

The tracking engine fetches on demand, but a scheduled run keeps the archive
warm so the offline cache has today's and tomorrow's curves even when the
device later loses connectivity.

Run locally:
    python -m daylight_dose.flows.fetch

Run with Prefect dashboard:
    prefect server start &
    python -m daylight_dose.flows.fetch
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

from prefect import flow, task

from daylight_dose.datasources.open_meteo import fetch_daily_uv
from daylight_dose.persistence import UVRecordArchive
from daylight_dose.schemas import DailyUVRecord
from daylight_dose.store import DataStore
from daylight_dose.uv.cache import DEFAULT_FRESHNESS, CacheKey, LocationKey

# Data store with tiered directories
store = DataStore(Path("data"))


@task(name="fetch-uv", retries=2, retry_delay_seconds=5)
def fetch_uv(lat: float, lon: float, day: date, timezone: str = "auto") -> DailyUVRecord:
    """Fetch one day of hourly UV from Open-Meteo."""
    return fetch_daily_uv(lat, lon, day, timezone)


@task(name="save-uv")
def save_uv(
    record: DailyUVRecord,
    data_dir: Path | None = None,
    freshness: timedelta = DEFAULT_FRESHNESS,
) -> Path:
    """Save a UV record via the archive."""
    target = DataStore(data_dir) if data_dir is not None else store
    return UVRecordArchive(target, freshness).save(record)


@flow(name="fetch-uv-data", log_prints=True)
def fetch_all(
    lat: float = 45.5,
    lon: float = -122.6,
    days: int = 2,
    timezone: str = "auto",
    today: date | None = None,
    data_dir: Path | None = None,
) -> dict[str, Any]:
    """
    Fetch UV records for ``days`` consecutive dates starting today.

    Checks freshness before fetching and skips dates whose archived record is
    still valid. Returns per-date peak UV keyed by ISO date.
    """
    target = DataStore(data_dir) if data_dir is not None else store
    archive = UVRecordArchive(target)
    location = LocationKey.from_coordinates(lat, lon)
    if today is None:
        zone = ZoneInfo(timezone) if timezone != "auto" else None
        today = datetime.now(zone).date()

    results: dict[str, Any] = {"location": {"lat": location.latitude, "lon": location.longitude}}
    max_uv: dict[str, float] = {}

    for offset in range(days):
        day = today + timedelta(days=offset)
        key = CacheKey(location, day)
        if archive.is_fresh(key):
            print(f"UV data for {day} is fresh, skipping fetch.")
            record = archive.load(key)
        else:
            print(f"Fetching UV for ({lat}, {lon}) on {day}...")
            record = fetch_uv(lat, lon, day, timezone)
            output_path = save_uv(record, data_dir)
            print(f"Saved UV record (peak {record.max_uv:.1f}) to {output_path}")
        if record is not None:
            max_uv[day.isoformat()] = record.max_uv

    results["max_uv"] = max_uv
    return results


if __name__ == "__main__":
    result = fetch_all()
    print(f"Flow complete: {result}")
