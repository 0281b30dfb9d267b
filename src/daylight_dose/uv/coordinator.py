"""Chooses what UV data to serve: live, cached (offline), or nothing.

Three servable states for a location at a moment:

  - live:     today's record is fresh, or a fetch for it just succeeded
  - offline:  today's record exists but is stale and the network is
              unreachable or the last fetch failed (``offline_mode``)
  - no data:  no record for today and no way to get one (``has_no_data``)

After sunset the current UV is 0 and the display values (sunrise, sunset,
max UV) switch to tomorrow's record, or to today's values shifted by a day
when tomorrow has not been fetched yet.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta, tzinfo

from daylight_dose.dosimetry.factors import (
    altitude_multiplier,
    cloud_modification_factor,
    time_of_day_quality,
)
from daylight_dose.errors import NoUsableDataError
from daylight_dose.schemas import DailyUVRecord, Location
from daylight_dose.uv.cache import CacheKey, LocationKey, UVTimeSeriesCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DisplayValues:
    """Sun times and peak UV for the day the consumer should show."""

    sunrise: datetime
    sunset: datetime
    max_uv: float
    is_tomorrow: bool = False
    estimated: bool = False


@dataclass(frozen=True)
class UVSnapshot:
    """Everything the engine needs to know about UV at one moment."""

    as_of: datetime
    location: LocationKey | None
    # Nearest-hour UV (cloud adjusted) before the altitude multiplier
    base_uv: float = 0.0
    altitude_multiplier: float = 1.0
    cloud_cover_percent: float | None = None
    time_of_day_quality: float = 0.0
    offline_mode: bool = False
    has_no_data: bool = True
    is_fetching: bool = False
    last_updated: datetime | None = None
    display_tomorrow: bool = False
    display: DisplayValues | None = None
    record: DailyUVRecord | None = None

    @property
    def current_uv(self) -> float:
        """UV index at the user's elevation."""
        return self.base_uv * self.altitude_multiplier

    @property
    def rate_quality(self) -> float:
        """Time-of-day quality for the rate model.

        A partial record already folds quality into ``base_uv``, so it is not
        applied a second time.
        """
        if self.record is not None and not self.record.has_hourly:
            return 1.0
        return self.time_of_day_quality

    @property
    def is_live(self) -> bool:
        return not self.has_no_data and not self.offline_mode

    def minutes_since_update(self) -> float | None:
        if self.last_updated is None:
            return None
        return (self.as_of - self.last_updated).total_seconds() / 60.0


def _always_reachable() -> bool:
    return True


class OfflineCoordinator:
    """Wraps a ``UVTimeSeriesCache`` with the fetch/fallback policy."""

    def __init__(
        self,
        cache: UVTimeSeriesCache,
        tz: tzinfo = UTC,
        *,
        is_reachable: Callable[[], bool] = _always_reachable,
        apply_cloud_attenuation: bool = False,
    ) -> None:
        self.cache = cache
        self.tz = tz
        self._is_reachable = is_reachable
        self.apply_cloud_attenuation = apply_cloud_attenuation

    # -------------------------------------------------------------------------
    # Keys
    # -------------------------------------------------------------------------

    def local_date(self, now: datetime) -> date:
        return now.astimezone(self.tz).date()

    def today_key(self, location: Location, now: datetime) -> CacheKey:
        return CacheKey(
            LocationKey.from_coordinates(location.latitude, location.longitude),
            self.local_date(now),
        )

    def tomorrow_key(self, location: Location, now: datetime) -> CacheKey:
        today = self.today_key(location, now)
        return CacheKey(today.location, today.day + timedelta(days=1))

    def _due_keys(self, location: Location, now: datetime) -> list[CacheKey]:
        today = self.today_key(location, now)
        keys = [today] if self.cache.fetch_due(today, now) else []
        record = self.cache.get(today)
        if record is not None and now >= record.sunset:
            tomorrow = self.tomorrow_key(location, now)
            if self.cache.fetch_due(tomorrow, now):
                keys.append(tomorrow)
        return keys

    # -------------------------------------------------------------------------
    # Serving
    # -------------------------------------------------------------------------

    async def resolve(self, location: Location | None, now: datetime | None = None) -> UVSnapshot:
        """Fetch whatever is due (awaiting it), then build a snapshot."""
        now = now or datetime.now(UTC)
        if location is not None and self._is_reachable():
            attempted: set[CacheKey] = set()
            # Sunset may only be known once today's record has arrived
            for _ in range(2):
                for key in self._due_keys(location, now):
                    if key not in attempted:
                        attempted.add(key)
                        await self.cache.refresh(key)
        return self.snapshot(location, now)

    def poll(self, location: Location | None, now: datetime | None = None) -> UVSnapshot:
        """Start background fetches for due keys and return the cached view.

        Never blocks on the network; results are applied by the cache when
        the fetch task completes. Requires a running event loop when a fetch
        is due.
        """
        now = now or datetime.now(UTC)
        if location is not None and self._is_reachable():
            for key in self._due_keys(location, now):
                self.cache.schedule_refresh(key)
        return self.snapshot(location, now)

    async def current_uv(self, location: Location | None, now: datetime | None = None) -> float:
        """Strict lookup: UV at the user's elevation, or ``NoUsableDataError``."""
        state = await self.resolve(location, now)
        if state.has_no_data:
            raise NoUsableDataError("no UV record for today and no fresh data available")
        return state.current_uv

    def snapshot(self, location: Location | None, now: datetime | None = None) -> UVSnapshot:
        """Build the current view from cached records only."""
        now = now or datetime.now(UTC)
        if location is None:
            return UVSnapshot(as_of=now, location=None)

        key = self.today_key(location, now)
        record = self.cache.get(key)
        is_fetching = self.cache.is_fetching(key)
        if record is None:
            return UVSnapshot(as_of=now, location=key.location, is_fetching=is_fetching)

        stale = self.cache.fetch_due(key, now)
        offline = stale and (not self._is_reachable() or self.cache.last_error(key) is not None)

        elevation = location.altitude_m if location.altitude_m is not None else record.elevation_m
        multiplier = altitude_multiplier(elevation or 0.0)
        base_uv, cloud_cover = self._base_uv(record, now)
        after_sunset = now >= record.sunset

        return UVSnapshot(
            as_of=now,
            location=key.location,
            base_uv=base_uv,
            altitude_multiplier=multiplier,
            cloud_cover_percent=cloud_cover,
            time_of_day_quality=time_of_day_quality(now, record.sunrise, record.sunset),
            offline_mode=offline,
            has_no_data=False,
            is_fetching=is_fetching,
            last_updated=record.last_updated,
            display_tomorrow=after_sunset,
            display=self._display_values(location, record, now, after_sunset),
            record=record,
        )

    def _base_uv(self, record: DailyUVRecord, now: datetime) -> tuple[float, float | None]:
        if not record.has_hourly:
            # Partial record: approximate the hourly curve from the daily peak
            return record.max_uv * time_of_day_quality(now, record.sunrise, record.sunset), None
        sample = record.sample(record.nearest_hour(now))
        if not record.is_daylight(now):
            return 0.0, sample.cloud_cover_percent
        uv = sample.uv_index
        if self.apply_cloud_attenuation:
            uv *= cloud_modification_factor(sample.cloud_cover_percent)
        return uv, sample.cloud_cover_percent

    def _display_values(
        self, location: Location, record: DailyUVRecord, now: datetime, after_sunset: bool
    ) -> DisplayValues:
        if not after_sunset:
            return DisplayValues(sunrise=record.sunrise, sunset=record.sunset, max_uv=record.max_uv)
        tomorrow = self.cache.get(self.tomorrow_key(location, now))
        if tomorrow is not None:
            return DisplayValues(
                sunrise=tomorrow.sunrise,
                sunset=tomorrow.sunset,
                max_uv=tomorrow.max_uv,
                is_tomorrow=True,
            )
        return DisplayValues(
            sunrise=record.sunrise + timedelta(days=1),
            sunset=record.sunset + timedelta(days=1),
            max_uv=record.max_uv,
            is_tomorrow=True,
            estimated=True,
        )
