"""Per-location, per-day UV time-series cache with freshness tracking.

Records are keyed by ``(rounded location, local date)`` and replaced whole on
every successful fetch; they are never merged or mutated.

Fetching is asynchronous and deduplicated: while a fetch for a key is in
flight, further refresh requests await that same task instead of issuing a
second network call. A caller may explicitly supersede an in-flight fetch;
each request gets an id, and only the most recently issued request for a key
is allowed to write its result (stale responses are discarded).

The fetch callable must raise ``FetchFailedError`` on failure. The cache
records the error and keeps serving the previous record for the key.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Awaitable, Callable, Iterable
from datetime import date, datetime, timedelta
from typing import NamedTuple

from daylight_dose.errors import FetchFailedError
from daylight_dose.schemas import COORDINATE_PRECISION, DailyUVRecord

logger = logging.getLogger(__name__)

DEFAULT_FRESHNESS = timedelta(minutes=5)

FetchDaily = Callable[[float, float, date], Awaitable[DailyUVRecord]]


class LocationKey(NamedTuple):
    """Coordinates rounded so nearby positions share one cache entry."""

    latitude: float
    longitude: float

    @classmethod
    def from_coordinates(cls, latitude: float, longitude: float) -> LocationKey:
        return cls(round(latitude, COORDINATE_PRECISION), round(longitude, COORDINATE_PRECISION))


class CacheKey(NamedTuple):
    location: LocationKey
    day: date

    @classmethod
    def for_record(cls, record: DailyUVRecord) -> CacheKey:
        return cls(LocationKey(record.latitude, record.longitude), record.date)


class UVTimeSeriesCache:
    """Owns every ``DailyUVRecord`` and the fetches that produce them."""

    def __init__(
        self,
        fetch_daily: FetchDaily,
        freshness_interval: timedelta = DEFAULT_FRESHNESS,
    ) -> None:
        self._fetch_daily = fetch_daily
        self.freshness_interval = freshness_interval
        self._records: dict[CacheKey, DailyUVRecord] = {}
        self._errors: dict[CacheKey, FetchFailedError] = {}
        self._inflight: dict[CacheKey, tuple[int, asyncio.Task[DailyUVRecord | None]]] = {}
        self._latest_request: dict[CacheKey, int] = {}
        self._request_ids = itertools.count(1)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, key: CacheKey) -> DailyUVRecord | None:
        return self._records.get(key)

    def last_error(self, key: CacheKey) -> FetchFailedError | None:
        """Error from the most recent fetch for ``key``, cleared on success."""
        return self._errors.get(key)

    def is_fetching(self, key: CacheKey) -> bool:
        return key in self._inflight

    def is_fresh(self, key: CacheKey, now: datetime) -> bool:
        record = self._records.get(key)
        if record is None:
            return False
        return now - record.last_updated < self.freshness_interval

    def fetch_due(self, key: CacheKey, now: datetime) -> bool:
        """True when the record is missing or at least one freshness interval old."""
        return not self.is_fresh(key, now)

    def age(self, key: CacheKey, now: datetime) -> timedelta | None:
        record = self._records.get(key)
        return None if record is None else now - record.last_updated

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def put(self, record: DailyUVRecord) -> CacheKey:
        """Store ``record``, replacing an older one for the same key.

        Used to seed the cache from disk; a seeded record that is older than
        the one already held is ignored.
        """
        key = CacheKey.for_record(record)
        current = self._records.get(key)
        if current is None or current.last_updated <= record.last_updated:
            self._records[key] = record
        return key

    def seed(self, records: Iterable[DailyUVRecord]) -> int:
        count = 0
        for record in records:
            self.put(record)
            count += 1
        return count

    def evict_before(self, day: date) -> int:
        """Drop records for dates earlier than ``day``."""
        stale = [key for key in self._records if key.day < day]
        for key in stale:
            del self._records[key]
            self._errors.pop(key, None)
        return len(stale)

    # -------------------------------------------------------------------------
    # Fetching
    # -------------------------------------------------------------------------

    async def refresh(self, key: CacheKey, *, supersede: bool = False) -> DailyUVRecord | None:
        """
        Fetch a fresh record for ``key`` and return whatever the cache then holds.

        Joins the in-flight fetch for the key if there is one, unless
        ``supersede`` is set. Returns the cached record (possibly stale, possibly
        None) when the fetch fails.
        """
        task = self.schedule_refresh(key, supersede=supersede)
        return await asyncio.shield(task)

    def schedule_refresh(
        self, key: CacheKey, *, supersede: bool = False
    ) -> asyncio.Task[DailyUVRecord | None]:
        """Start (or join) a background fetch without waiting for it.

        Must be called from a running event loop.
        """
        inflight = self._inflight.get(key)
        if inflight is not None and not supersede:
            return inflight[1]

        request_id = next(self._request_ids)
        self._latest_request[key] = request_id
        task = asyncio.get_running_loop().create_task(
            self._run_fetch(key, request_id), name=f"uv-fetch-{key.day}-{request_id}"
        )
        self._inflight[key] = (request_id, task)
        return task

    async def _run_fetch(self, key: CacheKey, request_id: int) -> DailyUVRecord | None:
        try:
            record = await self._fetch_daily(key.location.latitude, key.location.longitude, key.day)
            if record.date != key.day:
                msg = f"provider returned {record.date} for a {key.day} request"
                raise FetchFailedError(msg)
        except FetchFailedError as exc:
            if self._latest_request.get(key) == request_id:
                self._errors[key] = exc
                logger.warning("UV fetch for %s on %s failed: %s", key.location, key.day, exc)
            return self._records.get(key)
        except Exception as exc:
            logger.exception("Unexpected error fetching UV for %s on %s", key.location, key.day)
            if self._latest_request.get(key) == request_id:
                error = FetchFailedError(f"UV fetch for {key.day} failed: {exc}")
                error.__cause__ = exc
                self._errors[key] = error
            return self._records.get(key)
        finally:
            inflight = self._inflight.get(key)
            if inflight is not None and inflight[0] == request_id:
                del self._inflight[key]

        if self._latest_request.get(key) != request_id:
            logger.debug("Discarding superseded UV response %d for %s", request_id, key)
            return self._records.get(key)

        self._records[key] = record
        self._errors.pop(key, None)
        logger.debug(
            "Cached UV record for %s on %s (max UV %.1f)", key.location, key.day, record.max_uv
        )
        return record
