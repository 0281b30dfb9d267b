"""Tests for the UV time-series cache."""

from __future__ import annotations

import asyncio
from datetime import UTC, date, datetime, timedelta

from conftest import DAY, FakeProvider, build_record

from daylight_dose.errors import FetchFailedError
from daylight_dose.schemas import DailyUVRecord
from daylight_dose.uv import CacheKey, LocationKey, UVTimeSeriesCache

KEY = CacheKey(LocationKey(45.5, -122.6), DAY)
NOW = datetime(2026, 6, 21, 13, 0, tzinfo=UTC)


class TestKeys:
    def test_location_key_rounds(self) -> None:
        assert LocationKey.from_coordinates(45.5123, -122.6789) == LocationKey(45.51, -122.68)

    def test_key_for_record(self) -> None:
        record = build_record(lat=45.504, lon=-122.601)
        assert CacheKey.for_record(record) == KEY


class TestFreshness:
    def test_missing_record_is_due(self, provider: FakeProvider) -> None:
        cache = UVTimeSeriesCache(provider)
        assert cache.fetch_due(KEY, NOW)
        assert cache.age(KEY, NOW) is None

    def test_fresh_within_interval(self, provider: FakeProvider) -> None:
        cache = UVTimeSeriesCache(provider, freshness_interval=timedelta(minutes=5))
        cache.put(build_record(last_updated=NOW))
        assert cache.is_fresh(KEY, NOW + timedelta(minutes=4))
        assert cache.fetch_due(KEY, NOW + timedelta(minutes=5))

    def test_put_ignores_older_record(self, provider: FakeProvider) -> None:
        cache = UVTimeSeriesCache(provider)
        cache.put(build_record(last_updated=NOW, peak_uv=6))
        cache.put(build_record(last_updated=NOW - timedelta(hours=1), peak_uv=9))
        record = cache.get(KEY)
        assert record is not None
        assert record.max_uv == 6

    def test_evict_before(self, provider: FakeProvider) -> None:
        cache = UVTimeSeriesCache(provider)
        cache.seed([build_record(day=DAY - timedelta(days=1)), build_record(day=DAY)])
        assert cache.evict_before(DAY) == 1
        assert cache.get(KEY) is not None


class TestRefresh:
    def test_successful_fetch_is_cached(self, provider: FakeProvider) -> None:
        cache = UVTimeSeriesCache(provider)
        record = asyncio.run(cache.refresh(KEY))
        assert record is not None
        assert cache.get(KEY) == record
        assert provider.calls == [(45.5, -122.6, DAY)]
        assert not cache.is_fetching(KEY)

    def test_concurrent_requests_share_one_fetch(self, provider: FakeProvider) -> None:
        async def scenario() -> tuple[DailyUVRecord | None, DailyUVRecord | None]:
            provider.gate = asyncio.Event()
            cache = UVTimeSeriesCache(provider)
            first = asyncio.create_task(cache.refresh(KEY))
            second = asyncio.create_task(cache.refresh(KEY))
            await asyncio.sleep(0)
            assert cache.is_fetching(KEY)
            provider.gate.set()
            return await first, await second

        first, second = asyncio.run(scenario())
        assert len(provider.calls) == 1
        assert first is second

    def test_failure_serves_previous_record(self) -> None:
        provider = FakeProvider(fail=True)
        cache = UVTimeSeriesCache(provider)
        old = build_record(last_updated=NOW - timedelta(hours=2))
        cache.put(old)

        record = asyncio.run(cache.refresh(KEY))

        assert record == old
        assert isinstance(cache.last_error(KEY), FetchFailedError)

    def test_unexpected_error_serves_previous_record(self) -> None:
        async def broken(lat: float, lon: float, day: date) -> DailyUVRecord:
            raise OSError("disk full while archiving record")

        cache = UVTimeSeriesCache(broken)
        old = build_record(last_updated=NOW - timedelta(hours=2))
        cache.put(old)

        assert asyncio.run(cache.refresh(KEY)) == old
        error = cache.last_error(KEY)
        assert isinstance(error, FetchFailedError)
        assert isinstance(error.__cause__, OSError)
        assert not cache.is_fetching(KEY)

    def test_unexpected_error_in_background_fetch(self) -> None:
        async def broken(lat: float, lon: float, day: date) -> DailyUVRecord:
            raise OSError("disk full while archiving record")

        cache = UVTimeSeriesCache(broken)

        async def scenario() -> DailyUVRecord | None:
            return await cache.schedule_refresh(KEY)

        assert asyncio.run(scenario()) is None
        assert cache.last_error(KEY) is not None

    def test_success_clears_error(self) -> None:
        provider = FakeProvider(fail=True, fetched_at=NOW)
        cache = UVTimeSeriesCache(provider)
        asyncio.run(cache.refresh(KEY))
        assert cache.last_error(KEY) is not None

        provider.fail = False
        asyncio.run(cache.refresh(KEY))
        assert cache.last_error(KEY) is None

    def test_wrong_date_counts_as_failure(self) -> None:
        async def wrong_day(lat: float, lon: float, day: date) -> DailyUVRecord:
            return build_record(day=day + timedelta(days=1), lat=lat, lon=lon)

        cache = UVTimeSeriesCache(wrong_day)
        assert asyncio.run(cache.refresh(KEY)) is None
        assert cache.get(KEY) is None
        assert cache.last_error(KEY) is not None


class _ManualProvider:
    """Each call blocks until its own gate is released; call n reports max UV n."""

    def __init__(self) -> None:
        self.gates: list[asyncio.Event] = []

    async def __call__(self, lat: float, lon: float, day: date) -> DailyUVRecord:
        gate = asyncio.Event()
        self.gates.append(gate)
        number = len(self.gates)
        await gate.wait()
        return build_record(day=day, lat=lat, lon=lon, max_uv=float(number), last_updated=NOW)


class TestSupersede:
    def test_newer_request_wins_when_older_finishes_last(self) -> None:
        async def scenario() -> tuple[float | None, float | None, float]:
            fetcher = _ManualProvider()
            cache = UVTimeSeriesCache(fetcher)
            old = cache.schedule_refresh(KEY)
            await asyncio.sleep(0)
            new = cache.schedule_refresh(KEY, supersede=True)
            await asyncio.sleep(0)

            fetcher.gates[1].set()
            newer = await new
            fetcher.gates[0].set()
            older = await old
            held = cache.get(KEY)
            assert held is not None
            return (
                newer.max_uv if newer else None,
                older.max_uv if older else None,
                held.max_uv,
            )

        newer, older, held = asyncio.run(scenario())
        assert newer == 2.0
        # The stale response is discarded; its caller sees the current record
        assert older == 2.0
        assert held == 2.0

    def test_stale_response_discarded_when_it_finishes_first(self) -> None:
        async def scenario() -> tuple[DailyUVRecord | None, float]:
            fetcher = _ManualProvider()
            cache = UVTimeSeriesCache(fetcher)
            old = cache.schedule_refresh(KEY)
            await asyncio.sleep(0)
            new = cache.schedule_refresh(KEY, supersede=True)
            await asyncio.sleep(0)

            fetcher.gates[0].set()
            older = await old
            assert cache.is_fetching(KEY)
            fetcher.gates[1].set()
            await new
            held = cache.get(KEY)
            assert held is not None
            return older, held.max_uv

        older, held = asyncio.run(scenario())
        assert older is None
        assert held == 2.0

    def test_join_without_supersede(self) -> None:
        async def scenario() -> bool:
            fetcher = _ManualProvider()
            cache = UVTimeSeriesCache(fetcher)
            first = cache.schedule_refresh(KEY)
            second = cache.schedule_refresh(KEY)
            await asyncio.sleep(0)
            fetcher.gates[0].set()
            await first
            return first is second

        assert asyncio.run(scenario())
