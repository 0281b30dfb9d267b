"""Tests for the offline coordinator."""

from __future__ import annotations

import asyncio
from datetime import UTC, date, datetime, timedelta

import pytest
from conftest import DAY, FakeProvider, build_record

from daylight_dose.errors import NoUsableDataError
from daylight_dose.schemas import DailyUVRecord, Location
from daylight_dose.uv import OfflineCoordinator, UVTimeSeriesCache

HOME = Location(latitude=45.5, longitude=-122.6, altitude_m=0.0)
NOON = datetime(2026, 6, 21, 13, 0, tzinfo=UTC)
NIGHT = datetime(2026, 6, 21, 22, 0, tzinfo=UTC)


def make_coordinator(
    provider: FakeProvider, reachable: bool = True, apply_cloud_attenuation: bool = False
) -> OfflineCoordinator:
    cache = UVTimeSeriesCache(provider, freshness_interval=timedelta(minutes=5))
    return OfflineCoordinator(
        cache,
        UTC,
        is_reachable=lambda: reachable,
        apply_cloud_attenuation=apply_cloud_attenuation,
    )


class TestNoData:
    def test_no_location(self, provider: FakeProvider) -> None:
        state = asyncio.run(make_coordinator(provider).resolve(None, NOON))
        assert state.has_no_data
        assert state.current_uv == 0.0
        assert provider.calls == []

    def test_fetch_fails_without_cache(self) -> None:
        coordinator = make_coordinator(FakeProvider(fail=True))
        state = asyncio.run(coordinator.resolve(HOME, NOON))
        assert state.has_no_data
        assert not state.offline_mode

    def test_strict_lookup_raises(self) -> None:
        coordinator = make_coordinator(FakeProvider(fail=True))
        with pytest.raises(NoUsableDataError):
            asyncio.run(coordinator.current_uv(HOME, NOON))


class TestLive:
    def test_fetches_and_serves_nearest_hour(self, provider: FakeProvider) -> None:
        coordinator = make_coordinator(provider)
        state = asyncio.run(coordinator.resolve(HOME, NOON))
        assert not state.has_no_data
        assert state.is_live
        assert state.base_uv == pytest.approx(8.0)
        assert state.time_of_day_quality == pytest.approx(1.0)
        assert state.cloud_cover_percent == 20.0

    def test_minutes_round_to_nearest_hour(self, provider: FakeProvider) -> None:
        coordinator = make_coordinator(provider)
        coordinator.cache.put(build_record(last_updated=NOON))
        record = build_record()
        state = coordinator.snapshot(HOME, NOON + timedelta(minutes=40))
        assert state.base_uv == pytest.approx(record.hourly_uv[14])

    def test_no_refetch_within_freshness(self, provider: FakeProvider) -> None:
        coordinator = make_coordinator(provider)

        async def scenario() -> None:
            await coordinator.resolve(HOME, NOON)
            await coordinator.resolve(HOME, NOON + timedelta(minutes=2))
            assert len(provider.calls) == 1
            await coordinator.resolve(HOME, NOON + timedelta(minutes=6))

        asyncio.run(scenario())
        assert len(provider.calls) == 2

    def test_altitude_from_location(self, provider: FakeProvider) -> None:
        coordinator = make_coordinator(provider)
        high = Location(latitude=45.5, longitude=-122.6, altitude_m=2000)
        state = asyncio.run(coordinator.resolve(high, NOON))
        assert state.altitude_multiplier == pytest.approx(1.2)
        assert state.current_uv == pytest.approx(8.0 * 1.2)

    def test_cloud_attenuation_opt_in(self, provider: FakeProvider) -> None:
        coordinator = make_coordinator(provider, apply_cloud_attenuation=True)
        state = asyncio.run(coordinator.resolve(HOME, NOON))
        assert state.base_uv < 8.0

    def test_partial_record_uses_daily_peak(self, provider: FakeProvider) -> None:
        coordinator = make_coordinator(provider)
        coordinator.cache.put(build_record(hourly=False, last_updated=NOON))
        state = coordinator.snapshot(HOME, NOON)
        assert state.base_uv == pytest.approx(8.0)
        assert state.cloud_cover_percent is None

    def test_poll_does_not_wait(self, provider: FakeProvider) -> None:
        coordinator = make_coordinator(provider)

        async def scenario() -> None:
            state = coordinator.poll(HOME, NOON)
            assert state.has_no_data
            assert state.is_fetching
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            assert not coordinator.snapshot(HOME, NOON).has_no_data

        asyncio.run(scenario())


class TestOffline:
    def test_stale_record_and_failed_fetch(self) -> None:
        coordinator = make_coordinator(FakeProvider(fail=True))
        coordinator.cache.put(build_record(last_updated=NOON - timedelta(hours=1)))
        state = asyncio.run(coordinator.resolve(HOME, NOON))
        assert state.offline_mode
        assert not state.has_no_data
        assert state.base_uv == pytest.approx(8.0)
        assert state.minutes_since_update() == pytest.approx(60)

    def test_unexpected_provider_error_goes_offline(self) -> None:
        async def broken(lat: float, lon: float, day: date) -> DailyUVRecord:
            raise OSError("disk full while archiving record")

        cache = UVTimeSeriesCache(broken, freshness_interval=timedelta(minutes=5))
        cache.put(build_record(last_updated=NOON - timedelta(hours=2)))
        coordinator = OfflineCoordinator(cache, UTC)

        state = asyncio.run(coordinator.resolve(HOME, NOON))
        assert state.offline_mode

        async def background() -> None:
            coordinator.poll(HOME, NOON)
            await asyncio.sleep(0)
            await asyncio.sleep(0)

        asyncio.run(background())
        assert coordinator.snapshot(HOME, NOON).offline_mode

    def test_unreachable_network_skips_fetch(self) -> None:
        provider = FakeProvider()
        coordinator = make_coordinator(provider, reachable=False)
        coordinator.cache.put(build_record(last_updated=NOON - timedelta(hours=1)))
        state = asyncio.run(coordinator.resolve(HOME, NOON))
        assert state.offline_mode
        assert provider.calls == []

    def test_fresh_record_is_not_offline(self) -> None:
        coordinator = make_coordinator(FakeProvider(fail=True), reachable=False)
        coordinator.cache.put(build_record(last_updated=NOON - timedelta(minutes=1)))
        state = coordinator.snapshot(HOME, NOON)
        assert not state.offline_mode


class TestAfterSunset:
    def test_uv_is_zero_at_night(self, provider: FakeProvider) -> None:
        coordinator = make_coordinator(provider)
        coordinator.cache.put(build_record(last_updated=NIGHT))
        state = coordinator.snapshot(HOME, NIGHT)
        assert state.base_uv == 0.0
        assert state.time_of_day_quality == 0.0

    def test_switches_display_to_tomorrow(self) -> None:
        provider = FakeProvider(fetched_at=NIGHT)
        coordinator = make_coordinator(provider)
        coordinator.cache.put(build_record(last_updated=NIGHT))

        state = asyncio.run(coordinator.resolve(HOME, NIGHT))

        assert provider.calls == [(45.5, -122.6, DAY + timedelta(days=1))]
        assert state.display_tomorrow
        assert state.display is not None
        assert state.display.is_tomorrow
        assert not state.display.estimated
        assert state.display.sunrise.date() == DAY + timedelta(days=1)

    def test_estimates_tomorrow_when_unavailable(self) -> None:
        coordinator = make_coordinator(FakeProvider(fail=True))
        today = build_record(last_updated=NIGHT)
        coordinator.cache.put(today)

        state = asyncio.run(coordinator.resolve(HOME, NIGHT))

        assert state.display is not None
        assert state.display.estimated
        assert state.display.sunrise == today.sunrise + timedelta(days=1)
        assert state.display.max_uv == today.max_uv

    def test_daytime_display_is_today(self, provider: FakeProvider) -> None:
        coordinator = make_coordinator(provider)
        coordinator.cache.put(build_record(last_updated=NOON))
        state = coordinator.snapshot(HOME, NOON)
        assert not state.display_tomorrow
        assert state.display is not None
        assert state.display.sunset.date() == DAY
