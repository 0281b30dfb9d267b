"""Shared fixtures: synthetic UV records and fake providers."""

from __future__ import annotations

import asyncio
import math
from collections.abc import Callable
from datetime import UTC, date, datetime, time, timedelta

import pytest

from daylight_dose.errors import FetchFailedError
from daylight_dose.schemas import ClothingLevel, DailyUVRecord, PersonalProfile, SkinType

DAY = date(2026, 6, 21)
SUNRISE_HOUR = 5
SUNSET_HOUR = 21


def build_record(
    day: date = DAY,
    lat: float = 45.5,
    lon: float = -122.6,
    peak_uv: float = 8.0,
    last_updated: datetime | None = None,
    hourly: bool = True,
    cloud_cover: float = 20.0,
    max_uv: float | None = None,
) -> DailyUVRecord:
    """A UTC day with sunrise 05:00, sunset 21:00, and a half-sine UV curve peaking at 13:00."""
    span = SUNSET_HOUR - SUNRISE_HOUR
    uv = [
        round(peak_uv * max(0.0, math.sin(math.pi * (h - SUNRISE_HOUR) / span)), 3)
        if SUNRISE_HOUR <= h <= SUNSET_HOUR
        else 0.0
        for h in range(24)
    ]
    return DailyUVRecord(
        latitude=lat,
        longitude=lon,
        date=day,
        timezone="UTC",
        hourly_uv=tuple(uv) if hourly else (),
        hourly_cloud_cover=tuple([cloud_cover] * 24) if hourly else (),
        max_uv=peak_uv if max_uv is None else max_uv,
        sunrise=datetime.combine(day, time(SUNRISE_HOUR), tzinfo=UTC),
        sunset=datetime.combine(day, time(SUNSET_HOUR), tzinfo=UTC),
        last_updated=last_updated or datetime.combine(day, time(12), tzinfo=UTC),
    )


class FakeProvider:
    """Async stand-in for a network UV provider."""

    def __init__(self, fetched_at: datetime | None = None, fail: bool = False) -> None:
        self.fetched_at = fetched_at
        self.fail = fail
        self.calls: list[tuple[float, float, date]] = []
        self.gate: asyncio.Event | None = None

    async def __call__(self, lat: float, lon: float, day: date) -> DailyUVRecord:
        self.calls.append((lat, lon, day))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise FetchFailedError("network unreachable")
        return build_record(day=day, lat=lat, lon=lon, last_updated=self.fetched_at)


@pytest.fixture
def make_record() -> Callable[..., DailyUVRecord]:
    return build_record


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider(fetched_at=datetime(2026, 6, 21, 13, 0, tzinfo=UTC))


@pytest.fixture
def profile() -> PersonalProfile:
    return PersonalProfile(
        skin_type=SkinType.TYPE_3,
        clothing_level=ClothingLevel.MINIMAL,
        age=30,
    )


@pytest.fixture
def noon() -> datetime:
    return datetime(2026, 6, 21, 13, 0, tzinfo=UTC)


def minutes_after(start: datetime, minutes: float) -> datetime:
    return start + timedelta(minutes=minutes)
