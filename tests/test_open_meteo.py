"""Tests for the Open-Meteo UV data source."""

from __future__ import annotations

import asyncio
from datetime import UTC, date, datetime
from typing import Any
from unittest.mock import Mock, patch

import pytest
import requests

from daylight_dose.datasources.open_meteo import (
    OpenMeteoUVProvider,
    fetch_daily_uv,
    parse_daily_uv,
)
from daylight_dose.errors import FetchFailedError

DAY = date(2026, 6, 21)


def sample_payload(hours: int = 24, timezone: str = "America/Los_Angeles") -> dict[str, Any]:
    return {
        "latitude": 45.5,
        "longitude": -122.6,
        "elevation": 52.0,
        "timezone": timezone,
        "hourly": {
            "time": [f"2026-06-21T{h:02d}:00" for h in range(hours)],
            "uv_index": [max(0.0, 8.0 - abs(13 - h)) for h in range(hours)],
            "cloud_cover": [10.0] * hours,
        },
        "daily": {
            "time": ["2026-06-21"],
            "sunrise": ["2026-06-21T05:21"],
            "sunset": ["2026-06-21T21:03"],
            "uv_index_max": [8.1],
        },
    }


class TestParseDailyUV:
    def test_parses_hourly_and_daily(self) -> None:
        fetched = datetime(2026, 6, 21, 15, tzinfo=UTC)
        record = parse_daily_uv(sample_payload(), 45.5, -122.6, DAY, fetched_at=fetched)

        assert record.date == DAY
        assert record.timezone == "America/Los_Angeles"
        assert len(record.hourly_uv) == 24
        assert record.hourly_uv[13] == 8.0
        assert record.hourly_cloud_cover[0] == 10.0
        assert record.max_uv == 8.1
        assert record.elevation_m == 52.0
        assert record.last_updated == fetched

    def test_sun_times_are_local(self) -> None:
        record = parse_daily_uv(sample_payload(), 45.5, -122.6, DAY)
        assert record.sunrise.hour == 5
        assert record.sunrise.minute == 21
        assert record.sunrise.utcoffset() is not None
        assert record.is_daylight(datetime(2026, 6, 21, 20, 0, tzinfo=UTC))

    def test_missing_hourly_gives_partial_record(self) -> None:
        payload = sample_payload()
        del payload["hourly"]
        record = parse_daily_uv(payload, 45.5, -122.6, DAY)
        assert not record.has_hourly
        assert record.max_uv == 8.1

    def test_missing_peak_uses_hourly_max(self) -> None:
        payload = sample_payload()
        payload["daily"]["uv_index_max"] = [None]
        record = parse_daily_uv(payload, 45.5, -122.6, DAY)
        assert record.max_uv == 8.0

    def test_short_dst_day_is_filled(self) -> None:
        payload = sample_payload(hours=23)
        record = parse_daily_uv(payload, 45.5, -122.6, DAY)
        assert len(record.hourly_uv) == 24
        assert record.hourly_uv[23] == record.hourly_uv[22]

    def test_null_hourly_values_become_zero(self) -> None:
        payload = sample_payload()
        payload["hourly"]["uv_index"][13] = None
        record = parse_daily_uv(payload, 45.5, -122.6, DAY)
        assert record.hourly_uv[13] == 0.0

    def test_date_not_in_payload(self) -> None:
        with pytest.raises(ValueError):
            parse_daily_uv(sample_payload(), 45.5, -122.6, date(2026, 6, 22))


class TestFetchDailyUV:
    @patch("daylight_dose.datasources.open_meteo.daily_uv.session.get")
    def test_request_params(self, mock_get: Mock) -> None:
        mock_response = Mock()
        mock_response.json.return_value = sample_payload()
        mock_response.raise_for_status = Mock()
        mock_get.return_value = mock_response

        record = fetch_daily_uv(45.5, -122.6, DAY)

        assert record.max_uv == 8.1
        mock_get.assert_called_once()
        params = mock_get.call_args.kwargs["params"]
        assert params["latitude"] == 45.5
        assert params["longitude"] == -122.6
        assert params["start_date"] == params["end_date"] == "2026-06-21"
        assert "uv_index" in params["hourly"]
        assert "sunset" in params["daily"]
        assert params["timezone"] == "auto"

    @patch("daylight_dose.datasources.open_meteo.daily_uv.session.get")
    def test_http_error_propagates(self, mock_get: Mock) -> None:
        mock_response = Mock()
        mock_response.raise_for_status.side_effect = requests.HTTPError("503")
        mock_get.return_value = mock_response

        with pytest.raises(requests.HTTPError):
            fetch_daily_uv(45.5, -122.6, DAY)


class TestProvider:
    @patch("daylight_dose.datasources.open_meteo.daily_uv.session.get")
    def test_returns_record(self, mock_get: Mock) -> None:
        mock_response = Mock()
        mock_response.json.return_value = sample_payload()
        mock_response.raise_for_status = Mock()
        mock_get.return_value = mock_response

        record = asyncio.run(OpenMeteoUVProvider()(45.5, -122.6, DAY))
        assert record.date == DAY

    @patch("daylight_dose.datasources.open_meteo.daily_uv.session.get")
    def test_network_error_becomes_fetch_failed(self, mock_get: Mock) -> None:
        mock_get.side_effect = requests.ConnectionError("no route to host")
        with pytest.raises(FetchFailedError):
            asyncio.run(OpenMeteoUVProvider().fetch_daily(45.5, -122.6, DAY))

    @patch("daylight_dose.datasources.open_meteo.daily_uv.session.get")
    def test_malformed_payload_becomes_fetch_failed(self, mock_get: Mock) -> None:
        mock_response = Mock()
        mock_response.json.return_value = {"timezone": "UTC", "daily": {}}
        mock_response.raise_for_status = Mock()
        mock_get.return_value = mock_response

        with pytest.raises(FetchFailedError):
            asyncio.run(OpenMeteoUVProvider().fetch_daily(45.5, -122.6, DAY))
