"""Tests for the local vitamin-D ledger."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

from daylight_dose.errors import InvalidInputError
from daylight_dose.health import StoreHealthLog
from daylight_dose.store import DataStore

TODAY = date(2026, 6, 21)


class TestStoreHealthLog:
    def test_save_and_list(self, tmp_path: Path) -> None:
        log = StoreHealthLog(DataStore(tmp_path))
        stamp = datetime(2026, 6, 21, 13, 0, tzinfo=UTC)
        log.save_vitamin_d(1200.0, stamp)

        entries = log.entries()
        assert len(entries) == 1
        assert entries[0].amount_iu == 1200.0
        assert entries[0].timestamp == stamp

    def test_daily_totals_window(self, tmp_path: Path) -> None:
        log = StoreHealthLog(DataStore(tmp_path))
        noon = datetime(2026, 6, 21, 12, 0, tzinfo=UTC)
        log.save_vitamin_d(500.0, noon)
        log.save_vitamin_d(700.0, noon + timedelta(hours=2))
        log.save_vitamin_d(900.0, noon - timedelta(days=3))
        log.save_vitamin_d(4000.0, noon - timedelta(days=10))

        totals = log.daily_totals(7, TODAY)
        assert totals == {TODAY: 1200.0, TODAY - timedelta(days=3): 900.0}
        assert log.todays_total(TODAY) == 1200.0

    def test_totals_use_local_date(self, tmp_path: Path) -> None:
        log = StoreHealthLog(DataStore(tmp_path), tz=ZoneInfo("America/Los_Angeles"))
        # 02:00 UTC on the 22nd is still the evening of the 21st in Portland
        log.save_vitamin_d(300.0, datetime(2026, 6, 22, 2, 0, tzinfo=UTC))
        assert log.todays_total(TODAY) == 300.0

    def test_rejects_negative(self, tmp_path: Path) -> None:
        log = StoreHealthLog(DataStore(tmp_path))
        with pytest.raises(InvalidInputError):
            log.save_vitamin_d(-1.0, datetime(2026, 6, 21, tzinfo=UTC))

    def test_empty_log(self, tmp_path: Path) -> None:
        log = StoreHealthLog(DataStore(tmp_path))
        assert log.entries() == []
        assert log.daily_totals(7, TODAY) == {}
