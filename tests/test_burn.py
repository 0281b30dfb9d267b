"""Tests for burn-time estimation."""

from __future__ import annotations

import pytest

from daylight_dose.dosimetry import UNBOUNDED, burn_time_minutes, burn_time_table
from daylight_dose.dosimetry.burn import minimal_erythema_dose
from daylight_dose.errors import InvalidInputError
from daylight_dose.schemas import SkinType


class TestBurnTime:
    def test_zero_uv_is_unbounded(self) -> None:
        assert burn_time_minutes(0, SkinType.TYPE_1) is UNBOUNDED

    def test_known_values(self) -> None:
        # 10 UV -> 15 J/m2 per minute
        assert burn_time_minutes(10, SkinType.TYPE_1) == 13
        assert burn_time_minutes(10, SkinType.TYPE_3) == 23
        assert burn_time_minutes(10, SkinType.TYPE_6) == 66

    def test_never_below_one_minute(self) -> None:
        assert burn_time_minutes(10_000, SkinType.TYPE_1) == 1

    def test_decreases_with_uv(self) -> None:
        times = [burn_time_minutes(uv, SkinType.TYPE_2) for uv in (1, 3, 6, 9, 12)]
        assert times == sorted(times, reverse=True)

    def test_increases_with_skin_type(self) -> None:
        times = [burn_time_minutes(6, s) for s in SkinType]
        assert times == sorted(times)

    def test_rejects_negative(self) -> None:
        with pytest.raises(InvalidInputError):
            burn_time_minutes(-1, SkinType.TYPE_1)


class TestBurnTable:
    def test_covers_every_skin_type(self) -> None:
        table = burn_time_table(5)
        assert set(table) == set(SkinType)

    def test_med_scales_with_skin_type(self) -> None:
        assert minimal_erythema_dose(SkinType.TYPE_1) == 200
        assert minimal_erythema_dose(SkinType.TYPE_6) == 1000
