"""Instantaneous vitamin-D synthesis rate (IU per hour).

The rate model is a pure function so it can be re-evaluated every tick, or
out of band when the profile changes, without accumulating error. Units: the
model returns IU/hour; divide by 60 for IU/minute; a session total is the time
integral of the rate (see ``session.py``).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from daylight_dose.dosimetry import factors
from daylight_dose.dosimetry.burn import burn_time_minutes
from daylight_dose.errors import InvalidInputError
from daylight_dose.schemas import PersonalProfile, Session

# Reference synthesis for minimal clothing (~80% skin exposed)
BASE_RATE_IU_PER_HOUR = 21_000.0


@dataclass(frozen=True)
class RateBreakdown:
    """Every factor that went into one rate evaluation."""

    uv_index: float
    uv_factor: float
    exposure_factor: float
    skin_factor: float
    age_factor: float
    adaptation_factor: float
    time_of_day_quality: float
    altitude_multiplier: float
    iu_per_hour: float
    burn_time_minutes: int | None

    @property
    def iu_per_minute(self) -> float:
        return self.iu_per_hour / 60.0


def _validate_environment(
    time_of_day_quality: float, altitude_multiplier: float, adaptation_factor: float
) -> None:
    quality = factors.require_non_negative("time_of_day_quality", time_of_day_quality)
    if quality > 1.0:
        msg = f"time_of_day_quality must be within [0, 1], got {time_of_day_quality!r}"
        raise InvalidInputError(msg)
    if factors.require_non_negative("altitude_multiplier", altitude_multiplier) < 1.0:
        msg = f"altitude_multiplier must be >= 1, got {altitude_multiplier!r}"
        raise InvalidInputError(msg)
    if factors.require_non_negative("adaptation_factor", adaptation_factor) == 0.0:
        msg = "adaptation_factor must be > 0"
        raise InvalidInputError(msg)


def rate_breakdown(
    uv_index: float,
    profile: PersonalProfile,
    time_of_day_quality: float = 1.0,
    altitude_multiplier: float = 1.0,
    adaptation_factor: float = 1.0,
) -> RateBreakdown:
    """
    Evaluate the rate model and keep the individual factors.

    Args:
        uv_index: Ground-level UV index at sea level (>= 0).
        profile: Skin type, clothing, sunscreen and age of the person.
        time_of_day_quality: Spectral effectiveness in [0, 1].
        altitude_multiplier: UV gain from elevation (>= 1).
        adaptation_factor: Photoadaptation multiplier from recent history.

    Raises:
        InvalidInputError: If any numeric input is negative, NaN, or out of range.
    """
    uv_factor = factors.uv_intensity_factor(uv_index)
    _validate_environment(time_of_day_quality, altitude_multiplier, adaptation_factor)

    exposure = factors.exposure_factor(profile.clothing_level, profile.sunscreen_level)
    skin = factors.skin_type_factor(profile.skin_type)
    age = factors.age_factor(profile.age) if profile.use_age_factor else 1.0

    iu_per_hour = (
        BASE_RATE_IU_PER_HOUR
        * uv_factor
        * exposure
        * skin
        * age
        * adaptation_factor
        * time_of_day_quality
        * altitude_multiplier
    )
    return RateBreakdown(
        uv_index=uv_index,
        uv_factor=uv_factor,
        exposure_factor=exposure,
        skin_factor=skin,
        age_factor=age,
        adaptation_factor=adaptation_factor,
        time_of_day_quality=time_of_day_quality,
        altitude_multiplier=altitude_multiplier,
        iu_per_hour=iu_per_hour,
        burn_time_minutes=burn_time_minutes(uv_index * altitude_multiplier, profile.skin_type),
    )


def vitamin_d_rate(
    uv_index: float,
    profile: PersonalProfile,
    time_of_day_quality: float = 1.0,
    altitude_multiplier: float = 1.0,
    adaptation_factor: float = 1.0,
) -> float:
    """Synthesis rate in IU/hour. Always >= 0; exactly 0 when ``uv_index`` is 0."""
    return rate_breakdown(
        uv_index, profile, time_of_day_quality, altitude_multiplier, adaptation_factor
    ).iu_per_hour


def estimate_session_iu(
    uv_index: float,
    minutes: float,
    profile: PersonalProfile,
    time_of_day_quality: float = 1.0,
    altitude_multiplier: float = 1.0,
    adaptation_factor: float = 1.0,
) -> float:
    """IU produced by ``minutes`` of exposure at a constant UV index."""
    duration = factors.require_non_negative("minutes", minutes)
    rate = vitamin_d_rate(
        uv_index, profile, time_of_day_quality, altitude_multiplier, adaptation_factor
    )
    return rate * duration / 60.0


def manual_session(
    uv_index: float,
    minutes: float,
    profile: PersonalProfile,
    end_time: datetime | None = None,
    adaptation_factor: float = 1.0,
) -> Session:
    """
    Build a completed session for an exposure logged after the fact.

    The UV index is taken as constant over the whole exposure, so it is both
    the average and the peak of the session.
    """
    if math.isnan(minutes) or minutes <= 0:
        msg = f"minutes must be > 0, got {minutes!r}"
        raise InvalidInputError(msg)
    end = end_time or datetime.now(UTC)
    amount = estimate_session_iu(uv_index, minutes, profile, adaptation_factor=adaptation_factor)
    return Session(
        start_time=end - timedelta(minutes=minutes),
        end_time=end,
        accumulated_iu=amount,
        average_uv=uv_index,
        peak_uv=uv_index,
        profile=profile,
    )
