"""Pure factor functions for the vitamin-D rate model (no I/O, no state).

Every factor is a bounded multiplier. The rate model composes them
multiplicatively:

    uv_factor      = uv * K / (C + uv)                  saturating, 0 at uv=0
    exposure       = clothing_fraction * (1 - sunscreen_attenuation)
    skin           = SKIN_TYPES[skin_type].vitamin_d_factor
    age            = 1.0 (<=20) .. 0.25 (>=70), linear between
    altitude       = 1 + 0.10 per 1000 m, never below 1
    quality        = sin(pi * daylight_fraction), 0 outside daylight
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from daylight_dose.errors import InvalidInputError
from daylight_dose.reference import CLOTHING_EXPOSURE, SKIN_TYPES, SUNSCREEN_ATTENUATION

if TYPE_CHECKING:
    from datetime import datetime

    from daylight_dose.schemas import ClothingLevel, SkinType, SunscreenLevel

# Saturating UV response: uv * UV_CURVE_K / (UV_CURVE_C + uv)
UV_CURVE_K = 2.5
UV_CURVE_C = 3.0

AGE_FULL_CAPACITY = 20
AGE_FLOOR_FACTOR = 0.25
AGE_DECLINE_PER_YEAR = 0.015

ALTITUDE_GAIN_PER_KM = 0.10

# Kasten-Czeplak style cloud modification: 1 - A * (cover/100) ** B
CLOUD_ATTENUATION_A = 0.75
CLOUD_ATTENUATION_B = 3.4


def require_non_negative(name: str, value: float) -> float:
    """Reject NaN, infinite, and negative values."""
    if value is None or math.isnan(value) or math.isinf(value) or value < 0:
        msg = f"{name} must be a finite number >= 0, got {value!r}"
        raise InvalidInputError(msg)
    return float(value)


def uv_intensity_factor(uv_index: float) -> float:
    """Saturating response to UV index; marginal gain shrinks above ~6-8."""
    uv = require_non_negative("uv_index", uv_index)
    return uv * UV_CURVE_K / (UV_CURVE_C + uv)


def exposure_factor(clothing: ClothingLevel, sunscreen: SunscreenLevel) -> float:
    """Fraction of UVB reaching skin: exposed area times unblocked fraction."""
    return CLOTHING_EXPOSURE[clothing] * (1.0 - SUNSCREEN_ATTENUATION[sunscreen])


def skin_type_factor(skin_type: SkinType) -> float:
    return SKIN_TYPES[skin_type].vitamin_d_factor


def age_factor(age: float) -> float:
    """Cutaneous synthesis capacity relative to a 20-year-old.

    >>> age_factor(45)
    0.625
    """
    years = require_non_negative("age", age)
    if years <= AGE_FULL_CAPACITY:
        return 1.0
    return max(AGE_FLOOR_FACTOR, 1.0 - AGE_DECLINE_PER_YEAR * (years - AGE_FULL_CAPACITY))


def altitude_multiplier(altitude_m: float) -> float:
    """UV gain with elevation. Below sea level counts as sea level."""
    if altitude_m is None or math.isnan(altitude_m) or math.isinf(altitude_m):
        msg = f"altitude_m must be a finite number, got {altitude_m!r}"
        raise InvalidInputError(msg)
    return 1.0 + ALTITUDE_GAIN_PER_KM * max(0.0, altitude_m) / 1000.0


def time_of_day_quality(when: datetime, sunrise: datetime, sunset: datetime) -> float:
    """Spectral effectiveness of sunlight at ``when``, in [0, 1].

    Follows solar elevation as a half-sine over the daylight span: UVB makes up
    a larger share of UV when the sun is high, so the same UV index yields more
    synthesis near solar noon than near sunrise or sunset.
    """
    if not sunrise <= when < sunset:
        return 0.0
    span = (sunset - sunrise).total_seconds()
    if span <= 0:
        return 0.0
    fraction = (when - sunrise).total_seconds() / span
    return max(0.0, min(1.0, math.sin(math.pi * fraction)))


def cloud_modification_factor(cloud_cover_percent: float) -> float:
    """Fraction of clear-sky UV that gets through a given cloud cover."""
    cover = min(100.0, require_non_negative("cloud_cover_percent", cloud_cover_percent))
    return 1.0 - CLOUD_ATTENUATION_A * (cover / 100.0) ** CLOUD_ATTENUATION_B
