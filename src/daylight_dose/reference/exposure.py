"""Clothing coverage and sunscreen attenuation tables."""

from __future__ import annotations

from types import MappingProxyType

from daylight_dose.schemas import ClothingLevel, SunscreenLevel

# Fraction of skin exposed to the sun
CLOTHING_EXPOSURE = MappingProxyType(
    {
        ClothingLevel.NONE: 1.00,
        ClothingLevel.MINIMAL: 0.80,
        ClothingLevel.LIGHT: 0.40,
        ClothingLevel.MODERATE: 0.15,
        ClothingLevel.HEAVY: 0.05,
    }
)

# Fraction of UVB blocked, 1 - 1/SPF
SUNSCREEN_ATTENUATION = MappingProxyType(
    {
        SunscreenLevel.NONE: 0.0,
        SunscreenLevel.SPF15: 1 - 1 / 15,
        SunscreenLevel.SPF30: 1 - 1 / 30,
        SunscreenLevel.SPF50: 1 - 1 / 50,
        SunscreenLevel.SPF100: 1 - 1 / 100,
    }
)
