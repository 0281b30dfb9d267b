"""Display labels for the tagged variants (presentation only)."""

from __future__ import annotations

from types import MappingProxyType

from daylight_dose.schemas import ClothingLevel, SkinType, SunscreenLevel

SKIN_TYPE_LABELS = MappingProxyType(
    {
        SkinType.TYPE_1: "Very Fair",
        SkinType.TYPE_2: "Fair",
        SkinType.TYPE_3: "Light",
        SkinType.TYPE_4: "Medium",
        SkinType.TYPE_5: "Dark",
        SkinType.TYPE_6: "Very Dark",
    }
)

SKIN_TYPE_DETAILS = MappingProxyType(
    {
        SkinType.TYPE_1: "Always burns, never tans",
        SkinType.TYPE_2: "Usually burns, tans minimally",
        SkinType.TYPE_3: "Sometimes burns, tans uniformly",
        SkinType.TYPE_4: "Rarely burns, tans easily",
        SkinType.TYPE_5: "Rarely burns, tans profusely",
        SkinType.TYPE_6: "Never burns, deeply pigmented",
    }
)

CLOTHING_LABELS = MappingProxyType(
    {
        ClothingLevel.NONE: "Nude",
        ClothingLevel.MINIMAL: "Minimal (swimwear)",
        ClothingLevel.LIGHT: "Light (shorts, t-shirt)",
        ClothingLevel.MODERATE: "Moderate (long sleeves)",
        ClothingLevel.HEAVY: "Heavy (fully covered)",
    }
)

SUNSCREEN_LABELS = MappingProxyType(
    {
        SunscreenLevel.NONE: "No sunscreen",
        SunscreenLevel.SPF15: "SPF 15",
        SunscreenLevel.SPF30: "SPF 30",
        SunscreenLevel.SPF50: "SPF 50",
        SunscreenLevel.SPF100: "SPF 100",
    }
)
