"""Per-skin-type synthesis efficiency and burn threshold."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from daylight_dose.schemas import SkinType


@dataclass(frozen=True)
class SkinTypeFactors:
    """Numeric properties of one Fitzpatrick class."""

    # Relative vitamin-D synthesis efficiency (type 3 = 1.0)
    vitamin_d_factor: float
    # Multiple of the type-1 minimal erythema dose (melanin protection)
    med_multiplier: float


# Erythemally weighted dose (J/m2) that reddens type-1 skin
BASE_MED_J_PER_M2: float = 200.0

SKIN_TYPES = MappingProxyType(
    {
        SkinType.TYPE_1: SkinTypeFactors(vitamin_d_factor=1.25, med_multiplier=1.0),
        SkinType.TYPE_2: SkinTypeFactors(vitamin_d_factor=1.10, med_multiplier=1.25),
        SkinType.TYPE_3: SkinTypeFactors(vitamin_d_factor=1.00, med_multiplier=1.75),
        SkinType.TYPE_4: SkinTypeFactors(vitamin_d_factor=0.70, med_multiplier=2.25),
        SkinType.TYPE_5: SkinTypeFactors(vitamin_d_factor=0.40, med_multiplier=3.0),
        SkinType.TYPE_6: SkinTypeFactors(vitamin_d_factor=0.20, med_multiplier=5.0),
    }
)
