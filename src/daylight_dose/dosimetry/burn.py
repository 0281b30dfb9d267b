"""Safe-exposure ceiling from the minimal erythema dose (MED).

    dose_rate (J/m2 per minute) = uv_index * 0.025 W/m2 * 60 s
    burn_time (minutes)         = MED(skin_type) / dose_rate

One UV index unit is 25 mW/m2 of erythemally weighted irradiance. The result
is advisory: nothing in the engine ends a session when it is exceeded.
"""

from __future__ import annotations

import math
from typing import Final

from daylight_dose.dosimetry.factors import require_non_negative
from daylight_dose.reference import BASE_MED_J_PER_M2, SKIN_TYPES
from daylight_dose.schemas import SkinType

ERYTHEMAL_W_PER_M2_PER_UV = 0.025

#: Returned when there is no UV, so no exposure time leads to a burn.
UNBOUNDED: Final = None


def minimal_erythema_dose(skin_type: SkinType) -> float:
    """MED in J/m2 for a skin type."""
    return BASE_MED_J_PER_M2 * SKIN_TYPES[skin_type].med_multiplier


def burn_time_minutes(uv_index: float, skin_type: SkinType) -> int | None:
    """
    Minutes until the MED is reached at a constant UV index.

    Returns:
        Whole minutes (at least 1), or ``UNBOUNDED`` when ``uv_index`` is 0.
    """
    uv = require_non_negative("uv_index", uv_index)
    if uv == 0:
        return UNBOUNDED
    dose_per_minute = uv * ERYTHEMAL_W_PER_M2_PER_UV * 60.0
    return max(1, math.floor(minimal_erythema_dose(skin_type) / dose_per_minute))


def burn_time_table(uv_index: float) -> dict[SkinType, int | None]:
    """Burn times for every skin type at one UV index."""
    return {skin_type: burn_time_minutes(uv_index, skin_type) for skin_type in SkinType}
