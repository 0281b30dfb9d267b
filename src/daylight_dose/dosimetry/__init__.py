"""Vitamin-D dosimetry: rate model, burn time, adaptation, session integration.

Public API:
  - rate: vitamin_d_rate, rate_breakdown, estimate_session_iu, manual_session
  - burn: burn_time_minutes, burn_time_table, UNBOUNDED
  - adaptation: AdaptationTracker
  - session: SessionAccumulator, ExposureConditions, TrackingState
  - factors: individual bounded factors (age, altitude, UV curve, ...)
"""

from daylight_dose.dosimetry.adaptation import AdaptationTracker
from daylight_dose.dosimetry.burn import UNBOUNDED, burn_time_minutes, burn_time_table
from daylight_dose.dosimetry.factors import (
    age_factor,
    altitude_multiplier,
    cloud_modification_factor,
    exposure_factor,
    skin_type_factor,
    time_of_day_quality,
    uv_intensity_factor,
)
from daylight_dose.dosimetry.rate import (
    BASE_RATE_IU_PER_HOUR,
    RateBreakdown,
    estimate_session_iu,
    manual_session,
    rate_breakdown,
    vitamin_d_rate,
)
from daylight_dose.dosimetry.session import ExposureConditions, SessionAccumulator, TrackingState

__all__ = [
    "BASE_RATE_IU_PER_HOUR",
    "UNBOUNDED",
    "AdaptationTracker",
    "ExposureConditions",
    "RateBreakdown",
    "SessionAccumulator",
    "TrackingState",
    "age_factor",
    "altitude_multiplier",
    "burn_time_minutes",
    "burn_time_table",
    "cloud_modification_factor",
    "estimate_session_iu",
    "exposure_factor",
    "manual_session",
    "rate_breakdown",
    "skin_type_factor",
    "time_of_day_quality",
    "uv_intensity_factor",
    "vitamin_d_rate",
]
