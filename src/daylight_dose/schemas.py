"""
Domain models for daylight-dose.

Pydantic models for personal inputs, cached UV data, and exposure sessions.
All models are frozen: components hand each other immutable snapshots and
replace records instead of mutating them.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import IntEnum, StrEnum
from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field, field_validator, model_validator

HOURS_PER_DAY = 24

# Cache keys and stored records use coordinates rounded to ~1 km
COORDINATE_PRECISION = 2

# =============================================================================
# Personal inputs
# =============================================================================


class SkinType(IntEnum):
    """Fitzpatrick skin type, lightest (1) to darkest (6)."""

    TYPE_1 = 1
    TYPE_2 = 2
    TYPE_3 = 3
    TYPE_4 = 4
    TYPE_5 = 5
    TYPE_6 = 6


class ClothingLevel(StrEnum):
    """How much skin is covered, from nothing to fully dressed."""

    NONE = "none"
    MINIMAL = "minimal"
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"


class SunscreenLevel(StrEnum):
    """Sunscreen applied to exposed skin."""

    NONE = "none"
    SPF15 = "spf15"
    SPF30 = "spf30"
    SPF50 = "spf50"
    SPF100 = "spf100"


class PersonalProfile(BaseModel):
    """Personal parameters that feed the rate model."""

    model_config = {"frozen": True}

    skin_type: SkinType = SkinType.TYPE_3
    clothing_level: ClothingLevel = ClothingLevel.LIGHT
    sunscreen_level: SunscreenLevel = SunscreenLevel.NONE
    age: int = Field(default=30, ge=0, le=130)
    altitude_m: float = 0.0
    # Off means the age reduction is not applied
    use_age_factor: bool = True


# =============================================================================
# Location & UV data
# =============================================================================


class Location(BaseModel):
    """A position reported by the location provider."""

    model_config = {"frozen": True}

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    altitude_m: float | None = None


class UVSample(BaseModel):
    """UV index and cloud cover for one hour of a day."""

    model_config = {"frozen": True}

    hour: int = Field(..., ge=0, lt=HOURS_PER_DAY)
    uv_index: float = Field(..., ge=0)
    cloud_cover_percent: float = Field(default=0.0, ge=0, le=100)


class DailyUVRecord(BaseModel):
    """Hourly UV and cloud cover for one location and one local date.

    Hourly arrays are indexed by local hour-of-day in ``timezone``. Either both
    are empty (partial data: only daily values were available) or both hold
    exactly 24 values.
    """

    model_config = {"frozen": True}

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    date: date
    timezone: str = "UTC"
    hourly_uv: tuple[float, ...] = ()
    hourly_cloud_cover: tuple[float, ...] = ()
    max_uv: float = Field(default=0.0, ge=0)
    sunrise: datetime
    sunset: datetime
    last_updated: datetime
    elevation_m: float | None = None

    @field_validator("latitude", "longitude")
    @classmethod
    def _round_coordinate(cls, value: float) -> float:
        return round(value, COORDINATE_PRECISION)

    @field_validator("hourly_uv", "hourly_cloud_cover")
    @classmethod
    def _non_negative(cls, values: tuple[float, ...]) -> tuple[float, ...]:
        if any(v < 0 for v in values):
            raise ValueError("hourly values must be >= 0")
        return values

    @model_validator(mode="after")
    def _check_hourly_shape(self) -> DailyUVRecord:
        lengths = {len(self.hourly_uv), len(self.hourly_cloud_cover)}
        if lengths not in ({0}, {HOURS_PER_DAY}):
            raise ValueError(
                "hourly_uv and hourly_cloud_cover must both be empty or both hold 24 values"
            )
        if self.sunset < self.sunrise:
            raise ValueError("sunset precedes sunrise")
        return self

    @property
    def has_hourly(self) -> bool:
        return bool(self.hourly_uv)

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def is_daylight(self, when: datetime) -> bool:
        """Whether ``when`` falls between sunrise (inclusive) and sunset."""
        return self.sunrise <= when < self.sunset

    def nearest_hour(self, when: datetime) -> int:
        """Local hour bucket closest to ``when`` (minutes >= 30 round up)."""
        local = when.astimezone(self.tz)
        hour = local.hour + (1 if local.minute >= 30 else 0)
        return min(hour, HOURS_PER_DAY - 1)

    def sample(self, hour: int) -> UVSample:
        """Return the stored sample for a local hour of the day."""
        if not self.has_hourly:
            raise IndexError("record has no hourly data")
        return UVSample(
            hour=hour,
            uv_index=self.hourly_uv[hour],
            cloud_cover_percent=min(self.hourly_cloud_cover[hour], 100.0),
        )


# =============================================================================
# Sessions
# =============================================================================


class Session(BaseModel):
    """One tracked sun exposure.

    ``end_time`` is None while the session is still being tracked. Once ended,
    the session is handed to persistence and never changes again.
    """

    model_config = {"frozen": True}

    start_time: datetime
    end_time: datetime | None = None
    accumulated_iu: float = Field(default=0.0, ge=0)
    average_uv: float = Field(default=0.0, ge=0)
    peak_uv: float = Field(default=0.0, ge=0)
    profile: PersonalProfile = Field(default_factory=PersonalProfile)

    @property
    def is_active(self) -> bool:
        return self.end_time is None

    @property
    def duration_seconds(self) -> float:
        """Elapsed seconds, or 0 while still active."""
        if self.end_time is None:
            return 0.0
        return max(0.0, (self.end_time - self.start_time).total_seconds())
