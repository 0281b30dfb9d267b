"""
Application settings.

All values can be overridden with ``DAYLIGHT_``-prefixed environment variables
or a local ``.env`` file, e.g. ``DAYLIGHT_LAT=51.5 DAYLIGHT_SKIN_TYPE=2``.
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from zoneinfo import ZoneInfo

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from daylight_dose.schemas import ClothingLevel, PersonalProfile, SkinType, SunscreenLevel


class Settings(BaseSettings):
    """Runtime configuration for the engine, flows, and CLI."""

    model_config = SettingsConfigDict(env_prefix="DAYLIGHT_", env_file=".env", extra="ignore")

    app_name: str = "daylight-dose"
    app_env: str = "development"
    debug: bool = False

    # Location used by the CLI and the fetch flow
    lat: float = Field(default=45.5, ge=-90, le=90)
    lon: float = Field(default=-122.6, ge=-180, le=180)
    altitude_m: float = 0.0
    timezone: str = "America/Los_Angeles"

    data_dir: Path = Path("data")

    freshness_interval_seconds: int = Field(default=300, gt=0)
    tick_seconds: int = Field(default=60, gt=0)

    # Open-Meteo's uv_index is already all-sky; enable only for clear-sky sources
    apply_cloud_attenuation: bool = False

    # Default personal profile
    skin_type: SkinType = SkinType.TYPE_3
    clothing_level: ClothingLevel = ClothingLevel.LIGHT
    sunscreen_level: SunscreenLevel = SunscreenLevel.NONE
    age: int = Field(default=30, ge=0)
    use_age_factor: bool = True

    @property
    def freshness_interval(self) -> timedelta:
        return timedelta(seconds=self.freshness_interval_seconds)

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def default_profile(self) -> PersonalProfile:
        """Build the profile described by these settings."""
        return PersonalProfile(
            skin_type=self.skin_type,
            clothing_level=self.clothing_level,
            sunscreen_level=self.sunscreen_level,
            age=self.age,
            altitude_m=self.altitude_m,
            use_age_factor=self.use_age_factor,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
