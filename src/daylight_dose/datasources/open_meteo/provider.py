"""Async Open-Meteo UV provider for the cache.

The blocking ``requests`` call runs in a worker thread so a fetch never
stalls the tick loop. Every failure surfaces exactly once as
``FetchFailedError``; retries, if any, happen in the HTTP adapter.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import requests

from daylight_dose.datasources.open_meteo.daily_uv import fetch_daily_uv
from daylight_dose.errors import FetchFailedError

if TYPE_CHECKING:
    from datetime import date

    from daylight_dose.schemas import DailyUVRecord

logger = logging.getLogger(__name__)


class OpenMeteoUVProvider:
    """Network UV provider backed by the Open-Meteo Forecast API."""

    def __init__(self, timezone: str = "auto") -> None:
        self.timezone = timezone

    async def fetch_daily(self, lat: float, lon: float, day: date) -> DailyUVRecord:
        try:
            return await asyncio.to_thread(fetch_daily_uv, lat, lon, day, self.timezone)
        except requests.RequestException as exc:
            msg = f"Open-Meteo request failed: {exc}"
            raise FetchFailedError(msg) from exc
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            logger.debug("Malformed Open-Meteo payload", exc_info=True)
            msg = f"Open-Meteo returned an unusable payload: {exc}"
            raise FetchFailedError(msg) from exc

    __call__ = fetch_daily
