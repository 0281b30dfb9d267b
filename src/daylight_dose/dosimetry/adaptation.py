"""Photoadaptation multiplier from the last seven days of vitamin-D dose.

Curve (monotonic, saturating, clamped)::

    weighted_iu = sum(w_i * iu_i) / sum(w_i)     w = 7 for today ... 1 for 6 days ago
    factor      = 1 + (ceiling - 1) * weighted_iu / (weighted_iu + HALF_SATURATION_IU)
    factor      = clamp(factor, floor, ceiling)

Days with no record count as 0 IU, so the factor decays back to 1.0 as
high-exposure days age out of the window.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import TYPE_CHECKING

from daylight_dose.dosimetry.factors import require_non_negative
from daylight_dose.errors import InvalidInputError

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

WINDOW_DAYS = 7
DEFAULT_FLOOR = 1.0
DEFAULT_CEILING = 2.0
# Weighted daily dose at which half of the possible boost is reached
HALF_SATURATION_IU = 20_000.0


class AdaptationTracker:
    """Owns the rolling window of daily accumulated IU."""

    def __init__(
        self,
        floor: float = DEFAULT_FLOOR,
        ceiling: float = DEFAULT_CEILING,
        half_saturation_iu: float = HALF_SATURATION_IU,
        window_days: int = WINDOW_DAYS,
    ) -> None:
        if not 0 < floor <= 1.0 <= ceiling:
            msg = f"need 0 < floor <= 1 <= ceiling, got floor={floor}, ceiling={ceiling}"
            raise InvalidInputError(msg)
        if half_saturation_iu <= 0 or window_days < 1:
            msg = "half_saturation_iu and window_days must be positive"
            raise InvalidInputError(msg)
        self.floor = floor
        self.ceiling = ceiling
        self.half_saturation_iu = half_saturation_iu
        self.window_days = window_days
        self._daily: dict[date, float] = {}
        self._latest: date | None = None

    def record_day(self, day: date, accumulated_iu: float) -> None:
        """Set the total IU accumulated on ``day`` (replaces any earlier value)."""
        self._daily[day] = require_non_negative("accumulated_iu", accumulated_iu)
        if self._latest is None or day > self._latest:
            self._latest = day
        self._evict(self._latest)

    def add_dose(self, day: date, amount_iu: float) -> float:
        """Add a session's IU to ``day`` and return the new daily total."""
        total = self._daily.get(day, 0.0) + require_non_negative("amount_iu", amount_iu)
        self.record_day(day, total)
        return total

    def seed(self, totals: Mapping[date, float]) -> None:
        """Load historical daily totals, e.g. from the health platform."""
        for day, amount in sorted(totals.items()):
            self.record_day(day, amount)
        logger.debug("Seeded adaptation window with %d days", len(totals))

    def window(self) -> dict[date, float]:
        """Copy of the daily totals currently held."""
        return dict(self._daily)

    def total_for(self, day: date) -> float:
        return self._daily.get(day, 0.0)

    def weighted_average(self, today: date) -> float:
        """Recency-weighted mean daily IU over the window ending at ``today``."""
        numerator = 0.0
        denominator = 0
        for offset in range(self.window_days):
            weight = self.window_days - offset
            numerator += weight * self._daily.get(today - timedelta(days=offset), 0.0)
            denominator += weight
        return numerator / denominator

    def current_factor(self, today: date | None = None) -> float:
        """Adaptation multiplier in ``[floor, ceiling]`` as of ``today``."""
        today = today or date.today()
        self._evict(today)
        weighted = self.weighted_average(today)
        raw = 1.0 + (self.ceiling - 1.0) * weighted / (weighted + self.half_saturation_iu)
        return max(self.floor, min(self.ceiling, raw))

    def _evict(self, today: date) -> None:
        cutoff = today - timedelta(days=self.window_days)
        for day in [d for d in self._daily if d <= cutoff]:
            del self._daily[day]
