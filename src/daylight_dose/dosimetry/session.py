"""Session integrator: accumulates IU over one tracked exposure.

State machine: IDLE -> TRACKING -> IDLE. ``begin()`` and ``end()`` are the
only transitions; ``tick()`` integrates while tracking and is a no-op when
idle.

Integration uses wall-clock deltas, never tick counts. Each tick evaluates the
rate with the inputs it is given and applies it to the interval since the
previous tick, so a tick after a long gap (app backgrounded) integrates the
whole gap at the last known UV. Average UV is weighted by elapsed time because
tick cadence is not guaranteed to be uniform.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

from daylight_dose.dosimetry.factors import require_non_negative
from daylight_dose.dosimetry.rate import vitamin_d_rate
from daylight_dose.errors import NoActiveSessionError, SessionAlreadyActiveError
from daylight_dose.schemas import PersonalProfile, Session

logger = logging.getLogger(__name__)

RateFunction = Callable[[float, PersonalProfile, float, float, float], float]


class TrackingState(StrEnum):
    IDLE = "idle"
    TRACKING = "tracking"


@dataclass(frozen=True)
class ExposureConditions:
    """Environmental scalers that accompany a UV reading."""

    time_of_day_quality: float = 1.0
    altitude_multiplier: float = 1.0
    adaptation_factor: float = 1.0


@dataclass
class _ActiveSession:
    start_time: datetime
    profile: PersonalProfile
    last_tick: datetime
    last_uv: float
    last_rate: float
    peak_uv: float
    accumulated_iu: float = 0.0
    uv_seconds: float = 0.0
    elapsed_seconds: float = 0.0

    @property
    def average_uv(self) -> float:
        if self.elapsed_seconds == 0:
            return self.last_uv
        return self.uv_seconds / self.elapsed_seconds


class SessionAccumulator:
    """Integrates the rate model over an exposure session.

    Exclusively owns the active session; callers only ever receive frozen
    ``Session`` snapshots.
    """

    def __init__(self, rate_function: RateFunction = vitamin_d_rate) -> None:
        self._rate = rate_function
        self._active: _ActiveSession | None = None

    @property
    def state(self) -> TrackingState:
        return TrackingState.TRACKING if self._active else TrackingState.IDLE

    @property
    def is_tracking(self) -> bool:
        return self._active is not None

    @property
    def accumulated_iu(self) -> float:
        return self._active.accumulated_iu if self._active else 0.0

    @property
    def current_rate(self) -> float:
        """IU/hour from the latest evaluation, or 0 when idle."""
        return self._active.last_rate if self._active else 0.0

    def begin(
        self,
        uv_index: float,
        profile: PersonalProfile,
        now: datetime | None = None,
        conditions: ExposureConditions | None = None,
    ) -> Session:
        """Start tracking. Fails if a session is already active."""
        if self._active is not None:
            msg = f"a session started at {self._active.start_time.isoformat()} is still active"
            raise SessionAlreadyActiveError(msg)
        now = now or datetime.now(UTC)
        conditions = conditions or ExposureConditions()
        rate = self._evaluate(uv_index, profile, conditions)
        effective_uv = uv_index * conditions.altitude_multiplier
        self._active = _ActiveSession(
            start_time=now,
            profile=profile,
            last_tick=now,
            last_uv=effective_uv,
            last_rate=rate,
            peak_uv=effective_uv,
        )
        logger.info("Session started at %s (UV %.1f)", now.isoformat(), effective_uv)
        return self._snapshot(self._active)

    def tick(
        self,
        uv_index: float,
        profile: PersonalProfile,
        now: datetime | None = None,
        conditions: ExposureConditions | None = None,
    ) -> float | None:
        """
        Integrate the interval since the last tick.

        Returns:
            The rate (IU/hour) applied to the interval, or None when idle.
        """
        active = self._active
        if active is None:
            return None
        now = now or datetime.now(UTC)
        conditions = conditions or ExposureConditions()
        rate = self._evaluate(uv_index, profile, conditions)
        effective_uv = uv_index * conditions.altitude_multiplier

        elapsed = (now - active.last_tick).total_seconds()
        if elapsed < 0:
            logger.warning(
                "Clock moved backwards by %.0fs; skipping integration until it catches up",
                -elapsed,
            )
        else:
            self._integrate(active, rate, effective_uv, elapsed)
            active.last_tick = now

        active.last_uv = effective_uv
        active.last_rate = rate
        active.peak_uv = max(active.peak_uv, effective_uv)
        return rate

    def end(self, now: datetime | None = None) -> Session:
        """
        Stop tracking and return the finalized session.

        The interval since the last tick is integrated at the last known rate.

        Raises:
            NoActiveSessionError: If no session is being tracked.
        """
        active = self._active
        if active is None:
            raise NoActiveSessionError("end() called while idle")
        now = now or datetime.now(UTC)
        elapsed = (now - active.last_tick).total_seconds()
        if elapsed > 0:
            self._integrate(active, active.last_rate, active.last_uv, elapsed)
        end_time = max(now, active.last_tick)

        self._active = None
        session = self._snapshot(active, end_time=end_time)
        logger.info(
            "Session ended at %s: %.0f IU over %.0fs",
            end_time.isoformat(),
            session.accumulated_iu,
            session.duration_seconds,
        )
        return session

    def snapshot(self) -> Session | None:
        """Immutable view of the active session, or None when idle."""
        return self._snapshot(self._active) if self._active else None

    def _evaluate(
        self, uv_index: float, profile: PersonalProfile, conditions: ExposureConditions
    ) -> float:
        rate = self._rate(
            uv_index,
            profile,
            conditions.time_of_day_quality,
            conditions.altitude_multiplier,
            conditions.adaptation_factor,
        )
        return require_non_negative("rate", rate)

    @staticmethod
    def _integrate(active: _ActiveSession, rate: float, uv: float, elapsed: float) -> None:
        active.accumulated_iu += rate * elapsed / 3600.0
        active.uv_seconds += uv * elapsed
        active.elapsed_seconds += elapsed

    @staticmethod
    def _snapshot(active: _ActiveSession, end_time: datetime | None = None) -> Session:
        return Session(
            start_time=active.start_time,
            end_time=end_time,
            accumulated_iu=active.accumulated_iu,
            average_uv=active.average_uv,
            peak_uv=active.peak_uv,
            profile=active.profile,
        )
