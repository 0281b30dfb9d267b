"""
Dose engine: wires the UV coordinator, rate model, adaptation, and session
integrator into one timeline, and hands results to collaborators.

Collaborators are injected, never looked up globally:

    location_provider  () -> Location | None
    coordinator        OfflineCoordinator over a UVTimeSeriesCache
    persistence        SessionSink (optional), gets each completed session once
    health             HealthPlatform (optional), gets {amount, timestamp}

A periodic ``tick()`` (default every 60 s) polls the coordinator without
waiting for the network, re-evaluates the rate, and integrates the session.
Profile edits and manual UV entry recompute the rate between ticks without
touching accumulated dose. Presentation code reads ``snapshot()`` or
subscribes to the snapshots published after every state change.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, tzinfo
from typing import TYPE_CHECKING

from daylight_dose.dosimetry.adaptation import WINDOW_DAYS, AdaptationTracker
from daylight_dose.dosimetry.burn import burn_time_minutes
from daylight_dose.dosimetry.factors import require_non_negative
from daylight_dose.dosimetry.rate import RateBreakdown, manual_session, rate_breakdown
from daylight_dose.dosimetry.session import ExposureConditions, SessionAccumulator
from daylight_dose.uv.coordinator import DisplayValues, UVSnapshot

if TYPE_CHECKING:
    from daylight_dose.health import HealthPlatform
    from daylight_dose.persistence import SessionSink
    from daylight_dose.schemas import Location, PersonalProfile, Session
    from daylight_dose.uv.coordinator import OfflineCoordinator

logger = logging.getLogger(__name__)

DEFAULT_TICK_SECONDS = 60.0

LocationProvider = Callable[[], "Location | None"]
Listener = Callable[["DoseSnapshot"], None]


@dataclass(frozen=True)
class DoseSnapshot:
    """Read-only view of the engine for presentation code."""

    as_of: datetime
    current_uv: float
    current_rate: float  # IU/hour
    session_accumulated_iu: float
    is_tracking: bool
    session_started_at: datetime | None
    burn_time_minutes: int | None
    offline_mode: bool
    has_no_data: bool
    last_updated: datetime | None
    display_tomorrow: bool
    display: DisplayValues | None
    adaptation_factor: float
    todays_total_iu: float
    manual_uv: bool = False

    @property
    def rate_per_minute(self) -> float:
        return self.current_rate / 60.0

    @property
    def todays_total_with_session(self) -> float:
        return self.todays_total_iu + self.session_accumulated_iu


def _utc_now() -> datetime:
    return datetime.now(UTC)


class DoseEngine:
    """Single logical timeline for one user's exposure tracking."""

    def __init__(
        self,
        coordinator: OfflineCoordinator,
        location_provider: LocationProvider,
        profile: PersonalProfile,
        *,
        accumulator: SessionAccumulator | None = None,
        adaptation: AdaptationTracker | None = None,
        persistence: SessionSink | None = None,
        health: HealthPlatform | None = None,
        tz: tzinfo = UTC,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._coordinator = coordinator
        self._location_provider = location_provider
        self._profile = profile
        self._accumulator = accumulator or SessionAccumulator()
        self._adaptation = adaptation or AdaptationTracker()
        self._persistence = persistence
        self._health = health
        self.tz = tz
        self._clock = clock

        now = clock()
        self._uv = UVSnapshot(as_of=now, location=None)
        self._manual_uv: float | None = None
        self._breakdown: RateBreakdown | None = None
        self._listeners: list[Listener] = []

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    @property
    def profile(self) -> PersonalProfile:
        return self._profile

    @property
    def is_tracking(self) -> bool:
        return self._accumulator.is_tracking

    @property
    def uv_state(self) -> UVSnapshot:
        return self._uv

    def snapshot(self, now: datetime | None = None) -> DoseSnapshot:
        now = now or self._clock()
        uv, conditions = self._inputs(now)
        breakdown = self._breakdown or self._evaluate(uv, conditions)
        active = self._accumulator.snapshot()
        effective_uv = uv * conditions.altitude_multiplier
        return DoseSnapshot(
            as_of=now,
            current_uv=effective_uv,
            current_rate=breakdown.iu_per_hour,
            session_accumulated_iu=active.accumulated_iu if active else 0.0,
            is_tracking=active is not None,
            session_started_at=active.start_time if active else None,
            burn_time_minutes=burn_time_minutes(effective_uv, self._profile.skin_type),
            offline_mode=self._uv.offline_mode,
            has_no_data=self._uv.has_no_data and self._manual_uv is None,
            last_updated=self._uv.last_updated,
            display_tomorrow=self._uv.display_tomorrow,
            display=self._uv.display,
            adaptation_factor=conditions.adaptation_factor,
            todays_total_iu=self._adaptation.total_for(self._local_date(now)),
            manual_uv=self._manual_uv is not None,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with a fresh snapshot after every state change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -------------------------------------------------------------------------
    # Timeline
    # -------------------------------------------------------------------------

    async def refresh(self, now: datetime | None = None) -> DoseSnapshot:
        """Wait for any due UV fetch, then recompute. Use at startup."""
        now = now or self._clock()
        self._uv = await self._coordinator.resolve(self._location_provider(), now)
        return self.recompute(now)

    async def tick(self, now: datetime | None = None) -> DoseSnapshot:
        """One cooperative tick: poll UV, re-evaluate the rate, integrate."""
        now = now or self._clock()
        self._uv = self._coordinator.poll(self._location_provider(), now)
        uv, conditions = self._inputs(now)
        self._breakdown = self._evaluate(uv, conditions)
        self._accumulator.tick(uv, self._profile, now, conditions)
        return self._publish(now)

    async def run(
        self,
        interval: float = DEFAULT_TICK_SECONDS,
        *,
        stop: asyncio.Event | None = None,
        max_ticks: int | None = None,
    ) -> int:
        """Tick every ``interval`` seconds until ``stop`` is set.

        Returns the number of ticks performed.
        """
        stop = stop or asyncio.Event()
        ticks = 0
        while not stop.is_set():
            await self.tick()
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(stop.wait(), timeout=interval)
        return ticks

    def recompute(self, now: datetime | None = None) -> DoseSnapshot:
        """Re-evaluate the rate without integrating (out-of-band update)."""
        now = now or self._clock()
        uv, conditions = self._inputs(now)
        self._breakdown = self._evaluate(uv, conditions)
        return self._publish(now)

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def begin(self, now: datetime | None = None) -> Session:
        """Start tracking an exposure session at the current UV."""
        now = now or self._clock()
        uv, conditions = self._inputs(now)
        session = self._accumulator.begin(uv, self._profile, now, conditions)
        self._breakdown = self._evaluate(uv, conditions)
        self._publish(now)
        return session

    def end(self, now: datetime | None = None) -> Session:
        """Stop tracking, record the dose, and hand the session to collaborators.

        Raises:
            NoActiveSessionError: If no session is being tracked.
        """
        now = now or self._clock()
        session = self._accumulator.end(now)
        self._complete(session)
        self._publish(now)
        return session

    def log_manual_session(
        self, uv_index: float, minutes: float, end_time: datetime | None = None
    ) -> Session:
        """Record an exposure that was not tracked live."""
        end_time = end_time or self._clock()
        factor = self._adaptation.current_factor(self._local_date(end_time))
        session = manual_session(
            uv_index, minutes, self._profile, end_time=end_time, adaptation_factor=factor
        )
        self._complete(session)
        self._publish(self._clock())
        return session

    def update_profile(self, profile: PersonalProfile, now: datetime | None = None) -> DoseSnapshot:
        """Switch profile mid-session without resetting accumulated dose.

        The elapsed interval is integrated at the old profile first, so the new
        factors only apply from now on.
        """
        now = now or self._clock()
        self._close_segment(now)
        self._profile = profile
        if self._persistence is not None:
            try:
                self._persistence.save_profile(profile)
            except Exception:
                logger.exception("Failed to persist profile update")
        return self.recompute(now)

    def set_manual_uv(self, uv_index: float | None, now: datetime | None = None) -> DoseSnapshot:
        """Override the UV reading (None returns to cached/live data)."""
        if uv_index is not None:
            uv_index = require_non_negative("uv_index", uv_index)
        now = now or self._clock()
        self._close_segment(now)
        self._manual_uv = uv_index
        return self.recompute(now)

    def seed_adaptation(self, today: date | None = None) -> int:
        """Load recent daily totals from the health platform, if any.

        Returns the number of days loaded.
        """
        if self._health is None:
            return 0
        today = today or self._local_date(self._clock())
        try:
            totals = self._health.daily_totals(WINDOW_DAYS, today)
        except Exception:
            logger.exception("Could not read daily totals from the health platform")
            return 0
        self._adaptation.seed(totals)
        return len(totals)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _local_date(self, when: datetime) -> date:
        return when.astimezone(self.tz).date()

    def _inputs(self, now: datetime) -> tuple[float, ExposureConditions]:
        adaptation = self._adaptation.current_factor(self._local_date(now))
        if self._manual_uv is not None:
            return self._manual_uv, ExposureConditions(adaptation_factor=adaptation)
        return self._uv.base_uv, ExposureConditions(
            time_of_day_quality=self._uv.rate_quality,
            altitude_multiplier=self._uv.altitude_multiplier,
            adaptation_factor=adaptation,
        )

    def _evaluate(self, uv: float, conditions: ExposureConditions) -> RateBreakdown:
        return rate_breakdown(
            uv,
            self._profile,
            conditions.time_of_day_quality,
            conditions.altitude_multiplier,
            conditions.adaptation_factor,
        )

    def _close_segment(self, now: datetime) -> None:
        if self._accumulator.is_tracking:
            uv, conditions = self._inputs(now)
            self._accumulator.tick(uv, self._profile, now, conditions)

    def _complete(self, session: Session) -> None:
        if session.end_time is None:
            msg = "only finished sessions can be recorded"
            raise ValueError(msg)
        self._adaptation.add_dose(self._local_date(session.end_time), session.accumulated_iu)

        if self._persistence is not None:
            try:
                self._persistence.save_session(session)
            except Exception:
                logger.exception("Failed to persist session started %s", session.start_time)

        if self._health is not None and session.accumulated_iu > 0:
            try:
                self._health.save_vitamin_d(session.accumulated_iu, session.end_time)
            except Exception:
                logger.exception(
                    "Failed to write %.0f IU to the health platform", session.accumulated_iu
                )

    def _publish(self, now: datetime) -> DoseSnapshot:
        snap = self.snapshot(now)
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                logger.exception("Snapshot listener %r failed", listener)
        return snap
