"""Summaries over stored sessions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, tzinfo
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from daylight_dose.schemas import Session


@dataclass(frozen=True)
class SessionSummary:
    """Totals across a set of completed sessions."""

    count: int
    total_iu: float
    total_seconds: float
    average_uv: float

    @property
    def average_iu(self) -> float:
        return self.total_iu / self.count if self.count else 0.0


def summarize_sessions(sessions: list[Session]) -> SessionSummary:
    """
    Summarize completed sessions.

    Average UV is weighted by session duration; zero-length sessions are
    counted but don't move the average.
    """
    completed = [s for s in sessions if not s.is_active]
    total_seconds = sum(s.duration_seconds for s in completed)
    if total_seconds > 0:
        average_uv = sum(s.average_uv * s.duration_seconds for s in completed) / total_seconds
    elif completed:
        average_uv = sum(s.average_uv for s in completed) / len(completed)
    else:
        average_uv = 0.0
    return SessionSummary(
        count=len(completed),
        total_iu=sum(s.accumulated_iu for s in completed),
        total_seconds=total_seconds,
        average_uv=average_uv,
    )


def daily_totals(sessions: list[Session], tz: tzinfo = UTC) -> dict[date, float]:
    """IU per local date, keyed by the day each session started."""
    totals: dict[date, float] = {}
    for s in sessions:
        day = s.start_time.astimezone(tz).date()
        totals[day] = totals.get(day, 0.0) + s.accumulated_iu
    return dict(sorted(totals.items()))


def format_duration(seconds: float) -> str:
    """Compact duration such as ``"45s"``, ``"12m"`` or ``"12m 30s"``."""
    minutes, secs = divmod(int(seconds), 60)
    if minutes == 0:
        return f"{secs}s"
    if secs == 0:
        return f"{minutes}m"
    return f"{minutes}m {secs}s"


def format_iu(value: float) -> str:
    """IU with precision that shrinks as the value grows."""
    if value < 1:
        return f"{value:.2f} IU"
    if value < 10:
        return f"{value:.1f} IU"
    return f"{int(value):,} IU"
