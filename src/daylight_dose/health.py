"""Health-platform collaborator: vitamin-D entries and daily totals.

The engine writes ``{amount, timestamp}`` here when a session ends and reads
daily totals back to seed the adaptation window. ``StoreHealthLog`` is a
local implementation on top of ``DataStore``; any object with the same two
methods can stand in for a real health platform.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta, tzinfo
from pathlib import Path
from typing import Protocol

from daylight_dose.dosimetry.factors import require_non_negative
from daylight_dose.store import DataStore

LOG_PATH = Path("history/vitamin_d.json")


class HealthPlatform(Protocol):
    def save_vitamin_d(self, amount_iu: float, timestamp: datetime) -> object: ...

    def daily_totals(self, days: int, today: date) -> dict[date, float]: ...


@dataclass(frozen=True)
class VitaminDEntry:
    amount_iu: float
    timestamp: datetime


class StoreHealthLog:
    """Vitamin-D ledger kept in the local data store."""

    def __init__(self, store: DataStore, tz: tzinfo = UTC) -> None:
        self.store = store
        self.tz = tz

    def save_vitamin_d(self, amount_iu: float, timestamp: datetime) -> Path:
        amount = require_non_negative("amount_iu", amount_iu)
        item = {"amount_iu": amount, "timestamp": timestamp.isoformat()}
        return self.store.append(LOG_PATH, item, source="daylight-dose")

    def entries(self) -> list[VitaminDEntry]:
        return [
            VitaminDEntry(
                amount_iu=item["amount_iu"], timestamp=datetime.fromisoformat(item["timestamp"])
            )
            for item in self.store.read(LOG_PATH) or []
        ]

    def daily_totals(self, days: int, today: date) -> dict[date, float]:
        """IU per local date for the ``days`` days ending at ``today``."""
        first = today - timedelta(days=days - 1)
        totals: dict[date, float] = {}
        for entry in self.entries():
            day = entry.timestamp.astimezone(self.tz).date()
            if first <= day <= today:
                totals[day] = totals.get(day, 0.0) + entry.amount_iu
        return totals

    def todays_total(self, today: date) -> float:
        return self.daily_totals(1, today).get(today, 0.0)
