"""Durable storage for sessions, the personal profile, and fetched UV records.

Both repositories sit on top of ``DataStore``. ``SessionRepository`` is
the persistence collaborator the engine hands completed sessions to.
``UVRecordArchive`` keeps fetched daily records on disk so the offline cache
still has something to serve after a restart.

Layout::

    history/sessions/2026-06-21.json        list of sessions started that day (UTC)
    history/profile.json                    last saved PersonalProfile
    live/uv/45.5_-122.6/2026-06-21.json     one DailyUVRecord
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Protocol

from daylight_dose.datasources.open_meteo import SOURCE_NAME
from daylight_dose.schemas import DailyUVRecord, PersonalProfile, Session
from daylight_dose.store import DataStore
from daylight_dose.uv.cache import DEFAULT_FRESHNESS, CacheKey, LocationKey

logger = logging.getLogger(__name__)

SESSIONS_DIR = Path("history/sessions")
PROFILE_PATH = Path("history/profile.json")
UV_DIR = Path("live/uv")

LOCAL_SOURCE = "daylight-dose"


class SessionSink(Protocol):
    """What the engine needs from a persistence collaborator."""

    def save_session(self, session: Session) -> object: ...

    def save_profile(self, profile: PersonalProfile) -> object: ...


class SessionRepository:
    """Stores completed sessions and the profile as JSON envelopes."""

    def __init__(self, store: DataStore) -> None:
        self.store = store

    def save_session(self, session: Session) -> Path:
        if session.is_active:
            msg = "only completed sessions can be saved"
            raise ValueError(msg)
        path = SESSIONS_DIR / f"{session.start_time.date().isoformat()}.json"
        return self.store.append(path, session.model_dump(mode="json"), source=LOCAL_SOURCE)

    def load_sessions(self, start: date | None = None, end: date | None = None) -> list[Session]:
        """Sessions whose start date falls within ``[start, end]``, oldest first."""
        sessions: list[Session] = []
        for path in self.store.glob(f"{SESSIONS_DIR}/*.json"):
            day = date.fromisoformat(path.stem)
            if (start and day < start) or (end and day > end):
                continue
            for item in self.store.read(path) or []:
                sessions.append(Session.model_validate(item))
        return sorted(sessions, key=lambda s: s.start_time)

    def save_profile(self, profile: PersonalProfile) -> Path:
        return self.store.write(PROFILE_PATH, profile.model_dump(mode="json"), source=LOCAL_SOURCE)

    def load_profile(self) -> PersonalProfile | None:
        data = self.store.read(PROFILE_PATH)
        return PersonalProfile.model_validate(data) if data else None


class UVRecordArchive:
    """On-disk copy of the UV cache, one file per location and date."""

    def __init__(self, store: DataStore, freshness_interval: timedelta = DEFAULT_FRESHNESS) -> None:
        self.store = store
        self.freshness_interval = freshness_interval

    @staticmethod
    def path_for(key: CacheKey) -> Path:
        location = f"{key.location.latitude}_{key.location.longitude}"
        return UV_DIR / location / f"{key.day.isoformat()}.json"

    def save(self, record: DailyUVRecord) -> Path:
        key = CacheKey.for_record(record)
        return self.store.write(
            self.path_for(key),
            record.model_dump(mode="json"),
            source=SOURCE_NAME,
            valid_until=record.last_updated + self.freshness_interval,
            location={"lat": record.latitude, "lon": record.longitude},
        )

    def is_fresh(self, key: CacheKey, now: datetime | None = None) -> bool:
        return self.store.is_fresh(self.path_for(key), now)

    def load(self, key: CacheKey) -> DailyUVRecord | None:
        data = self.store.read(self.path_for(key))
        return DailyUVRecord.model_validate(data) if data else None

    def load_location(
        self, location: LocationKey, since: date | None = None
    ) -> list[DailyUVRecord]:
        """All archived records for a location, optionally from ``since`` onward."""
        records: list[DailyUVRecord] = []
        folder = f"{location.latitude}_{location.longitude}"
        for path in self.store.glob(f"{UV_DIR}/{folder}/*.json"):
            if since and date.fromisoformat(path.stem) < since:
                continue
            data = self.store.read(path)
            if data:
                records.append(DailyUVRecord.model_validate(data))
        return records

    def prune(self, before: date) -> int:
        """Delete archived records for dates earlier than ``before``."""
        removed = 0
        for path in self.store.glob(f"{UV_DIR}/*/*.json"):
            if date.fromisoformat(path.stem) < before and self.store.delete(path):
                removed += 1
        if removed:
            logger.info("Pruned %d archived UV records older than %s", removed, before)
        return removed
