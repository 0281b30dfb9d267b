"""Daylight Dose - vitamin-D synthesis estimates from live UV data.

Architecture::

    dosimetry/     Pure model (rate, burn time, adaptation, session integrator)
    uv/            Per-location/day UV cache and the offline fallback coordinator
    datasources/   External APIs (Open-Meteo hourly UV and sun times)
    engine.py      Tick loop that drives the cache, model, and session
    store.py       JSON envelopes with freshness metadata (live, history)
    persistence.py Sessions, profile, and UV archive on top of the store
    health.py      Vitamin-D ledger the engine writes completed sessions to
    flows/         Prefect orchestration (pre-fetch UV into the archive)
    services/      Shared utilities (HTTP client with retry)

Data flow: datasources -> uv cache -> engine -> dosimetry -> persistence/health

Extension points: see each package's docstring for step-by-step guides:
  - New UV source:     datasources/__init__.py
  - New lookup table:  reference/__init__.py
"""

__version__ = "0.1.0"

from daylight_dose.config import Settings
from daylight_dose.schemas import PersonalProfile, Session

__all__ = ["PersonalProfile", "Session", "Settings", "__version__"]
