"""Exception taxonomy for the dosimetry engine.

Only ``InvalidInputError`` and ``NoActiveSessionError`` reach callers of the
numeric model and the session integrator. ``FetchFailedError`` is raised by UV
providers and recovered inside the cache (fallback to stored records).
``NoUsableDataError`` is raised only by strict lookups; the snapshot API reports
the same condition as ``has_no_data`` instead.
"""

from __future__ import annotations


class DoseError(Exception):
    """Base class for all daylight-dose errors."""


class InvalidInputError(DoseError, ValueError):
    """A numeric parameter was negative, NaN, or outside its allowed range."""


class NoActiveSessionError(DoseError):
    """``end()`` was called while no exposure session was being tracked."""


class SessionAlreadyActiveError(DoseError):
    """``begin()`` was called while a session was already being tracked."""


class FetchFailedError(DoseError):
    """The network UV provider could not deliver a daily record."""


class NoUsableDataError(DoseError):
    """Neither a cached record nor a fresh fetch is available for today."""
