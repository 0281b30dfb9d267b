"""JSON data store with freshness-aware metadata envelopes.

Files are organized into two tiers:
  - live/:    UV records, valid for one freshness interval after fetch
  - history/: completed sessions, vitamin-D log, saved profile (no expiry)

Every file is wrapped in an envelope ``{"meta": {...}, "data": ...}``. The
``meta`` block carries the source, the write time, and an optional
``valid_until`` that ``is_fresh()`` checks.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any


class DataStore:
    """Manages read/write of enveloped JSON files under a base directory."""

    def __init__(self, base_dir: Path) -> None:
        self.base = base_dir
        self.live = base_dir / "live"
        self.history = base_dir / "history"

    def read(self, path: Path) -> Any | None:
        """Read the ``data`` payload, or None if the file doesn't exist."""
        envelope = self.read_raw(path)
        if envelope is None:
            return None
        return envelope.get("data", envelope)

    def read_raw(self, path: Path) -> dict[str, Any] | None:
        """Read the full envelope (meta + data) from a JSON file."""
        full = self._resolve(path)
        if not full.exists():
            return None
        with full.open() as f:
            result: dict[str, Any] = json.load(f)
        return result

    def write(
        self,
        path: Path,
        data: Any,
        source: str,
        valid_until: datetime | None = None,
        **params: Any,
    ) -> Path:
        """Write data wrapped in a metadata envelope.

        Args:
            path: Relative path under base_dir (e.g. ``live/uv/45.5_-122.6/2026-06-21.json``).
            data: JSON-serializable payload stored under the ``data`` key.
            source: Data source identifier (e.g. ``"open-meteo.com"``).
            valid_until: Expiry timestamp. None means the file never goes stale.
            **params: Extra metadata fields (location, query params, etc.).

        Returns:
            Absolute path of the written file.
        """
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)

        meta: dict[str, Any] = {
            "source": source,
            "fetched_at": datetime.now(UTC).isoformat(),
        }
        if valid_until is not None:
            meta["valid_until"] = valid_until.isoformat()
        if params:
            meta.update(params)

        envelope = {"meta": meta, "data": data}
        tmp = full.with_suffix(full.suffix + ".tmp")
        with tmp.open("w") as f:
            json.dump(envelope, f, indent=2)
        tmp.replace(full)

        return full

    def append(self, path: Path, item: Any, source: str) -> Path:
        """Append ``item`` to the list payload at ``path`` (created if missing)."""
        existing = self.read(path)
        items = list(existing) if isinstance(existing, list) else []
        items.append(item)
        return self.write(path, items, source=source)

    def glob(self, pattern: str) -> list[Path]:
        """Relative paths under base_dir matching ``pattern``, sorted."""
        if not self.base.exists():
            return []
        return sorted(p.relative_to(self.base) for p in self.base.glob(pattern) if p.is_file())

    def delete(self, path: Path) -> bool:
        full = self._resolve(path)
        if not full.exists():
            return False
        full.unlink()
        return True

    def _resolve(self, path: Path) -> Path:
        full = self.base / path if not path.is_absolute() else path
        try:
            full.resolve().relative_to(self.base.resolve())
        except ValueError:
            msg = f"Path escapes store base directory: {path}"
            raise ValueError(msg) from None
        return full

    def is_fresh(self, path: Path, now: datetime | None = None) -> bool:
        """Check if a file exists and hasn't expired.

        Returns False if the file is missing, has no ``valid_until``, or
        the expiry time has passed.
        """
        envelope = self.read_raw(path)
        if envelope is None:
            return False

        valid_until = envelope.get("meta", {}).get("valid_until")
        if valid_until is None:
            return False

        expiry = datetime.fromisoformat(valid_until)
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=UTC)
        return (now or datetime.now(UTC)) < expiry
