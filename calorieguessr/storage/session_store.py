from __future__ import annotations

"""Per-day score records, persisted cookie-style.

Persistence is best-effort: a record that is missing, expired or unreadable
loads as absent, and a medium that cannot be written turns `save` into a
no-op. The game then simply behaves as if every visit were a fresh one.
"""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Dict, Optional, Protocol

from pydantic import ValidationError

from ..app.explain import Tracer
from .schema import DAY_KEY_RE, ScoreRecord

DEFAULT_PREFIX = "scores"
DEFAULT_RETENTION_DAYS = 1


class SessionStore(Protocol):
    def load(self, key: str) -> Optional[ScoreRecord]: ...

    def save(self, record: ScoreRecord) -> None: ...

    def clear_all(self) -> None: ...


class MemorySessionStore:
    """Dict-backed store; records are copied in and out."""

    def __init__(self) -> None:
        self._records: Dict[str, ScoreRecord] = {}
        self.saves = 0

    def load(self, key: str) -> Optional[ScoreRecord]:
        rec = self._records.get(key)
        return rec.model_copy(deep=True) if rec is not None else None

    def save(self, record: ScoreRecord) -> None:
        self.saves += 1
        self._records[record.date] = record.model_copy(deep=True)

    def clear_all(self) -> None:
        self._records.clear()

    def keys(self) -> list[str]:
        return sorted(self._records)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FileSessionStore:
    """One JSON file per day: `<prefix>_<key>.json`.

    File content: {"value": {date, scores, completed}, "expires": iso-8601}.
    Entries expire `retention_days` after their last write.
    """

    def __init__(
        self,
        directory: Path | str,
        *,
        prefix: str = DEFAULT_PREFIX,
        retention_days: int = DEFAULT_RETENTION_DAYS,
        now: Callable[[], datetime] = _utcnow,
        tracer: Optional[Tracer] = None,
    ) -> None:
        self.directory = Path(directory)
        self.prefix = prefix
        self.retention = timedelta(days=int(retention_days))
        self._now = now
        self.tracer = tracer or Tracer()

    def _path(self, key: str) -> Path:
        return self.directory / f"{self.prefix}_{key}.json"

    def load(self, key: str) -> Optional[ScoreRecord]:
        p = self._path(key)
        try:
            raw = p.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            self.tracer.trace("store_unavailable", {"op": "load", "key": key, "error": str(e)})
            return None
        try:
            doc = json.loads(raw)
            expires = datetime.fromisoformat(doc["expires"])
            if expires.tzinfo is None:
                expires = expires.replace(tzinfo=timezone.utc)
            record = ScoreRecord.model_validate(doc["value"])
        except (ValueError, KeyError, TypeError, ValidationError) as e:
            self.tracer.trace("store_corrupt", {"key": key, "error": str(e)})
            return None
        if expires <= self._now():
            self.tracer.trace("store_expired", {"key": key})
            self._remove(p)
            return None
        if record.date != key:
            self.tracer.trace("store_corrupt", {"key": key, "error": "date mismatch"})
            return None
        return record

    def save(self, record: ScoreRecord) -> None:
        doc = {
            "value": record.model_dump(),
            "expires": (self._now() + self.retention).isoformat(),
        }
        p = self._path(record.date)
        tmp = p.with_suffix(".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(doc, separators=(",", ":")), encoding="utf-8")
            tmp.replace(p)
        except OSError as e:
            self.tracer.trace("store_unavailable", {"op": "save", "key": record.date, "error": str(e)})

    def clear_all(self) -> None:
        if not self.directory.is_dir():
            return
        for p, _ in self._own_files():
            self._remove(p)

    def keys(self) -> list[str]:
        if not self.directory.is_dir():
            return []
        return sorted(key for _, key in self._own_files())

    def _own_files(self) -> list[tuple[Path, str]]:
        # the glob also matches longer prefixes such as "scores_v2"
        start = len(self.prefix) + 1
        out = []
        for p in self.directory.glob(f"{self.prefix}_*.json"):
            key = p.stem[start:]
            if DAY_KEY_RE.match(key):
                out.append((p, key))
        return out

    def _remove(self, p: Path) -> None:
        try:
            p.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            self.tracer.trace("store_unavailable", {"op": "remove", "path": str(p), "error": str(e)})
