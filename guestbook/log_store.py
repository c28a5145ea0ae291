from __future__ import annotations

import json
import logging
import threading
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


@dataclass(frozen=True)
class Entry:
    user: str
    message: str
    timestamp: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Any) -> Entry:
        if not isinstance(raw, dict):
            raise ValueError("entry must be an object")
        fields = {}
        for key in ("user", "message", "timestamp"):
            value = raw.get(key)
            if not isinstance(value, str):
                raise ValueError(f"entry field {key!r} must be a string")
            fields[key] = value
        parse_timestamp(fields["timestamp"])
        return cls(**fields)


def parse_timestamp(value: str) -> datetime:
    # fromisoformat only accepts a trailing "Z" from Python 3.11 on.
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class LogStore:
    """Guestbook entries kept as one pretty-printed JSON array on disk.

    Every append rewrites the whole file. Reads and appends go through a
    single lock, so concurrent appends on one store never drop each other.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def initialize(self) -> None:
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                if self.path.exists():
                    return
                self._write([])
            except OSError as exc:
                raise StorageError(f"Cannot initialize {self.path}: {exc}") from exc
        logger.info("Created empty guestbook at %s", self.path)

    def list_all(self) -> list[Entry]:
        with self._lock:
            entries = self._read()
        return sorted(entries, key=lambda entry: parse_timestamp(entry.timestamp))

    def append(self, entry: Entry) -> Entry:
        with self._lock:
            entries = self._read()
            entries.append(entry)
            self._write(entries)
        return entry

    def _read(self) -> list[Entry]:
        try:
            with self.path.open("r", encoding="utf-8") as file:
                raw = json.load(file)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise StorageError(f"Cannot read {self.path}: {exc}") from exc

        if not isinstance(raw, list):
            raise StorageError(f"{self.path} does not hold a JSON array")
        try:
            return [Entry.from_dict(item) for item in raw]
        except ValueError as exc:
            raise StorageError(f"Malformed entry in {self.path}: {exc}") from exc

    def _write(self, entries: list[Entry]) -> None:
        payload = [entry.to_dict() for entry in entries]
        try:
            with self.path.open("w", encoding="utf-8") as file:
                json.dump(payload, file, indent=2, ensure_ascii=False)
        except OSError as exc:
            raise StorageError(f"Cannot write {self.path}: {exc}") from exc
