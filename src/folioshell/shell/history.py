"""Command history with recall navigation and persistence.

History is stored the way a browser's localStorage would hold it: a
single string key whose value is the JSON-encoded, length-bounded array
of previously submitted commands.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class LocalStorage:
    """A tiny string key/value store persisted as one JSON file."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path).expanduser()

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(data), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not persist %s: %s", self._path, e)

    def _load(self) -> dict:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable storage %s: %s", self._path, e)
            return {}
        return data if isinstance(data, dict) else {}


class CommandHistory:
    """Bounded, persisted list of submitted commands with a recall cursor.

    The cursor ranges over ``[0, len(entries)]``; ``len(entries)`` is the
    blank "new entry" position.
    """

    def __init__(
        self,
        storage: LocalStorage | None = None,
        key: str = "folioshell_command_history",
        capacity: int = 100,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._storage = storage
        self._key = key
        self._capacity = capacity
        self._entries: list[str] = self._restore()
        self._cursor = len(self._entries)

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, line: str) -> None:
        """Record a submitted command and reset the cursor to the end.

        A repeat of the immediately preceding entry is not stored again.
        """
        if not self._entries or self._entries[-1] != line:
            self._entries.append(line)
            del self._entries[: -self._capacity]
            self._save()
        self._cursor = len(self._entries)

    def previous(self) -> str | None:
        """Move one step back. Returns None when history is empty."""
        if not self._entries:
            return None
        self._cursor = max(0, self._cursor - 1)
        return self._entries[self._cursor]

    def next(self) -> str | None:
        """Move one step forward; the past-the-end position is blank."""
        if not self._entries:
            return None
        self._cursor = min(len(self._entries), self._cursor + 1)
        if self._cursor == len(self._entries):
            return ""
        return self._entries[self._cursor]

    def reset_cursor(self) -> None:
        self._cursor = len(self._entries)

    def _restore(self) -> list[str]:
        if self._storage is None:
            return []
        raw = self._storage.get(self._key)
        if not raw:
            return []
        try:
            entries = json.loads(raw)
        except ValueError:
            logger.warning("Discarding corrupt command history under %s", self._key)
            return []
        if not isinstance(entries, list):
            return []
        return [str(e) for e in entries][-self._capacity:]

    def _save(self) -> None:
        if self._storage is not None:
            self._storage.set(self._key, json.dumps(self._entries[-self._capacity:]))
