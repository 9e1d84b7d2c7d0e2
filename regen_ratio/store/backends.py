"""
Durable key-value backends for ``SnapshotStore``.

Every backend exposes the same two-call contract:

  ``read(key) -> str | None``   - ``None`` when the key has never been written.
  ``write(key, value) -> None`` - full overwrite of one key, all-or-nothing.

Each call acquires its resource, performs one read or write, and releases it.
Failures surface as ``PersistenceError``; the caller decides whether to
degrade (reads) or propagate (writes).

Implementations:
  ``InMemoryBackend``  - dict-backed; for tests and throwaway sessions.
  ``SqliteBackend``    - one row per key in ``kv_store``; one transaction per write.
  ``JsonFileBackend``  - one JSON object file; writes go to a temp file that
                         is atomically renamed over the target.
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from regen_ratio.db.connection import get_connection
from regen_ratio.db.repositories.kv_repo import KeyValueRepository
from regen_ratio.errors import PersistenceError

logger = logging.getLogger(__name__)


class KeyValueBackend(ABC):
    """Abstract durable store holding string blobs under string keys."""

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """Return the blob stored under ``key``, or ``None`` if absent.

        Raises:
            PersistenceError: If the store cannot be read.
        """

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """Overwrite ``key`` with ``value`` atomically.

        Raises:
            PersistenceError: If the store cannot be written.
        """


class InMemoryBackend(KeyValueBackend):
    """Process-local backend. State survives only as long as the instance."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        self._data[key] = value


class SqliteBackend(KeyValueBackend):
    """Backend storing each key as one row of the ``kv_store`` table.

    Attributes:
        db_path: SQLite file path.
        wal_mode: Passed through to ``get_connection()``.
        busy_timeout_ms: Passed through to ``get_connection()``.
    """

    def __init__(
        self,
        db_path: str,
        wal_mode: bool = True,
        busy_timeout_ms: int = 5000,
    ) -> None:
        self.db_path = db_path
        self.wal_mode = wal_mode
        self.busy_timeout_ms = busy_timeout_ms

    def read(self, key: str) -> Optional[str]:
        try:
            with get_connection(self.db_path, self.wal_mode, self.busy_timeout_ms) as conn:
                return KeyValueRepository(conn).get(key)
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceError(f"Cannot read '{key}' from {self.db_path}: {exc}") from exc

    def write(self, key: str, value: str) -> None:
        try:
            with get_connection(
                self.db_path, self.wal_mode, self.busy_timeout_ms, write=True
            ) as conn:
                KeyValueRepository(conn).put(key, value)
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceError(f"Cannot write '{key}' to {self.db_path}: {exc}") from exc


class JsonFileBackend(KeyValueBackend):
    """Backend storing all keys in one JSON object file.

    Attributes:
        path: The JSON file. Parent directories are created on first write.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Cannot read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise PersistenceError(f"{self.path} does not hold a JSON object.")
        return data

    def read(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def write(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise PersistenceError(f"Cannot write {self.path}: {exc}") from exc
