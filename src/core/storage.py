"""Key-value storage for credentials, settings, and history.

Every persisted value lives under a named key. Tests use InMemoryStore;
the CLI uses SQLiteStore.
"""

import logging
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path

from src.core.errors import StorageQuotaExceededError

logger = logging.getLogger(__name__)

_KV_TABLE = """
CREATE TABLE IF NOT EXISTS kv (
    key     TEXT PRIMARY KEY,
    value   TEXT NOT NULL
);
"""


class KeyValueStore(ABC):
    """Base class for named-key string storage."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value stored under key, or None."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key.

        Raises:
            StorageQuotaExceededError: If the store has no room for the value.
                Previously stored data is left intact.
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key. Missing keys are ignored."""


class InMemoryStore(KeyValueStore):
    """Dict-backed store with an optional total capacity in bytes."""

    def __init__(self, capacity: int | None = None) -> None:
        self._data: dict[str, str] = {}
        self._capacity = capacity

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self._capacity is not None:
            used = sum(
                len(v.encode()) for k, v in self._data.items() if k != key
            )
            needed = len(value.encode())
            if used + needed > self._capacity:
                msg = (
                    f"Storage capacity exceeded writing '{key}': "
                    f"{used + needed} > {self._capacity} bytes"
                )
                raise StorageQuotaExceededError(msg)
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class SQLiteStore(KeyValueStore):
    """Durable store backed by a single SQLite table.

    ``max_value_bytes`` caps the size of any single value, mirroring the
    per-origin quota a browser applies to local storage.
    """

    def __init__(self, path: str | Path, max_value_bytes: int | None = None) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute(_KV_TABLE)
        self._conn.commit()
        self._max_value_bytes = max_value_bytes

    def get(self, key: str) -> str | None:
        row = self._conn.execute(
            "SELECT value FROM kv WHERE key = ?", (key,),
        ).fetchone()
        if row is None:
            return None
        return row[0]  # type: ignore[no-any-return]

    def set(self, key: str, value: str) -> None:
        size = len(value.encode())
        if self._max_value_bytes is not None and size > self._max_value_bytes:
            msg = (
                f"Storage capacity exceeded writing '{key}': "
                f"{size} > {self._max_value_bytes} bytes"
            )
            raise StorageQuotaExceededError(msg)
        try:
            self._conn.execute(
                """
                INSERT INTO kv (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, value),
            )
            self._conn.commit()
        except (sqlite3.DataError, sqlite3.OperationalError) as e:
            self._conn.rollback()
            if isinstance(e, sqlite3.OperationalError) and "full" not in str(e):
                raise
            logger.debug("SQLite write for '%s' failed: %s", key, e)
            msg = f"Storage capacity exceeded writing '{key}': {e}"
            raise StorageQuotaExceededError(msg) from e

    def delete(self, key: str) -> None:
        self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()
