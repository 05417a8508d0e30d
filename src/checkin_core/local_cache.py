"""Best-effort local key/value cache for records and settings.

Values are JSON strings. Failures are logged and reported as a missing
value or a False return, never raised to the caller.
"""
import json
import logging
import os
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Generator, Optional

log = logging.getLogger(__name__)


class LocalCache(ABC):
    """Key -> JSON string store with no transactions."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> bool:
        ...

    @abstractmethod
    def remove(self, *keys: str) -> bool:
        ...

    def get_json(self, key: str, default: Any = None) -> Any:
        """Decode a cached JSON value, returning default if absent or corrupt."""
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            log.error(f"[CACHE] Corrupt value for {key}: {e}")
            return default

    def set_json(self, key: str, value: Any) -> bool:
        try:
            raw = json.dumps(value)
        except (TypeError, ValueError) as e:
            log.error(f"[CACHE] Could not serialize value for {key}: {e}")
            return False
        return self.set(key, raw)


class MemoryLocalCache(LocalCache):
    """Process-local cache, used in tests and when no cache file is configured."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> bool:
        self._data[key] = value
        return True

    def remove(self, *keys: str) -> bool:
        for key in keys:
            self._data.pop(key, None)
        return True

    def keys(self) -> list[str]:
        return list(self._data)


class SQLiteLocalCache(LocalCache):
    """
    Key/value cache persisted in a single SQLite table.
    Opens a short-lived connection per operation.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        directory = os.path.dirname(self.db_path)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            with self._connect() as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS local_cache (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    )
                    """
                )
        except (sqlite3.Error, OSError) as e:
            log.error(f"[CACHE] Failed to initialize cache at {self.db_path}: {e}")

    @contextmanager
    def _connect(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self.db_path)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def get(self, key: str) -> Optional[str]:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT value FROM local_cache WHERE key = ?", (key,)
                ).fetchone()
        except sqlite3.Error as e:
            log.error(f"[CACHE] Read failed for {key}: {e}")
            return None
        return row[0] if row else None

    def set(self, key: str, value: str) -> bool:
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO local_cache (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value, datetime.now(timezone.utc).isoformat()),
                )
        except sqlite3.Error as e:
            log.error(f"[CACHE] Write failed for {key}: {e}")
            return False
        log.debug(f"[CACHE] Stored {key} ({len(value)} bytes)")
        return True

    def remove(self, *keys: str) -> bool:
        if not keys:
            return True
        placeholders = ", ".join("?" * len(keys))
        try:
            with self._connect() as conn:
                conn.execute(f"DELETE FROM local_cache WHERE key IN ({placeholders})", keys)
        except sqlite3.Error as e:
            log.error(f"[CACHE] Remove failed for {keys}: {e}")
            return False
        return True
