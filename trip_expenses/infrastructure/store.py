"""Opaque string key-value stores backing the ledger.

Three backends share one small surface (``get``/``set``/``delete``):
in-process memory, a SQLite file and Redis. ``build_store`` picks one from
``EXPENSE_STORE``.
"""

from __future__ import annotations

import logging
import os
import sqlite3
import threading
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from trip_expenses.shared.exceptions import StoreError

try:
    import redis
except Exception:  # pragma: no cover - optional dependency
    redis = None

_logger = logging.getLogger("trip-expenses.store")

DEFAULT_SQLITE_PATH = "data/trip_expenses.sqlite3"
_DEFAULT_PREFIX = "trip-expenses:"


@runtime_checkable
class KeyValueStore(Protocol):
    backend: str

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    backend = "memory"

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class SQLiteStore:
    backend = "sqlite"

    def __init__(self, db_path: str | Path = DEFAULT_SQLITE_PATH) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, timeout=5.0)
        conn.execute("PRAGMA journal_mode=WAL;")
        return conn

    def _init_schema(self) -> None:
        with self._lock, self._connect() as conn:
            conn.execute("CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL)")

    def get(self, key: str) -> Optional[str]:
        try:
            with self._lock, self._connect() as conn:
                row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"sqlite read failed for {key!r}: {exc}") from exc
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        try:
            with self._lock, self._connect() as conn:
                conn.execute(
                    "INSERT INTO kv (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    (key, value),
                )
        except sqlite3.Error as exc:
            raise StoreError(f"sqlite write failed for {key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            with self._lock, self._connect() as conn:
                conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        except sqlite3.Error as exc:
            raise StoreError(f"sqlite delete failed for {key!r}: {exc}") from exc


class RedisStore:
    backend = "redis"

    def __init__(self, redis_url: str, prefix: str = _DEFAULT_PREFIX):
        if redis is None:  # pragma: no cover
            raise RuntimeError("redis package is not installed")
        self._prefix = prefix
        self._client = redis.Redis.from_url(redis_url, decode_responses=True)
        self._client.ping()

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        try:
            return self._client.get(self._key(key))
        except redis.RedisError as exc:
            raise StoreError(f"redis read failed for {key!r}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        try:
            self._client.set(self._key(key), value)
        except redis.RedisError as exc:
            raise StoreError(f"redis write failed for {key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self._client.delete(self._key(key))
        except redis.RedisError as exc:
            raise StoreError(f"redis delete failed for {key!r}: {exc}") from exc


def build_store() -> KeyValueStore:
    """Store selected by ``EXPENSE_STORE``; unusable backends fall back to memory."""
    backend = os.getenv("EXPENSE_STORE", "memory").strip().lower()

    if backend == "sqlite":
        path = os.getenv("EXPENSE_STORE_PATH", DEFAULT_SQLITE_PATH)
        try:
            store = SQLiteStore(path)
            _logger.info("Expense store initialized with SQLite backend at %s", path)
            return store
        except (OSError, sqlite3.Error) as exc:
            _logger.warning("Failed to open SQLite store, fallback to memory store: %s", exc)

    elif backend == "redis":
        redis_url = os.getenv("REDIS_URL", "")
        if not redis_url:
            _logger.warning("EXPENSE_STORE=redis but REDIS_URL is not set; fallback to memory store")
        elif redis is None:
            _logger.warning("EXPENSE_STORE=redis but redis dependency is missing; fallback to memory store")
        else:
            try:
                store = RedisStore(redis_url)
                _logger.info("Expense store initialized with Redis backend")
                return store
            except Exception as exc:
                _logger.warning("Failed to connect Redis store, fallback to memory store: %s", exc)

    elif backend != "memory":
        _logger.warning("Unknown EXPENSE_STORE=%r; using memory store", backend)

    return MemoryStore()
