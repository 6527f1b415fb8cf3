"""Key-value stores backing the cache decorator."""

from __future__ import annotations

import asyncio
import json
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Protocol

from pr_report.errors import CacheWriteFailure

CacheKey = tuple[str, ...]


class KeyValueStore(Protocol):
    """Point get/set by composite key; values are JSON documents."""

    async def get(self, key: CacheKey) -> str | None:
        """Return the stored document or None."""

    async def set(self, key: CacheKey, value: str) -> None:
        """Store a document, replacing any previous value (last write wins)."""


class InMemoryKeyValueStore:
    """Process-local store used by tests and one-shot CLI runs."""

    def __init__(self) -> None:
        self._data: dict[CacheKey, str] = {}

    def __len__(self) -> int:
        return len(self._data)

    async def get(self, key: CacheKey) -> str | None:
        return self._data.get(key)

    async def set(self, key: CacheKey, value: str) -> None:
        self._data[key] = value


class SqliteKeyValueStore:
    """SQLite-backed store shared by every run in the process (or across processes).

    WAL journaling lets readers proceed during a write; concurrent writers to
    one key simply overwrite each other.
    """

    def __init__(self, path: str | Path, *, timeout: float = 30.0) -> None:
        self._path = Path(path)
        self._timeout = timeout
        _ensure_kv_table(self._path, timeout)

    async def get(self, key: CacheKey) -> str | None:
        return await asyncio.to_thread(self._get, _encode_key(key))

    async def set(self, key: CacheKey, value: str) -> None:
        try:
            await asyncio.to_thread(self._set, _encode_key(key), value)
        except sqlite3.Error as exc:
            raise CacheWriteFailure(f"could not store {key!r}: {exc}") from exc

    def _get(self, key: str) -> str | None:
        with closing(sqlite3.connect(self._path, timeout=self._timeout)) as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def _set(self, key: str, value: str) -> None:
        with closing(sqlite3.connect(self._path, timeout=self._timeout)) as conn:
            with conn:
                conn.execute(
                    "INSERT INTO kv(key, value) VALUES(?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                    (key, value),
                )


def _encode_key(key: CacheKey) -> str:
    return json.dumps(list(key), ensure_ascii=False, separators=(",", ":"))


def _ensure_kv_table(db_path: Path, timeout: float) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with closing(sqlite3.connect(db_path, timeout=timeout)) as conn:
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute(
            "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
        )
        conn.commit()
