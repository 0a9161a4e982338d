"""Nonce caches for replay detection.

Each cache is a ``NonceLookup``: calling it with a nonce returns True when
the nonce was seen within the TTL, otherwise records it and returns False.
"""

from __future__ import annotations

import sqlite3
import threading
import time
from collections import OrderedDict
from pathlib import Path

from hawkauth.common.settings import Settings
from hawkauth.models import NonceLookup


class MemoryNonceCache:
    """In-memory nonce cache with TTL eviction and a size bound."""

    def __init__(self, ttl_seconds: float = 120.0, max_entries: int = 10000):
        self._ttl_seconds = ttl_seconds
        self._max_entries = max_entries
        self._entries: OrderedDict[str, float] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def _evict_expired(self, now: float) -> None:
        while self._entries:
            nonce, expires_at = next(iter(self._entries.items()))
            if expires_at > now:
                break
            self._entries.pop(nonce, None)

    def __call__(self, nonce: str) -> bool:
        now = time.time()
        with self._lock:
            self._evict_expired(now)
            expires_at = self._entries.get(nonce)
            if expires_at is not None and expires_at > now:
                return True

            self._entries[nonce] = now + self._ttl_seconds
            self._entries.move_to_end(nonce)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)
            return False


class SqliteNonceCache:
    """SQLite nonce cache with TTL for cross-process replay detection."""

    def __init__(self, path: str, ttl_seconds: float = 120.0) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._ttl_seconds = ttl_seconds
        self._conn = sqlite3.connect(self._path, check_same_thread=False)
        self._lock = threading.Lock()
        self._conn.execute(
            "CREATE TABLE IF NOT EXISTS hawk_nonces ("
            "nonce TEXT PRIMARY KEY,"
            "expires_at REAL NOT NULL"
            ")"
        )
        self._conn.execute("CREATE INDEX IF NOT EXISTS idx_expires ON hawk_nonces (expires_at)")
        self._conn.commit()

    def _cleanup(self, now: float) -> None:
        self._conn.execute("DELETE FROM hawk_nonces WHERE expires_at <= ?", (now,))

    def __call__(self, nonce: str) -> bool:
        now = time.time()
        with self._lock:
            self._cleanup(now)
            cursor = self._conn.execute(
                "INSERT OR IGNORE INTO hawk_nonces (nonce, expires_at) VALUES (?, ?)",
                (nonce, now + self._ttl_seconds),
            )
            self._conn.commit()
            return cursor.rowcount == 0

    def close(self) -> None:
        self._conn.close()


def create_nonce_cache(settings: Settings) -> NonceLookup:
    """Build the nonce cache selected by settings."""
    if settings.nonce_storage == "sqlite":
        return SqliteNonceCache(settings.nonce_sqlite_path, ttl_seconds=settings.nonce_ttl_seconds)
    return MemoryNonceCache(
        ttl_seconds=settings.nonce_ttl_seconds,
        max_entries=settings.nonce_max_entries,
    )
