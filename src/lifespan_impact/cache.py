"""Key-value stores for daily targets."""

import sqlite3
import threading
from collections import OrderedDict
from contextlib import closing
from pathlib import Path
from typing import Protocol

import structlog

from .types import CacheStats

logger = structlog.get_logger(__name__)


class TargetCache(Protocol):
    """String key-value contract used by the recommendation engine."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryTargetCache:
    """Thread-safe in-memory LRU cache."""

    def __init__(self, max_size: int = 1_000) -> None:
        """Initialize the cache.

        Args:
            max_size: Maximum number of entries before the oldest is evicted.
        """
        self._max_size = max_size
        self._entries: OrderedDict[str, str] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> str | None:
        with self._lock:
            value = self._entries.get(key)
            if value is None:
                self._misses += 1
                return None
            self._hits += 1
            self._entries.move_to_end(key)
            return value

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_size:
                self._entries.popitem(last=False)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_stats(self) -> CacheStats:
        """Get cache statistics."""
        with self._lock:
            size = len(self._entries)
        total = self._hits + self._misses
        hit_rate = (self._hits / total * 100) if total > 0 else 0.0
        return {
            "size": size,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate_pct": round(hit_rate, 2),
            "persist_enabled": False,
        }

    def clear(self) -> None:
        """Clear all entries from cache."""
        with self._lock:
            self._entries.clear()
        logger.info("target_cache_cleared")


class SQLiteTargetCache:
    """Target cache persisted to a SQLite file.

    Each operation opens a short-lived connection, so one instance can be
    shared between threads; writes are serialized by an internal lock.
    """

    def __init__(self, persist_path: Path | str) -> None:
        self._persist_path = Path(persist_path)
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._persist_path.parent.mkdir(parents=True, exist_ok=True)
        with closing(sqlite3.connect(self._persist_path)) as conn, conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS daily_targets (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
        logger.debug("target_cache_opened", path=str(self._persist_path))

    def get(self, key: str) -> str | None:
        with closing(sqlite3.connect(self._persist_path)) as conn:
            row = conn.execute("SELECT value FROM daily_targets WHERE key = ?", (key,)).fetchone()
        with self._lock:
            if row is None:
                self._misses += 1
                return None
            self._hits += 1
        return row[0]

    def set(self, key: str, value: str) -> None:
        with self._lock, closing(sqlite3.connect(self._persist_path)) as conn, conn:
            conn.execute(
                "INSERT OR REPLACE INTO daily_targets (key, value) VALUES (?, ?)",
                (key, value),
            )

    def delete(self, key: str) -> None:
        with self._lock, closing(sqlite3.connect(self._persist_path)) as conn, conn:
            conn.execute("DELETE FROM daily_targets WHERE key = ?", (key,))

    def __len__(self) -> int:
        with closing(sqlite3.connect(self._persist_path)) as conn:
            (count,) = conn.execute("SELECT COUNT(*) FROM daily_targets").fetchone()
        return count

    def get_stats(self) -> CacheStats:
        """Get cache statistics."""
        size = len(self)
        total = self._hits + self._misses
        hit_rate = (self._hits / total * 100) if total > 0 else 0.0
        return {
            "size": size,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate_pct": round(hit_rate, 2),
            "persist_enabled": True,
        }

    def clear(self) -> None:
        """Clear all entries from cache."""
        with self._lock, closing(sqlite3.connect(self._persist_path)) as conn, conn:
            conn.execute("DELETE FROM daily_targets")
        logger.info("target_cache_cleared", path=str(self._persist_path))
