"""TTL-bounded cache of scraped content, backed by a key-value store."""

import logging
import sqlite3
import time
from pathlib import Path
from typing import Callable, Optional, Protocol

from linkchat.models import CacheDecodeResult, ScrapedContent, now_ms

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "scraped:"
MAX_KEY_URL_LENGTH = 255
MAX_CACHE_SIZE = 1_000_000  # bytes of serialized JSON
CACHE_EXPIRATION_SECONDS = 7 * 24 * 60 * 60


class KeyValueStoreProtocol(Protocol):
    """Interface for the key-value store underneath the content cache."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if absent or expired."""
        ...

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store a value that expires after ttl_seconds."""
        ...

    def delete(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""
        ...


class SQLiteKeyValueStore:
    """SQLite key-value store with per-key expiry."""

    def __init__(self, db_path: Path, clock: Callable[[], float] = time.time):
        self.db_path = db_path
        self._clock = clock
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(db_path))
        self._conn.row_factory = sqlite3.Row
        self._ensure_db()

    def _ensure_db(self) -> None:
        """Create the cache table if it doesn't exist."""
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS cache (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                expires_at REAL NOT NULL
            )
        """)
        self._conn.commit()

    def get(self, key: str) -> Optional[str]:
        """Return the value for key, deleting it first if it has expired."""
        row = self._conn.execute(
            "SELECT value, expires_at FROM cache WHERE key = ?", (key,)
        ).fetchone()
        if row is None:
            return None
        if row["expires_at"] <= self._clock():
            self.delete(key)
            return None
        return row["value"]

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Insert or replace a value. Last write wins."""
        self._conn.execute(
            "INSERT OR REPLACE INTO cache (key, value, expires_at) VALUES (?, ?, ?)",
            (key, value, self._clock() + ttl_seconds),
        )
        self._conn.commit()

    def delete(self, key: str) -> None:
        self._conn.execute("DELETE FROM cache WHERE key = ?", (key,))
        self._conn.commit()

    def purge_expired(self) -> int:
        """Delete every expired row. Returns the number removed."""
        cursor = self._conn.execute(
            "DELETE FROM cache WHERE expires_at <= ?", (self._clock(),)
        )
        self._conn.commit()
        return cursor.rowcount

    def count(self) -> int:
        """Return the number of stored rows, expired or not."""
        row = self._conn.execute("SELECT COUNT(*) AS cnt FROM cache").fetchone()
        return row["cnt"]

    def close(self) -> None:
        self._conn.close()


def cache_key(url: str) -> str:
    """Build the namespaced cache key for a URL."""
    return CACHE_KEY_PREFIX + url[:MAX_KEY_URL_LENGTH]


class ContentCache:
    """Best-effort cache of ScrapedContent keyed by URL.

    Every operation is fault tolerant: read problems become a miss and
    write problems skip the write. Nothing here raises to the caller.
    """

    def __init__(self, store: KeyValueStoreProtocol):
        self.store = store

    def get(self, url: str) -> Optional[ScrapedContent]:
        """Return cached content for url, or None on miss or any failure."""
        key = cache_key(url)
        try:
            raw = self.store.get(key)
        except Exception:
            logger.warning("Error reading cache for %s", url, exc_info=True)
            return None

        if not raw:
            logger.info("Cache miss for %s", url)
            return None

        result = CacheDecodeResult.decode(raw)
        if not result.ok:
            logger.warning("Invalid cached data for %s: %s", url, result.error)
            self._evict(key)
            return None

        age_minutes = round((now_ms() - result.record.created_at) / 1000 / 60)
        logger.info("Cache hit for %s with age %d minutes", url, age_minutes)
        return result.record

    def put(self, url: str, content: ScrapedContent) -> bool:
        """Store content for url. Returns True if a write happened."""
        try:
            content.created_at = now_ms()
            data = content.to_dict()
            # Round-trip through validation so a mistyped field is never cached
            ScrapedContent.from_dict(data)
            serialized = content.to_json()

            size = len(serialized.encode("utf-8"))
            if size > MAX_CACHE_SIZE:
                logger.warning(
                    "Content for %s is too large to cache (%d bytes)", url, size
                )
                return False

            self.store.set(cache_key(url), serialized, CACHE_EXPIRATION_SECONDS)
        except ValueError as e:
            logger.error("Invalid content for %s: %s", url, e)
            return False
        except Exception:
            logger.error("Error caching content for %s", url, exc_info=True)
            return False

        logger.info("Cached content for %s", url)
        return True

    def _evict(self, key: str) -> None:
        try:
            self.store.delete(key)
        except Exception:
            logger.warning("Failed to evict cache key %s", key, exc_info=True)
