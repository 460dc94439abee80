"""A key-value cache with per-key expiry, backed by an on-disk store."""

from __future__ import annotations

import logging
import os
import sqlite3
import threading
import time
from pathlib import Path
from types import TracebackType

TRACE = 5
DEFAULT_TTL_SECONDS = 24 * 60 * 60

# Fixed bookkeeping costs, in bytes, counted by the memory estimate.
_HANDLE_SIZE = 112
_METADATA_SIZE = 72

_STORE_NAME = "store.sqlite"
_STORE_FILES = (
    _STORE_NAME,
    _STORE_NAME + "-journal",
    _STORE_NAME + "-wal",
    _STORE_NAME + "-shm",
)

logging.addLevelName(TRACE, "TRACE")
logger = logging.getLogger("levelcache")


class CacheError(Exception):
    """Raised when the cache or its backing store fails."""


def _key_cost(key: str) -> int:
    return _METADATA_SIZE + len(key.encode("utf-8")) + 1


def _destroy_store(path: Path) -> None:
    """Remove any store left at ``path`` by an earlier run."""
    for name in _STORE_FILES:
        try:
            (path / name).unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("[open] Could not destroy existing database: %s", exc)
            return


class LevelCache:
    """A string cache whose keys expire after a time-to-live.

    Opening a cache wipes whatever store already lives at ``path``.
    Expired keys are removed lazily on ``get`` and, when
    ``cleanup_frequency_sec`` is positive, by a background thread.
    """

    def __init__(
        self,
        path: str | os.PathLike[str],
        max_memory_mb: int = 0,
        default_ttl_seconds: int = 0,
        cleanup_frequency_sec: int = 0,
        log_level: int = logging.INFO,
    ) -> None:
        if max_memory_mb < 0:
            raise ValueError("max_memory_mb must not be negative")
        if default_ttl_seconds < 0:
            raise ValueError("default_ttl_seconds must not be negative")
        if cleanup_frequency_sec < 0:
            raise ValueError("cleanup_frequency_sec must not be negative")

        logger.setLevel(log_level)
        self.log_level = log_level
        self.path = Path(path)
        logger.info("[open] Opening database at '%s'", self.path)

        self.max_memory_mb = max_memory_mb
        self.default_ttl = default_ttl_seconds or DEFAULT_TTL_SECONDS
        self.cleanup_frequency_sec = cleanup_frequency_sec
        self._index: dict[str, int] = {}
        self._lock = threading.RLock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._total_memory = _HANDLE_SIZE

        _destroy_store(self.path)
        try:
            self.path.mkdir(parents=True, exist_ok=True)
            self._conn: sqlite3.Connection | None = sqlite3.connect(
                self.path / _STORE_NAME,
                check_same_thread=False,
                isolation_level=None,
            )
        except (OSError, sqlite3.Error) as exc:
            logger.error("[open] Failed to open database: %s", exc)
            raise CacheError(f"failed to open database at {self.path}: {exc}") from exc

        try:
            if max_memory_mb > 0:
                cache_bytes = max_memory_mb * 1024 * 1024
                self._conn.execute(f"PRAGMA cache_size = -{max_memory_mb * 1024}")
                self._total_memory += cache_bytes
                logger.info("[open] LRU cache created with size %d MB", max_memory_mb)
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
            )
        except sqlite3.Error as exc:
            self._conn.close()
            self._conn = None
            logger.error("[open] Failed to open database: %s", exc)
            raise CacheError(f"failed to open database at {self.path}: {exc}") from exc

        if cleanup_frequency_sec > 0:
            self._thread = threading.Thread(
                target=self._cleanup_loop, name="levelcache-cleanup", daemon=True
            )
            self._thread.start()

        logger.info("[open] Database opened successfully")
        logger.warning(
            "[open] Memory usage tracking does not include all internal store allocations."
        )

    def _cleanup_loop(self) -> None:
        logger.info(
            "[cleanup] Thread started with frequency %d seconds", self.cleanup_frequency_sec
        )
        while not self._stop.wait(self.cleanup_frequency_sec):
            logger.debug("[cleanup] Running cleanup cycle")
            with self._lock:
                if self._conn is None:
                    break
                now = int(time.time())
                expired = [k for k, exp in self._index.items() if exp > 0 and now > exp]
                for key in expired:
                    logger.info("[cleanup] Key '%s' expired, deleting", key)
                    try:
                        self.delete(key)
                    except CacheError as exc:
                        logger.error("[cleanup] %s", exc)
        logger.info("[cleanup] Thread stopped")

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise CacheError("cache is closed")
        return self._conn

    def close(self) -> None:
        """Stop the cleanup thread and release the store. Safe to call twice."""
        if self._conn is None:
            return
        logger.info("[close] Closing database")
        if self._thread is not None:
            self._stop.set()
            self._thread.join()
            self._thread = None
        with self._lock:
            for key in self._index:
                self._total_memory -= _key_cost(key)
            self._index.clear()
            self._conn.close()
            self._conn = None
        logger.info("[close] Database closed")

    def put(self, key: str, value: str, ttl_seconds: int = 0) -> None:
        """Store ``value`` under ``key``; a ttl of 0 uses the default."""
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must not be negative")
        logger.log(TRACE, "[put] Putting key '%s'", key)
        with self._lock:
            conn = self._connection()
            ttl = ttl_seconds or self.default_ttl
            expiration = int(time.time()) + ttl
            is_new = key not in self._index
            if is_new:
                logger.debug("[put] Key '%s' not found, creating new entry", key)
            else:
                logger.debug("[put] Key '%s' found, updating expiration", key)
            try:
                conn.execute(
                    "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)", (key, value)
                )
            except sqlite3.Error as exc:
                logger.error("[put] Failed to put key '%s' into store: %s", key, exc)
                raise CacheError(f"failed to put key {key!r}: {exc}") from exc
            if is_new:
                self._total_memory += _key_cost(key)
            self._index[key] = expiration
            logger.info("[put] Key '%s' put successfully with TTL %d seconds", key, ttl)

    def get(self, key: str) -> str | None:
        """Return the value for ``key``, or None if absent or expired."""
        logger.log(TRACE, "[get] Getting key '%s'", key)
        with self._lock:
            conn = self._connection()
            expiration = self._index.get(key)
            if expiration is None:
                logger.debug("[get] Key '%s' not found in index", key)
                return None
            if expiration > 0 and int(time.time()) > expiration:
                logger.info("[get] Key '%s' expired, deleting", key)
                self.delete(key)
                return None
            try:
                row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            except sqlite3.Error as exc:
                logger.error("[get] Failed to get key '%s' from store: %s", key, exc)
                raise CacheError(f"failed to get key {key!r}: {exc}") from exc
            if row is None:
                logger.warning(
                    "[get] Key '%s' not found in db, but present in index. Inconsistency.", key
                )
                return None
            logger.info("[get] Key '%s' retrieved successfully", key)
            return row[0]

    def delete(self, key: str) -> None:
        """Remove ``key``; removing a missing key is not an error."""
        logger.log(TRACE, "[delete] Deleting key '%s'", key)
        with self._lock:
            conn = self._connection()
            expiration = self._index.pop(key, None)
            if expiration is not None:
                self._total_memory -= _key_cost(key)
            try:
                conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            except sqlite3.Error as exc:
                logger.error("[delete] Failed to delete key '%s' from store: %s", key, exc)
                if expiration is not None:
                    logger.debug("[delete] Rolling back in-memory delete for key '%s'", key)
                    self._index[key] = expiration
                    self._total_memory += _key_cost(key)
                raise CacheError(f"failed to delete key {key!r}: {exc}") from exc
            logger.info("[delete] Key '%s' deleted successfully", key)

    def memory_usage(self) -> int:
        """Estimated memory held by the cache, in bytes."""
        with self._lock:
            return self._total_memory

    def __enter__(self) -> LevelCache:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()