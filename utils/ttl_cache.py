"""
Small thread-safe cache with time-based eviction.

Used by the import engine to remember product lookups by normalized name
for the duration of a run.  Entries expire `ttl_seconds` after they were
written; expired entries are dropped on access and by evict_expired().
The clock is injectable so tests can advance time.
"""

import logging
import threading
import time
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

_MISSING = object()


class TTLCache:
    """Key → value map whose entries expire after a fixed time."""

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[Any, tuple[float, Any]] = {}

    def get(self, key: Any, default: Any = None) -> Any:
        """Return the live value for *key*, or *default*."""
        with self._lock:
            entry = self._entries.get(key, _MISSING)
            if entry is _MISSING:
                return default
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return default
            return value

    def set(self, key: Any, value: Any) -> None:
        with self._lock:
            if (
                self.max_entries is not None
                and key not in self._entries
                and len(self._entries) >= self.max_entries
            ):
                self._evict_expired_locked()
                if len(self._entries) >= self.max_entries:
                    # Drop the entry closest to expiry.
                    oldest = min(self._entries, key=lambda k: self._entries[k][0])
                    del self._entries[oldest]
            self._entries[key] = (self._clock() + self.ttl_seconds, value)

    def invalidate(self, key: Any) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def evict_expired(self) -> int:
        """Drop all expired entries; return how many were removed."""
        with self._lock:
            removed = self._evict_expired_locked()
        if removed:
            logger.debug(f"Evicted {removed} expired cache entries")
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: Any) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def _evict_expired_locked(self) -> int:
        now = self._clock()
        expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)
