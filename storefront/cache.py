"""In-process response cache with a fixed time-to-live."""

import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300


class ResponseCache:
    """
    String-keyed cache of (value, stored_at) pairs.

    Expiry is lazy: a stale entry is dropped when someone reads it, there is
    no background sweep. The cache has no coherence of its own; whoever
    mutates the underlying data must call invalidate() before the next read.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None if missing or expired."""
        entry = self._entries.get(key)
        if entry is not None:
            value, stored_at = entry
            if self._clock() - stored_at < self.ttl_seconds:
                self._hits += 1
                return value
        self._entries.pop(key, None)
        self._misses += 1
        return None

    def set(self, key: str, value: Any) -> None:
        """Store value, overwriting any previous entry and its timestamp."""
        self._entries[key] = (value, self._clock())

    def invalidate(self, pattern: Optional[str] = None) -> int:
        """
        Drop every key containing pattern, or everything when pattern is None.

        Returns the number of entries removed.
        """
        if pattern is None:
            removed = len(self._entries)
            self._entries.clear()
        else:
            doomed = [key for key in self._entries if pattern in key]
            for key in doomed:
                del self._entries[key]
            removed = len(doomed)
        logger.debug("Cache invalidated pattern=%r removed=%d", pattern, removed)
        return removed

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> Dict[str, Any]:
        """Return hit/miss statistics."""
        total = self._hits + self._misses
        rate = (self._hits / total * 100) if total > 0 else 0
        return {
            "entries": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": f"{rate:.1f}%",
        }
