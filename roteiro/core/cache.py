"""In-process TTL caches for Google API responses.

Two tiers are used: sheet structure and grid data change often and are kept
for seconds, while place coordinates are practically immutable and kept for
weeks. Only successful responses are stored.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

logger = logging.getLogger(__name__)

STRUCTURE_CACHE_SECONDS = 10
PLACE_CACHE_SECONDS = 30 * 24 * 60 * 60

_MISSING = object()


class TTLCache:
    """Thread-safe mapping whose entries expire ``ttl`` seconds after being set."""

    def __init__(self, ttl: float, name: str = "cache", clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self.name = name
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}
        self._key_locks: Dict[Hashable, threading.Lock] = {}

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            expires_at, value = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return default
        logger.debug("%s hit for %s", self.name, key)
        return value

    def set(self, key: Hashable, value: Any, ttl: Optional[float] = None) -> None:
        expires_at = self._clock() + (self.ttl if ttl is None else ttl)
        with self._lock:
            self._entries[key] = (expires_at, value)

    def get_or_set(self, key: Hashable, factory: Callable[[], Any]) -> Any:
        """Return the cached value or store the result of ``factory()``.

        Concurrent callers for the same key wait for the first one instead of
        calling ``factory`` again. Exceptions raised by ``factory`` propagate
        and nothing is stored, so a failed call is attempted again next time.
        """
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            return value

        with self._lock:
            key_lock = self._key_locks.setdefault(key, threading.Lock())
        with key_lock:
            value = self.get(key, _MISSING)
            if value is _MISSING:
                value = factory()
                self.set(key, value)
        return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


structure_cache = TTLCache(STRUCTURE_CACHE_SECONDS, name="structure_cache")
place_cache = TTLCache(PLACE_CACHE_SECONDS, name="place_cache")
