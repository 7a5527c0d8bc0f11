"""
Thread-safe time-to-live caches for values shared across reward attempts.
"""
import logging
import threading
import time
from typing import Any, Callable, Hashable, Optional, TypeVar

from cachetools import TTLCache

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


class TTLValueCache:
    """
    Small TTL cache with an injectable clock.

    Entries expire ``ttl`` seconds after they are stored and are refreshed
    lazily by the next lookup. Concurrent refreshes are allowed to race:
    the loader is expected to be idempotent, so the last write wins.

    Args:
        ttl: Lifetime of an entry in seconds
        now: Clock returning seconds; defaults to ``time.monotonic``
        maxsize: Maximum number of entries
        name: Label used in log messages
    """

    def __init__(
        self,
        ttl: float,
        now: Optional[Callable[[], float]] = None,
        maxsize: int = 16,
        name: str = "cache",
    ):
        self.ttl = ttl
        self.name = name
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, timer=now or time.monotonic)
        self._lock = threading.RLock()

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            return self._cache.get(key, default)

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            self._cache[key] = value

    def get_or_load(self, key: Hashable, loader: Callable[[], T]) -> T:
        """
        Return the cached value for ``key``, calling ``loader`` on a miss.

        The loader runs outside the lock; exceptions it raises propagate and
        nothing is cached.
        """
        with self._lock:
            cached = self._cache.get(key, _MISSING)
        if cached is not _MISSING:
            return cached

        logger.debug("%s miss for %s, loading", self.name, key)
        value = loader()
        self.set(key, value)
        return value

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._cache
