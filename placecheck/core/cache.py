"""Capacity and TTL bounded in-process caches.

Caches are explicit services: the server builds them once at start-up and
hands them to the pipeline, so tests can pass their own instances.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Generic, Hashable, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")


class TTLCache(Generic[V]):
    """Thread-safe LRU cache whose entries expire ``ttl`` seconds after insertion."""

    def __init__(self, maxsize: int, ttl: float, *, clock: Callable[[], float] = time.monotonic) -> None:
        if maxsize <= 0:
            raise ValueError("maxsize must be positive")
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.maxsize = maxsize
        self.ttl = ttl
        self._clock = clock
        self._entries: "OrderedDict[Hashable, Tuple[V, float]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Optional[V]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, stored_at = entry
            if self._clock() - stored_at >= self.ttl:
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return value

    def set(self, key: Hashable, value: V) -> None:
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self.maxsize:
                self._evict()
            self._entries[key] = (value, self._clock())

    def _evict(self) -> None:
        now = self._clock()
        expired = [key for key, (_, stored_at) in self._entries.items() if now - stored_at >= self.ttl]
        for key in expired:
            del self._entries[key]
        while len(self._entries) >= self.maxsize:
            oldest_key, _ = self._entries.popitem(last=False)
            logger.debug("Evicted cache entry %s", oldest_key)


class DocumentCache(TTLCache[Any]):
    """Raw fetched documents keyed by URL (500 entries, 30 minutes by default)."""

    def __init__(self, maxsize: int = 500, ttl: float = 30 * 60, **kwargs: Any) -> None:
        super().__init__(maxsize, ttl, **kwargs)


class KeywordVolumeCache(TTLCache[Any]):
    """Keyword volume lookups keyed by keyword (12 hours by default)."""

    def __init__(self, maxsize: int = 5000, ttl: float = 12 * 60 * 60, **kwargs: Any) -> None:
        super().__init__(maxsize, ttl, **kwargs)
