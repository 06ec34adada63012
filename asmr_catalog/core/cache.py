from __future__ import annotations

import hashlib
import itertools
import logging
import threading
import time
from dataclasses import dataclass
from typing import Dict, Generic, Hashable, Iterable, Optional, Tuple, TypeVar


V = TypeVar("V")

# Capacities observed in production use.
TREE_CACHE_CAPACITY = 20
TRANSLATION_CACHE_CAPACITY = 1000

logger = logging.getLogger(__name__)


# ------------------------------------------------------------
# Deterministic cache key
# ------------------------------------------------------------

def make_fingerprint(items: Iterable[str]) -> str:
    """
    Fingerprint an ordered list of strings.

    The key covers the plain concatenation of the items, so it is only a
    lookup hint: callers must still verify that the cached value covers the
    items they asked for.
    """
    blob = "".join(items).encode("utf-8")
    return hashlib.sha256(blob).hexdigest()


# ------------------------------------------------------------
# Cache backend
# ------------------------------------------------------------

@dataclass
class CacheEntry(Generic[V]):
    value: V
    last_access: Tuple[float, int]


class TimeBasedLRUCache(Generic[V]):
    """
    Capacity bounded memory cache with least-recently-used eviction.

    Every hit refreshes the entry's access stamp. When a put pushes the size
    over capacity, exactly one entry (the one with the oldest stamp) is
    dropped. There is no expiry: the stamp measures recency only.

    All reads and writes run under one lock per instance, so the eviction scan
    is atomic with respect to concurrent get/put on the same cache.
    """

    def __init__(self, capacity: int, *, name: str = "cache"):
        if not isinstance(capacity, int) or capacity <= 0:
            raise ValueError("capacity must be a positive integer")
        self._capacity = capacity
        self._name = name
        self._store: Dict[Hashable, CacheEntry[V]] = {}
        self._lock = threading.Lock()
        # monotonic clock ties are broken by a strictly increasing counter
        self._counter = itertools.count()

    @property
    def capacity(self) -> int:
        return self._capacity

    def _stamp(self) -> Tuple[float, int]:
        return time.monotonic(), next(self._counter)

    def get(self, key: Hashable) -> Optional[V]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            entry.last_access = self._stamp()
            return entry.value

    def put(self, key: Hashable, value: V) -> None:
        with self._lock:
            self._store[key] = CacheEntry(value=value, last_access=self._stamp())
            if len(self._store) > self._capacity:
                oldest = min(self._store, key=lambda k: self._store[k].last_access)
                self._store.pop(oldest, None)
                logger.debug(f"[{self._name}] evicted {oldest!r}")

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._store

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
