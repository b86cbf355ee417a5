"""Explicit in-process caches shared by search components."""

from collections import OrderedDict
from typing import Any, Callable, Dict, Hashable, Optional, Tuple
import threading
import time
import logging

logger = logging.getLogger(__name__)


class TTLCache:
    """Thread-safe key/value cache with a per-entry time-to-live.

    Used for read-mostly derived structures (synonym index snapshot,
    category keyword table). Writers call ``invalidate()`` after mutating
    the underlying data; readers may see a stale value until then or until
    the TTL elapses.
    """

    def __init__(self, ttl_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}
        self._generation = 0
        self._lock = threading.Lock()

    def get(self, key: Hashable, builder: Callable[[], Any]) -> Any:
        """Return the cached value for key, building it on a miss or expiry."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and (self.ttl_seconds <= 0 or now - entry[0] < self.ttl_seconds):
                return entry[1]
            generation = self._generation

        # Build outside the lock; a build that straddles invalidate() is not stored
        value = builder()
        with self._lock:
            if generation == self._generation:
                self._entries[key] = (self._clock(), value)
        return value

    def peek(self, key: Hashable) -> Optional[Any]:
        """Return the cached value without building it."""
        with self._lock:
            entry = self._entries.get(key)
            return entry[1] if entry else None

    def invalidate(self, key: Optional[Hashable] = None) -> None:
        """Drop one key, or everything when no key is given."""
        with self._lock:
            self._generation += 1
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)
        logger.debug(f"Cache invalidated (key={key!r})")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class LRUCache:
    """Bounded least-recently-used memo."""

    def __init__(self, max_size: int = 100):
        self.max_size = max_size
        self._entries: 'OrderedDict[Hashable, Any]' = OrderedDict()
        self._generation = 0
        self._lock = threading.Lock()

    def get(self, key: Hashable, builder: Callable[[], Any]) -> Any:
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
                return self._entries[key]
            generation = self._generation

        value = builder()
        with self._lock:
            if generation != self._generation:
                return value
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_size:
                self._entries.popitem(last=False)
        return value

    def invalidate(self) -> None:
        with self._lock:
            self._generation += 1
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
