"""
In-memory cache for chain snapshots with a freshness window.

Expired entries are kept as the last known value so callers can fall back
to them when the RPC endpoint is unreachable, but only up to ``max_age``
seconds and ``max_entries`` keys. Least recently used keys go first.
"""

import time
from collections import OrderedDict
from typing import Any, Callable, Hashable, Optional, Tuple
from threading import Lock


class SnapshotCache:
    """Thread-safe, bounded TTL cache that remembers the last known value."""

    def __init__(
        self,
        ttl: int = 15,
        max_age: int = 600,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.entries: "OrderedDict[Hashable, Tuple[Any, float]]" = OrderedDict()
        self.lock = Lock()
        self.ttl = ttl
        self.max_age = max(max_age, ttl)
        self.max_entries = max_entries
        self.clock = clock

    def _entry(self, key: Hashable, max_age: float) -> Optional[Any]:
        entry = self.entries.get(key)
        if entry is None:
            return None
        value, stored_at = entry
        age = self.clock() - stored_at
        if age >= self.max_age:
            del self.entries[key]
            return None
        if age >= max_age:
            return None
        self.entries.move_to_end(key)
        return value

    def get_fresh(self, key: Hashable) -> Optional[Any]:
        """Get value if it is still within the freshness window"""
        with self.lock:
            return self._entry(key, self.ttl)

    def get_last_known(self, key: Hashable) -> Optional[Any]:
        """Get value if it is younger than ``max_age``"""
        with self.lock:
            return self._entry(key, self.max_age)

    def set(self, key: Hashable, value: Any):
        with self.lock:
            self.entries[key] = (value, self.clock())
            self.entries.move_to_end(key)
            self._evict()

    def delete(self, key: Hashable):
        with self.lock:
            self.entries.pop(key, None)

    def clear(self):
        with self.lock:
            self.entries.clear()

    def cleanup_expired(self):
        """Remove all entries past ``max_age``"""
        with self.lock:
            self._drop_aged()

    def _drop_aged(self):
        now = self.clock()
        aged = [k for k, (_, stored_at) in self.entries.items() if now - stored_at >= self.max_age]
        for key in aged:
            del self.entries[key]

    def _evict(self):
        self._drop_aged()
        while len(self.entries) > self.max_entries:
            self.entries.popitem(last=False)
