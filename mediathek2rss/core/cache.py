"""Time-bounded cache for generated feeds."""

import math
import threading
import time
from typing import Callable

from cachetools import TTLCache


class FeedCache:
    """String cache whose entries expire a fixed duration after being stored.

    Entries are dropped lazily: a read that finds its entry expired evicts
    the expired entries. There is no size bound. The timer is injectable so
    tests can move the clock forward.
    """

    def __init__(
        self,
        duration: float,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self.duration = duration
        self._entries: TTLCache = TTLCache(maxsize=math.inf, ttl=duration, timer=timer)
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        """Return the content stored for key, or None if absent or expired."""
        with self._lock:
            content = self._entries.get(key)
            if content is None:
                self._entries.expire()
            return content

    def put(self, key: str, content: str) -> None:
        """Store content under key, replacing any existing entry."""
        with self._lock:
            self._entries[key] = content

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
