"""
TTL cache for market data responses.
No Streamlit dependency so the service works outside of the app.
"""
import time
from collections import OrderedDict
from typing import Any, Hashable, Optional


class TTLCache:
    """
    Time-to-live cache with a size bound; the oldest entry is evicted first.
    Keys are request tuples such as ("minute", "SPY", "2024-03-01", "2024-03-01").
    """

    def __init__(self, ttl_seconds: int = 300, max_entries: int = 256, clock=time.monotonic):
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._store: "OrderedDict[Hashable, tuple]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._store)

    def get(self, key: Hashable) -> Optional[Any]:
        """Cached value if younger than the TTL, else None."""
        entry = self._store.get(key)
        if entry is None:
            return None
        value, stored_at = entry
        if self._clock() - stored_at < self._ttl:
            return value
        del self._store[key]
        return None

    def set(self, key: Hashable, value: Any) -> None:
        self._store.pop(key, None)
        self._store[key] = (value, self._clock())
        while len(self._store) > self._max_entries:
            self._store.popitem(last=False)

    def clear(self) -> None:
        self._store.clear()
