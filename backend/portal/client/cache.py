"""In-memory query cache with per-entry stale times and prefix invalidation."""
import time
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional

Key = tuple[Hashable, ...]


@dataclass
class CacheEntry:
    value: Any
    fetched_at: float
    stale_after: float


class QueryCache:
    """Cached results keyed by tuples such as ``("events", filters)``.

    ``invalidate(("events",))`` drops every key that starts with ``"events"``,
    mirroring how the portal's views share one list of events.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[Key, CacheEntry] = {}

    def get(self, key: Key) -> Optional[Any]:
        """Return the cached value if it is still fresh, else None."""
        entry = self._entries.get(key)
        if entry is None or self._clock() - entry.fetched_at >= entry.stale_after:
            return None
        return entry.value

    def peek(self, key: Key) -> Optional[Any]:
        """Return the cached value regardless of freshness."""
        entry = self._entries.get(key)
        return entry.value if entry else None

    def set(self, key: Key, value: Any, stale_after: float) -> None:
        self._entries[key] = CacheEntry(value, self._clock(), stale_after)

    def replace(self, key: Key, value: Any) -> None:
        """Swap the value in place, keeping the entry's fetch time."""
        entry = self._entries.get(key)
        if entry is not None:
            entry.value = value

    def keys(self, prefix: Key = ()) -> list[Key]:
        return [key for key in self._entries if key[:len(prefix)] == prefix]

    def invalidate(self, prefix: Key) -> list[Key]:
        removed = self.keys(prefix)
        for key in removed:
            del self._entries[key]
        return removed

    def snapshot(self) -> dict[Key, CacheEntry]:
        return {key: CacheEntry(e.value, e.fetched_at, e.stale_after) for key, e in self._entries.items()}

    def restore(self, snapshot: dict[Key, CacheEntry]) -> None:
        self._entries = dict(snapshot)
