import time
import threading
from typing import Any, Callable, Dict, Optional, Tuple
from urllib.parse import urlencode

CACHE_TTL = 5 * 60  # 5 minutes
CACHE_MAX_ENTRIES = 512


def cache_key(url: str, params: Optional[Dict[str, Any]] = None) -> str:
    if not params:
        return url
    return f"{url}?{urlencode(sorted(params.items()))}"


class TTLCache:
    """
    In-memory response cache. Entries expire after ``ttl`` seconds or on
    invalidate(); past ``max_entries`` the oldest entry is evicted.
    """

    def __init__(
        self,
        ttl: float = CACHE_TTL,
        max_entries: int = CACHE_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def _expired(self, stored_at: float, now: float) -> bool:
        return now - stored_at >= self.ttl

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            stored_at, value = entry
            if self._expired(stored_at, self._clock()):
                del self._entries[key]
                return None

            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            now = self._clock()

            # Re-inserting keeps the dict ordered oldest-first
            self._entries.pop(key, None)
            self._entries[key] = (now, value)

            for stale in [k for k, (at, _) in self._entries.items() if self._expired(at, now)]:
                del self._entries[stale]

            while len(self._entries) > self.max_entries:
                del self._entries[next(iter(self._entries))]

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
