import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

from ..logging_config import get_logger
from ..models.query import NewsQuery


logger = get_logger("tools.cache")


class ResponseCache:
    """In-memory TTL cache of upstream results keyed by normalized query.

    Expired entries are dropped when read, and in bulk by :meth:`sweep`,
    which :meth:`put` triggers at most once per ``sweep_interval`` seconds.
    """

    def __init__(self, sweep_interval: float = 300.0, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._last_sweep = clock()

    def get(self, query: NewsQuery) -> Optional[Any]:
        key = query.cache_key()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, payload = entry
            if self._clock() >= expires_at:
                self._entries.pop(key, None)
                return None
            return payload

    def put(self, query: NewsQuery, payload: Any, ttl: float) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be > 0")
        now = self._clock()
        with self._lock:
            self._entries[query.cache_key()] = (now + ttl, payload)
        if now - self._last_sweep >= self._sweep_interval:
            self.sweep()

    def sweep(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
            for key in expired:
                del self._entries[key]
            self._last_sweep = now
        if expired:
            logger.info("cache_swept", removed=len(expired))
        return len(expired)

    def clear(self) -> int:
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
        return removed

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {"size": len(self._entries)}
