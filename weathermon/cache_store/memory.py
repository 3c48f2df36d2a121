"""In-memory TTL cache, intended for development and tests."""

import threading
import time
from typing import Callable, Optional

from weathermon.cache_store.base import CacheStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="cache_store/in_memory")


class InMemoryCacheStore(CacheStore):
    """Thread-safe, TTL-aware in-memory cache (dev/test)."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        logger.debug("Initializing InMemoryCacheStore")
        self._clock = clock
        self._entries: dict[str, tuple[float, str]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        """Return the value, dropping it first if it has expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at <= self._clock():
                self._entries.pop(key, None)
                return None
            return value

    def set(self, key: str, value: str, ttl_seconds: int) -> bool:
        with self._lock:
            self._entries[key] = (self._clock() + ttl_seconds, value)
        return True

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
