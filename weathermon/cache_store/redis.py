"""Redis-backed cache with per-key expiry."""

from typing import Optional

from weathermon.cache_store.base import CacheStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="cache_store/redis")


class RedisCacheStore(CacheStore):
    """Cache entries stored with SETEX. Redis errors are logged, never raised."""

    def __init__(self, client, prefix: str = "") -> None:
        """Wrap a redis client; `prefix` namespaces keys when Redis is shared."""
        logger.debug("Initializing RedisCacheStore")
        self.client = client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        """Fetch a value, or None on a miss or a Redis error."""
        try:
            raw = self.client.get(self._key(key))
        except Exception as exc:
            logger.error("Failed to read %s from Redis: %s", key, exc)
            return None
        if raw is None:
            return None
        if isinstance(raw, bytes):
            try:
                return raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                logger.warning("Discarding undecodable cache entry %s: %s", key, exc)
                return None
        return str(raw)

    def set(self, key: str, value: str, ttl_seconds: int) -> bool:
        """Write a value with an expiry; returns False if Redis rejected it."""
        try:
            self.client.setex(self._key(key), ttl_seconds, value.encode("utf-8"))
        except Exception as exc:
            logger.error("Failed to write %s to Redis: %s", key, exc)
            return False
        return True

    def delete(self, key: str) -> None:
        try:
            self.client.delete(self._key(key))
        except Exception as exc:
            logger.error("Failed to delete %s from Redis: %s", key, exc)

    def clear(self) -> None:
        """Best-effort clear of keys under the configured prefix."""
        if not self.prefix:
            logger.warning("Refusing to clear an unprefixed Redis cache")
            return
        try:
            for key in self.client.scan_iter(f"{self.prefix}*"):
                self.client.delete(key)
        except Exception as exc:
            logger.error("Failed to clear cache keys from Redis: %s", exc)
