"""Shared protocol for cache backends."""

from typing import Optional, Protocol


class CacheStore(Protocol):
    """Expiring key/value store holding JSON strings. Never authoritative."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if missing, expired or unreadable."""

    def set(self, key: str, value: str, ttl_seconds: int) -> bool:
        """Store `value` for `ttl_seconds`; return False if the write did not happen."""

    def delete(self, key: str) -> None:
        """Remove a key without raising if it is absent."""

    def clear(self) -> None:
        """Drop every key this store owns."""
