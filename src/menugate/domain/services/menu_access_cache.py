"""TTL cache for resolved menus.

Resolution results are cached per identity. Structural and role-row changes
clear the whole cache, since a role row touches every user of that role;
a user-row change drops only that user's entries.

Thread-safe; one instance lives on the application state.
"""

import threading
import time
from dataclasses import dataclass
from typing import Any

from menugate.domain.entities.identity import Identity


@dataclass
class CacheEntry:
    """Cache entry with TTL support.

    Attributes:
        value: The cached value.
        expires_at: Unix timestamp when this entry expires.
    """

    value: Any
    expires_at: float


class MenuAccessCache:
    """Thread-safe TTL cache keyed by identity.

    Cache keys are formatted as: {user_id}:{role}:{company_id}:{company_access}:{kind}
    """

    def __init__(self, ttl_seconds: int = 300):
        """Initialize the cache.

        Args:
            ttl_seconds: Time-to-live for cache entries in seconds. 0 disables caching.
        """
        self.ttl_seconds = ttl_seconds
        self._cache: dict[str, CacheEntry] = {}
        self._lock = threading.RLock()

    def _make_key(self, identity: Identity, kind: str) -> str:
        return (
            f"{identity.user_id}:{identity.role.value}:{identity.company_id}:"
            f"{identity.company_access.value}:{kind}"
        )

    def get(self, identity: Identity, kind: str = "resolved") -> Any | None:
        """Get a cached value, or None if missing or expired."""
        key = self._make_key(identity, kind)

        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None

            if time.time() > entry.expires_at:
                del self._cache[key]
                return None

            return entry.value

    def set(self, identity: Identity, value: Any, kind: str = "resolved") -> None:
        """Store a value for ``identity``."""
        if self.ttl_seconds <= 0:
            return
        key = self._make_key(identity, kind)
        expires_at = time.time() + self.ttl_seconds

        with self._lock:
            self._cache[key] = CacheEntry(value=value, expires_at=expires_at)

    def invalidate_user(self, user_id: str) -> None:
        """Drop every entry cached for ``user_id``."""
        with self._lock:
            keys_to_delete = [key for key in self._cache if key.startswith(f"{user_id}:")]
            for key in keys_to_delete:
                del self._cache[key]

    def invalidate_all(self) -> None:
        """Clear entire cache."""
        with self._lock:
            self._cache.clear()

    def size(self) -> int:
        """Get current cache size."""
        with self._lock:
            return len(self._cache)
