"""
Formwork Kernel — Component Cache

A thin service over a key/value backend (get, set, delete). Discovery
metadata and template sources are cached through it in production-like
environments; in development every read misses.

The service records the keys it wrote so clear_all() can remove them
without the backend supporting prefix scans.
"""

from __future__ import annotations

import copy
import logging
import time
from collections.abc import Callable
from typing import Any, Protocol

from formwork.config import settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Backend protocol
# ---------------------------------------------------------------------------


class CacheBackend(Protocol):
    """Key/value store consumed by the cache service. get() returns None on a miss."""

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any, ttl: int) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryCache:
    """
    In-process backend with per-entry expiry.
    Values are deep-copied in and out so callers never share state with the cache.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: dict[str, tuple[float, Any]] = {}
        self._clock = clock

    def get(self, key: str) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        return copy.deepcopy(value)

    def set(self, key: str, value: Any, ttl: int) -> None:
        self._entries[key] = (self._clock() + ttl, copy.deepcopy(value))

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ComponentCacheService:
    """Prefixed, switchable cache for component metadata and template sources."""

    def __init__(
        self,
        backend: CacheBackend | None = None,
        *,
        enabled: bool | None = None,
        ttl: int | None = None,
        prefix: str | None = None,
    ) -> None:
        self._backend: CacheBackend = backend if backend is not None else MemoryCache()
        self._enabled = enabled
        self._ttl = ttl
        self._prefix = prefix if prefix is not None else settings.COMPONENT_CACHE_PREFIX
        self._written: set[str] = set()
        self._stats: dict[str, int] = {"hits": 0, "misses": 0, "writes": 0}

    def is_enabled(self) -> bool:
        if self._enabled is not None:
            return self._enabled
        return settings.caching_enabled

    def ttl(self) -> int:
        return self._ttl if self._ttl is not None else settings.COMPONENT_CACHE_TTL

    def key_for(self, name: str) -> str:
        return f"{self._prefix}{name}"

    def get(self, name: str) -> Any:
        if not self.is_enabled():
            return None
        value = self._backend.get(self.key_for(name))
        if value is None:
            self._stats["misses"] += 1
            logger.debug("ComponentCacheService: miss %s", name)
        else:
            self._stats["hits"] += 1
        return value

    def set(self, name: str, value: Any) -> None:
        if not self.is_enabled():
            return
        key = self.key_for(name)
        self._backend.set(key, value, self.ttl())
        self._written.add(key)
        self._stats["writes"] += 1

    def delete(self, name: str) -> None:
        key = self.key_for(name)
        self._backend.delete(key)
        self._written.discard(key)

    def clear_all(self) -> int:
        """Delete every key this service wrote. Returns how many were removed."""
        count = len(self._written)
        for key in sorted(self._written):
            self._backend.delete(key)
        self._written.clear()
        if count:
            logger.info("ComponentCacheService: cleared %d entries with prefix %s", count, self._prefix)
        return count

    def get_stats(self) -> dict[str, Any]:
        return {
            "enabled": self.is_enabled(),
            "ttl": self.ttl(),
            "prefix": self._prefix,
            "entries": len(self._written),
            **self._stats,
        }
