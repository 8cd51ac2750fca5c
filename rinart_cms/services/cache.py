"""
In-process TTL cache used in front of the public read paths.

Entries expire after a fixed time-to-live and are dropped explicitly by the
admin write handlers. The cache lives in a single process; running several
API instances means each keeps its own copy.
"""

from __future__ import annotations

import time
from typing import Callable, Generic, Hashable, TypeVar

import cachetools
import structlog

logger = structlog.get_logger(__name__)

V = TypeVar("V")

MISSING = object()

DEFAULT_MAX_ENTRIES = 1024


class TTLCache(Generic[V]):
    """``cachetools.TTLCache`` with a sentinel for misses and logged invalidation."""

    def __init__(
        self,
        ttl_seconds: float,
        *,
        name: str = "cache",
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._name = name
        self._entries: cachetools.TTLCache = cachetools.TTLCache(
            maxsize=max_entries, ttl=max(ttl_seconds, 0), timer=clock
        )

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, key: Hashable, default: object = MISSING) -> V | object:
        """Return the cached value, or ``default`` when missing or expired."""

        return self._entries.get(key, default)

    def contains(self, key: Hashable) -> bool:
        return key in self._entries

    def set(self, key: Hashable, value: V) -> V:
        if self._ttl > 0:
            self._entries[key] = value
        return value

    def invalidate(self, key: Hashable) -> None:
        if self._entries.pop(key, MISSING) is not MISSING:
            logger.debug("cache.invalidated", cache=self._name, key=str(key))

    def clear(self) -> None:
        self._entries.clear()
        logger.debug("cache.cleared", cache=self._name)

    def __len__(self) -> int:
        self._entries.expire()
        return len(self._entries)
