"""
TTL cache for expensive read results.

Entries expire lazily: freshness is checked on read and stale entries are
dropped at that moment. There is no timer and no capacity-based eviction.

Values are deep-copied on the way in and on the way out, so a caller that
mutates a returned dict cannot change what later callers see.
"""

from __future__ import annotations

import copy
import time
from dataclasses import dataclass
from typing import (
    Awaitable,
    Callable,
    Dict,
    Generic,
    List,
    Optional,
    Tuple,
    TypeVar,
)

from neo_access.utils.logging import get_logger

V = TypeVar("V")

_logger = get_logger(__name__)


@dataclass
class CacheEntry(Generic[V]):
    """A cached value and its absolute expiry on the cache clock (seconds)."""

    value: V
    expires_at: float


class TTLCache(Generic[V]):
    """
    In-memory cache with a per-instance default TTL.

    Example:
        >>> cache: TTLCache[dict] = TTLCache("rpc", ttl_ms=30_000)
        >>> cache.set("mainnet:blockchain_info", {"height": 100})
        >>> cache.get("mainnet:blockchain_info")
        {'height': 100}
        >>> cache.has("unknown")
        False
    """

    def __init__(
        self,
        name: str = "default",
        ttl_ms: int = 60_000,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the cache.

        Args:
            name: Cache name used in log records.
            ttl_ms: Default time-to-live in milliseconds.
            clock: Monotonic clock returning seconds.
        """
        if ttl_ms <= 0:
            raise ValueError("ttl_ms must be positive")

        self._name = name
        self._ttl_ms = ttl_ms
        self._clock = clock
        self._entries: Dict[str, CacheEntry[V]] = {}
        _logger.debug(
            "Cache created",
            extra={"cache": name, "ttl_ms": ttl_ms},
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def ttl_ms(self) -> int:
        return self._ttl_ms

    @property
    def size(self) -> int:
        """Number of stored entries, including ones not yet found stale."""
        return len(self._entries)

    def _fresh_entry(self, key: str) -> Optional[CacheEntry[V]]:
        entry = self._entries.get(key)
        if entry is None:
            _logger.debug("Cache miss", extra={"cache": self._name, "key": key})
            return None

        if self._clock() >= entry.expires_at:
            del self._entries[key]
            _logger.debug("Cache entry expired", extra={"cache": self._name, "key": key})
            return None

        _logger.debug("Cache hit", extra={"cache": self._name, "key": key})
        return entry

    def get(self, key: str, default: Optional[V] = None) -> Optional[V]:
        """
        Get a fresh value.

        Args:
            key: Cache key.
            default: Returned when the key is absent or expired.

        Returns:
            Cached value or ``default``.
        """
        entry = self._fresh_entry(key)
        return default if entry is None else copy.deepcopy(entry.value)

    def has(self, key: str) -> bool:
        """Check whether ``key`` holds an unexpired value."""
        return self._fresh_entry(key) is not None

    def set(self, key: str, value: V, ttl_ms: Optional[int] = None) -> None:
        """
        Store a value, overwriting any previous entry and resetting its expiry.

        Args:
            key: Cache key.
            value: Value to cache.
            ttl_ms: Override of the default TTL for this entry.
        """
        ttl = self._ttl_ms if ttl_ms is None else ttl_ms
        if ttl <= 0:
            raise ValueError("ttl_ms must be positive")
        self._entries[key] = CacheEntry(
            value=copy.deepcopy(value),
            expires_at=self._clock() + ttl / 1000,
        )
        _logger.debug("Cache set", extra={"cache": self._name, "key": key, "ttl_ms": ttl})

    async def get_or_compute(
        self,
        key: str,
        factory: Callable[[], Awaitable[V]],
        ttl_ms: Optional[int] = None,
    ) -> V:
        """
        Return the cached value, or await ``factory`` and cache its result.

        Failures raised by ``factory`` propagate and nothing is cached.
        """
        entry = self._fresh_entry(key)
        if entry is not None:
            return copy.deepcopy(entry.value)

        value = await factory()
        self.set(key, value, ttl_ms)
        return value

    def remove(self, key: str) -> None:
        """Delete ``key`` whether or not it is fresh."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove every entry."""
        self._entries.clear()
        _logger.debug("Cache cleared", extra={"cache": self._name})

    def keys(self) -> List[str]:
        """Keys of entries that are still fresh."""
        return [key for key, _ in self.entries()]

    def entries(self) -> List[Tuple[str, V]]:
        """Snapshot of fresh ``(key, value)`` pairs."""
        now = self._clock()
        return [
            (key, copy.deepcopy(entry.value))
            for key, entry in self._entries.items()
            if now < entry.expires_at
        ]
