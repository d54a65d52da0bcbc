"""
repositories/identifier_cache.py

Responsibility: Holds the in-memory, TTL-bounded mapping from zone and record
names to provider identifiers. Shared by every run of a process.
Does NOT: call the DNS provider, decide what to cache, or persist anything
to disk; identifiers are rebuilt from the provider after every restart.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A cached identifier and the monotonic instant it stops being valid."""

    key: str
    value: str
    expires_at: float


class IdentifierCache:
    """
    Fixed-capacity, lazily-expiring name → identifier map.

    Expired entries are treated as misses on read and dropped at that point;
    there is no background sweep. When a new key arrives at capacity, the
    entry with the earliest expiry is evicted (an already-expired one if any).
    A single lock guards the map so concurrent resolution tasks always see a
    consistent state.

    Collaborators:
        - clock: a monotonic time source in seconds, injectable for tests
    """

    def __init__(self, capacity: int, clock: Callable[[], float] = time.monotonic) -> None:
        """
        Initialises an empty cache.

        Args:
            capacity: Maximum number of entries; must be at least 1.
            clock: Returns the current time in seconds. Defaults to
                   time.monotonic so wall-clock corrections never
                   extend or shorten an entry's life.

        Raises:
            ValueError: If capacity is less than 1.
        """
        if capacity < 1:
            raise ValueError(f"cache capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @classmethod
    def for_names(cls, record_names: tuple[str, ...] | list[str], **kwargs) -> IdentifierCache:
        """
        Sizes a cache for one zone plus the given record names.

        Args:
            record_names: The configured record names (duplicates included).

        Returns:
            An IdentifierCache with capacity len(record_names) + 1.
        """
        return cls(capacity=len(record_names) + 1, **kwargs)

    @property
    def capacity(self) -> int:
        return self._capacity

    def get(self, key: str) -> str | None:
        """
        Returns the cached identifier for `key`, or None on a miss.

        An entry whose expiry has passed counts as a miss.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                return None
            return entry.value

    def put(self, key: str, value: str, ttl: float) -> None:
        """
        Stores `value` under `key` for `ttl` seconds.

        A ttl of zero (or less) means caching is disabled and nothing is stored.

        Args:
            key: A zone key or record key built by NameResolver.
            value: Provider identifier.
            ttl: Lifetime in seconds.
        """
        if ttl <= 0:
            return

        with self._lock:
            now = self._clock()
            if key not in self._entries and len(self._entries) >= self._capacity:
                victim = min(self._entries.values(), key=lambda e: e.expires_at)
                del self._entries[victim.key]
                logger.debug("Identifier cache full, evicted %s.", victim.key)
            self._entries[key] = CacheEntry(key=key, value=value, expires_at=now + ttl)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        # Counts expired-but-unread entries too.
        with self._lock:
            return len(self._entries)
