"""TTL-based in-memory cache for API responses."""

import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any


class CacheEntry:
    """
    Cached response payload.

    Parameters
    ----------
    key : str
        Cache key (request path plus disambiguating parameters)
    value : Any
        Cached payload (parsed JSON or text)
    stored_at : float
        Timestamp the entry was stored at, in the owning cache's clock

    """

    __slots__ = ("key", "stored_at", "value")

    def __init__(self, key: str, value: Any, stored_at: float) -> None:
        self.key = key
        self.value = value
        self.stored_at = stored_at

    def is_expired(self, now: float, ttl: float) -> bool:
        """
        Check if the entry has outlived the TTL.

        Parameters
        ----------
        now : float
            Current timestamp
        ttl : float
            Time-to-live in seconds

        Returns
        -------
        bool
            True if expired, False otherwise

        """
        return now - self.stored_at >= ttl

    def __repr__(self) -> str:
        return f"CacheEntry(key={self.key!r}, stored_at={self.stored_at!r})"


class ResponseCache:
    """
    In-memory cache for API responses with a single TTL.

    Expired entries are evicted lazily when they are looked up. When
    ``max_entries`` is set the least recently used entry is evicted once the
    bound is exceeded, which keeps height-keyed historical lookups from
    growing the cache without limit.

    Parameters
    ----------
    ttl : float
        Time-to-live in seconds for every entry
    max_entries : int | None
        Upper bound on stored entries (None = unbounded)
    clock : Callable[[], float]
        Time source, ``time.monotonic`` by default

    """

    def __init__(
        self,
        ttl: float,
        *,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl <= 0:
            msg = f"Cache TTL must be positive, got {ttl}"
            raise ValueError(msg)
        if max_entries is not None and max_entries < 1:
            msg = f"max_entries must be at least 1, got {max_entries}"
            raise ValueError(msg)

        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    def lookup(self, key: str) -> CacheEntry | None:
        """
        Get the live entry for a key.

        Parameters
        ----------
        key : str
            Cache key

        Returns
        -------
        CacheEntry | None
            Entry if found and not expired, None otherwise

        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            if entry.is_expired(self._clock(), self.ttl):
                del self._entries[key]
                return None

            self._entries.move_to_end(key)
            return entry

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get the cached value for a key.

        Parameters
        ----------
        key : str
            Cache key
        default : Any
            Value returned on a miss

        Returns
        -------
        Any
            Cached value if found and valid, ``default`` otherwise

        """
        entry = self.lookup(key)
        return default if entry is None else entry.value

    def set(self, key: str, value: Any) -> CacheEntry:
        """
        Store a value, replacing any previous entry for the key.

        Parameters
        ----------
        key : str
            Cache key
        value : Any
            Value to cache

        Returns
        -------
        CacheEntry
            The newly stored entry

        """
        entry = CacheEntry(key, value, self._clock())
        with self._lock:
            self._entries[key] = entry
            self._entries.move_to_end(key)
            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    self._entries.popitem(last=False)
        return entry

    def clear(self) -> None:
        """Clear all cached entries."""
        with self._lock:
            self._entries.clear()

    def cleanup_expired(self) -> int:
        """
        Remove all expired entries from cache.

        Returns
        -------
        int
            Number of entries removed

        """
        with self._lock:
            now = self._clock()
            expired_keys = [key for key, entry in self._entries.items() if entry.is_expired(now, self.ttl)]
            for key in expired_keys:
                del self._entries[key]
        return len(expired_keys)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.lookup(key) is not None
