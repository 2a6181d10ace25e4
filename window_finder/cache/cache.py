"""In-memory cache with hierarchical namespaces and per-entry time-to-live."""

import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple


class TTLCache:
    """Thread-safe cache of values grouped by namespace, each entry with its own TTL."""

    def __init__(self, clock: Callable[[], float] = time.time):
        """
        Initialize the cache.

        Args:
            clock: Time source returning seconds
        """
        self._clock = clock
        self._lock = threading.RLock()
        # {namespace_path: {key: {"value": Any, "timestamp": float, "ttl": float}}}
        # Example: {"catalog": {"merged": {...}}, "favicons": {"https://...": {...}}}
        self._cache: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def get(self, namespace_path: str, key: str, default: Any = None) -> Any:
        """
        Get a value from cache.

        Args:
            namespace_path: Namespace path (e.g., "catalog", "favicons")
            key: Key within the namespace
            default: Default value if key not found or expired

        Returns:
            Cached value or default
        """
        entry = self.get_entry(namespace_path, key)
        if entry is None:
            return default
        return entry[0]

    def get_entry(self, namespace_path: str, key: str) -> Optional[Tuple[Any, float]]:
        """
        Get a value together with the time it was stored.

        Args:
            namespace_path: Namespace path
            key: Key within the namespace

        Returns:
            (value, timestamp) or None if missing or expired
        """
        with self._lock:
            namespace_cache = self._cache.get(namespace_path)
            if not namespace_cache or key not in namespace_cache:
                return None

            entry = namespace_cache[key]
            timestamp = entry["timestamp"]
            ttl = entry["ttl"]

            # An entry is fresh while its age is strictly below the TTL
            if ttl > 0 and (self._clock() - timestamp) >= ttl:
                del namespace_cache[key]
                if not namespace_cache:
                    del self._cache[namespace_path]
                return None

            return entry["value"], timestamp

    def set(self, namespace_path: str, key: str, value: Any, ttl: float = 0, timestamp: Optional[float] = None) -> None:
        """
        Set a value in cache.

        Args:
            namespace_path: Namespace path
            key: Key within the namespace
            value: Value to cache
            ttl: Time to live in seconds (0 = no expiration)
            timestamp: Time the value was produced (defaults to now)
        """
        with self._lock:
            self._cache.setdefault(namespace_path, {})[key] = {
                "value": value,
                "timestamp": self._clock() if timestamp is None else timestamp,
                "ttl": ttl
            }

    def invalidate(self, namespace_path: str, key: Optional[str] = None) -> None:
        """
        Invalidate (remove) a cache entry or entire namespace.

        Args:
            namespace_path: Namespace path
            key: Optional key within the namespace. If None, invalidates entire namespace.
        """
        with self._lock:
            if namespace_path not in self._cache:
                return

            if key is None:
                del self._cache[namespace_path]
            else:
                namespace_cache = self._cache[namespace_path]
                namespace_cache.pop(key, None)
                if not namespace_cache:
                    del self._cache[namespace_path]

    def invalidate_all(self) -> None:
        """Invalidate all cache entries."""
        with self._lock:
            self._cache.clear()

    def size(self, namespace_path: str) -> int:
        with self._lock:
            return len(self._cache.get(namespace_path, {}))
