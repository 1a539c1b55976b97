"""
Dictionary-based cache implementation for lib.cache, dood!

Entries are kept in a plain dict in insertion order. Expired entries are
treated as absent (and dropped when read), and when the size bound is
exceeded the oldest *inserted* entry is evicted. Reads never refresh an
entry's position, so this is not an LRU.
"""

import logging
import time
from threading import RLock
from typing import Any, Dict, Generic, Optional, Tuple

from .interface import CacheInterface
from .types import K, KeyGenerator, V

logger = logging.getLogger(__name__)


class DictCache(CacheInterface[K, V], Generic[K, V]):
    """
    In-memory cache with TTL expiration and a bounded entry count, dood!

    Example:
        >>> cache = DictCache[str, list](keyGenerator=QueryKeyGenerator(), defaultTtl=300, maxSize=50)
        >>> await cache.set("Nellore", [{"display_name": "Nellore, Andhra Pradesh, India"}])
        >>> await cache.get("nellore")
        [{'display_name': 'Nellore, Andhra Pradesh, India'}]
    """

    def __init__(
        self,
        keyGenerator: KeyGenerator[K],
        defaultTtl: float = 3600,
        maxSize: int = 1000,
    ):
        """
        Initialize DictCache.

        Args:
            keyGenerator: Converts keys of type K into string dict keys
            defaultTtl: Default entry lifetime in seconds (negative disables expiration)
            maxSize: Maximum number of entries kept, 0 or less means unbounded
        """
        self._keyGenerator = keyGenerator
        self._defaultTtl = defaultTtl
        self._maxSize = maxSize
        self._store: Dict[str, Tuple[V, float]] = {}
        self._lock = RLock()

    def _isExpired(self, timestamp: float, ttl: Optional[float] = None) -> bool:
        effectiveTtl = ttl if ttl is not None else self._defaultTtl
        if effectiveTtl < 0:
            return False
        return time.time() - timestamp >= effectiveTtl

    async def get(self, key: K, ttl: Optional[float] = None) -> Optional[V]:
        try:
            strKey = self._keyGenerator.generateKey(key)
        except Exception as e:
            logger.error(f"Failed to generate cache key for {key!r}: {e}")
            return None

        with self._lock:
            entry = self._store.get(strKey)
            if entry is None:
                logger.debug(f"Cache miss for key: {strKey}")
                return None

            value, timestamp = entry
            if self._isExpired(timestamp, ttl):
                del self._store[strKey]
                logger.debug(f"Removed expired entry: {strKey}")
                return None

            logger.debug(f"Cache hit for key: {strKey}")
            return value

    async def set(self, key: K, value: V) -> bool:
        try:
            strKey = self._keyGenerator.generateKey(key)
        except Exception as e:
            logger.error(f"Failed to generate cache key for {key!r}: {e}")
            return False

        with self._lock:
            # Re-setting an existing key keeps its insertion position
            self._store[strKey] = (value, time.time())

            if self._maxSize > 0 and len(self._store) > self._maxSize:
                oldestKey = next(iter(self._store))
                del self._store[oldestKey]
                logger.debug(f"Evicted oldest cache entry: {oldestKey}")

        return True

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
        logger.debug("Cleared all cache data, dood!")

    def getStats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "entries": len(self._store),
                "maxSize": self._maxSize,
                "defaultTtl": self._defaultTtl,
                "threadSafe": True,
            }
