"""
Abstract cache interface for lib.cache, dood!

Every cache backend used by the places service implements this interface,
so the service can swap DictCache for NullCache (or anything else) freely.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Optional

from .types import K, V


class CacheInterface(ABC, Generic[K, V]):
    """
    Generic async cache interface for any key-value storage, dood!

    Type Parameters:
        K: The key type
        V: The value type
    """

    @abstractmethod
    async def get(self, key: K, ttl: Optional[float] = None) -> Optional[V]:
        """
        Get cached value by key.

        Args:
            key: The cache key to retrieve
            ttl: Optional TTL override in seconds. ``0`` means every entry is
                 already expired, a negative value disables expiration.

        Returns:
            Optional[V]: The cached value if found and not expired, None otherwise
        """
        pass

    @abstractmethod
    async def set(self, key: K, value: V) -> bool:
        """
        Store value in cache with the current timestamp.

        Args:
            key: The cache key to store the value under
            value: The value to cache

        Returns:
            bool: True if the value was stored, False otherwise
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove all entries from the cache."""
        pass

    @abstractmethod
    def getStats(self) -> Dict[str, Any]:
        """
        Get implementation-specific cache statistics.

        Returns:
            Dict[str, Any]: Dictionary containing cache statistics
        """
        pass
