"""
Null cache implementation for lib.cache, dood!

A no-op CacheInterface implementation, handy for disabling the suggestion
cache (``cache-size = 0``) or for tests that must always hit the network.
"""

from typing import Any, Dict, Optional

from .interface import CacheInterface
from .types import K, V


class NullCache(CacheInterface[K, V]):
    """No-op cache that never stores anything, dood!"""

    async def get(self, key: K, ttl: Optional[float] = None) -> Optional[V]:
        """Always a cache miss."""
        return None

    async def set(self, key: K, value: V) -> bool:
        """Pretend to store the value.

        Returns:
            bool: Always True
        """
        return True

    def clear(self) -> None:
        pass

    def getStats(self) -> Dict[str, Any]:
        return {"enabled": False}
