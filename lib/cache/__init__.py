"""
lib.cache - Generic async cache library for LANE Places, dood!

Core Components:
- CacheInterface: Abstract base class for all cache implementations
- KeyGenerator: Protocol for generating cache keys from objects
- DictCache: In-memory cache with TTL and insertion-order size bound
- NullCache: No-op cache for testing and debugging

Example Usage:
    >>> from lib.cache import DictCache, QueryKeyGenerator
    >>>
    >>> cache = DictCache[str, list](
    ...     keyGenerator=QueryKeyGenerator(),
    ...     defaultTtl=300,
    ...     maxSize=50
    ... )
    >>>
    >>> await cache.set("  Chennai ", [{"display_name": "Chennai, Tamil Nadu, India"}])
    >>> results = await cache.get("chennai")
"""

from .dict_cache import DictCache
from .interface import CacheInterface
from .key_generator import QueryKeyGenerator, StringKeyGenerator
from .null_cache import NullCache
from .types import K, KeyGenerator, T, V

__all__ = [
    # Core types
    "KeyGenerator",
    "K",
    "V",
    "T",
    # Interfaces
    "CacheInterface",
    # Implementations
    "DictCache",
    "NullCache",
    # Key generators
    "StringKeyGenerator",
    "QueryKeyGenerator",
]
