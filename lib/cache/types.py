"""
Core type definitions and protocols for lib.cache, dood!
"""

from typing import Protocol, TypeVar

K = TypeVar("K")  # Key type
V = TypeVar("V")  # Value type
T = TypeVar("T", contravariant=True)  # Object type accepted by key generators


class KeyGenerator(Protocol[T]):
    """
    Protocol for turning arbitrary objects into string cache keys, dood!

    Example:
        >>> class UpperKeyGenerator(KeyGenerator[str]):
        ...     def generateKey(self, obj: str) -> str:
        ...         return obj.upper()
    """

    def generateKey(self, obj: T) -> str:
        """
        Generate string cache key from object.

        Args:
            obj: The object to convert to a cache key

        Returns:
            str: A string representation suitable for use as a cache key
        """
        ...
