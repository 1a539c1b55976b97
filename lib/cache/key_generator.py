"""
Built-in key generator implementations for lib.cache, dood!

Available Generators:
    - StringKeyGenerator: Pass-through for string keys
    - QueryKeyGenerator: Normalized free-text search queries (trimmed, lower-cased)
"""

from .types import KeyGenerator


class StringKeyGenerator(KeyGenerator[str]):
    """
    Pass-through key generator for string keys, dood!

    Example:
        >>> generator = StringKeyGenerator()
        >>> generator.generateKey("user:123")
        'user:123'
    """

    def generateKey(self, obj: str) -> str:
        """
        Return the input string unchanged.

        Raises:
            TypeError: If obj is not a string
        """
        if not isinstance(obj, str):
            raise TypeError(f"StringKeyGenerator expects string input, got {type(obj).__name__}, dood!")

        return obj


class QueryKeyGenerator(KeyGenerator[str]):
    """
    Key generator for user-typed search queries, dood!

    Queries that differ only in surrounding whitespace or letter case
    share one cache entry.

    Example:
        >>> generator = QueryKeyGenerator()
        >>> generator.generateKey("  Chennai ")
        'chennai'
    """

    def generateKey(self, obj: str) -> str:
        if not isinstance(obj, str):
            raise TypeError(f"QueryKeyGenerator expects string input, got {type(obj).__name__}, dood!")

        return obj.strip().lower()
