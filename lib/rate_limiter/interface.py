from abc import ABC, abstractmethod
from typing import Any, Dict, List


class RateLimiterInterface(ABC):
    """
    Abstract base class for rate limiter implementations.

    Supports multiple independent queues; a queue is registered
    automatically the first time it is used.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """
        Initialize the rate limiter.

        Called once during setup, before the first applyLimit().
        """
        pass

    @abstractmethod
    async def destroy(self) -> None:
        """
        Clean up rate limiter resources. Called during shutdown.
        """
        pass

    @abstractmethod
    async def applyLimit(self, queue: str = "default") -> None:
        """
        Apply rate limiting for the specified queue.

        Sleeps as long as needed so that the caller respects the configured
        limit, then records the call.

        Args:
            queue: Name of the queue to apply rate limiting to.
        """
        pass

    @abstractmethod
    def getStats(self, queue: str = "default") -> Dict[str, Any]:
        """
        Get current rate limiting statistics for a queue.

        Raises:
            ValueError: If the queue doesn't exist
        """
        pass

    @abstractmethod
    def listQueues(self) -> List[str]:
        """
        Get list of all queues seen by this rate limiter.
        """
        pass
