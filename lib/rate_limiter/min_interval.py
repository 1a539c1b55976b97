import asyncio
import logging
import time
from typing import Any, Dict, List

from .interface import RateLimiterInterface

logger = logging.getLogger(__name__)


class MinIntervalRateLimiter(RateLimiterInterface):
    """
    Minimum-interval rate limiter.

    Guarantees that two calls on the same queue start at least
    ``minInterval`` seconds apart. This is what public geocoders such as
    Nominatim ask for ("no more than one request per second").

    Algorithm:
        1. Compute time elapsed since the last recorded call on the queue
        2. If it is below minInterval, sleep for the remainder
        3. Record the current time as the last call

    Thread Safety:
        Uses an asyncio.Lock per queue, so concurrent callers are
        serialized and each one measures against the timestamp left by
        the previous caller.

    Example:
        >>> limiter = MinIntervalRateLimiter(minInterval=1.1)
        >>> await limiter.initialize()
        >>> await limiter.applyLimit("nominatim")
        >>> await limiter.applyLimit("nominatim")  # Sleeps ~1.1 seconds
    """

    def __init__(self, minInterval: float = 1.1):
        """
        Initialize the limiter.

        Args:
            minInterval: Minimum spacing between calls in seconds

        Raises:
            ValueError: If minInterval is negative
        """
        if minInterval < 0:
            raise ValueError("minInterval must not be negative")

        self._minInterval = float(minInterval)
        self._lastRequestTime: Dict[str, float] = {}
        self._totalWaits: Dict[str, int] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._initialized = False

    @property
    def minInterval(self) -> float:
        return self._minInterval

    async def initialize(self) -> None:
        if self._initialized:
            logger.warning("MinIntervalRateLimiter already initialized")
            return

        self._initialized = True
        logger.info(f"MinIntervalRateLimiter initialized with {self._minInterval:.2f}s interval, dood!")

    async def destroy(self) -> None:
        self._lastRequestTime.clear()
        self._totalWaits.clear()
        self._locks.clear()
        self._initialized = False
        logger.info("MinIntervalRateLimiter destroyed, dood!")

    def _ensureQueue(self, queue: str) -> None:
        if queue not in self._locks:
            self._locks[queue] = asyncio.Lock()
            self._totalWaits[queue] = 0
            logger.debug(f"Auto-registered queue '{queue}', dood!")

    async def applyLimit(self, queue: str = "default") -> None:
        """
        Wait out the remainder of the minimum interval, then record the call.

        Args:
            queue: Name of the queue. Auto-registered on first use.
        """
        self._ensureQueue(queue)

        async with self._locks[queue]:
            lastRequest = self._lastRequestTime.get(queue)
            if lastRequest is not None:
                elapsed = time.monotonic() - lastRequest
                if elapsed < self._minInterval:
                    waitTime = self._minInterval - elapsed
                    self._totalWaits[queue] += 1
                    logger.debug(f"Rate limit reached for queue '{queue}', waiting {waitTime:.2f} seconds, dood!")
                    await asyncio.sleep(waitTime)

            self._lastRequestTime[queue] = time.monotonic()

    def getStats(self, queue: str = "default") -> Dict[str, Any]:
        """
        Get current statistics for a queue.

        Returns:
            Dictionary containing:
            - minInterval: Configured spacing in seconds
            - lastRequestAge: Seconds since the last call (None if never called)
            - nextAllowedIn: Seconds until a call would go through without waiting
            - totalWaits: How many calls had to sleep

        Raises:
            ValueError: If the queue doesn't exist
        """
        if queue not in self._locks:
            raise ValueError(f"Queue '{queue}' does not exist")

        lastRequest = self._lastRequestTime.get(queue)
        lastRequestAge = None if lastRequest is None else time.monotonic() - lastRequest
        nextAllowedIn = 0.0 if lastRequestAge is None else max(0.0, self._minInterval - lastRequestAge)

        return {
            "minInterval": self._minInterval,
            "lastRequestAge": lastRequestAge,
            "nextAllowedIn": nextAllowedIn,
            "totalWaits": self._totalWaits[queue],
        }

    def listQueues(self) -> List[str]:
        return list(self._locks.keys())
