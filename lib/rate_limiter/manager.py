import logging
from threading import RLock
from typing import Any, Dict, List, Optional, Type

from .interface import RateLimiterInterface
from .min_interval import MinIntervalRateLimiter
from .types import RateLimiterConfig, RateLimiterManagerConfig

logger = logging.getLogger(__name__)

DEFAULT_LIMITER_NAME = "default"
# Nominatim usage policy: at most one request per second, plus some slack
DEFAULT_MIN_INTERVAL = 1.1

RATE_LIMITER_TYPES: Dict[str, Type[RateLimiterInterface]] = {
    "mininterval": MinIntervalRateLimiter,
    "min_interval": MinIntervalRateLimiter,
}


class RateLimiterManager(RateLimiterInterface):
    """
    Process-wide registry of named rate limiters and queue bindings, dood!

    The manager is a RateLimiterInterface itself: PlaceSearchService gets
    the manager as its limiter and calls ``applyLimit("nominatim")``, the
    manager then picks the limiter bound to that queue (or the default one).
    Every input on the page goes through the same instance, so the
    spacing between geocoder calls holds for all of them together.

    Usage:
        >>> manager = RateLimiterManager.getInstance()
        >>> await manager.loadConfig({
        ...     "ratelimiters": {"nominatim-policy": {"type": "MinInterval", "config": {"minInterval": 1.1}}},
        ...     "queues": {"nominatim": "nominatim-policy"},
        ... })
        >>> await manager.applyLimit("nominatim")
    """

    _instance: Optional["RateLimiterManager"] = None
    _lock = RLock()

    def __new__(cls) -> "RateLimiterManager":
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
            return cls._instance

    def __init__(self):
        # __init__ runs on every RateLimiterManager() call, keep the state
        if hasattr(self, "initialized"):
            return

        self._rateLimiters: Dict[str, RateLimiterInterface] = {}
        self._queueMappings: Dict[str, str] = {}
        self._defaultLimiter: Optional[str] = None
        self.initialized = True
        logger.info("RateLimiterManager initialized, dood!")

    @classmethod
    def getInstance(cls) -> "RateLimiterManager":
        return cls()

    async def initialize(self) -> None:
        """
        Register the fallback limiter unless one named "default" exists.

        The fallback keeps the public Nominatim spacing, so an empty
        ``[ratelimiter]`` section is still polite to the server.
        """
        if DEFAULT_LIMITER_NAME in self._rateLimiters:
            return

        fallback = MinIntervalRateLimiter(minInterval=DEFAULT_MIN_INTERVAL)
        await fallback.initialize()
        self.registerRateLimiter(DEFAULT_LIMITER_NAME, fallback)
        logger.debug(f"Using MinIntervalRateLimiter({DEFAULT_MIN_INTERVAL}s) as fallback limiter, dood!")

    @staticmethod
    def _createLimiter(name: str, limiterConfig: RateLimiterConfig) -> RateLimiterInterface:
        limiterType = str(limiterConfig.get("type", ""))
        limiterClass = RATE_LIMITER_TYPES.get(limiterType.lower())
        if limiterClass is None:
            raise ValueError(f"Unknown rate limiter type '{limiterType}' for '{name}'")

        try:
            return limiterClass(**limiterConfig.get("config", {}))
        except TypeError as e:
            raise ValueError(f"Invalid config for rate limiter '{name}': {e}") from e

    async def loadConfig(self, config: RateLimiterManagerConfig) -> None:
        """
        Load the ``[ratelimiter]`` configuration section.

        The whole section is validated before anything gets registered, so a
        broken section leaves the manager untouched.

        Args:
            config: Dict with optional ``ratelimiters`` (name -> type and
                constructor config), ``queues`` (queue -> limiter name) and
                ``default`` (limiter for unbound queues, "default" if omitted)

        Raises:
            ValueError: On unknown limiter types, bad limiter configs, names
                that are already registered or references to limiters that
                do not exist
        """
        limiterConfigs = config.get("ratelimiters", {})
        queues = config.get("queues", {})
        defaultName = config.get("default", DEFAULT_LIMITER_NAME)

        duplicates = sorted(set(limiterConfigs) & set(self._rateLimiters))
        if duplicates:
            raise ValueError(f"Rate limiter(s) already registered: {', '.join(duplicates)}")

        knownNames = set(self._rateLimiters) | set(limiterConfigs) | {DEFAULT_LIMITER_NAME}
        for queueName, limiterName in queues.items():
            if limiterName not in knownNames:
                raise ValueError(f"Queue '{queueName}' is bound to unknown rate limiter '{limiterName}'")
        if defaultName not in knownNames:
            raise ValueError(f"Default rate limiter '{defaultName}' is not configured")

        newLimiters = {name: self._createLimiter(name, limiterConfig) for name, limiterConfig in limiterConfigs.items()}
        for name, limiter in newLimiters.items():
            await limiter.initialize()
            self.registerRateLimiter(name, limiter)

        await self.initialize()

        for queueName, limiterName in queues.items():
            self.bindQueue(queueName, limiterName)
        self.setDefaultLimiter(defaultName)

        logger.debug(f"Loaded {len(newLimiters)} rate limiter(s) and {len(queues)} queue binding(s), dood!")

    def registerRateLimiter(self, name: str, limiter: RateLimiterInterface) -> None:
        """
        Register a limiter under a name. The first one registered becomes
        the default until setDefaultLimiter() says otherwise.

        Raises:
            ValueError: If name is already registered
        """
        if name in self._rateLimiters:
            raise ValueError(f"Rate limiter '{name}' is already registered")

        self._rateLimiters[name] = limiter
        logger.info(f"Registered {type(limiter).__name__} as '{name}', dood!")

        if self._defaultLimiter is None:
            self._defaultLimiter = name

    def setDefaultLimiter(self, name: str) -> None:
        if name not in self._rateLimiters:
            raise ValueError(f"Rate limiter '{name}' is not registered")

        self._defaultLimiter = name
        logger.info(f"Default rate limiter is now '{name}', dood!")

    def bindQueue(self, queue: str, limiterName: str) -> None:
        """
        Route a queue to a registered limiter.

        Raises:
            ValueError: If the rate limiter name is not registered
        """
        if limiterName not in self._rateLimiters:
            raise ValueError(f"Rate limiter '{limiterName}' is not registered")

        self._queueMappings[queue] = limiterName
        logger.info(f"Queue '{queue}' -> rate limiter '{limiterName}', dood!")

    def _getLimiterName(self, queue: str) -> str:
        if not self._rateLimiters:
            raise RuntimeError("No rate limiters registered, dood!")

        limiterName = self._queueMappings.get(queue, self._defaultLimiter)
        if limiterName is None:
            raise RuntimeError("No default rate limiter set, dood!")

        return limiterName

    async def applyLimit(self, queue: str = "default") -> None:
        """
        Wait until the limiter responsible for the queue lets the call through.

        Raises:
            RuntimeError: If no rate limiters are registered
        """
        await self._rateLimiters[self._getLimiterName(queue)].applyLimit(queue)

    def getStats(self, queue: str = "default") -> Dict[str, Any]:
        """
        Get statistics of the limiter responsible for the queue, with an
        extra ``limiter`` key naming it.

        Raises:
            RuntimeError: If no rate limiters are registered
            ValueError: If the limiter has not seen the queue yet
        """
        limiterName = self._getLimiterName(queue)
        stats = dict(self._rateLimiters[limiterName].getStats(queue))
        stats["limiter"] = limiterName
        return stats

    def listQueues(self) -> List[str]:
        """Bound queues first, then queues the limiters have seen."""
        queues: List[str] = list(self._queueMappings)
        for limiter in self._rateLimiters.values():
            queues.extend(queue for queue in limiter.listQueues() if queue not in queues)
        return queues

    def listRateLimiters(self) -> List[str]:
        return list(self._rateLimiters)

    def getQueueMappings(self) -> Dict[str, str]:
        return dict(self._queueMappings)

    def getDefaultLimiter(self) -> Optional[str]:
        return self._defaultLimiter

    async def destroy(self) -> None:
        """
        Destroy every registered limiter and forget all bindings.

        Called on shutdown, and by tests to get a clean singleton.
        """
        for name, limiter in self._rateLimiters.items():
            try:
                await limiter.destroy()
            except Exception as e:
                logger.error(f"Error destroying rate limiter '{name}': {e}")

        self._rateLimiters.clear()
        self._queueMappings.clear()
        self._defaultLimiter = None
        logger.info("RateLimiterManager cleaned up, dood!")
