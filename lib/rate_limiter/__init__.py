"""
Rate Limiter Library

Reusable async rate limiting with multiple independent queues and a
singleton manager that maps queues to limiter backends.

Example:
    >>> from lib.rate_limiter import MinIntervalRateLimiter, RateLimiterManager
    >>>
    >>> manager = RateLimiterManager.getInstance()
    >>>
    >>> nominatimLimiter = MinIntervalRateLimiter(minInterval=1.1)
    >>> await nominatimLimiter.initialize()
    >>>
    >>> manager.registerRateLimiter("nominatim-policy", nominatimLimiter)
    >>> manager.bindQueue("nominatim", "nominatim-policy")
    >>>
    >>> await manager.applyLimit("nominatim")  # Sleeps if the last call was < 1.1s ago
"""

from .interface import RateLimiterInterface
from .manager import RateLimiterManager
from .min_interval import MinIntervalRateLimiter
from .types import RateLimiterConfig, RateLimiterManagerConfig

__all__ = [
    "RateLimiterInterface",
    "RateLimiterManager",
    "MinIntervalRateLimiter",
    "RateLimiterConfig",
    "RateLimiterManagerConfig",
]
