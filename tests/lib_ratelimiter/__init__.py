from lib.rate_limiter import RateLimiterManager


async def initRateLimiter(limiterName: str = "default", slow: bool = False) -> RateLimiterManager:
    """
    Initialize a rate limiter for testing purposes.

    Registers a MinIntervalRateLimiter under the given name in the singleton
    RateLimiterManager, unless one with that name already exists, and makes
    it the default limiter.

    Args:
        limiterName: Name of the rate limiter to create or retrieve. Defaults to "default".
        slow: If True, uses the real Nominatim spacing (1.1 seconds) for testing
              rate limiting behavior. If False, uses no spacing at all.
              Defaults to False.

    Returns:
        RateLimiterManager: The singleton rate limiter manager instance with the configured
                          rate limiter registered.

    Example:
        >>> manager = await initRateLimiter("test_api", slow=False)
        >>> await manager.applyLimit("nominatim")
    """
    manager = RateLimiterManager.getInstance()
    # Singleton survives between tests, so the limiter may be registered already
    if limiterName not in manager.listRateLimiters():
        await manager.loadConfig(
            {
                "ratelimiters": {
                    limiterName: {
                        "type": "MinInterval",
                        "config": {"minInterval": 1.1 if slow else 0.0},
                    },
                },
            }
        )
        manager.setDefaultLimiter(limiterName)
    return manager
