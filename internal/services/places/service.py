"""
Place search service: process-wide owner of the geocoder client, the
suggestion cache and the geocoder rate limiter

Every LocationAutocomplete created by the application shares one
PlaceSearchService, so several location inputs on one screen share one
cache and never exceed the geocoder's request rate together.
"""

import logging
import threading
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

from lib.cache import CacheInterface, DictCache, NullCache, QueryKeyGenerator
from lib.nominatim import (
    NominatimClient,
    NominatimError,
    NominatimNetworkError,
    NominatimRateLimitError,
    SearchResponse,
)
from lib.rate_limiter import MinIntervalRateLimiter, RateLimiterInterface, RateLimiterManager

from .exceptions import PlacesConfigError
from .formatting import toReverseLocation
from .models import PlacesConfig, ReverseLocationDict, RetryPolicy, SelectListener

if TYPE_CHECKING:
    from internal.config.manager import ConfigManager

    from .autocomplete import LocationAutocomplete

logger = logging.getLogger(__name__)


class PlaceSearchService:
    """
    Shared service behind every location input.

    Construct it once at start-up (``getInstance()`` + ``injectConfig()``)
    and hand it to each consumer. Unlike other singletons, the constructor
    always builds a fresh, independent instance, so tests can create one
    per test case with their own collaborators.

    Usage:
        service = PlaceSearchService.getInstance()
        service.injectConfig(configManager)

        autocomplete = service.createAutocomplete()
        autocomplete.setQuery("Nellore")
    """

    _instance: Union["PlaceSearchService", None] = None
    _lock = threading.RLock()

    def __init__(
        self,
        client: Optional[NominatimClient] = None,
        cache: Optional[CacheInterface[str, SearchResponse]] = None,
        rateLimiter: Optional[RateLimiterInterface] = None,
        config: Optional[PlacesConfig] = None,
    ):
        """
        Initialize the service.

        Args:
            client: Geocoder client (default: public Nominatim)
            cache: Suggestion cache keyed by query text (default: DictCache with
                normalized keys, config.cacheTtl and config.cacheSize)
            rateLimiter: Limiter shared by all geocoder calls (default:
                MinIntervalRateLimiter with config.minInterval)
            config: Service settings (default: PlacesConfig())
        """
        self.config = config if config is not None else PlacesConfig()
        self.client = client if client is not None else NominatimClient()
        self.cache: CacheInterface[str, SearchResponse] = (
            cache if cache is not None else self._createCache(self.config)
        )
        self.rateLimiter: RateLimiterInterface = (
            rateLimiter if rateLimiter is not None else MinIntervalRateLimiter(self.config.minInterval)
        )

    @classmethod
    def getInstance(cls) -> "PlaceSearchService":
        """
        Get the application-wide instance, creating it on first use.
        """
        with cls._lock:
            if cls._instance is None:
                cls._instance = cls()
                logger.info("PlaceSearchService created, dood!")
            return cls._instance

    @staticmethod
    def _createCache(config: PlacesConfig) -> CacheInterface[str, SearchResponse]:
        if config.cacheSize <= 0:
            logger.info("Suggestion cache disabled, dood!")
            return NullCache()
        return DictCache[str, SearchResponse](
            keyGenerator=QueryKeyGenerator(),
            defaultTtl=config.cacheTtl,
            maxSize=config.cacheSize,
        )

    def injectConfig(self, configManager: "ConfigManager") -> None:
        """
        Rebuild client, cache and settings from configuration.

        The rate limiter becomes the RateLimiterManager singleton, so the
        ``[ratelimiter]`` section decides which limiter serves the geocoder
        queue (the manager's 1.1 second default when the queue is unbound).

        Args:
            configManager: The configuration manager

        Raises:
            PlacesConfigError: If a setting has the wrong type or value
        """
        nominatimConfig = configManager.getNominatimConfig()
        autocompleteConfig = configManager.getAutocompleteConfig()

        try:
            self.config = self._parseConfig(nominatimConfig, autocompleteConfig)
            self.client = NominatimClient(
                baseUrl=nominatimConfig.get("base-url", NominatimClient.API_BASE_URL),
                userAgent=nominatimConfig.get("user-agent", NominatimClient.DEFAULT_USER_AGENT),
                requestTimeout=nominatimConfig.get("request-timeout"),
                acceptLanguage=nominatimConfig.get("accept-language"),
            )
        except (TypeError, ValueError) as e:
            raise PlacesConfigError(f"Invalid places configuration: {e}") from e

        self.cache = self._createCache(self.config)
        self.rateLimiter = RateLimiterManager.getInstance()
        logger.info(
            f"PlaceSearchService configured for {self.client.baseUrl} "
            f"(queue '{self.config.rateLimiterQueue}'), dood!"
        )

    @staticmethod
    def _parseConfig(nominatimConfig: Dict[str, Any], autocompleteConfig: Dict[str, Any]) -> PlacesConfig:
        defaults = PlacesConfig()
        defaultRetry = defaults.retryPolicy
        retryPolicy = RetryPolicy(
            maxRetries=int(autocompleteConfig.get("max-retries", defaultRetry.maxRetries)),
            backoff={
                NominatimRateLimitError: float(
                    autocompleteConfig.get("rate-limited-delay", defaultRetry.backoff[NominatimRateLimitError])
                ),
                NominatimNetworkError: float(
                    autocompleteConfig.get("network-error-delay", defaultRetry.backoff[NominatimNetworkError])
                ),
            },
        )

        config = PlacesConfig(
            countryCodes=str(nominatimConfig.get("country-codes", defaults.countryCodes)),
            countryName=str(nominatimConfig.get("country-name", defaults.countryName)),
            resultLimit=int(nominatimConfig.get("limit", defaults.resultLimit)),
            cacheTtl=float(autocompleteConfig.get("cache-ttl", defaults.cacheTtl)),
            cacheSize=int(autocompleteConfig.get("cache-size", defaults.cacheSize)),
            rateLimiterQueue=str(autocompleteConfig.get("rate-limiter-queue", defaults.rateLimiterQueue)),
            debounceDelay=float(autocompleteConfig.get("debounce-delay", defaults.debounceDelay)),
            minQueryLength=int(autocompleteConfig.get("min-query-length", defaults.minQueryLength)),
            retryPolicy=retryPolicy,
        )
        if config.resultLimit <= 0:
            raise ValueError("limit must be positive")
        if config.retryPolicy.maxRetries < 0:
            raise ValueError("max-retries must not be negative")
        return config

    ###
    # Search pipeline steps, driven by LocationAutocomplete
    ###

    def normalizeQuery(self, text: str) -> str:
        """Cache key for a query: trimmed and lower-cased"""
        return text.strip().lower()

    def buildSearchText(self, text: str) -> str:
        """
        Get the text actually sent to the geocoder.

        Appends the country suffix (", India") unless the country name is
        already part of the query, compared case-insensitively.
        """
        text = text.strip()
        if self.config.countryName and self.config.countryName.lower() not in text.lower():
            return f"{text}, {self.config.countryName}"
        return text

    async def getCached(self, query: str) -> Optional[SearchResponse]:
        """
        Get fresh cached suggestions for query, dood!

        Returns:
            Copy of the cached list (possibly empty) or None on miss, expiry
            or cache failure
        """
        try:
            cached = await self.cache.get(self.normalizeQuery(query))
            return None if cached is None else list(cached)
        except Exception as e:
            logger.warning(f"Suggestion cache read failed for '{query}': {e}")
            return None

    async def storeSuggestions(self, query: str, results: SearchResponse) -> None:
        """Cache a copy of the suggestions for query, failures are logged and ignored"""
        try:
            await self.cache.set(self.normalizeQuery(query), list(results))
        except Exception as e:
            logger.warning(f"Suggestion cache write failed for '{query}': {e}")

    async def waitForRateLimit(self) -> None:
        """Wait until the shared geocoder queue allows the next request"""
        await self.rateLimiter.applyLimit(self.config.rateLimiterQueue)

    async def fetchSuggestions(self, query: str) -> SearchResponse:
        """
        Make one geocoder search attempt, dood!

        Does not wait for the rate limiter and does not touch the cache,
        the caller decides about both.

        Args:
            query: User query, the country suffix is added here

        Returns:
            List of search results, possibly empty

        Raises:
            NominatimError: Any typed client error (429, other HTTP, network, bad response)
        """
        searchText = self.buildSearchText(query)
        logger.debug(f"Searching places for '{searchText}'")
        return await self.client.search(
            searchText,
            countrycodes=self.config.countryCodes or None,
            limit=self.config.resultLimit,
            addressdetails=self.config.addressDetails,
        )

    async def reverseGeocode(self, lat: float, lon: float) -> Optional[ReverseLocationDict]:
        """
        Describe a coordinate pair, dood!

        Goes through the same rate limiter queue as searches.

        Returns:
            ReverseLocationDict or None if the lookup failed (the failure is logged)
        """
        await self.waitForRateLimit()
        try:
            result = await self.client.reverse(lat, lon, addressdetails=self.config.addressDetails)
        except NominatimError as e:
            logger.error(f"Reverse geocoding failed for ({lat}, {lon}): {e}")
            return None

        return toReverseLocation(result)

    def createAutocomplete(
        self,
        initialValue: str = "",
        onSelect: Optional[SelectListener] = None,
    ) -> "LocationAutocomplete":
        """Create a LocationAutocomplete bound to this service"""
        from .autocomplete import LocationAutocomplete

        return LocationAutocomplete(self, initialValue=initialValue, onSelect=onSelect)

    def getStats(self) -> Dict[str, Any]:
        """Get cache and rate limiter statistics"""
        try:
            rateLimiterStats = self.rateLimiter.getStats(self.config.rateLimiterQueue)
        except (ValueError, RuntimeError):
            # Queue has not been used yet or no limiter is registered
            rateLimiterStats = {}
        return {
            "baseUrl": self.client.baseUrl,
            "queue": self.config.rateLimiterQueue,
            "cache": self.cache.getStats(),
            "rateLimiter": rateLimiterStats,
        }
