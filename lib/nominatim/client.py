"""
Nominatim API Async Client

This module provides the NominatimClient class for the OpenStreetMap
Nominatim geocoder. Caching and rate limiting are deliberately left to the
caller (see internal.services.places), because the usage policy limits are
shared by every consumer of the process, not by one client object.
"""

import json
import logging
from typing import Any, Dict, Optional, Union, cast

import httpx

from .exceptions import (
    NominatimHTTPError,
    NominatimNetworkError,
    NominatimRateLimitError,
    NominatimResponseError,
)
from .models import ReverseResponse, SearchResponse

logger = logging.getLogger(__name__)


class NominatimClient:
    """Async client for the Nominatim API, dood!

    Creates a new HTTP session for each request so concurrent searches
    from different tasks never share connection state.

    Example:
        >>> client = NominatimClient(userAgent="LANE-Carpool-App (carpooling app)")
        >>> results = await client.search("Chennai, India", countrycodes="in", limit=5)
        >>> print(results[0]["display_name"])
    """

    API_BASE_URL = "https://nominatim.openstreetmap.org"
    DEFAULT_USER_AGENT = "LANE-Carpool-App (carpooling app)"

    def __init__(
        self,
        baseUrl: str = API_BASE_URL,
        userAgent: str = DEFAULT_USER_AGENT,
        requestTimeout: Optional[float] = None,
        acceptLanguage: Optional[str] = None,
    ):
        """Initialize Nominatim client, dood!

        Args:
            baseUrl: Nominatim server URL (default: public OSM instance)
            userAgent: Descriptive client identifier, required by the usage policy
            requestTimeout: HTTP timeout in seconds, None waits forever
            acceptLanguage: Optional preferred language for results (e.g., "en")
        """
        self.baseUrl = baseUrl.rstrip("/")
        self.userAgent = userAgent
        self.requestTimeout = requestTimeout
        self.acceptLanguage = acceptLanguage

    async def search(
        self,
        query: str,
        *,
        countrycodes: Optional[str] = None,
        limit: int = 5,
        addressdetails: bool = True,
    ) -> SearchResponse:
        """Forward geocoding: free text to candidate places, dood!

        Args:
            query: Free-form search query (e.g., "Nellore, India")
            countrycodes: Comma-separated ISO country codes to restrict the search
            limit: Maximum number of results
            addressdetails: Include the structured ``address`` breakdown

        Returns:
            List of search results, possibly empty

        Raises:
            NominatimRateLimitError: Server answered 429
            NominatimHTTPError: Server answered another non-2xx status
            NominatimNetworkError: No HTTP answer at all
            NominatimResponseError: Body is not a JSON array
        """
        params: Dict[str, Any] = {
            "q": query,
            "limit": limit,
            "addressdetails": 1 if addressdetails else 0,
        }
        if countrycodes:
            params["countrycodes"] = countrycodes

        data = await self._makeRequest("search", params)
        if not isinstance(data, list):
            raise NominatimResponseError(f"Expected a JSON array from /search, got {type(data).__name__}")

        return cast(SearchResponse, data)

    async def reverse(
        self,
        lat: float,
        lon: float,
        *,
        zoom: Optional[int] = None,
        addressdetails: bool = True,
    ) -> ReverseResponse:
        """Reverse geocoding: coordinates to the nearest address, dood!

        Args:
            lat: Latitude (-90 to 90)
            lon: Longitude (-180 to 180)
            zoom: Detail level (3-18, higher = more detailed)
            addressdetails: Include the structured ``address`` breakdown

        Returns:
            Reverse geocoding result

        Raises:
            NominatimError subclasses, see search()
        """
        params: Dict[str, Any] = {
            "lat": lat,
            "lon": lon,
            "addressdetails": 1 if addressdetails else 0,
        }
        if zoom is not None:
            params["zoom"] = zoom

        data = await self._makeRequest("reverse", params)
        if not isinstance(data, dict):
            raise NominatimResponseError(f"Expected a JSON object from /reverse, got {type(data).__name__}")
        if "error" in data:
            # Nominatim reports "Unable to geocode" with a 200 status
            raise NominatimResponseError(str(data["error"]))

        return cast(ReverseResponse, data)

    async def _makeRequest(self, endpoint: str, params: Dict[str, Any]) -> Union[Dict[str, Any], list]:
        """Make HTTP request to the Nominatim API, dood!

        Single point for all HTTP requests. Task cancellation is not caught
        here and propagates to the caller unchanged.

        Args:
            endpoint: API endpoint path ("search" or "reverse")
            params: Query parameters (format and language added automatically)

        Returns:
            Parsed JSON response
        """
        url = f"{self.baseUrl}/{endpoint}"

        params["format"] = "json"
        if self.acceptLanguage and "accept-language" not in params:
            params["accept-language"] = self.acceptLanguage

        headers = {
            "User-Agent": self.userAgent,
            "Accept": "application/json",
        }

        logger.debug(f"Making request to {url} with params: {params}")

        try:
            async with httpx.AsyncClient(timeout=self.requestTimeout) as session:
                response = await session.get(url, params=params, headers=headers)
        except httpx.RequestError as e:
            logger.error(f"Network error: {e}")
            raise NominatimNetworkError(f"Network error while fetching {endpoint}: {e}", e) from e

        if response.status_code == 429:
            logger.warning("Nominatim rate limit exceeded")
            raise NominatimRateLimitError("Nominatim rate limit exceeded")

        if not 200 <= response.status_code < 300:
            logger.error(f"API request failed: {response.status_code}")
            raise NominatimHTTPError(response.status_code, str(response.reason_phrase or ""))

        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            logger.error(f"Failed to parse JSON response: {e}")
            raise NominatimResponseError(f"Invalid JSON from {endpoint}: {e}") from e

        logger.debug(f"API request successful: {response.status_code}")
        return data
