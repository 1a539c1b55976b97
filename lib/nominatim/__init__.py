"""
Nominatim API Client Library

Async client for the OpenStreetMap Nominatim geocoder with typed
responses and a typed error hierarchy.

Example usage:
    from lib.nominatim import NominatimClient

    client = NominatimClient(userAgent="LANE-Carpool-App (carpooling app)")

    # Forward geocoding
    results = await client.search("Nellore, India", countrycodes="in", limit=5)

    # Reverse geocoding
    location = await client.reverse(14.44, 79.98)
"""

from lib.nominatim.client import NominatimClient
from lib.nominatim.exceptions import (
    NominatimError,
    NominatimHTTPError,
    NominatimNetworkError,
    NominatimRateLimitError,
    NominatimResponseError,
)
from lib.nominatim.models import Address, ReverseResponse, SearchResponse, SearchResult

__all__ = [
    "NominatimClient",
    "NominatimError",
    "NominatimHTTPError",
    "NominatimNetworkError",
    "NominatimRateLimitError",
    "NominatimResponseError",
    "Address",
    "SearchResult",
    "SearchResponse",
    "ReverseResponse",
]
