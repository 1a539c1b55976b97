"""
Nominatim API Data Models

TypedDict models for Nominatim ``format=json`` responses. Nominatim omits
fields freely depending on the object type, so most fields are optional.
"""

import sys
from typing import List, NotRequired

if sys.version_info >= (3, 15):
    from typing import TypedDict
else:
    from typing_extensions import TypedDict


class Address(TypedDict, total=False, closed=False):
    """Structured address components (``addressdetails=1``), dood!"""

    road: str  # Street name
    suburb: str  # Suburb name
    village: str  # Village name
    town: str  # Town name
    city: str  # City name
    county: str  # County name
    state_district: str  # District (Indian addresses use this a lot)
    state: str  # State name
    postcode: str  # Postal code
    country: str  # Country name
    country_code: str  # ISO country code (e.g., "in")


class SearchResult(TypedDict):
    """Single result from /search endpoint, dood!"""

    display_name: str  # Full display address
    lat: NotRequired[str]  # Latitude (string in API response)
    lon: NotRequired[str]  # Longitude (string in API response)
    type: NotRequired[str]  # Place type (city, road, railway, ...)
    name: NotRequired[str]  # Place name
    place_id: NotRequired[int]  # Unique place identifier
    osm_type: NotRequired[str]  # OSM object type (node/way/relation)
    osm_id: NotRequired[int]  # OSM object ID
    importance: NotRequired[float]  # Importance score (0-1)
    address: NotRequired[Address]  # Structured address components
    boundingbox: NotRequired[List[str]]  # [min_lat, max_lat, min_lon, max_lon]


class ReverseResult(TypedDict):
    """Result from /reverse endpoint, dood!"""

    display_name: str
    lat: NotRequired[str]
    lon: NotRequired[str]
    type: NotRequired[str]
    name: NotRequired[str]
    place_id: NotRequired[int]
    address: NotRequired[Address]


# Response types for each endpoint
SearchResponse = List[SearchResult]  # /search returns array
ReverseResponse = ReverseResult  # /reverse returns single object
