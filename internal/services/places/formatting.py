"""
Pure helpers that turn raw Nominatim results into what the UI shows
"""

import logging
import math
from typing import Any, Mapping, Optional

from lib.nominatim import ReverseResponse, SearchResult

from .models import ReverseLocationDict, SelectedLocationDict

logger = logging.getLogger(__name__)

SHORT_NAME_ADDRESS_FIELDS = ("city", "town", "village", "state_district", "state")

LOCATION_ICONS = {
    "city": "fa-city",
    "town": "fa-building",
    "village": "fa-home",
    "state": "fa-map",
    "administrative": "fa-map-marked-alt",
    "road": "fa-road",
    "railway": "fa-train",
    "airport": "fa-plane",
}
DEFAULT_LOCATION_ICON = "fa-map-marker-alt"


def getShortName(result: Mapping[str, Any]) -> str:
    """
    Get the short locality name of a search result.

    Preference order: address city, town, village, state_district, state,
    then the result's own name, then the first comma separated part of its
    display name.

    Args:
        result: Raw search result

    Returns:
        str: Short name, empty string if nothing usable is present
    """
    address = result.get("address") or {}
    for key in SHORT_NAME_ADDRESS_FIELDS:
        value = address.get(key)
        if value:
            return str(value)

    name = result.get("name")
    if name:
        return str(name)

    displayName = result.get("display_name") or ""
    return str(displayName).split(",")[0].strip()


def getLocationIcon(categoryType: Optional[str]) -> str:
    """Map a result ``type`` to an icon identifier, generic pin for unknown types."""
    if categoryType is None:
        return DEFAULT_LOCATION_ICON
    return LOCATION_ICONS.get(categoryType, DEFAULT_LOCATION_ICON)


def parseCoordinate(value: Any) -> float:
    """Parse a decimal-degree string, NaN when missing or malformed."""
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid coordinate value: {value!r}")
        return math.nan


def toSelectedLocation(result: SearchResult) -> SelectedLocationDict:
    """Convert a picked search result into the canonical point shape."""
    return {
        "type": "Point",
        "coordinates": [parseCoordinate(result.get("lon")), parseCoordinate(result.get("lat"))],
        "address": result.get("display_name", ""),
        "city": getShortName(result),
    }


def toReverseLocation(result: ReverseResponse) -> ReverseLocationDict:
    address = result.get("address") or {}
    return {
        "address": result.get("display_name", ""),
        "city": address.get("city") or address.get("town") or address.get("village"),
        "state": address.get("state"),
        "country": address.get("country"),
    }
