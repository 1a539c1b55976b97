"""
Places models: data shapes and settings for the place search service
"""

import sys
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Callable, Dict, List, Optional, Type, TypeAlias

from lib.nominatim import NominatimError, NominatimNetworkError, NominatimRateLimitError, SearchResult

if sys.version_info >= (3, 15):
    from typing import TypedDict
else:
    from typing_extensions import TypedDict


class SelectedLocationDict(TypedDict):
    """Location picked by the user, in the shape the rides API expects"""

    type: str  # Always "Point"
    coordinates: List[float]  # [longitude, latitude]
    address: str  # Full display address
    city: str  # Short locality name


class ReverseLocationDict(TypedDict):
    """Human readable description of a coordinate pair"""

    address: str
    city: Optional[str]
    state: Optional[str]
    country: Optional[str]


class AutocompleteMessage(StrEnum):
    """User-facing messages shown next to the location input"""

    SEARCH_BUSY = "Search is busy. Please wait a moment and try again."
    """Geocoder kept answering 429 after all retries"""
    SEARCH_UNAVAILABLE = "Unable to search locations. Check your internet connection."
    """Any other failure"""
    NOT_FOUND = "No locations found. Try a different spelling or add more details."
    """Informational: the search succeeded but returned nothing"""


@dataclass(frozen=True)
class AutocompleteState:
    """Snapshot of everything a location input renders.

    Attributes:
        query: Current input text
        suggestions: Current suggestion list
        loading: True while a network search is outstanding
        error: Message to show, or None
        selectedLocation: The picked location, or None
    """

    query: str
    suggestions: List[SearchResult]
    loading: bool
    error: Optional[str]
    selectedLocation: Optional[SelectedLocationDict]


StateListener: TypeAlias = Callable[[AutocompleteState], None]
SelectListener: TypeAlias = Callable[[SelectedLocationDict], None]


@dataclass
class RetryPolicy:
    """Bounded retry schedule for geocoder requests.

    Attributes:
        maxRetries: Additional attempts after the first one
        backoff: Delay in seconds before retrying, per error type. Errors
            not listed here are never retried.
    """

    maxRetries: int = 2
    backoff: Dict[Type[NominatimError], float] = field(
        default_factory=lambda: {
            NominatimRateLimitError: 2.0,
            NominatimNetworkError: 1.0,
        }
    )

    def getDelay(self, error: BaseException, attempt: int) -> Optional[float]:
        """Get the delay before retrying after ``error`` on zero-based ``attempt``.

        Returns:
            Seconds to sleep, or None if the error must not be retried
        """
        if attempt >= self.maxRetries:
            return None

        for errorType, delay in self.backoff.items():
            if isinstance(error, errorType):
                return delay

        return None


@dataclass
class PlacesConfig:
    """Settings of the place search service.

    Defaults follow the public Nominatim usage policy and the LANE client.
    """

    countryCodes: str = "in"
    countryName: str = "India"
    resultLimit: int = 5
    addressDetails: bool = True

    cacheTtl: float = 300  # 5 minutes
    cacheSize: int = 50

    rateLimiterQueue: str = "nominatim"
    minInterval: float = 1.1

    debounceDelay: float = 0.5
    minQueryLength: int = 3
    retryPolicy: RetryPolicy = field(default_factory=RetryPolicy)
