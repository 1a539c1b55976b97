"""
Place search package

Location autocomplete for the ride forms: debounced suggestion search
against the Nominatim geocoder with a shared cache and a shared rate limit.
"""

from .autocomplete import LocationAutocomplete
from .exceptions import PlacesConfigError
from .formatting import getLocationIcon, getShortName
from .models import (
    AutocompleteMessage,
    AutocompleteState,
    PlacesConfig,
    ReverseLocationDict,
    RetryPolicy,
    SelectedLocationDict,
)
from .service import PlaceSearchService

__all__ = [
    "LocationAutocomplete",
    "PlaceSearchService",
    "PlacesConfig",
    "PlacesConfigError",
    "RetryPolicy",
    "AutocompleteMessage",
    "AutocompleteState",
    "SelectedLocationDict",
    "ReverseLocationDict",
    "getShortName",
    "getLocationIcon",
]
