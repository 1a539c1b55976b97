"""
Place search service exceptions
"""


class PlacesConfigError(Exception):
    """
    Exception raised when the ``[nominatim]`` or ``[autocomplete]`` configuration is invalid.

    Args:
        message: Description of the configuration error
    """

    pass
