"""
Nominatim client exceptions

All errors raised by NominatimClient inherit from NominatimError.
"""


class NominatimError(Exception):
    """
    Base exception for all Nominatim client errors.

    Catch this to handle any geocoding failure generically.
    """

    pass


class NominatimRateLimitError(NominatimError):
    """
    Raised when the server answers HTTP 429 Too Many Requests.
    """

    pass


class NominatimHTTPError(NominatimError):
    """
    Raised for any other non-2xx HTTP status.

    Args:
        statusCode: HTTP status code returned by the server
        reason: Reason phrase, if any
    """

    def __init__(self, statusCode: int, reason: str = ""):
        super().__init__(f"HTTP {statusCode}: {reason}".rstrip(": "))
        self.statusCode = statusCode
        self.reason = reason


class NominatimNetworkError(NominatimError):
    """
    Raised when the request never got an HTTP answer (DNS, connect, timeout, ...).

    Args:
        message: Description of the failure
        originalError: The underlying httpx exception
    """

    def __init__(self, message: str, originalError: Exception | None = None):
        super().__init__(message)
        self.originalError = originalError


class NominatimResponseError(NominatimError):
    """
    Raised when a 2xx response body is not the JSON shape we expect.
    """

    pass
