"""
Test utility functions and helpers.

This module provides helpers for faking httpx responses and for
patching httpx.AsyncClient in tests.
"""

from typing import Any, List, Optional
from unittest.mock import MagicMock, Mock

# ============================================================================
# Mock Creation Utilities
# ============================================================================


def createMockResponse(statusCode: int = 200, payload: Any = None, reasonPhrase: Optional[str] = None) -> MagicMock:
    """
    Create a mock httpx.Response.

    Args:
        statusCode: HTTP status code (default: 200)
        payload: Value returned by ``json()``
        reasonPhrase: HTTP reason phrase (default: derived from status)

    Returns:
        MagicMock: Configured response

    Example:
        response = createMockResponse(429)
        assert response.status_code == 429
    """
    response = MagicMock()
    response.status_code = statusCode
    if reasonPhrase is None:
        reasonPhrase = {200: "OK", 429: "Too Many Requests", 500: "Internal Server Error"}.get(statusCode, "")
    response.reason_phrase = reasonPhrase
    response.json.return_value = payload
    return response


def getAsyncClientGet(mockAsyncClient: MagicMock) -> MagicMock:
    """
    Get the ``get`` mock of a patched httpx.AsyncClient.

    Example:
        with patch("httpx.AsyncClient") as mockClient:
            getMock = getAsyncClientGet(mockClient)
            getMock.return_value = createMockResponse(200, [])
    """
    return mockAsyncClient.return_value.__aenter__.return_value.get


def getRequestedQueries(getMock: Mock) -> List[str]:
    """Get the ``q`` parameter of every /search call made through a patched client"""
    return [call.kwargs["params"]["q"] for call in getMock.call_args_list if "q" in call.kwargs["params"]]
