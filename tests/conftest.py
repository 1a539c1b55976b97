"""
Pytest configuration and common fixtures for LANE places tests.

This module provides shared fixtures for testing the place search
service, the Nominatim client and the configuration layer. All fixtures
follow camelCase naming convention.
"""

import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest

from internal.services.places import PlacesConfig, PlaceSearchService, RetryPolicy
from lib.nominatim import NominatimNetworkError, NominatimRateLimitError
from tests.fixtures.nominatim_data import createSampleSearchResult, createSampleSearchResults
from tests.fixtures.service_mocks import createMockNominatimClient

# ============================================================================
# Filesystem Fixtures
# ============================================================================


@pytest.fixture
def tempDir() -> Generator[Path, None, None]:
    """Create a temporary directory for config files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def writeConfig(tempDir: Path) -> Callable[[str, str], Path]:
    """
    Provide a helper writing TOML files into the temporary directory.

    Example:
        def testSomething(writeConfig):
            path = writeConfig("config.toml", "[nominatim]\\nlimit = 3\\n")
    """

    def _write(filename: str, content: str) -> Path:
        path = tempDir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return _write


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def fastPlacesConfig() -> PlacesConfig:
    """
    Provide a PlacesConfig with shortened timings.

    Debounce, rate limit spacing and retry backoff are cut down so tests
    run quickly, everything else keeps its default.
    """
    return PlacesConfig(
        debounceDelay=0.05,
        minInterval=0.0,
        retryPolicy=RetryPolicy(backoff={NominatimRateLimitError: 0.02, NominatimNetworkError: 0.01}),
    )


@pytest.fixture
def mockNominatimClient():
    """Provide a mocked NominatimClient answering with sample Chennai results."""
    return createMockNominatimClient(searchResults=createSampleSearchResults())


@pytest.fixture
def placeService(mockNominatimClient, fastPlacesConfig) -> PlaceSearchService:
    """Provide a fresh PlaceSearchService with a mocked client and fast timings."""
    return PlaceSearchService(client=mockNominatimClient, config=fastPlacesConfig)


@pytest.fixture
def sampleSearchResult():
    return createSampleSearchResult()


@pytest.fixture(autouse=True)
def resetPlaceSearchService() -> Generator[None, None, None]:
    """Forget the PlaceSearchService singleton between tests."""
    PlaceSearchService._instance = None
    yield
    PlaceSearchService._instance = None
