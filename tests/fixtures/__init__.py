"""
Test fixtures package for LANE places tests.

This package organizes test fixtures into logical modules:
- nominatim_data: Sample Nominatim search and reverse results
- service_mocks: Mock service instances (ConfigManager, NominatimClient)

All fixtures are also available through the main conftest.py file.
"""

from tests.fixtures.nominatim_data import (
    createSampleReverseResult,
    createSampleSearchResult,
    createSampleSearchResults,
)
from tests.fixtures.service_mocks import (
    createMockConfigManager,
    createMockNominatimClient,
)

__all__ = [
    # Nominatim data
    "createSampleSearchResult",
    "createSampleSearchResults",
    "createSampleReverseResult",
    # Service mocks
    "createMockConfigManager",
    "createMockNominatimClient",
]
