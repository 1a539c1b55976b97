"""
End-to-end tests for the command line front end, dood!

Runs main.py commands against a temporary config file with
httpx.AsyncClient patched.

Test Coverage:
    - Argument parsing
    - search, type and reverse commands
    - --print-config
    - Exit codes on configuration errors
"""

import sys
from unittest.mock import patch

import pytest

import main
from tests.fixtures.nominatim_data import (
    createSampleReverseResult,
    createSampleSearchResult,
    createSampleSearchResults,
)
from tests.utils import createMockResponse, getAsyncClientGet, getRequestedQueries

FAST_CONFIG_TOML = """
[ratelimiter.ratelimiters.nominatim-policy]
type = "MinInterval"
config = { minInterval = 0.0 }

[ratelimiter.queues]
nominatim = "nominatim-policy"

[autocomplete]
debounce-delay = 0.05
rate-limited-delay = 0.01
network-error-delay = 0.01
"""

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def configPath(writeConfig):
    return writeConfig("config.toml", FAST_CONFIG_TOML)


@pytest.fixture(autouse=True)
def noLoggingSetup():
    """Keep pytest log capture intact, dood!"""
    with patch("main.initLogging"):
        yield


# ============================================================================
# Argument Parsing
# ============================================================================


class TestArguments:
    """Test command line parsing."""

    def testSearchCommand(self):
        args = main.parse_arguments(["-c", "places.toml", "search", "Nellore"])

        assert args.command == "search"
        assert args.query == "Nellore"
        assert args.config.endswith("places.toml")
        assert args.config.startswith("/")

    def testTypeCommand(self):
        args = main.parse_arguments(["type", "Chennai", "--keystroke-delay", "0.02"])

        assert args.command == "type"
        assert args.text == "Chennai"
        assert args.keystroke_delay == 0.02

    def testReverseCommand(self):
        args = main.parse_arguments(["--config-dir", "conf.d", "--config-dir", "local", "reverse", "14.44", "79.98"])

        assert args.lat == 14.44
        assert args.lon == 79.98
        assert len(args.config_dir) == 2
        assert all(path.startswith("/") for path in args.config_dir)

    def testPrintConfigWithoutCommand(self):
        args = main.parse_arguments(["--print-config"])

        assert args.print_config is True
        assert args.command is None

    def testCommandRequired(self):
        with pytest.raises(SystemExit):
            main.parse_arguments([])


# ============================================================================
# Commands
# ============================================================================


class TestCommands:
    """Test commands through PlacesApp."""

    @pytest.mark.asyncio
    async def testSearch(self, configPath, capsys):
        app = main.PlacesApp(str(configPath))

        with patch("httpx.AsyncClient") as mockClient:
            getAsyncClientGet(mockClient).return_value = createMockResponse(200, createSampleSearchResults())

            exitCode = await app.run(main.parse_arguments(["search", "Chennai"]))

        output = capsys.readouterr().out
        assert exitCode == 0
        assert "1. [fa-city] Chennai" in output
        assert "2. [fa-train] Chennai" in output
        assert "Chennai International Airport, Meenambakkam, Tamil Nadu, India" in output

    @pytest.mark.asyncio
    async def testSearchNotFound(self, configPath, capsys):
        app = main.PlacesApp(str(configPath))

        with patch("httpx.AsyncClient") as mockClient:
            getAsyncClientGet(mockClient).return_value = createMockResponse(200, [])

            exitCode = await app.run(main.parse_arguments(["search", "Xyzzyville"]))

        assert exitCode == 0
        assert "No locations found" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def testTypeSendsOnlyFinalText(self, configPath, capsys):
        """Test simulated typing results in one request, dood!"""
        app = main.PlacesApp(str(configPath))

        with patch("httpx.AsyncClient") as mockClient:
            getMock = getAsyncClientGet(mockClient)
            getMock.return_value = createMockResponse(200, [createSampleSearchResult()])

            exitCode = await app.run(main.parse_arguments(["type", "Nellore", "--keystroke-delay", "0.005"]))

        assert exitCode == 0
        assert getRequestedQueries(getMock) == ["Nellore, India"]
        assert "1. [fa-city] Nellore" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def testReverse(self, configPath, capsys):
        app = main.PlacesApp(str(configPath))

        with patch("httpx.AsyncClient") as mockClient:
            getAsyncClientGet(mockClient).return_value = createMockResponse(200, createSampleReverseResult())

            exitCode = await app.run(main.parse_arguments(["reverse", "14.4426", "79.9865"]))

        output = capsys.readouterr().out
        assert exitCode == 0
        assert "Trunk Road, Nellore, Andhra Pradesh, 524001, India" in output
        assert "city: Nellore" in output

    @pytest.mark.asyncio
    async def testReverseFailure(self, configPath, capsys):
        app = main.PlacesApp(str(configPath))

        with patch("httpx.AsyncClient") as mockClient:
            getAsyncClientGet(mockClient).return_value = createMockResponse(500)

            exitCode = await app.run(main.parse_arguments(["reverse", "0", "0"]))

        assert exitCode == 1
        assert "Unable to describe location" in capsys.readouterr().out


# ============================================================================
# Entry Point
# ============================================================================


class TestMain:
    """Test main() exit behaviour."""

    def testPrintConfig(self, configPath, capsys):
        with patch.object(sys, "argv", ["main.py", "-c", str(configPath), "--print-config"]):
            with pytest.raises(SystemExit) as excInfo:
                main.main()

        assert excInfo.value.code == 0
        output = capsys.readouterr().out
        assert "=== LANE places Configuration ===" in output
        assert '"debounce-delay": 0.05' in output

    def testInvalidConfigExits(self, writeConfig):
        path = writeConfig("config.toml", FAST_CONFIG_TOML + '\n[nominatim]\nlimit = "five"\n')

        with patch.object(sys, "argv", ["main.py", "-c", str(path), "search", "Nellore"]):
            with pytest.raises(SystemExit) as excInfo:
                main.main()

        assert excInfo.value.code == 1

    def testMissingConfigExits(self, tempDir):
        with patch.object(sys, "argv", ["main.py", "-c", str(tempDir / "missing.toml"), "search", "Nellore"]):
            with pytest.raises(SystemExit) as excInfo:
                main.main()

        assert excInfo.value.code == 1
