"""
LANE places - location autocomplete for the carpooling app, command line front end.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import List, Optional

from internal.config.manager import ConfigManager
from internal.services.places import (
    LocationAutocomplete,
    PlaceSearchService,
    PlacesConfigError,
)
from lib.logging_utils import initLogging
from lib.rate_limiter import RateLimiterManager

# Configure basic logging first
logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.INFO)
# set higher logging level for httpx to avoid all GET requests being logged
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


class PlacesApp:
    """Wires configuration, logging, rate limiting and the place search service."""

    def __init__(self, configPath: str = "config.toml", configDirs: Optional[List[str]] = None):
        self.configManager = ConfigManager(configPath, configDirs)

        initLogging(self.configManager.getLoggingConfig())

        self.rateLimiterManager = RateLimiterManager.getInstance()
        self.placeService = PlaceSearchService.getInstance()

    async def _setup(self) -> None:
        await self.rateLimiterManager.loadConfig(self.configManager.getRateLimiterConfig())
        self.placeService.injectConfig(self.configManager)

    async def search(self, query: str) -> None:
        """Run one debounced search and print the suggestions, dood!"""
        autocomplete = self.placeService.createAutocomplete()
        try:
            autocomplete.setQuery(query)
            await autocomplete.waitIdle()
            printSuggestions(autocomplete)
        finally:
            await autocomplete.destroy()

    async def typeText(self, text: str, keystrokeDelay: float) -> None:
        """Feed text character by character like a typing user, then print the final suggestions"""
        autocomplete = self.placeService.createAutocomplete()
        try:
            for i in range(1, len(text) + 1):
                autocomplete.setQuery(text[:i])
                await asyncio.sleep(keystrokeDelay)
            await autocomplete.waitIdle()
            printSuggestions(autocomplete)
        finally:
            await autocomplete.destroy()

    async def reverse(self, lat: float, lon: float) -> bool:
        location = await self.placeService.reverseGeocode(lat, lon)
        if location is None:
            print(f"Unable to describe location ({lat}, {lon})")
            return False

        print(location["address"])
        for key in ("city", "state", "country"):
            if location[key]:
                print(f"  {key}: {location[key]}")
        return True

    async def run(self, args: argparse.Namespace) -> int:
        """Execute the selected command and return the process exit code."""
        try:
            await self._setup()
            match args.command:
                case "search":
                    await self.search(args.query)
                case "type":
                    await self.typeText(args.text, args.keystroke_delay)
                case "reverse":
                    if not await self.reverse(args.lat, args.lon):
                        return 1
                case _:
                    raise ValueError(f"Unknown command: {args.command}")
            logger.debug(f"Service stats: {self.placeService.getStats()}")
        finally:
            await self.rateLimiterManager.destroy()
        return 0


def printSuggestions(autocomplete: LocationAutocomplete) -> None:
    """Print suggestions the way the location input renders them, dood!"""
    if autocomplete.error:
        print(autocomplete.error)

    for i, result in enumerate(autocomplete.suggestions, start=1):
        icon = autocomplete.getLocationIcon(result.get("type"))
        shortName = autocomplete.getShortName(result)
        print(f"{i}. [{icon}] {shortName}")
        print(f"   {result['display_name']}")


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="LANE places - location autocomplete via Nominatim, dood!")
    parser.add_argument(
        "-c",
        "--config",
        default="config.toml",
        help="Path to configuration file (default: config.toml)",
    )
    parser.add_argument(
        "--config-dir",
        action="append",
        help="Directory to search for .toml config files recursively (can be specified multiple times), dood!",
    )
    parser.add_argument(
        "--print-config",
        action="store_true",
        help="Pretty-print loaded configuration and exit, dood!",
    )

    subparsers = parser.add_subparsers(dest="command")

    searchParser = subparsers.add_parser("search", help="Search places for a query")
    searchParser.add_argument("query", help="Text typed into the location input")

    typeParser = subparsers.add_parser("type", help="Simulate typing text into the location input")
    typeParser.add_argument("text", help="Text to type character by character")
    typeParser.add_argument(
        "--keystroke-delay",
        type=float,
        default=0.1,
        help="Seconds between keystrokes (default: 0.1)",
    )

    reverseParser = subparsers.add_parser("reverse", help="Describe a coordinate pair")
    reverseParser.add_argument("lat", type=float, help="Latitude")
    reverseParser.add_argument("lon", type=float, help="Longitude")

    args = parser.parse_args(argv)
    if not args.print_config and args.command is None:
        parser.error("a command is required unless --print-config is given")

    args.config = os.path.abspath(args.config)
    if args.config_dir:
        args.config_dir = [os.path.abspath(dirPath) for dirPath in args.config_dir]

    return args


def prettyPrintConfig(configManager: ConfigManager) -> None:
    """Pretty-print the loaded configuration, dood!"""
    print("=== LANE places Configuration ===")
    print()

    config = configManager.config
    try:
        print(json.dumps(config, indent=2, ensure_ascii=False, sort_keys=True))
    except (TypeError, ValueError) as e:
        # TOML dates are not JSON serializable
        logger.warning(f"Could not serialize config as JSON: {e}")
        print("Raw configuration:")
        for key, value in sorted(config.items()):
            print(f"{key}: {value}")

    print()
    print("=== Configuration loaded successfully, dood! ===")


def main():
    """Main entry point."""
    args = parse_arguments()

    try:
        if args.print_config:
            prettyPrintConfig(ConfigManager(args.config, args.config_dir))
            sys.exit(0)

        app = PlacesApp(configPath=args.config, configDirs=args.config_dir)
        sys.exit(asyncio.run(app.run(args)))
    except KeyboardInterrupt:
        logger.info("Stopped by user")
    except PlacesConfigError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Places CLI crashed: {e}")
        logger.exception(e)
        sys.exit(1)


if __name__ == "__main__":
    main()
