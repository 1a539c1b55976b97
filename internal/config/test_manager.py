"""
Tests for the Configuration Manager.

Covers loading the main TOML file, merging config directories,
environment substitution, .env loading and the section getters.
"""

import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from internal.config.manager import ConfigManager, substituteEnvVars

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def tempDir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sampleConfigToml():
    """Provide sample valid TOML configuration."""
    return """
[nominatim]
base-url = "https://nominatim.openstreetmap.org"
user-agent = "LANE-Carpool-App (carpooling app)"
country-codes = "in"

[autocomplete]
debounce-delay = 0.5
cache-size = 50

[logging]
level = "INFO"
"""


@pytest.fixture
def defaultsToml():
    """Provide default configuration TOML."""
    return """
[nominatim]
user-agent = "LANE-Default"
limit = 5
country-codes = "in"

[autocomplete]
cache-ttl = 300
queues = ["nominatim"]

[ratelimiter.queues]
nominatim = "default"
"""


@pytest.fixture
def nestedConfigToml():
    """Provide nested configuration structure."""
    return """
[ratelimiter.ratelimiters.nominatim-policy]
type = "MinInterval"

[ratelimiter.ratelimiters.nominatim-policy.config]
minInterval = 1.1

[ratelimiter.queues]
nominatim = "nominatim-policy"
"""


# ============================================================================
# Helper Functions
# ============================================================================


def createConfigFile(directory: Path, filename: str, content: str) -> Path:
    """Create a TOML config file in the specified directory."""
    filePath = directory / filename
    filePath.parent.mkdir(parents=True, exist_ok=True)
    filePath.write_text(content)
    return filePath


def createConfigDir(baseDir: Path, dirName: str, files: dict) -> Path:
    """Create a config directory with multiple TOML files."""
    configDir = baseDir / dirName
    configDir.mkdir(parents=True, exist_ok=True)

    for filename, content in files.items():
        createConfigFile(configDir, filename, content)

    return configDir


def createManager(configPath, tempDir: Path, **kwargs) -> ConfigManager:
    """Create a ConfigManager that never picks up a stray .env from the working directory."""
    return ConfigManager(str(configPath), dotEnvFile=str(tempDir / ".env"), **kwargs)


# ============================================================================
# Loading Tests
# ============================================================================


class TestConfigurationLoading:
    """Test configuration loading from TOML files."""

    def testLoadSingleConfigFile(self, tempDir, sampleConfigToml):
        configPath = createConfigFile(tempDir, "config.toml", sampleConfigToml)

        manager = createManager(configPath, tempDir)

        assert manager.config_path == str(configPath)
        assert manager.config["nominatim"]["country-codes"] == "in"
        assert manager.config["autocomplete"]["debounce-delay"] == 0.5

    def testEmptyConfigIsValid(self, tempDir):
        """Test an empty file is accepted, every section has defaults, dood!"""
        configPath = createConfigFile(tempDir, "config.toml", "")

        manager = createManager(configPath, tempDir)

        assert manager.config == {}
        assert manager.getNominatimConfig() == {}

    def testMissingConfigWithoutDirsExits(self, tempDir):
        with pytest.raises(SystemExit):
            createManager(tempDir / "nonexistent.toml", tempDir)

    def testMissingConfigWithDirs(self, tempDir, defaultsToml):
        configDir = createConfigDir(tempDir, "defaults", {"defaults.toml": defaultsToml})

        manager = createManager(tempDir / "nonexistent.toml", tempDir, configDirs=[str(configDir)])

        assert manager.config["nominatim"]["user-agent"] == "LANE-Default"

    def testInvalidSyntaxExits(self, tempDir):
        configPath = createConfigFile(tempDir, "config.toml", "[nominatim\nlimit = 5\n")

        with pytest.raises(SystemExit):
            createManager(configPath, tempDir)

    def testInvalidFileInConfigDirIsSkipped(self, tempDir, sampleConfigToml):
        configPath = createConfigFile(tempDir, "config.toml", sampleConfigToml)
        configDir = createConfigDir(
            tempDir,
            "conf.d",
            {"00-broken.toml": "[autocomplete\n", "01-valid.toml": "[autocomplete]\ncache-size = 10\n"},
        )

        manager = createManager(configPath, tempDir, configDirs=[str(configDir)])

        assert manager.config["autocomplete"]["cache-size"] == 10

    def testNonExistentConfigDirIsSkipped(self, tempDir, sampleConfigToml):
        configPath = createConfigFile(tempDir, "config.toml", sampleConfigToml)
        notADir = createConfigFile(tempDir, "file.txt", "")

        manager = createManager(configPath, tempDir, configDirs=[str(tempDir / "missing"), str(notADir)])

        assert manager.config["nominatim"]["country-codes"] == "in"


# ============================================================================
# Merging Tests
# ============================================================================


class TestConfigurationMerging:
    """Test configuration merging logic."""

    def testConfigDirOverridesMainConfig(self, tempDir, sampleConfigToml, defaultsToml):
        configPath = createConfigFile(tempDir, "config.toml", sampleConfigToml)
        configDir = createConfigDir(tempDir, "defaults", {"defaults.toml": defaultsToml})

        manager = createManager(configPath, tempDir, configDirs=[str(configDir)])

        # Config dirs are merged on top of the main file
        assert manager.config["nominatim"]["user-agent"] == "LANE-Default"
        # Keys only present in one source survive
        assert manager.config["nominatim"]["base-url"] == "https://nominatim.openstreetmap.org"
        assert manager.config["nominatim"]["limit"] == 5
        assert manager.config["autocomplete"]["debounce-delay"] == 0.5
        assert manager.config["autocomplete"]["cache-ttl"] == 300
        assert manager.config["logging"]["level"] == "INFO"

    def testMergeNestedConfigs(self, tempDir, nestedConfigToml):
        override = """
[ratelimiter.ratelimiters.nominatim-policy.config]
minInterval = 2.0

[ratelimiter.queues]
reverse = "nominatim-policy"
"""
        configPath = createConfigFile(tempDir, "config.toml", nestedConfigToml)
        configDir = createConfigDir(tempDir, "configs", {"override.toml": override})

        manager = createManager(configPath, tempDir, configDirs=[str(configDir)])

        rateLimiterConfig = manager.getRateLimiterConfig()
        assert rateLimiterConfig["ratelimiters"]["nominatim-policy"]["type"] == "MinInterval"
        assert rateLimiterConfig["ratelimiters"]["nominatim-policy"]["config"]["minInterval"] == 2.0
        assert rateLimiterConfig["queues"] == {"nominatim": "nominatim-policy", "reverse": "nominatim-policy"}

    def testMergePriority(self, tempDir):
        """Test files are merged in sorted path order, later ones win."""
        configPath = createConfigFile(tempDir, "config.toml", "[nominatim]\nlimit = 1\n")
        configDir = createConfigDir(
            tempDir,
            "configs",
            {
                "02-third.toml": "[nominatim]\nlimit = 3\n",
                "01-second.toml": "[nominatim]\nlimit = 2\ncountry-codes = \"in\"\n",
                "nested/03-fourth.toml": "[nominatim]\naccept-language = \"en\"\n",
            },
        )

        manager = createManager(configPath, tempDir, configDirs=[str(configDir)])

        assert manager.config["nominatim"] == {"limit": 3, "country-codes": "in", "accept-language": "en"}

    def testMergeMultipleDirectories(self, tempDir):
        configPath = createConfigFile(tempDir, "config.toml", "[nominatim]\nlimit = 5\n")
        dir1 = createConfigDir(tempDir, "dir1", {"a.toml": "[autocomplete]\ncache-size = 20\n"})
        dir2 = createConfigDir(tempDir, "dir2", {"b.toml": "[logging]\nlevel = 'DEBUG'\n"})

        manager = createManager(configPath, tempDir, configDirs=[str(dir1), str(dir2)])

        assert manager.config_dirs == [str(dir1), str(dir2)]
        assert manager.getNominatimConfig() == {"limit": 5}
        assert manager.getAutocompleteConfig() == {"cache-size": 20}
        assert manager.getLoggingConfig() == {"level": "DEBUG"}

    def testMergeArraysOverride(self, tempDir, defaultsToml):
        configPath = createConfigFile(tempDir, "config.toml", defaultsToml)
        configDir = createConfigDir(tempDir, "configs", {"override.toml": '[autocomplete]\nqueues = ["geocoder"]\n'})

        manager = createManager(configPath, tempDir, configDirs=[str(configDir)])

        assert manager.config["autocomplete"]["queues"] == ["geocoder"]


# ============================================================================
# Environment Tests
# ============================================================================


class TestEnvironment:
    """Test ${VAR} substitution and .env loading."""

    def testSubstituteEnvVars(self):
        with patch.dict(os.environ, {"LANE_TEST_AGENT": "LANE-Env"}, clear=False):
            result = substituteEnvVars(
                {
                    "user-agent": "${LANE_TEST_AGENT} (carpooling app)",
                    "list": ["${LANE_TEST_AGENT}", 5],
                    "unset": "${LANE_TEST_UNSET_VARIABLE}",
                    "number": 1.1,
                }
            )

        assert result == {
            "user-agent": "LANE-Env (carpooling app)",
            "list": ["LANE-Env", 5],
            "unset": "${LANE_TEST_UNSET_VARIABLE}",
            "number": 1.1,
        }

    def testDotEnvFileIsUsed(self, tempDir):
        """Test values from .env reach the configuration, dood!"""
        configPath = createConfigFile(tempDir, "config.toml", '[nominatim]\nbase-url = "${LANE_TEST_NOMINATIM_URL}"\n')
        dotEnv = createConfigFile(
            tempDir, ".env", '# local overrides\nLANE_TEST_NOMINATIM_URL="https://nominatim.local"\n\nBROKEN_LINE\n'
        )

        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("LANE_TEST_NOMINATIM_URL", None)
            manager = ConfigManager(str(configPath), dotEnvFile=str(dotEnv))

        assert manager.getNominatimConfig()["base-url"] == "https://nominatim.local"

    def testEnvironmentWinsOverDotEnv(self, tempDir):
        configPath = createConfigFile(tempDir, "config.toml", '[nominatim]\nuser-agent = "${LANE_TEST_AGENT}"\n')
        dotEnv = createConfigFile(tempDir, ".env", "LANE_TEST_AGENT=from-dotenv\n")

        with patch.dict(os.environ, {"LANE_TEST_AGENT": "from-environment"}, clear=False):
            manager = ConfigManager(str(configPath), dotEnvFile=str(dotEnv))

        assert manager.getNominatimConfig()["user-agent"] == "from-environment"


# ============================================================================
# Getter Methods Tests
# ============================================================================


class TestGetterMethods:
    """Test configuration getter methods."""

    def testGet(self, tempDir, sampleConfigToml):
        manager = createManager(createConfigFile(tempDir, "config.toml", sampleConfigToml), tempDir)

        assert manager.get("nominatim") is not None
        assert manager.get("nonexistent") is None
        assert manager.get("nonexistent", "default") == "default"

    def testSectionGetters(self, tempDir, sampleConfigToml):
        manager = createManager(createConfigFile(tempDir, "config.toml", sampleConfigToml), tempDir)

        assert manager.getNominatimConfig()["user-agent"] == "LANE-Carpool-App (carpooling app)"
        assert manager.getAutocompleteConfig() == {"debounce-delay": 0.5, "cache-size": 50}
        assert manager.getLoggingConfig() == {"level": "INFO"}
        assert manager.getRateLimiterConfig() == {}

    def testEmptySections(self, tempDir):
        manager = createManager(createConfigFile(tempDir, "config.toml", "[other]\nkey = 1\n"), tempDir)

        assert manager.getNominatimConfig() == {}
        assert manager.getAutocompleteConfig() == {}
        assert manager.getLoggingConfig() == {}
        assert manager.getRateLimiterConfig() == {}
