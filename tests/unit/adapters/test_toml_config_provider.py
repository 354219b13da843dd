"""Unit tests for TomlConfigProvider adapter."""

import logging
from pathlib import Path

import pytest

from kamune_bridge.adapters.config.toml_config_provider import (
    LOCAL_CONFIG_NAME,
    TomlConfigProvider,
)
from kamune_bridge.domain.config import BridgeConfig


@pytest.fixture
def global_path(tmp_path: Path) -> Path:
    """Global config location, created empty on demand by tests."""
    path = tmp_path / "home" / "kamune-bridge" / "config.toml"
    path.parent.mkdir(parents=True)
    return path


@pytest.fixture
def provider(global_path: Path) -> TomlConfigProvider:
    """Create a TomlConfigProvider reading the temp global config."""
    return TomlConfigProvider(global_path=global_path)


class TestLoadValidConfig:
    """Tests for loading valid configurations."""

    def test_load_local_config_returns_bridge_config(
        self, provider: TomlConfigProvider, tmp_path: Path
    ) -> None:
        """Test that loading a valid config returns BridgeConfig instance."""
        local = tmp_path / LOCAL_CONFIG_NAME
        local.write_text(
            """
[daemon]
binary_name = "kamuned"
request_timeout = 12.0
"""
        )

        result = provider.load(local)

        assert isinstance(result, BridgeConfig)
        assert result.daemon.binary_name == "kamuned"
        assert result.daemon.request_timeout == 12.0

    def test_load_config_with_all_sections(
        self, provider: TomlConfigProvider, tmp_path: Path
    ) -> None:
        """Test loading a config with all sections specified."""
        local = tmp_path / LOCAL_CONFIG_NAME
        local.write_text(
            """
[daemon]
binary_name = "kamuned"
binary = "/opt/kamune/kamuned"
args = ["--log-level", "debug"]
request_timeout = 10.0
shutdown_grace = 1.5

[logging]
level = "DEBUG"
file = "/tmp/kamune-bridge.log"
"""
        )

        result = provider.load(local)

        assert result.daemon.binary == "/opt/kamune/kamuned"
        assert result.daemon.args == ["--log-level", "debug"]
        assert result.daemon.shutdown_grace == 1.5
        assert result.logging.level == "DEBUG"
        assert result.logging.file == "/tmp/kamune-bridge.log"

    def test_default_local_path_is_cwd(
        self,
        provider: TomlConfigProvider,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that ./kamune-bridge.toml is read when no path is given."""
        work = tmp_path / "work"
        work.mkdir()
        (work / LOCAL_CONFIG_NAME).write_text('[logging]\nlevel = "WARNING"\n')
        monkeypatch.chdir(work)

        assert provider.load().logging.level == "WARNING"


class TestLoadMissingConfig:
    """Tests for loading when config files are missing."""

    def test_load_missing_files_returns_defaults(
        self, provider: TomlConfigProvider, tmp_path: Path
    ) -> None:
        """Test that missing config files return the default configuration."""
        result = provider.load(tmp_path / "missing.toml")

        assert result == BridgeConfig.default()


class TestGlobalLocalMerge:
    """Tests for the global/local cascade."""

    def test_global_config_applies_without_local(
        self, provider: TomlConfigProvider, global_path: Path, tmp_path: Path
    ) -> None:
        """Test that global values are used when there is no local file."""
        global_path.write_text('[daemon]\nrequest_timeout = 45.0\n')

        result = provider.load(tmp_path / "missing.toml")

        assert result.daemon.request_timeout == 45.0

    def test_local_overrides_global_per_key(
        self, provider: TomlConfigProvider, global_path: Path, tmp_path: Path
    ) -> None:
        """Test that local values win while other global keys survive."""
        global_path.write_text(
            '[daemon]\nbinary_name = "kamuned"\nrequest_timeout = 45.0\n'
        )
        local = tmp_path / LOCAL_CONFIG_NAME
        local.write_text("[daemon]\nrequest_timeout = 5.0\n")

        result = provider.load(local)

        assert result.daemon.request_timeout == 5.0
        assert result.daemon.binary_name == "kamuned"


class TestLoadInvalidConfig:
    """Tests for handling invalid config files."""

    def test_invalid_toml_is_ignored_with_warning(
        self,
        provider: TomlConfigProvider,
        tmp_path: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test that a malformed local file falls back and logs a warning."""
        local = tmp_path / LOCAL_CONFIG_NAME
        local.write_text("[daemon\nbroken =")

        with caplog.at_level(logging.WARNING):
            result = provider.load(local)

        assert result == BridgeConfig.default()
        assert "Failed to parse local config" in caplog.text

    def test_invalid_value_keeps_global(
        self, provider: TomlConfigProvider, global_path: Path, tmp_path: Path
    ) -> None:
        """Test that a local file failing validation does not discard global values."""
        global_path.write_text("[daemon]\nrequest_timeout = 45.0\n")
        local = tmp_path / LOCAL_CONFIG_NAME
        local.write_text("[daemon]\nrequest_timeout = -1\n")

        result = provider.load(local)

        assert result.daemon.request_timeout == 45.0

    def test_wrong_section_type_is_ignored(
        self, provider: TomlConfigProvider, tmp_path: Path
    ) -> None:
        """Test that a scalar where a table belongs is ignored."""
        local = tmp_path / LOCAL_CONFIG_NAME
        local.write_text('daemon = "oops"\n')

        assert provider.load(local) == BridgeConfig.default()
