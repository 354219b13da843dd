"""Tests for config I/O utilities."""

import tomllib
from pathlib import Path

import pytest

from kamune_bridge.domain.config import BridgeConfig, DaemonConfig, LoggingConfig
from kamune_bridge.shared.config_io import (
    config_to_data,
    create_default_config_file,
    get_global_config_path,
    load_config_data,
    save_config,
)


class TestGlobalConfigPath:
    """Tests for get_global_config_path.

    The autouse isolation fixture patches the module attribute; the function
    imported here at collection time is the real one.
    """

    def test_uses_xdg_config_home(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        """Test that XDG_CONFIG_HOME is honored on POSIX."""
        from kamune_bridge.shared import config_io

        monkeypatch.setattr(config_io.platform, "system", lambda: "Linux")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))

        path = get_global_config_path()

        assert path == tmp_path / "xdg" / "kamune-bridge" / "config.toml"

    def test_falls_back_to_home_config(self, monkeypatch: pytest.MonkeyPatch):
        """Test the ~/.config fallback."""
        from kamune_bridge.shared import config_io

        monkeypatch.setattr(config_io.platform, "system", lambda: "Linux")
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)

        path = get_global_config_path()

        assert path == Path.home() / ".config" / "kamune-bridge" / "config.toml"

    def test_windows_uses_appdata(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        """Test that APPDATA is used on Windows."""
        from kamune_bridge.shared import config_io

        monkeypatch.setattr(config_io.platform, "system", lambda: "Windows")
        monkeypatch.setenv("APPDATA", str(tmp_path / "appdata"))

        path = get_global_config_path()

        assert path == tmp_path / "appdata" / "kamune-bridge" / "config.toml"


class TestLoadConfigData:
    """Tests for load_config_data."""

    def test_missing_file_raises(self, tmp_path: Path):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config_data(tmp_path / "missing.toml")

    def test_invalid_toml_raises_value_error(self, tmp_path: Path):
        """Test that malformed TOML raises ValueError."""
        path = tmp_path / "config.toml"
        path.write_text("[daemon\nbinary_name = ")

        with pytest.raises(ValueError, match="Invalid TOML"):
            load_config_data(path)

    def test_loads_tables(self, tmp_path: Path):
        """Test that TOML tables are returned as nested dicts."""
        path = tmp_path / "config.toml"
        path.write_text('[daemon]\nbinary_name = "kamuned"\n')

        assert load_config_data(path) == {"daemon": {"binary_name": "kamuned"}}


class TestSaveConfig:
    """Tests for config_to_data and save_config."""

    def test_config_to_data_omits_unset_values(self):
        """Test that None values are left out because TOML has no null."""
        data = config_to_data(BridgeConfig.default())

        assert "binary" not in data["daemon"]
        assert "file" not in data["logging"]
        assert data["daemon"]["binary_name"] == "daemon"

    def test_save_then_load_restores_config(self, tmp_path: Path):
        """Test that a saved config loads back to the same values."""
        config = BridgeConfig(
            daemon=DaemonConfig(binary="/opt/daemon", args=["-v"], request_timeout=12.5),
            logging=LoggingConfig(level="DEBUG", file="/tmp/bridge.log"),
        )
        path = tmp_path / "nested" / "config.toml"

        save_config(config, path)
        loaded = BridgeConfig.from_partial(BridgeConfig.default(), load_config_data(path))

        assert loaded == config

    def test_default_config_file_is_valid(self, tmp_path: Path):
        """Test that the commented template parses to the defaults."""
        path = tmp_path / "dir" / "kamune-bridge.toml"

        create_default_config_file(path)

        with path.open("rb") as f:
            data = tomllib.load(f)
        assert BridgeConfig.from_partial(BridgeConfig.default(), data) == BridgeConfig.default()
        assert "KAMUNE_DAEMON_BIN" in path.read_text()
