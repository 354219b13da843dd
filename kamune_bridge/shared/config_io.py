"""Configuration I/O utilities for reading and writing TOML config files.

This module handles serialization/deserialization of BridgeConfig to/from TOML format.
"""

import os
import platform
import tomllib  # Built-in Python 3.11+
from pathlib import Path
from typing import Any

import tomli_w

from kamune_bridge.domain.config import BridgeConfig

APP_DIR_NAME = "kamune-bridge"


def get_global_config_path() -> Path:
    """Get the path to the global config file.

    The location is platform-dependent:
    - Linux/macOS: $XDG_CONFIG_HOME/kamune-bridge/config.toml or ~/.config/kamune-bridge/config.toml
    - Windows: %APPDATA%/kamune-bridge/config.toml

    Returns:
        Path to the global config file (may not exist)
    """
    if platform.system() == "Windows":
        appdata = os.environ.get("APPDATA", "")
        if appdata:
            return Path(appdata) / APP_DIR_NAME / "config.toml"
        return Path.home() / ".config" / APP_DIR_NAME / "config.toml"
    else:
        xdg_config = os.environ.get("XDG_CONFIG_HOME", "")
        if xdg_config:
            return Path(xdg_config) / APP_DIR_NAME / "config.toml"
        return Path.home() / ".config" / APP_DIR_NAME / "config.toml"


def load_config_data(path: Path) -> dict[str, Any]:
    """Load raw TOML data from a config file.

    Args:
        path: Path to config.toml file

    Returns:
        Dictionary with parsed TOML data

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file is malformed
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in config file: {e}") from e


def config_to_data(config: BridgeConfig) -> dict[str, Any]:
    """Convert a BridgeConfig to a TOML-serializable dictionary.

    TOML has no null, so unset optional values are omitted.
    """
    daemon: dict[str, Any] = {
        "binary_name": config.daemon.binary_name,
        "args": list(config.daemon.args),
        "request_timeout": config.daemon.request_timeout,
        "shutdown_grace": config.daemon.shutdown_grace,
    }
    if config.daemon.binary:
        daemon["binary"] = config.daemon.binary

    logging_section: dict[str, Any] = {"level": config.logging.level}
    if config.logging.file:
        logging_section["file"] = config.logging.file

    return {"daemon": daemon, "logging": logging_section}


def save_config(config: BridgeConfig, path: Path) -> None:
    """Save configuration to a TOML file.

    Args:
        config: BridgeConfig to save
        path: Destination path for config.toml
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        tomli_w.dump(config_to_data(config), f)


def create_default_config_file(path: Path) -> None:
    """Create a default config.toml file with sensible defaults and comments.

    Args:
        path: Destination path for config.toml
    """
    # Template string to preserve comments and formatting
    template = """\
# kamune-bridge configuration

[daemon]
# Base name of the daemon executable. Platform-qualified builds such as
# daemon-linux-amd64 are found automatically.
binary_name = "daemon"

# Explicit path to the daemon executable (overrides the search).
# Can also be set with the KAMUNE_DAEMON_BIN environment variable.
# binary = "/opt/kamune/daemon"

# Extra arguments passed to the daemon
args = []

# Seconds to wait for a reply to a command
request_timeout = 30.0

# Seconds the daemon gets to exit after "shutdown" before it is killed
shutdown_grace = 0.5

[logging]
# DEBUG, INFO, WARNING or ERROR
level = "INFO"

# Optional log file (logs always go to stderr too)
# file = "~/.kamune-bridge/bridge.log"
"""

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        f.write(template)
