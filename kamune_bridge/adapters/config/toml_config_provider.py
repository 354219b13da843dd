"""TOML-based configuration provider.

Config loading priority (highest to lowest):
1. Local: explicit --config path, or ./kamune-bridge.toml
2. Global: ~/.config/kamune-bridge/config.toml (user defaults)
3. Built-in defaults
"""

import logging
from pathlib import Path

from kamune_bridge.domain.config import BridgeConfig
from kamune_bridge.shared.config_io import get_global_config_path, load_config_data

logger = logging.getLogger(__name__)

LOCAL_CONFIG_NAME = "kamune-bridge.toml"


class TomlConfigProvider:
    """Configuration provider that loads from TOML files.

    Implements config cascade:
    1. Load global config if present
    2. Load local config if present
    3. Local values override global values (key-level merge per section)
    4. Missing values fall back to built-in defaults

    Gracefully handles missing or invalid configs with warnings.
    """

    def __init__(self, global_path: Path | None = None) -> None:
        self.global_path = global_path

    def load(self, local_path: Path | None = None) -> BridgeConfig:
        """Load configuration with global fallback.

        Args:
            local_path: Project or explicit config file (default: ./kamune-bridge.toml)

        Returns:
            BridgeConfig instance with merged global/local values or defaults
        """
        global_path = self.global_path or get_global_config_path()
        local_path = local_path or (Path.cwd() / LOCAL_CONFIG_NAME)

        config = BridgeConfig.default()
        config = self._apply(config, global_path, "global")
        config = self._apply(config, local_path, "local")
        return config

    def _apply(self, config: BridgeConfig, path: Path, label: str) -> BridgeConfig:
        if not path.exists():
            return config
        try:
            data = load_config_data(path)
            merged = BridgeConfig.from_partial(config, data)
        except (FileNotFoundError, ValueError, TypeError) as e:
            logger.warning(
                "Failed to parse %s config at %s: %s. Ignoring it.", label, path, e
            )
            return config
        logger.debug("Loaded %s config from %s", label, path)
        return merged
