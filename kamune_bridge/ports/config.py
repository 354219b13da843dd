"""Configuration provider port.

Defines the interface for loading and accessing application configuration.
"""

from pathlib import Path
from typing import Protocol

from kamune_bridge.domain.config import BridgeConfig


class ConfigProvider(Protocol):
    """Protocol for loading and providing configuration."""

    def load(self, local_path: Path | None = None) -> BridgeConfig:
        """Load configuration.

        Args:
            local_path: Optional config file overriding global settings

        Returns:
            BridgeConfig instance with loaded or default values

        Note:
            Implementations should gracefully fall back to defaults
            if config file is missing or invalid.
        """
        ...
