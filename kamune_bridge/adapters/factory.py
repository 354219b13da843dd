"""Factory classes for adapter and context instantiation.

This module centralizes the creation of the bridge and its dependencies,
keeping the CLI layer free from direct adapter imports.

The factories use lazy imports so that CLI commands which never talk to
the daemon (config, resolve) do not load the bridge machinery.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kamune_bridge.core.context import BridgeContext
    from kamune_bridge.domain.config import BridgeConfig
    from kamune_bridge.ports.config import ConfigProvider


class ConfigFactory:
    """Factory for creating configuration-related instances."""

    def create_config_provider(self) -> ConfigProvider:
        """Create a TomlConfigProvider instance.

        Returns:
            TomlConfigProvider instance.
        """
        from kamune_bridge.adapters.config.toml_config_provider import TomlConfigProvider

        return TomlConfigProvider()


class ContextFactory:
    """Factory for creating the application context.

    Args:
        config: BridgeConfig with daemon and logging settings.
    """

    def __init__(self, config: BridgeConfig) -> None:
        self._config = config

    def create_context(self, resource_dir: Path | None = None) -> BridgeContext:
        """Create a BridgeContext. Event forwarding is not started yet.

        Args:
            resource_dir: Bundle resource directory searched first for the daemon.

        Returns:
            BridgeContext instance.
        """
        from kamune_bridge.core.context import BridgeContext

        return BridgeContext(self._config, resource_dir=resource_dir)
