"""Config domain models for kamune-bridge.

Configuration is stored in config.toml and describes how the daemon is
located and launched, how long requests may wait, and how the bridge logs.
This module defines the validated configuration state.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Literal

from kamune_bridge.adapters.daemon.timeouts import BridgeTimeouts

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


@dataclass(frozen=True)
class DaemonConfig:
    """Configuration for locating, launching and talking to the daemon.

    Attributes:
        binary_name: Base name of the daemon executable (default: "daemon").
                    Platform-qualified variants are derived from it.
        binary: Explicit path to the daemon executable. Checked before the
               candidate search when set.
        args: Extra command line arguments passed to the daemon.
        request_timeout: Seconds to wait for a reply to an awaited command.
        shutdown_grace: Seconds to let the daemon exit after "shutdown"
                       before it is killed.

    Raises:
        ValueError: If binary_name is empty or a timeout is not positive.
    """

    binary_name: str = "daemon"
    binary: str | None = None
    args: list[str] = field(default_factory=list)
    request_timeout: float = BridgeTimeouts.REQUEST_DEFAULT
    shutdown_grace: float = BridgeTimeouts.SHUTDOWN_GRACE

    def __post_init__(self) -> None:
        """Validate daemon config after initialization."""
        if not self.binary_name:
            raise ValueError("binary_name must not be empty")
        if self.request_timeout <= 0:
            raise ValueError(
                f"request_timeout must be positive, got {self.request_timeout}"
            )
        if self.shutdown_grace < 0:
            raise ValueError(
                f"shutdown_grace cannot be negative, got {self.shutdown_grace}"
            )


@dataclass(frozen=True)
class LoggingConfig:
    """Configuration for bridge logging.

    Attributes:
        level: Log level name (default: "INFO")
        file: Optional log file path; logs also go to stderr
    """

    level: LogLevel = "INFO"
    file: str | None = None

    def __post_init__(self) -> None:
        if self.level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            raise ValueError(f"Unknown log level: {self.level}")


@dataclass(frozen=True)
class BridgeConfig:
    """Complete kamune-bridge configuration.

    Attributes:
        daemon: Daemon launch and request configuration
        logging: Logging configuration
    """

    daemon: DaemonConfig = field(default_factory=DaemonConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @staticmethod
    def default() -> BridgeConfig:
        """Create a config with all default values."""
        return BridgeConfig(daemon=DaemonConfig(), logging=LoggingConfig())

    @staticmethod
    def from_partial(base: BridgeConfig, data: dict[str, Any]) -> BridgeConfig:
        """Overlay partial config data onto an existing config.

        Only keys present in ``data`` are replaced; unknown sections and
        keys are ignored. Each section is re-validated after the merge.

        Args:
            base: Config providing values for missing keys
            data: Raw config dictionary (e.g. parsed TOML)

        Returns:
            New BridgeConfig with overrides applied

        Raises:
            ValueError: If a merged section fails validation
            TypeError: If a section has the wrong shape
        """
        daemon = _overlay(base.daemon, data.get("daemon", {}))
        logging_config = _overlay(base.logging, data.get("logging", {}))
        return BridgeConfig(daemon=daemon, logging=logging_config)


def _overlay(section: Any, overrides: dict[str, Any]) -> Any:
    if not isinstance(overrides, dict):
        raise TypeError(f"Config section must be a table, got {type(overrides).__name__}")
    known = {f.name for f in fields(section)}
    values = {k: v for k, v in overrides.items() if k in known}
    return replace(section, **values)
