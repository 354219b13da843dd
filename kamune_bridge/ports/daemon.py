"""Port interface for daemon management.

Defines protocols for driving a supervised daemon process.
"""

from pathlib import Path
from typing import Any, Protocol

from kamune_bridge.domain.messages import Command, Event


class DaemonManager(Protocol):
    """Protocol for managing daemon lifecycle.

    At most one daemon process is active per manager.
    """

    def is_running(self) -> bool:
        """Check if the daemon process is alive.

        Returns:
            True if the daemon is running
        """
        ...

    def start(self, path: Path | None = None) -> Path:
        """Start the daemon.

        Args:
            path: Executable to launch; resolved automatically when None

        Returns:
            Path of the launched executable

        Raises:
            AlreadyRunning: If a daemon is already active
        """
        ...

    def stop(self) -> None:
        """Stop the daemon. Idempotent."""
        ...

    def status(self) -> dict[str, Any]:
        """Get daemon status (at least a "running" key)."""
        ...


class CommandDispatcher(Protocol):
    """Protocol for sending commands to a running daemon."""

    def send(self, command: Command) -> str:
        """Send a command without waiting; returns its request id."""
        ...

    def send_and_await(self, command: Command, timeout: float | None = None) -> Event:
        """Send a command and return the event replying to it."""
        ...

    def request(self, name: str, params: Any = None, timeout: float | None = None) -> Event:
        """Send a named command with a fresh id and return its reply."""
        ...


class DaemonGateway(DaemonManager, CommandDispatcher, Protocol):
    """Lifecycle and command dispatch together, as the bridge facade offers."""
