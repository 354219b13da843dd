"""Command dispatcher and lifecycle facade for the daemon bridge.

DaemonBridge is the single entry point the frontend uses: it starts and
stops the daemon, sends fire-and-forget commands, and awaits replies
correlated by request id. It is safe to share between threads.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import CancelledError
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Any

from kamune_bridge.adapters.daemon.binary import resolve_binary
from kamune_bridge.adapters.daemon.correlator import ResponseCorrelator
from kamune_bridge.adapters.daemon.protocol import encode
from kamune_bridge.adapters.daemon.supervisor import ProcessSupervisor
from kamune_bridge.domain.config import DaemonConfig
from kamune_bridge.domain.exceptions import (
    AlreadyRunning,
    DaemonError,
    SendError,
    Timeout,
)
from kamune_bridge.domain.messages import Command, Event
from kamune_bridge.ports.events import EventPublisher

logger = logging.getLogger(__name__)

BINARY_ENV_VAR = "KAMUNE_DAEMON_BIN"


class DaemonBridge:
    """Bridge between the frontend and a supervised daemon process."""

    def __init__(
        self,
        config: DaemonConfig,
        sink: EventPublisher,
        resource_dir: Path | None = None,
    ) -> None:
        """Initialize the bridge. No process is started.

        Args:
            config: Daemon launch and request settings
            sink: Destination for every event the daemon emits. It must be
                drained (BridgeContext forwards it to subscribers).
            resource_dir: Bundle resource directory searched first for the binary
        """
        self.config = config
        self.sink = sink
        self.resource_dir = resource_dir
        self.correlator = ResponseCorrelator()
        self.supervisor = ProcessSupervisor(
            self.correlator, self.sink, shutdown_grace=self.config.shutdown_grace
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def resolve_binary(self) -> Path:
        """Locate the daemon executable from config, environment and search paths.

        Raises:
            BinaryNotFound: If no executable can be found
        """
        explicit = os.environ.get(BINARY_ENV_VAR) or self.config.binary
        return resolve_binary(
            self.resource_dir,
            binary_name=self.config.binary_name,
            explicit=Path(explicit).expanduser() if explicit else None,
        )

    def start(self, path: Path | None = None) -> Path:
        """Start the daemon.

        Args:
            path: Executable to launch; resolved from config when None

        Returns:
            Path of the launched executable

        Raises:
            AlreadyRunning: If a daemon is already active
            BinaryNotFound: If no executable can be found
            SpawnError: If the launch fails
        """
        if self.supervisor.is_running():
            raise AlreadyRunning()

        daemon_path = path or self.resolve_binary()
        self.supervisor.spawn(daemon_path, self.config.args)
        logger.info(f"Daemon started from: {daemon_path}")
        return daemon_path

    def stop(self) -> None:
        """Stop the daemon, failing outstanding requests. Idempotent."""
        self.supervisor.stop()

    def is_running(self) -> bool:
        return self.supervisor.is_running()

    def status(self) -> dict[str, Any]:
        """Get bridge status.

        Returns:
            Dictionary with "running", "pid" and "binary" keys
        """
        running = self.supervisor.is_running()
        handle = self.supervisor.handle if running else None
        return {
            "running": running,
            "pid": handle.pid if handle else None,
            "binary": str(handle.path) if handle else None,
        }

    def close(self) -> None:
        self.stop()

    def __enter__(self) -> DaemonBridge:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def send(self, command: Command) -> str:
        """Send a command without waiting for a reply.

        Args:
            command: Command to send

        Returns:
            The command's request id

        Raises:
            NotRunning: If no daemon is active
            EncodingError: If the command cannot be serialized
            SendError: If writing to the daemon fails
        """
        data = encode(command)
        logger.debug(f"Sending command: {data.rstrip()!r}")
        self.supervisor.write(data)
        return command.id

    def send_and_await(self, command: Command, timeout: float | None = None) -> Event:
        """Send a command and wait for the event replying to it.

        Args:
            command: Command to send
            timeout: Seconds to wait (default: config request_timeout)

        Returns:
            The reply event carrying the command's id

        Raises:
            NotRunning: If no daemon is active, or it stops before replying
            Timeout: If no reply arrives in time
            SendError: If writing fails or the reply channel closes
        """
        timeout = self.config.request_timeout if timeout is None else timeout
        future = self.correlator.register(command.id)

        try:
            self.send(command)
        except BaseException:
            self.correlator.expire(command.id)
            raise

        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            if self.correlator.expire(command.id):
                logger.warning(f"Command {command.name} timed out after {timeout}s")
                raise Timeout(command.id, timeout) from None
            # Lost the race: a reply or teardown completed the future first.
            return future.result(timeout=0)
        except CancelledError as e:
            raise SendError("response channel closed") from e

    def request(
        self, name: str, params: Any = None, timeout: float | None = None
    ) -> Event:
        """Send a named command with fresh id and return its reply.

        Raises:
            DaemonError: If the daemon replies with an error event
            (plus everything send_and_await raises)
        """
        command = Command.new(name, params)
        event = self.send_and_await(command, timeout=timeout)
        if event.is_error():
            raise DaemonError(event.error_message(), request_id=command.id)
        return event
