"""Frontend-facing command surface.

Each method wraps one bridge operation and returns a CommandResponse
envelope instead of raising, which is what a UI invoking the bridge over
an IPC boundary expects.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import asdict, dataclass
from typing import Any

from kamune_bridge.domain.exceptions import AlreadyRunning, BridgeError
from kamune_bridge.ports.daemon import DaemonGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResponse:
    """Result envelope returned to the frontend.

    Attributes:
        success: Whether the operation succeeded
        data: Payload on success
        error: Error text on failure
    """

    success: bool
    data: Any = None
    error: str | None = None

    @classmethod
    def ok(cls, data: Any) -> CommandResponse:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, message: str) -> CommandResponse:
        return cls(success=False, error=message)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class DaemonCommands:
    """Daemon operations exposed to the frontend."""

    def __init__(self, bridge: DaemonGateway) -> None:
        self.bridge = bridge

    def start_daemon(self) -> CommandResponse:
        """Start the daemon process."""
        try:
            path = self.bridge.start()
        except AlreadyRunning:
            return CommandResponse.fail("Daemon is already running")
        except BridgeError as e:
            logger.error(f"Failed to start daemon: {e}")
            return CommandResponse.fail(f"Failed to start daemon: {e}")
        return CommandResponse.ok({"status": "started", "path": str(path)})

    def stop_daemon(self) -> CommandResponse:
        """Stop the daemon process."""
        if not self.bridge.is_running():
            return CommandResponse.fail("Daemon is not running")
        self.bridge.stop()
        return CommandResponse.ok({"status": "stopped"})

    def daemon_status(self) -> CommandResponse:
        return CommandResponse.ok(self.bridge.status())

    def start_server(
        self, addr: str, storage_path: str | None = None, no_passphrase: bool = True
    ) -> CommandResponse:
        """Ask the daemon to listen for peers on ``addr``."""
        return self._call(
            "start_server",
            "start server",
            {
                "addr": addr,
                "storage_path": storage_path or "",
                "db_no_passphrase": no_passphrase,
            },
        )

    def dial(
        self, addr: str, storage_path: str | None = None, no_passphrase: bool = True
    ) -> CommandResponse:
        """Ask the daemon to connect to a remote server."""
        return self._call(
            "dial",
            "dial",
            {
                "addr": addr,
                "storage_path": storage_path or "",
                "db_no_passphrase": no_passphrase,
            },
        )

    def send_message(self, session_id: str, message: str) -> CommandResponse:
        """Send a text message on a session. The text travels base64-encoded."""
        data_base64 = base64.b64encode(message.encode("utf-8")).decode("ascii")
        return self._call(
            "send_message",
            "send message",
            {"session_id": session_id, "data_base64": data_base64},
        )

    def list_sessions(self) -> CommandResponse:
        return self._call("list_sessions", "list sessions", {})

    def close_session(self, session_id: str) -> CommandResponse:
        return self._call("close_session", "close session", {"session_id": session_id})

    def _call(self, name: str, action: str, params: dict[str, Any]) -> CommandResponse:
        try:
            event = self.bridge.request(name, params)
        except BridgeError as e:
            logger.error(f"Failed to {action}: {e}")
            return CommandResponse.fail(f"Failed to {action}: {e}")
        return CommandResponse.ok(event.data)
