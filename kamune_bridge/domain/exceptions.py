"""Domain exceptions for the daemon bridge.

Every failure the bridge can report is one of these types. They are raised
to callers as typed results and converted to user-facing messages at the
application boundary (CLI, shell, command surface).
"""

from __future__ import annotations

from pathlib import Path


class BridgeError(Exception):
    """Base exception for all bridge errors.

    Attributes:
        message: User-facing error message.
        hint: Optional actionable suggestion.
    """

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint


class NotRunning(BridgeError):
    """Raised when an operation needs a daemon process and none is active."""

    def __init__(self, message: str = "daemon not running", hint: str | None = None) -> None:
        super().__init__(message, hint=hint)


class AlreadyRunning(BridgeError):
    """Raised when starting a daemon while one is already owned."""

    def __init__(
        self, message: str = "daemon already running", hint: str | None = None
    ) -> None:
        super().__init__(message, hint=hint)


class BinaryNotFound(BridgeError):
    """Raised when no daemon executable exists in any candidate location.

    Attributes:
        searched: Candidate paths that were checked, in priority order.
    """

    def __init__(self, searched: list[Path] | None = None, message: str | None = None) -> None:
        self.searched = list(searched or [])
        super().__init__(
            message or "daemon binary not found in any expected location",
            hint="Set daemon.binary in the config file or KAMUNE_DAEMON_BIN",
        )


class SpawnError(BridgeError):
    """Raised when the OS refuses to launch the daemon executable."""

    def __init__(self, path: Path, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"failed to spawn daemon {path}: {cause}")


class SendError(BridgeError):
    """Raised when a command cannot be written or its reply channel closes."""


class ProtocolError(BridgeError):
    """Base exception for malformed protocol messages."""


class EncodingError(ProtocolError):
    """Raised when a command cannot be serialized."""


class DecodingError(ProtocolError):
    """Raised when a line from the daemon is not a valid event."""


class Timeout(BridgeError):
    """Raised when no reply arrives before the deadline.

    Attributes:
        request_id: Identifier of the command that timed out.
        timeout: Seconds waited.
    """

    def __init__(self, request_id: str, timeout: float) -> None:
        self.request_id = request_id
        self.timeout = timeout
        super().__init__(
            f"command timeout after {timeout:g}s (id {request_id})",
            hint="The daemon may be busy or unresponsive; check its status",
        )


class DaemonError(BridgeError):
    """Raised when the daemon explicitly reports failure in a reply.

    This is an application-level failure, not a protocol fault.
    """

    def __init__(self, message: str, request_id: str | None = None) -> None:
        self.request_id = request_id
        super().__init__(f"daemon error: {message}")
        self.reason = message
