"""Centralized timeout configuration for the daemon bridge.

All bridge-related timeout values are defined here so they can be tuned in
one place.
"""


class BridgeTimeouts:
    """Centralized timeout configuration for bridge operations.

    All values are in seconds.

    Groups:
        REQUEST_*: Waiting for replies to awaited commands
        SHUTDOWN_*: Graceful shutdown after the "shutdown" command
        KILL_*: Waiting for the process after a forced kill
        *_JOIN: Waiting for background threads to finish
    """

    # =========================================================================
    # Request Timeouts
    # =========================================================================

    REQUEST_DEFAULT: float = 30.0
    """Default time an awaited command waits for its reply.

    Commands such as "dial" involve a network handshake on the daemon side,
    so this has to cover connection setup to a remote peer.
    """

    # =========================================================================
    # Shutdown Timeouts
    # =========================================================================

    SHUTDOWN_GRACE: float = 0.5
    """Time the daemon gets to exit on its own after "shutdown".

    The daemon is killed once this elapses, whether or not it exited.
    """

    KILL_WAIT: float = 5.0
    """Time to wait for the process to be reaped after kill().

    A killed process should disappear almost instantly. Anything longer
    points at an OS-level problem and is logged.
    """

    # =========================================================================
    # Background Thread Timeouts
    # =========================================================================

    READER_JOIN: float = 2.0
    """Time to wait for stream readers to drain once the process is gone.

    The pipes close when the daemon exits, so readers normally finish
    immediately. A grandchild holding the pipe open can keep them alive;
    they are daemon threads and are abandoned after this.
    """

    FORWARDER_JOIN: float = 2.0
    """Time to wait for the event forwarder thread to stop."""

    STDERR_TAIL_LINES: int = 50
    """Number of recent stderr lines kept for diagnostics."""
