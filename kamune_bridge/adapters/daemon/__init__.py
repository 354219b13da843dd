"""Supervision of the kamune daemon and its stdio protocol.

The daemon is a child process speaking line-delimited JSON: commands go to
its stdin, events come back on its stdout, and stderr is diagnostic text.

Architecture:
- protocol.py: Line codec for commands and events
- binary.py: Platform-aware lookup of the daemon executable
- correlator.py: Pending-request table keyed by request id
- readers.py: stdout/stderr reader loops
- supervisor.py: Process ownership, stdin writes and shutdown
- timeouts.py: Timing constants
"""

from kamune_bridge.adapters.daemon.correlator import ResponseCorrelator
from kamune_bridge.adapters.daemon.supervisor import ProcessHandle, ProcessSupervisor

__all__ = ["ProcessHandle", "ProcessSupervisor", "ResponseCorrelator"]
