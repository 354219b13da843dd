"""Daemon process supervision (spawn/status/stop).

Owns the single daemon child process of a bridge: launches it with piped
stdin/stdout/stderr, runs the stream readers and a teardown watcher, and
shuts it down in a fixed sequence (shutdown command, grace period, kill).
"""

from __future__ import annotations

import contextlib
import logging
import subprocess
import threading
import weakref
from collections import deque
from collections.abc import Sequence
from pathlib import Path
from typing import IO

from kamune_bridge.adapters.daemon.correlator import ResponseCorrelator
from kamune_bridge.adapters.daemon.protocol import encode
from kamune_bridge.adapters.daemon.readers import read_stderr, read_stdout
from kamune_bridge.adapters.daemon.timeouts import BridgeTimeouts
from kamune_bridge.domain.exceptions import (
    AlreadyRunning,
    EncodingError,
    NotRunning,
    SendError,
    SpawnError,
)
from kamune_bridge.domain.messages import SHUTDOWN_COMMAND, Command
from kamune_bridge.ports.events import EventPublisher

logger = logging.getLogger(__name__)


def _shutdown_process(
    process: subprocess.Popen,
    stdin: IO[bytes] | None,
    write_lock: threading.Lock,
    grace: float,
) -> None:
    """Stop a daemon process: shutdown command, grace period, then kill.

    Every step is best-effort; the process is always killed and reaped at
    the end. Also used as the finalizer of dropped handles, so it must not
    reference the handle itself.

    stdin is only touched while holding the write lock; closing it under a
    writer stuck on a full pipe blocks. The kill unblocks such a writer
    with a broken pipe.

    Args:
        process: The daemon process
        stdin: Its stdin pipe
        write_lock: Lock serializing writes to stdin
        grace: Seconds to let the process exit on its own
    """
    if stdin is not None:
        if write_lock.acquire(timeout=max(grace, 0.1)):
            try:
                stdin.write(encode(Command.new(SHUTDOWN_COMMAND)))
                stdin.flush()
            except (OSError, ValueError, EncodingError) as e:
                logger.debug(f"Failed to send shutdown command: {e}")
            try:
                with contextlib.suppress(OSError, ValueError):
                    stdin.close()
            finally:
                write_lock.release()
        else:
            logger.warning("stdin busy with a pending write, skipping shutdown command")

    try:
        process.wait(timeout=grace)
    except subprocess.TimeoutExpired:
        logger.info(f"Daemon (PID {process.pid}) still running after {grace}s, killing")

    with contextlib.suppress(OSError):
        process.kill()

    try:
        process.wait(timeout=BridgeTimeouts.KILL_WAIT)
    except subprocess.TimeoutExpired:
        logger.error(f"Daemon (PID {process.pid}) survived kill! Manual cleanup required.")


def _watch_process(
    process: subprocess.Popen,
    stdout_reader: threading.Thread,
    stopping: threading.Event,
    correlator: ResponseCorrelator,
) -> None:
    """Fail pending requests once the daemon exits on its own.

    Waits for the stdout reader first so that replies written before the
    exit still reach their callers. When the exit was requested through
    stop(), the supervisor drains the table itself.
    """
    returncode = process.wait()
    stdout_reader.join(BridgeTimeouts.READER_JOIN)

    if stopping.is_set():
        return

    logger.warning(f"Daemon exited unexpectedly (exit code: {returncode})")
    correlator.fail_all(NotRunning(f"daemon exited (exit code: {returncode})"))


class ProcessHandle:
    """A running daemon process and the threads serving it.

    Dropping a handle without stopping it runs the same shutdown sequence
    as stop(), so the child is never orphaned.
    """

    def __init__(
        self,
        process: subprocess.Popen,
        path: Path,
        grace: float = BridgeTimeouts.SHUTDOWN_GRACE,
    ) -> None:
        self.process = process
        self.path = path
        self.stdin = process.stdin
        self.write_lock = threading.Lock()
        self.stopping = threading.Event()
        self.stderr_tail: deque[str] = deque(maxlen=BridgeTimeouts.STDERR_TAIL_LINES)
        self.threads: list[threading.Thread] = []
        self._finalizer = weakref.finalize(
            self, _shutdown_process, process, self.stdin, self.write_lock, grace
        )

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def alive(self) -> bool:
        return self._finalizer.alive

    def start_threads(self, correlator: ResponseCorrelator, sink: EventPublisher) -> None:
        """Start the stdout reader, stderr reader and teardown watcher."""
        stdout_reader = threading.Thread(
            target=read_stdout,
            args=(self.process.stdout, correlator, sink),
            name=f"kamune-stdout-{self.pid}",
            daemon=True,
        )
        stderr_reader = threading.Thread(
            target=read_stderr,
            args=(self.process.stderr, self.stderr_tail),
            name=f"kamune-stderr-{self.pid}",
            daemon=True,
        )
        watcher = threading.Thread(
            target=_watch_process,
            args=(self.process, stdout_reader, self.stopping, correlator),
            name=f"kamune-watcher-{self.pid}",
            daemon=True,
        )
        self.threads = [stdout_reader, stderr_reader, watcher]
        for thread in self.threads:
            thread.start()

    def write(self, data: bytes) -> None:
        """Write one encoded message to the daemon's stdin.

        Raises:
            SendError: If the write or flush fails
        """
        with self.write_lock:
            try:
                self.stdin.write(data)
            except (OSError, ValueError) as e:
                raise SendError(f"failed to write to stdin: {e}") from e
            try:
                self.stdin.flush()
            except (OSError, ValueError) as e:
                raise SendError(f"failed to flush stdin: {e}") from e

    def shutdown(self) -> None:
        """Run the shutdown sequence. Subsequent calls are no-ops."""
        self._finalizer()

    def join(self, timeout: float = BridgeTimeouts.READER_JOIN) -> None:
        """Wait for the background threads to finish."""
        current = threading.current_thread()
        for thread in self.threads:
            if thread is not current:
                thread.join(timeout)
                if thread.is_alive():
                    logger.warning(f"Thread {thread.name} still running after {timeout}s")


class ProcessSupervisor:
    """Supervisor owning at most one daemon process at a time."""

    def __init__(
        self,
        correlator: ResponseCorrelator,
        sink: EventPublisher,
        shutdown_grace: float = BridgeTimeouts.SHUTDOWN_GRACE,
    ) -> None:
        """Initialize supervisor.

        Args:
            correlator: Pending request table fed by the stdout reader
            sink: Destination for decoded events
            shutdown_grace: Seconds the daemon gets to exit after "shutdown"
        """
        self.correlator = correlator
        self.sink = sink
        self.shutdown_grace = shutdown_grace

        self._handle: ProcessHandle | None = None
        self._state_lock = threading.Lock()
        self._lifecycle_lock = threading.Lock()

    @property
    def handle(self) -> ProcessHandle | None:
        with self._state_lock:
            return self._handle

    def spawn(self, path: Path, args: Sequence[str] = ()) -> ProcessHandle:
        """Launch the daemon.

        Args:
            path: Daemon executable
            args: Extra command line arguments

        Returns:
            Handle of the new process

        Raises:
            AlreadyRunning: If this supervisor already owns a process
            SpawnError: If the OS fails to launch the executable
        """
        with self._lifecycle_lock:
            with self._state_lock:
                if self._handle is not None:
                    raise AlreadyRunning()

            logger.info(f"Spawning daemon from: {path}")
            try:
                process = subprocess.Popen(
                    [str(path), *args],
                    stdin=subprocess.PIPE,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                )
            except OSError as e:
                logger.error(f"Failed to spawn daemon: {e}")
                raise SpawnError(path, e) from e

            handle = ProcessHandle(process, path, grace=self.shutdown_grace)
            handle.start_threads(self.correlator, self.sink)

            with self._state_lock:
                self._handle = handle

            logger.info(f"Daemon spawned successfully (PID {handle.pid})")
            return handle

    def is_running(self) -> bool:
        """Check whether the owned daemon is still alive.

        An exited daemon is released here. A poll error counts as not
        running.
        """
        with self._state_lock:
            handle = self._handle
            if handle is None:
                return False
            try:
                returncode = handle.process.poll()
            except OSError as e:
                logger.warning(f"Failed to poll daemon: {e}")
                returncode = -1
            if returncode is None:
                return True
            self._handle = None

        logger.info(f"Daemon is no longer running (exit code: {returncode})")
        handle.shutdown()
        handle.join()
        return False

    def write(self, data: bytes) -> None:
        """Write an encoded message to the daemon.

        Raises:
            NotRunning: If no daemon is owned
            SendError: If the write fails
        """
        handle = self.handle
        if handle is None:
            raise NotRunning()
        handle.write(data)

    def stop(self) -> None:
        """Stop the daemon.

        Shutdown sequence:
        1. Send "shutdown" (best-effort) and close stdin
        2. Wait up to the grace period for the daemon to exit
        3. Kill it and wait for it to be reaped
        4. Join the readers, then fail every pending request with NotRunning

        State is always cleared, whatever fails along the way. Stopping
        when nothing runs is a no-op.
        """
        with self._lifecycle_lock:
            with self._state_lock:
                handle = self._handle
                self._handle = None

            if handle is None:
                logger.debug("Daemon not running, nothing to stop")
                return

            logger.info(f"Stopping daemon (PID {handle.pid})...")
            handle.stopping.set()
            try:
                handle.shutdown()
            finally:
                handle.join()
                self.correlator.fail_all(NotRunning())
            logger.info("Daemon stopped")

    def recent_stderr(self) -> list[str]:
        """Most recent stderr lines of the current daemon."""
        handle = self.handle
        return list(handle.stderr_tail) if handle else []

    def __enter__(self) -> ProcessSupervisor:
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
