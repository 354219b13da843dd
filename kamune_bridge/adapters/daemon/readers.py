"""Background loops draining the daemon's output streams.

read_stdout decodes protocol events, resolves waiting callers and publishes
every event to the sink. read_stderr only captures diagnostics. Both run in
their own thread and end quietly on end-of-stream or I/O error.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import IO

from kamune_bridge.adapters.daemon.correlator import ResponseCorrelator
from kamune_bridge.adapters.daemon.protocol import decode
from kamune_bridge.domain.exceptions import DecodingError
from kamune_bridge.ports.events import EventPublisher

logger = logging.getLogger(__name__)
stderr_logger = logging.getLogger("kamune_bridge.daemon.stderr")


def read_stdout(
    stream: IO[bytes], correlator: ResponseCorrelator, sink: EventPublisher
) -> None:
    """Drain daemon stdout until the stream ends or the sink closes.

    Args:
        stream: Daemon stdout (binary)
        correlator: Table of callers awaiting replies
        sink: Destination for every decoded event
    """
    try:
        for raw in stream:
            if not raw.strip():
                continue

            logger.debug(f"Daemon stdout: {raw.rstrip()!r}")

            try:
                event = decode(raw)
            except DecodingError as e:
                logger.warning(f"Failed to parse daemon event: {e} - line: {raw.rstrip()!r}")
                continue
            if event is None:
                continue

            # Replies are also forwarded so the frontend can rebuild state
            # from the event stream alone.
            if event.correlation_id:
                correlator.resolve(event.correlation_id, event)

            if not sink.publish(event):
                logger.warning("Event channel closed")
                break
    except (OSError, ValueError) as e:
        # ValueError: stream closed underneath the iterator
        logger.error(f"Error reading daemon stdout: {e}")

    logger.info("Daemon stdout reader exiting")


def read_stderr(stream: IO[bytes], tail: deque | None = None) -> None:
    """Drain daemon stderr for diagnostics.

    Args:
        stream: Daemon stderr (binary)
        tail: Optional bounded buffer receiving the most recent lines
    """
    try:
        for raw in stream:
            line = raw.decode("utf-8", errors="replace").rstrip()
            if not line:
                continue
            stderr_logger.debug(f"Daemon stderr: {line}")
            if tail is not None:
                tail.append(line)
    except (OSError, ValueError) as e:
        logger.error(f"Error reading daemon stderr: {e}")

    logger.info("Daemon stderr reader exiting")
