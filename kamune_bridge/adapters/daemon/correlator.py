"""Pending request table matching daemon replies to waiting callers.

Each awaited command registers a single-use Future under its request id.
All table access goes through one lock, and futures are completed while
the lock is held, so a reply, a timeout and a teardown racing for the same
id settle it exactly once.
"""

import logging
import threading
from concurrent.futures import Future

from kamune_bridge.domain.messages import Event

logger = logging.getLogger(__name__)


class ResponseCorrelator:
    """Thread-safe table of in-flight requests."""

    def __init__(self) -> None:
        self._pending: dict[str, Future] = {}
        self._lock = threading.Lock()

    @property
    def pending_count(self) -> int:
        """Number of requests still waiting for a reply."""
        with self._lock:
            return len(self._pending)

    def register(self, request_id: str) -> Future:
        """Create the reply channel for a request.

        Args:
            request_id: Identifier of the command about to be sent

        Returns:
            Future completed with the reply Event or a failure

        Raises:
            ValueError: If the id is already registered
        """
        future: Future = Future()
        with self._lock:
            if request_id in self._pending:
                raise ValueError(f"Request id already pending: {request_id}")
            self._pending[request_id] = future
        return future

    def resolve(self, request_id: str, event: Event) -> bool:
        """Deliver a reply to the caller waiting on ``request_id``.

        Returns:
            True if a caller was waiting, False if the event is push-only
        """
        with self._lock:
            future = self._pending.pop(request_id, None)
            if future is None:
                return False
            _complete(future, result=event)
        logger.debug(f"Resolved request {request_id} with {event.name}")
        return True

    def fail(self, request_id: str, error: BaseException) -> bool:
        """Deliver a failure to a single waiting caller."""
        with self._lock:
            future = self._pending.pop(request_id, None)
            if future is None:
                return False
            _complete(future, error=error)
        return True

    def fail_all(self, error: BaseException) -> int:
        """Fail every outstanding request.

        Used during teardown so no caller waits forever.

        Returns:
            Number of requests failed
        """
        with self._lock:
            drained = list(self._pending.items())
            self._pending.clear()
            for _, future in drained:
                _complete(future, error=error)

        if drained:
            logger.info(f"Failed {len(drained)} pending request(s): {error}")
        return len(drained)

    def expire(self, request_id: str) -> bool:
        """Drop a request whose caller gave up.

        Nothing is delivered. A reply that arrives later finds no entry and
        is treated as a push notification.

        Returns:
            True if the entry was removed here, False if a reply or teardown
            already completed it
        """
        with self._lock:
            return self._pending.pop(request_id, None) is not None


def _complete(
    future: Future, result: Event | None = None, error: BaseException | None = None
) -> None:
    # A future can be cancelled by its owner at any time.
    if future.done():
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)
