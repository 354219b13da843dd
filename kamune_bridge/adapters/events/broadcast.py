"""Event delivery from the daemon to the frontend.

The stdout reader publishes every decoded event into an EventSink. A single
EventForwarder thread drains the sink and re-emits each event on two
channels of an EventEmitter: "daemon:<evt>" and the catch-all
"daemon:event".
"""

from __future__ import annotations

import logging
import queue
import threading
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from kamune_bridge.adapters.daemon.timeouts import BridgeTimeouts
from kamune_bridge.domain.messages import Event

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = "daemon:"
CATCH_ALL_CHANNEL = "daemon:event"

Handler = Callable[[dict[str, Any]], None]

_CLOSED = object()


class SinkClosed(Exception):
    """Raised by EventSink.get() once the sink is closed and drained."""


def channel_for(event_name: str) -> str:
    """Channel name carrying events with the given name."""
    return f"{CHANNEL_PREFIX}{event_name}"


class EventSink:
    """Multi-producer queue of daemon events with explicit close."""

    def __init__(self) -> None:
        self._queue: queue.Queue = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, event: Event) -> bool:
        """Queue an event for forwarding.

        Returns:
            False if the sink is closed and the event was dropped
        """
        with self._lock:
            if self._closed:
                return False
            self._queue.put(event)
        return True

    def get(self, timeout: float | None = None) -> Event:
        """Take the next event.

        Raises:
            SinkClosed: If the sink was closed and every event was consumed
            queue.Empty: If timeout elapses with nothing queued
        """
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            # Leave the marker for any other consumer.
            self._queue.put(_CLOSED)
            raise SinkClosed()
        return item

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_CLOSED)


class EventEmitter:
    """Named channels with subscriber callbacks."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, channel: str, handler: Handler) -> Callable[[], None]:
        """Register a handler for a channel.

        Returns:
            Function that removes the handler again
        """
        with self._lock:
            self._handlers[channel].append(handler)

        def unsubscribe() -> None:
            with self._lock:
                handlers = self._handlers.get(channel, [])
                if handler in handlers:
                    handlers.remove(handler)

        return unsubscribe

    def emit(self, channel: str, payload: dict[str, Any]) -> int:
        """Invoke every handler subscribed to ``channel``.

        A failing handler is logged and does not prevent the others from
        running.

        Returns:
            Number of handlers that ran without raising
        """
        with self._lock:
            handlers = list(self._handlers.get(channel, []))

        delivered = 0
        for handler in handlers:
            try:
                handler(payload)
                delivered += 1
            except Exception as e:
                logger.error(f"Failed to emit event {channel}: {e}", exc_info=True)
        return delivered


class EventForwarder:
    """Background thread moving events from the sink to the emitter."""

    def __init__(self, sink: EventSink, emitter: EventEmitter) -> None:
        self.sink = sink
        self.emitter = emitter
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def forward(self, event: Event) -> None:
        """Emit one event on its named channel and on the catch-all channel."""
        payload = event.to_dict()
        self.emitter.emit(channel_for(event.name), payload)
        self.emitter.emit(CATCH_ALL_CHANNEL, payload)

    def run(self) -> None:
        """Forward events until the sink is closed."""
        logger.info("Starting daemon event forwarder")
        while True:
            try:
                event = self.sink.get()
            except SinkClosed:
                break
            self.forward(event)
        logger.info("Daemon event forwarder exiting")

    def start(self) -> None:
        if self.running:
            return
        self._thread = threading.Thread(
            target=self.run, name="kamune-event-forwarder", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float = BridgeTimeouts.FORWARDER_JOIN) -> None:
        """Close the sink and wait for queued events to be forwarded."""
        self.sink.close()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Event forwarder did not stop in time")
            self._thread = None
