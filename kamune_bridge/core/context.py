"""Application context wiring the bridge together.

One BridgeContext is built at startup and handed to every consumer (CLI
command, interactive shell). It replaces process-wide globals: the bridge,
its event sink and the event forwarder all live here.
"""

from __future__ import annotations

import logging
from pathlib import Path

from kamune_bridge.adapters.events.broadcast import EventEmitter, EventForwarder, EventSink
from kamune_bridge.core.bridge import DaemonBridge
from kamune_bridge.core.commands import DaemonCommands
from kamune_bridge.domain.config import BridgeConfig

logger = logging.getLogger(__name__)


class BridgeContext:
    """Everything a frontend needs to drive the daemon.

    Attributes:
        config: Loaded configuration
        sink: Events published by the stdout reader
        emitter: Channels the frontend subscribes to
        forwarder: Thread moving events from sink to emitter
        bridge: Command dispatcher and lifecycle facade
        commands: Envelope-returning command surface
    """

    def __init__(
        self, config: BridgeConfig | None = None, resource_dir: Path | None = None
    ) -> None:
        self.config = config or BridgeConfig.default()
        self.resource_dir = resource_dir
        self.sink = EventSink()
        self.emitter = EventEmitter()
        self.forwarder = EventForwarder(self.sink, self.emitter)
        self.bridge = DaemonBridge(self.config.daemon, self.sink, resource_dir=resource_dir)
        self.commands = DaemonCommands(self.bridge)

    def open(self) -> BridgeContext:
        """Start forwarding events to subscribers."""
        self.forwarder.start()
        return self

    def close(self) -> None:
        """Stop the daemon, then flush and stop event forwarding."""
        try:
            self.bridge.stop()
        finally:
            self.forwarder.stop()

    def __enter__(self) -> BridgeContext:
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()
