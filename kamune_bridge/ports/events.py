"""Port interface for daemon event delivery.

The stdout reader only needs somewhere to publish events, so the daemon
adapters depend on this protocol rather than on a concrete queue.
"""

from typing import Protocol

from kamune_bridge.domain.messages import Event


class EventPublisher(Protocol):
    """Destination for events decoded from the daemon."""

    def publish(self, event: Event) -> bool:
        """Queue an event for delivery.

        Returns:
            False if the publisher no longer accepts events
        """
        ...
