"""Protocol message models.

Commands flow from the bridge to the daemon; events flow back. Both are
plain frozen dataclasses with no knowledge of the wire encoding.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

COMMAND_KIND = "cmd"
EVENT_KIND = "evt"

SHUTDOWN_COMMAND = "shutdown"
ERROR_EVENT = "error"


def new_request_id() -> str:
    """Generate a fresh globally unique request identifier."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Command:
    """Outbound command sent to the daemon.

    Attributes:
        name: Operation requested from the daemon (e.g. "dial")
        id: Unique request identifier used to correlate the reply
        params: Open, schema-less parameters for the operation
        kind: Message discriminator, always "cmd"
    """

    name: str
    id: str = field(default_factory=new_request_id)
    params: Any = field(default_factory=dict)
    kind: str = COMMAND_KIND

    @classmethod
    def new(cls, name: str, params: Any = None) -> Command:
        """Create a command with a freshly generated id.

        A retry must go through this constructor again so that it gets
        its own id.
        """
        return cls(name=name, params={} if params is None else params)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "cmd": self.name, "id": self.id, "params": self.params}


@dataclass(frozen=True)
class Event:
    """Inbound message emitted by the daemon.

    Attributes:
        name: Event or topic name (e.g. "dial_result", "peer_joined")
        data: Open structured payload
        id: Request id when the event replies to a command, else None
        kind: Message discriminator, normally "evt"
    """

    name: str
    data: Any = None
    id: str | None = None
    kind: str = EVENT_KIND

    @property
    def correlation_id(self) -> str | None:
        """Request id this event replies to, or None for pure push events."""
        return self.id or None

    def is_error(self) -> bool:
        """Check if the daemon signaled failure with this event."""
        return self.name == ERROR_EVENT

    def error_message(self) -> str:
        """Extract the failure text from an error event payload."""
        if isinstance(self.data, dict):
            message = self.data.get("error") or self.data.get("message")
            if message:
                return str(message)
        if self.data:
            return str(self.data)
        return "unknown error"

    def to_dict(self) -> dict[str, Any]:
        """Payload shape forwarded to the frontend."""
        return {"type": self.kind, "evt": self.name, "id": self.id, "data": self.data}
