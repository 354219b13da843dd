"""Line-delimited JSON protocol for daemon communication.

Commands and events travel as one compact JSON object per line over the
daemon's stdin/stdout:

    {"type":"cmd","cmd":<name>,"id":<uuid>,"params":<object>}
    {"type":"evt","evt":<name>,"id":<optional uuid>,"data":<any>}
"""

import json
import logging

from kamune_bridge.domain.exceptions import DecodingError, EncodingError
from kamune_bridge.domain.messages import Command, Event

logger = logging.getLogger(__name__)

LINE_TERMINATOR = b"\n"


def encode(command: Command) -> bytes:
    """Serialize a command to a single UTF-8 line.

    Args:
        command: Command to serialize

    Returns:
        JSON record terminated by a newline

    Raises:
        EncodingError: If params contain values JSON cannot represent
    """
    try:
        text = json.dumps(command.to_dict(), separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Cannot encode command {command.name!r}: {e}") from e
    return text.encode("utf-8") + LINE_TERMINATOR


def decode(line: bytes | str) -> Event | None:
    """Parse one line emitted by the daemon.

    Args:
        line: Raw line (with or without trailing newline)

    Returns:
        Decoded Event, or None if the line is blank

    Raises:
        DecodingError: If the line is not valid JSON or lacks required fields
    """
    if isinstance(line, bytes):
        try:
            line = line.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodingError(f"Invalid UTF-8: {e}") from e

    line = line.strip()
    if not line:
        return None

    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise DecodingError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise DecodingError("Event must be a JSON object")

    kind = data.get("type")
    if not isinstance(kind, str):
        raise DecodingError("Event missing 'type' field")

    name = data.get("evt")
    if not isinstance(name, str):
        raise DecodingError("Event missing 'evt' field")

    request_id = data.get("id")
    if request_id is not None and not isinstance(request_id, str):
        raise DecodingError(f"Event 'id' must be a string, got {type(request_id).__name__}")

    # "data" may be null but must be present; only "id" is optional.
    if "data" not in data:
        raise DecodingError("Event missing 'data' field")

    return Event(name=name, data=data["data"], id=request_id, kind=kind)
