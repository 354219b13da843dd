"""Parsing of command parameters typed on the command line or in the shell."""

import json
from collections.abc import Iterable
from typing import Any


def parse_value(raw: str) -> Any:
    """Interpret a parameter value.

    JSON literals (numbers, true/false/null, quoted strings, arrays, objects)
    are decoded; anything else is kept as a plain string.
    """
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def parse_params(pairs: Iterable[str]) -> dict[str, Any]:
    """Build a params object from key=value pairs.

    Args:
        pairs: Items such as "addr=127.0.0.1:9000" or "no_passphrase=true"

    Returns:
        Dictionary of parsed parameters; later keys win

    Raises:
        ValueError: If an item has no "=" or an empty key
    """
    params: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(pair)
        params[key] = parse_value(value)
    return params
