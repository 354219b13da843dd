"""CLI error handling with actionable hints.

Provides consistent error formatting and common error factory functions
for all kamune-bridge CLI commands.
"""

from typing import NoReturn

import click


class BridgeCliError(click.ClickException):
    """CLI error with actionable hint for users.

    Attributes:
        message: The primary error message.
        hint: Optional actionable suggestion for the user.

    Example:
        raise BridgeCliError(
            "daemon binary not found",
            hint="Set daemon.binary in the config file"
        )
    """

    def __init__(self, message: str, hint: str | None = None) -> None:
        """Initialize the error with message and optional hint.

        Args:
            message: The primary error message.
            hint: Optional actionable suggestion for the user.
        """
        super().__init__(message)
        self.hint = hint

    def format_message(self) -> str:
        """Format the error message with hint if present.

        Returns:
            Formatted error message, with hint on a new line if provided.
        """
        msg = self.message
        if self.hint:
            msg += f"\nHint: {self.hint}"
        return msg


def invalid_param_error(raw: str) -> NoReturn:
    """Raise error for a malformed key=value parameter.

    Args:
        raw: The offending command line value.

    Raises:
        BridgeCliError: Always raises with syntax hint.
    """
    raise BridgeCliError(
        f"Invalid parameter '{raw}'",
        hint="Parameters use key=value syntax, e.g. -p addr=127.0.0.1:9000",
    )


def invalid_json_params_error(detail: str) -> NoReturn:
    """Raise error when --json does not hold a JSON object.

    Args:
        detail: Parser error text.

    Raises:
        BridgeCliError: Always raises with format hint.
    """
    raise BridgeCliError(
        f"Invalid JSON parameters: {detail}",
        hint='Pass a JSON object, e.g. --json \'{"addr": "127.0.0.1:9000"}\'',
    )
