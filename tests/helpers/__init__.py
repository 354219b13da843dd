"""Test helper utilities for the kamune-bridge test suite."""

from tests.helpers.cli_assertions import (
    assert_command_failed,
    assert_command_success,
    assert_error_message,
    assert_output_contains,
    assert_reply,
    json_lines,
)
from tests.helpers.waiting import wait_for_event, wait_until

__all__ = [
    "assert_command_success",
    "assert_command_failed",
    "assert_output_contains",
    "assert_error_message",
    "assert_reply",
    "json_lines",
    "wait_for_event",
    "wait_until",
]
