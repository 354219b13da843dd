"""Test fixtures module."""

from pathlib import Path

FAKE_DAEMON = Path(__file__).parent / "fake_daemon.py"

__all__ = ["FAKE_DAEMON"]
