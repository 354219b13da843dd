"""Pytest configuration and shared fixtures."""

import sys
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest

from kamune_bridge.adapters.events.broadcast import EventSink
from kamune_bridge.core.bridge import DaemonBridge
from kamune_bridge.domain.config import DaemonConfig
from tests.fixtures import FAKE_DAEMON

# ============================================================================
# Environment Isolation
# ============================================================================
# Keep tests independent of the developer's own config file and daemon
# override.


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point the global config at a temp location and clear KAMUNE_DAEMON_BIN."""
    monkeypatch.delenv("KAMUNE_DAEMON_BIN", raising=False)
    global_config = tmp_path / "global" / "config.toml"
    with patch(
        "kamune_bridge.shared.config_io.get_global_config_path",
        return_value=global_config,
    ), patch(
        "kamune_bridge.adapters.config.toml_config_provider.get_global_config_path",
        return_value=global_config,
    ):
        yield global_config


# ============================================================================
# Fake Daemon
# ============================================================================
# The fake daemon is a Python script, so it is launched through the current
# interpreter with the script as its first argument.


@pytest.fixture
def python_executable() -> Path:
    """Interpreter used as the daemon executable."""
    return Path(sys.executable)


@pytest.fixture
def fake_daemon_config() -> DaemonConfig:
    """Daemon config launching the scripted fake daemon."""
    return DaemonConfig(
        args=["-u", str(FAKE_DAEMON)],
        request_timeout=5.0,
        shutdown_grace=2.0,
    )


@pytest.fixture
def running_bridge(
    fake_daemon_config: DaemonConfig, python_executable: Path
) -> Iterator[DaemonBridge]:
    """A DaemonBridge with the fake daemon started.

    The daemon is stopped on teardown even if the test fails.
    """
    bridge = DaemonBridge(fake_daemon_config, EventSink())
    bridge.start(python_executable)
    try:
        yield bridge
    finally:
        bridge.stop()
