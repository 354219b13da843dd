"""Daemon executable discovery.

Builds an ordered list of candidate paths and returns the first one that
exists. Platform-specific naming is a runtime lookup keyed by
(operating system, architecture).
"""

from __future__ import annotations

import logging
import platform
import sys
from pathlib import Path

from kamune_bridge.domain.exceptions import BinaryNotFound

logger = logging.getLogger(__name__)

# Normalized (os, arch) pairs with a published, architecture-qualified build.
QUALIFIED_SUFFIXES: dict[tuple[str, str], str] = {
    ("darwin", "arm64"): "-darwin-arm64",
    ("darwin", "amd64"): "-darwin-amd64",
    ("linux", "amd64"): "-linux-amd64",
    ("linux", "arm64"): "-linux-arm64",
    ("windows", "amd64"): "-windows-amd64",
}

_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
}

DEV_DIST_DIRS = ("../../dist", "../dist", "dist")


def detect_host() -> tuple[str, str]:
    """Return the normalized (os, arch) pair of the running interpreter."""
    system = platform.system().lower()
    machine = platform.machine().lower()
    return system, _ARCH_ALIASES.get(machine, machine)


def binary_names(
    binary_name: str = "daemon", host: tuple[str, str] | None = None
) -> tuple[str, str]:
    """Get the bare and platform-qualified executable names.

    Args:
        binary_name: Base executable name
        host: (os, arch) pair, detected when None

    Returns:
        (bare, qualified). Unrecognized hosts use the bare name for both.
    """
    system, arch = host or detect_host()
    exe_suffix = ".exe" if system == "windows" else ""
    bare = f"{binary_name}{exe_suffix}"

    qualifier = QUALIFIED_SUFFIXES.get((system, arch))
    if qualifier is None:
        return bare, bare
    return bare, f"{binary_name}{qualifier}{exe_suffix}"


def binary_candidates(
    resource_dir: Path | None = None,
    *,
    binary_name: str = "daemon",
    exe_dir: Path | None = None,
    cwd: Path | None = None,
    host: tuple[str, str] | None = None,
) -> list[Path]:
    """Build the ordered list of places the daemon may live.

    Order:
    1. Resource directory (bundled app), then its "binaries" subdirectory
    2. Directory of the running executable
    3. Current working directory
    4. Development dist directories, qualified name only

    Args:
        resource_dir: Optional bundle resource directory
        binary_name: Base executable name
        exe_dir: Directory of the running executable (default: sys.executable's)
        cwd: Working directory (default: Path.cwd())
        host: (os, arch) pair, detected when None

    Returns:
        Candidate paths in priority order
    """
    bare, qualified = binary_names(binary_name, host)
    exe_dir = exe_dir if exe_dir is not None else Path(sys.executable).parent
    cwd = cwd if cwd is not None else Path.cwd()

    candidates: list[Path] = []
    if resource_dir is not None:
        candidates.append(resource_dir / bare)
        candidates.append(resource_dir / qualified)
        candidates.append(resource_dir / "binaries" / bare)
        candidates.append(resource_dir / "binaries" / qualified)

    candidates.append(exe_dir / bare)
    candidates.append(exe_dir / qualified)

    candidates.append(cwd / bare)
    candidates.append(cwd / qualified)

    for dist in DEV_DIST_DIRS:
        candidates.append((cwd / dist).resolve() / qualified)

    return candidates


def resolve_binary(
    resource_dir: Path | None = None,
    *,
    binary_name: str = "daemon",
    explicit: Path | None = None,
    exe_dir: Path | None = None,
    cwd: Path | None = None,
    host: tuple[str, str] | None = None,
) -> Path:
    """Find the daemon executable.

    Args:
        resource_dir: Optional bundle resource directory
        binary_name: Base executable name
        explicit: Configured path that takes precedence over the search
        exe_dir: Directory of the running executable
        cwd: Working directory
        host: (os, arch) pair, detected when None

    Returns:
        First candidate that exists as a regular file

    Raises:
        BinaryNotFound: If an explicit path is missing, or no candidate exists
    """
    if explicit is not None:
        if explicit.is_file():
            logger.info(f"Using configured daemon binary: {explicit}")
            return explicit
        raise BinaryNotFound(
            [explicit], message=f"configured daemon binary not found: {explicit}"
        )

    candidates = binary_candidates(
        resource_dir, binary_name=binary_name, exe_dir=exe_dir, cwd=cwd, host=host
    )
    for path in candidates:
        if path.is_file():
            logger.info(f"Found daemon binary at: {path}")
            return path

    logger.debug(f"Daemon binary not found, searched: {[str(p) for p in candidates]}")
    raise BinaryNotFound(candidates)
