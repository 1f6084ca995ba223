"""Package manager detection and install.

The manager for a repository is taken from its lock file when there is one;
otherwise the configured fleet-wide default is used. There is no hard-coded
fallback: a repository with no lock file and no configured default cannot
be installed.
"""

from __future__ import annotations

from pathlib import Path

from .errors import ToolingError
from .models import ExecutionMode, PackageManager
from .shell import info, run

LOCK_FILES = [m.lock_file for m in PackageManager]


def detect_manager(path: Path) -> PackageManager | None:
    """Detect the package manager from the lock file present.

    Checks pnpm-lock.yaml, then yarn.lock, then package-lock.json.
    """
    for manager in PackageManager:
        if (path / manager.lock_file).exists():
            return manager
    return None


def resolve_manager(path: Path, default: PackageManager | None) -> PackageManager:
    """Pick the manager for a repository: detected first, then the default.

    Raises:
        ToolingError: If no lock file is present and no default is configured.
    """
    detected = detect_manager(path)
    if detected is not None:
        return detected
    if default is not None:
        info(f"No lock file found, using default package manager: {default.value}")
        return default
    raise ToolingError(
        f"No lock file found in {path} and no default package manager configured "
        "(run `mru set-package-manager`)"
    )


class InstallRunner:
    """Runs `<manager> install` in a repository."""

    def __init__(self, mode: ExecutionMode = ExecutionMode.LIVE) -> None:
        self.mode = mode

    def install(self, path: Path, manager: PackageManager) -> None:
        if self.mode is ExecutionMode.SIMULATE:
            info(f"Would run {manager.value} install in {path}")
            return
        info(f"Running {manager.value} install in {path}")
        run(manager.value, "install", cwd=path)
