"""Shell and git utilities.

Provides simple wrappers around subprocess calls for running git, gh and
package-manager commands inside a repository checkout, plus output
formatting helpers.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

from .errors import ToolingError


def _capture(cmd: list[str], cwd: Path | None) -> str:
    try:
        result = subprocess.run(cmd, cwd=cwd, capture_output=True, text=True)
    except OSError as exc:
        raise ToolingError(f"Failed to run {cmd[0]}: {exc}") from exc
    if result.returncode != 0:
        raise ToolingError(
            f"`{' '.join(cmd)}` exited with status {result.returncode}",
            stderr=result.stderr.strip(),
        )
    return result.stdout.strip()


def git(*args: str, cwd: Path | None = None) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "status", "--porcelain").
        cwd: Repository working copy to run in.

    Returns:
        Stripped stdout from the git command.

    Raises:
        ToolingError: If git is missing or exits non-zero.
    """
    return _capture(["git", *args], cwd)


def gh(*args: str, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    """Run a GitHub CLI command, capturing output without checking.

    The caller inspects returncode and stderr, since gh reports conditions
    like "already exists" only through its error output.
    """
    try:
        return subprocess.run(["gh", *args], cwd=cwd, capture_output=True, text=True)
    except OSError as exc:
        raise ToolingError(f"Failed to run gh: {exc}") from exc


def run(*args: str, cwd: Path | None = None) -> None:
    """Run an arbitrary command, streaming its output to the terminal.

    Unlike git(), this doesn't capture output so users can see install
    progress.

    Raises:
        ToolingError: If the command is missing or exits non-zero.
    """
    try:
        result = subprocess.run(args, cwd=cwd)
    except OSError as exc:
        raise ToolingError(f"Failed to run {args[0]}: {exc}") from exc
    if result.returncode != 0:
        raise ToolingError(
            f"`{' '.join(args)}` exited with status {result.returncode}"
        )


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate repositories in the terminal output of a fleet run.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def info(msg: str) -> None:
    """Print an indented progress line."""
    print(f"  {msg}")


def warn(msg: str) -> None:
    """Print a warning for a failure that does not stop the run."""
    print(f"  Warning: {msg}", file=sys.stderr)
