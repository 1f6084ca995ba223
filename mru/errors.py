"""Exception types raised by mru.

Every failure that belongs to a single repository is an MruError, so the
fleet loop can attribute it and move on without catching unrelated bugs.
"""

from __future__ import annotations


class MruError(Exception):
    """Base class for expected, user-facing failures."""


class ConfigError(MruError):
    """The configuration file is unreadable or invalid."""


class RepositoryError(MruError):
    """The repository checkout is missing, not a git repo, or has no branch."""


class ManifestError(MruError):
    """package.json is missing or cannot be parsed."""


class ToolingError(MruError):
    """An external command (git, install, push) failed.

    Attributes:
        stderr: Captured error output, empty when the command streamed it.
    """

    def __init__(self, message: str, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr

    def __str__(self) -> str:
        base = super().__str__()
        return f"{base}: {self.stderr}" if self.stderr else base


class HostError(MruError):
    """The code host rejected or failed a pull request operation."""


class RepositoryUpdateError(MruError):
    """A repository's update workflow failed.

    Attributes:
        repo: Path of the repository as configured.
        state: Workflow state that was running when the failure happened.
        cause: The underlying error.
    """

    def __init__(self, repo: str, state: str, cause: Exception) -> None:
        super().__init__(f"{repo}: {state} failed: {cause}")
        self.repo = repo
        self.state = state
        self.cause = cause
