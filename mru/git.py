"""Version control adapter.

GitAdapter wraps the git operations the update workflow needs as discrete
calls against one working copy. The execution mode is fixed at
construction: in SIMULATE mode every mutating call prints what it would do
and returns the same result a live call would, while read-only queries
(current branch, branch existence, staged files, status, committed file
contents) still run.
"""

from __future__ import annotations

from pathlib import Path

from .errors import RepositoryError, ToolingError
from .models import CommitStatus, ExecutionMode
from .shell import git, info


class GitAdapter:
    """Git operations bound to an execution mode."""

    def __init__(self, mode: ExecutionMode = ExecutionMode.LIVE) -> None:
        self.mode = mode

    @property
    def simulate(self) -> bool:
        return self.mode is ExecutionMode.SIMULATE

    # Queries: these run in both modes.

    def current_branch(self, path: Path) -> str:
        """Return the checked-out branch name.

        Raises:
            RepositoryError: If git fails or HEAD is detached.
        """
        try:
            branch = git("branch", "--show-current", cwd=path)
        except ToolingError as exc:
            raise RepositoryError(
                f"Failed to get current branch for repository {path}: {exc}"
            ) from exc
        if not branch:
            raise RepositoryError(f"Repository {path} is in detached HEAD state")
        return branch

    def branch_exists(self, path: Path, name: str) -> bool:
        return bool(git("branch", "--list", name, cwd=path))

    def has_staged_changes(self, path: Path) -> bool:
        return bool(git("diff", "--staged", "--name-only", cwd=path))

    def status(self, path: Path) -> bool:
        """Return True if the working tree has uncommitted changes."""
        return bool(git("status", "--porcelain", cwd=path))

    def modified_files(self, path: Path) -> list[str]:
        """Return tracked files changed against HEAD, then untracked files."""
        changed = git("diff", "--name-only", "HEAD", cwd=path).splitlines()
        untracked = git("ls-files", "--others", "--exclude-standard", cwd=path)
        return changed + untracked.splitlines()

    def show_file(self, path: Path, ref: str, file: str) -> str:
        """Return the content of file as committed on ref."""
        return git("show", f"{ref}:{file}", cwd=path)

    # Mutations: simulated in SIMULATE mode.

    def checkout(self, path: Path, name: str) -> None:
        if self.simulate:
            info(f"Would checkout branch '{name}' in {path}")
            return
        info(f"Checking out branch '{name}' in {path}")
        git("checkout", name, cwd=path)

    def create_and_checkout(self, path: Path, name: str) -> None:
        if self.simulate:
            info(f"Would create branch '{name}' in {path}")
            return
        info(f"Creating branch '{name}' in {path}")
        git("checkout", "-b", name, cwd=path)

    def stage(self, path: Path, files: list[str]) -> list[str]:
        """Stage the given files, skipping any that don't exist.

        Returns:
            The files that were (or would be) staged.
        """
        present = [f for f in files if (path / f).exists()]
        if not present:
            info(f"No files to stage in {path}")
            return present
        if self.simulate:
            info(f"Would stage files in {path}: {', '.join(present)}")
            return present
        info(f"Staging files in {path}: {', '.join(present)}")
        git("add", "--", *present, cwd=path)
        return present

    def commit(self, path: Path, message: str) -> CommitStatus:
        """Commit staged changes.

        An empty index is not an error: the commit is skipped with a notice.
        """
        if self.simulate:
            info(f"Would commit changes with message: '{message}'")
            return CommitStatus.COMMITTED
        if not self.has_staged_changes(path):
            info("No staged changes to commit, skipping commit")
            return CommitStatus.SKIPPED
        info(f"Committing changes with message: '{message}'")
        git("commit", "-m", message, cwd=path)
        return CommitStatus.COMMITTED

    def push(self, path: Path, branch: str, remote: str = "origin") -> None:
        if self.simulate:
            info(f"Would push branch '{branch}' to {remote}")
            return
        info(f"Pushing branch '{branch}' to {remote}")
        git("push", "--set-upstream", remote, branch, cwd=path)

    def clone(self, url: str, dest: Path) -> None:
        if self.simulate:
            info(f"Would clone {url} into {dest}")
            return
        info(f"Cloning {url} into {dest}")
        git("clone", url, str(dest))
