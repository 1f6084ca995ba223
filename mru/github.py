"""Code-host client for GitHub, driven through the gh CLI.

Creating a pull request is idempotent: when GitHub reports that a pull
request already exists for the branch, the existing URL is recovered and
returned instead of raising.
"""

from __future__ import annotations

import re
from pathlib import Path

from .errors import HostError
from .models import ExecutionMode
from .shell import gh, info

DRY_RUN_PR_URL = "dry-run-pr-url"
NO_PR = "NO_PR"
MERGE_METHODS = ("merge", "squash", "rebase")

_ALREADY_EXISTS = ("already exists", "already a pull request")
_URL_RE = re.compile(r"https://\S+/pull/\d+")


def _repo_args(remote_url: str | None) -> list[str]:
    return ["--repo", remote_url] if remote_url else []


class GitHubClient:
    """Pull request operations bound to an execution mode."""

    def __init__(self, mode: ExecutionMode = ExecutionMode.LIVE) -> None:
        self.mode = mode

    @property
    def simulate(self) -> bool:
        return self.mode is ExecutionMode.SIMULATE

    def check_auth(self) -> bool:
        """Return True if gh is installed and authenticated."""
        return gh("auth", "status").returncode == 0

    def _require_auth(self) -> None:
        if not self.check_auth():
            raise HostError(
                "GitHub CLI is not installed or not authenticated. "
                "Please run 'gh auth login'"
            )

    def find_pr_url(
        self, path: Path, remote_url: str | None, branch: str
    ) -> str | None:
        """Return the URL of the pull request for branch, if one exists."""
        result = gh(
            "pr", "view", branch, "--json", "url", "--jq", ".url",
            *_repo_args(remote_url),
            cwd=path,
        )
        url = result.stdout.strip()
        return url if result.returncode == 0 and url else None

    def create_pr(
        self,
        path: Path,
        remote_url: str | None,
        branch: str,
        title: str,
        draft: bool = False,
        body: str | None = None,
    ) -> str:
        """Open a pull request from branch and return its URL.

        If one is already open for the branch, its URL is returned.

        Raises:
            HostError: If gh is unavailable or GitHub rejects the request.
        """
        if self.simulate:
            draft_note = " (draft)" if draft else ""
            info(f"Would create PR{draft_note} for branch '{branch}' with title: '{title}'")
            return DRY_RUN_PR_URL

        self._require_auth()
        info(f"Creating PR for branch '{branch}' with title: '{title}'")

        args = ["pr", "create", "--title", title, "--body", body or "", "--head", branch]
        if draft:
            args.append("--draft")
        args.extend(_repo_args(remote_url))

        result = gh(*args, cwd=path)
        if result.returncode != 0:
            error = result.stderr.strip()
            if any(marker in error for marker in _ALREADY_EXISTS):
                info(f"PR already exists for branch '{branch}'")
                match = _URL_RE.search(error)
                url = match.group(0) if match else self.find_pr_url(path, remote_url, branch)
                if not url:
                    raise HostError(
                        f"PR for branch '{branch}' exists but its URL could not be found"
                    )
                info(f"Existing PR URL: {url}")
                return url
            raise HostError(f"Failed to create PR: {error}")

        url = result.stdout.strip().splitlines()[-1] if result.stdout.strip() else ""
        info(f"PR created: {url}")
        return url

    def pr_status(self, path: Path, remote_url: str | None, branch: str) -> str:
        """Return the PR state for branch (OPEN, MERGED, CLOSED) or NO_PR."""
        self._require_auth()
        result = gh(
            "pr", "view", branch, "--json", "state", "--jq", ".state",
            *_repo_args(remote_url),
            cwd=path,
        )
        if result.returncode != 0 or not result.stdout.strip():
            return NO_PR
        return result.stdout.strip()

    def merge_pr(
        self, path: Path, remote_url: str | None, branch: str, method: str = "merge"
    ) -> None:
        """Merge the pull request for branch. Already-merged PRs are fine.

        Raises:
            HostError: If the method is unknown or the merge fails.
        """
        if method not in MERGE_METHODS:
            raise HostError(
                f"Invalid merge method '{method}'. Must be one of: {', '.join(MERGE_METHODS)}"
            )
        if self.simulate:
            info(f"Would merge PR for branch '{branch}' using {method}")
            return

        self._require_auth()
        info(f"Merging PR for branch '{branch}'")
        result = gh(
            "pr", "merge", branch, f"--{method}", *_repo_args(remote_url), cwd=path
        )
        if result.returncode != 0:
            error = result.stderr.strip()
            if "already merged" in error:
                info(f"PR for branch '{branch}' is already merged")
                return
            raise HostError(f"Failed to merge PR: {error}")
        info("PR merged successfully")
