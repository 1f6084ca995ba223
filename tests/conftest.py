"""Shared test fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from mru.errors import ToolingError
from mru.models import CommitStatus, PackageManager, RepositoryRef

SAMPLE_MANIFEST = {
    "name": "web-app",
    "version": "1.0.0",
    "dependencies": {"left-pad": "^1.0.0", "react": "^18.2.0"},
    "devDependencies": {"left-pad": "~0.9.0", "jest": "^29.0.0"},
    "peerDependencies": {"react-dom": "^18.0.0"},
}


@pytest.fixture
def make_repo(tmp_path: Path) -> Callable[..., RepositoryRef]:
    """Create a fake checkout with a .git dir and an optional package.json."""

    def _make(
        name: str = "repo",
        manifest: dict | None = SAMPLE_MANIFEST,
        lock_file: str | None = None,
    ) -> RepositoryRef:
        root = tmp_path / name
        (root / ".git").mkdir(parents=True)
        if manifest is not None:
            (root / "package.json").write_text(json.dumps(manifest, indent=2) + "\n")
        if lock_file:
            (root / lock_file).write_text("")
        return RepositoryRef(path=str(root))

    return _make


class FakeGit:
    """In-memory stand-in for GitAdapter that tracks branches per checkout."""

    def __init__(self, fail_on: set[str] | None = None) -> None:
        self.current: dict[Path, str] = {}
        self.existing: dict[Path, set[str]] = {}
        self.calls: list[tuple] = []
        self.fail_on = fail_on or set()
        self.dirty: dict[Path, list[str]] = {}

    def _check(self, op: str) -> None:
        if op in self.fail_on:
            raise ToolingError(f"git {op} failed")

    def current_branch(self, path: Path) -> str:
        return self.current.setdefault(path, "main")

    def branch_exists(self, path: Path, name: str) -> bool:
        return name in self.existing.setdefault(path, {"main"})

    def checkout(self, path: Path, name: str) -> None:
        self.calls.append(("checkout", path, name))
        self._check("checkout")
        self.current[path] = name

    def create_and_checkout(self, path: Path, name: str) -> None:
        self.calls.append(("create", path, name))
        self._check("create")
        self.existing.setdefault(path, {"main"}).add(name)
        self.current[path] = name

    def stage(self, path: Path, files: list[str]) -> list[str]:
        present = [f for f in files if (path / f).exists()]
        self.calls.append(("stage", path, present))
        return present

    def commit(self, path: Path, message: str) -> CommitStatus:
        self.calls.append(("commit", path, message))
        self._check("commit")
        return CommitStatus.COMMITTED

    def push(self, path: Path, branch: str, remote: str = "origin") -> None:
        self.calls.append(("push", path, branch, remote))
        self._check("push")

    def modified_files(self, path: Path) -> list[str]:
        self.calls.append(("modified", path))
        return self.dirty.get(path, [])

    def ops_for(self, path: Path) -> list[str]:
        return [c[0] for c in self.calls if c[1] == path]


class FakeInstaller:
    def __init__(self, fail_paths: set[Path] | None = None) -> None:
        self.calls: list[tuple[Path, PackageManager]] = []
        self.fail_paths = fail_paths or set()

    def install(self, path: Path, manager: PackageManager) -> None:
        self.calls.append((path, manager))
        if path in self.fail_paths:
            raise ToolingError(f"`{manager.value} install` exited with status 1")


class FakeHost:
    def __init__(self, url: str = "https://github.com/acme/web/pull/7", error=None):
        self.url = url
        self.error = error
        self.calls: list[tuple] = []

    def create_pr(self, path, remote_url, branch, title, draft=False, body=None) -> str:
        self.calls.append((path, remote_url, branch, title, draft))
        if self.error:
            raise self.error
        return self.url


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def fake_installer() -> FakeInstaller:
    return FakeInstaller()


@pytest.fixture
def fake_host() -> FakeHost:
    return FakeHost()
