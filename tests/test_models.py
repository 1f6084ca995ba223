"""Tests for mru.models."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from mru.errors import RepositoryError
from mru.models import (
    DependencyClass,
    ExecutionMode,
    FleetReport,
    Outcome,
    RepoResult,
    RepositoryRef,
    UpdateRequest,
    WorkflowContext,
    WorkflowState,
)


class TestUpdateRequest:
    def test_is_frozen(self) -> None:
        request = UpdateRequest(package="react", version="18.3.0")
        with pytest.raises(ValidationError):
            request.version = "19.0.0"

    def test_commit_message_from_template(self) -> None:
        request = UpdateRequest(package="react", version="^18.3.0")
        assert request.commit_message() == "chore: update react to ^18.3.0"
        assert request.commit_message("deps: {package}@{version}") == "deps: react@^18.3.0"

    def test_explicit_message_wins(self) -> None:
        request = UpdateRequest(package="react", version="18.3.0", message="bump react")
        assert request.commit_message("deps: {package}") == "bump react"

    def test_branch_and_mode(self) -> None:
        request = UpdateRequest(package="react", version="~18.3.0", dry_run=True)
        assert request.branch_name == "update-react-18.3.0"
        assert request.mode is ExecutionMode.SIMULATE
        assert UpdateRequest(package="a", version="1").mode is ExecutionMode.LIVE


class TestRepositoryRef:
    def test_validate_checkout(self, tmp_path: Path) -> None:
        (tmp_path / ".git").mkdir()
        assert RepositoryRef(path=str(tmp_path)).validate_checkout() == tmp_path

    def test_missing_path(self, tmp_path: Path) -> None:
        with pytest.raises(RepositoryError, match="does not exist"):
            RepositoryRef(path=str(tmp_path / "gone")).validate_checkout()

    def test_not_git(self, tmp_path: Path) -> None:
        with pytest.raises(RepositoryError, match="Not a git repository"):
            RepositoryRef(path=str(tmp_path)).validate_checkout()

    def test_expands_home(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))
        assert RepositoryRef(path="~/web").expanded_path == tmp_path / "web"


def test_dependency_class_labels() -> None:
    assert [c.value for c in DependencyClass] == [
        "dependencies",
        "devDependencies",
        "peerDependencies",
    ]
    assert DependencyClass.DEVELOPMENT.label == "Dev Dependencies"


def test_workflow_context_records_steps() -> None:
    ctx = WorkflowContext(repo=RepositoryRef(path="/srv/web"), branch="update-x-1.0.0")
    ctx.enter(WorkflowState.BRANCHING)
    ctx.enter(WorkflowState.EDITING)

    assert ctx.state is WorkflowState.EDITING
    assert ctx.steps == [WorkflowState.BRANCHING, WorkflowState.EDITING]


def test_fleet_report_views() -> None:
    report = FleetReport(
        results=[
            RepoResult(repo="a", outcome=Outcome.UPDATED),
            RepoResult(repo="b", outcome=Outcome.NO_OP),
            RepoResult(repo="c", outcome=Outcome.FAILED, error="boom"),
            RepoResult(repo="d", outcome=Outcome.UPDATED),
        ]
    )

    assert [r.repo for r in report.updated] == ["a", "d"]
    assert [r.repo for r in report.no_op] == ["b"]
    assert [r.repo for r in report.failed] == ["c"]
    assert not report.aborted
