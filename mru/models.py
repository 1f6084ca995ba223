"""Data models for mru.

These Pydantic models and enums represent the core data structures passed
between the fleet loop, the update workflow and the adapters it drives.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .errors import RepositoryError
from .versions import branch_name

DEFAULT_COMMIT_TEMPLATE = "chore: update {package} to {version}"


class ExecutionMode(str, Enum):
    """Whether adapters perform side effects or only report them."""

    LIVE = "live"
    SIMULATE = "simulate"

    @classmethod
    def from_dry_run(cls, dry_run: bool) -> ExecutionMode:
        return cls.SIMULATE if dry_run else cls.LIVE


class DependencyClass(str, Enum):
    """The package.json sections a dependency can be declared in.

    The value is the manifest key for the section.
    """

    DIRECT = "dependencies"
    DEVELOPMENT = "devDependencies"
    PEER = "peerDependencies"

    @property
    def label(self) -> str:
        return {
            DependencyClass.DIRECT: "Dependencies",
            DependencyClass.DEVELOPMENT: "Dev Dependencies",
            DependencyClass.PEER: "Peer Dependencies",
        }[self]


class PackageManager(str, Enum):
    """Supported JavaScript package managers, in detection priority order."""

    PNPM = "pnpm"
    YARN = "yarn"
    NPM = "npm"

    @property
    def lock_file(self) -> str:
        return {
            PackageManager.PNPM: "pnpm-lock.yaml",
            PackageManager.YARN: "yarn.lock",
            PackageManager.NPM: "package-lock.json",
        }[self]


class WorkflowState(str, Enum):
    """States of the per-repository update workflow, in execution order."""

    START = "start"
    BRANCHING = "branching"
    EDITING = "editing"
    INSTALLING = "installing"
    COMMITTING = "committing"
    PUSHING = "pushing"
    PULL_REQUEST = "pull-request"
    RESTORING = "restoring"


class CommitStatus(str, Enum):
    COMMITTED = "committed"
    SKIPPED = "skipped"


class Outcome(str, Enum):
    UPDATED = "updated"
    NO_OP = "no-op"
    FAILED = "failed"


class Decision(str, Enum):
    """Operator's answer after a repository fails."""

    CONTINUE = "continue"
    ABORT = "abort"


class RepositoryRef(BaseModel):
    """One managed repository checkout.

    Attributes:
        path: Filesystem path as written in the config; may start with "~".
        remote_url: Code-host URL of origin, used to target pull requests.
        remote: Name of the git remote to push the working branch to.
    """

    path: str
    remote_url: str | None = None
    remote: str = "origin"

    @property
    def expanded_path(self) -> Path:
        return Path(self.path).expanduser()

    def validate_checkout(self) -> Path:
        """Return the expanded path, or raise if it isn't a git checkout."""
        path = self.expanded_path
        if not path.exists():
            raise RepositoryError(f"Repository path does not exist: {self.path}")
        if not (path / ".git").exists():
            raise RepositoryError(f"Not a git repository: {self.path}")
        return path


class UpdateRequest(BaseModel):
    """Parameters of one fleet-wide update run.

    Attributes:
        package: Dependency name to update.
        version: Version string to write, e.g. "^1.2.3".
        message: Commit message override; None uses the template.
        pull_request: Open a pull request after pushing.
        draft: Open the pull request as a draft.
        dry_run: Report side effects instead of performing them.
    """

    model_config = ConfigDict(frozen=True)

    package: str
    version: str
    message: str | None = None
    pull_request: bool = False
    draft: bool = False
    dry_run: bool = False

    @property
    def branch_name(self) -> str:
        return branch_name(self.package, self.version)

    @property
    def mode(self) -> ExecutionMode:
        return ExecutionMode.from_dry_run(self.dry_run)

    def commit_message(self, template: str = DEFAULT_COMMIT_TEMPLATE) -> str:
        if self.message:
            return self.message
        return template.format(package=self.package, version=self.version)


class DependencyRecord(BaseModel):
    """A single dependency declaration found in a manifest."""

    name: str
    version: str
    dep_class: DependencyClass


class WorkflowContext(BaseModel):
    """Mutable state for one repository's pass through the workflow.

    Created fresh for every repository and discarded afterwards.

    Attributes:
        original_branch: Branch checked out on entry; the restore target.
        branch: Working branch holding the update commit.
        reused_branch: Whether the working branch existed before this run.
        changed: Whether the manifest edit changed anything.
        state: State currently executing.
        steps: States entered so far, in order.
    """

    repo: RepositoryRef
    branch: str
    original_branch: str = ""
    reused_branch: bool = False
    changed: bool = False
    state: WorkflowState = WorkflowState.START
    steps: list[WorkflowState] = Field(default_factory=list)
    manager: PackageManager | None = None
    commit: CommitStatus | None = None
    pr_url: str | None = None

    def enter(self, state: WorkflowState) -> None:
        self.state = state
        self.steps.append(state)


class RepoResult(BaseModel):
    """Terminal result of running the workflow on one repository."""

    repo: str
    outcome: Outcome
    branch: str = ""
    pr_url: str | None = None
    commit: CommitStatus | None = None
    steps: list[WorkflowState] = Field(default_factory=list)
    error: str | None = None


class FleetReport(BaseModel):
    """Results of a fleet run, in processing order."""

    results: list[RepoResult] = Field(default_factory=list)
    aborted: bool = False

    def _with(self, outcome: Outcome) -> list[RepoResult]:
        return [r for r in self.results if r.outcome == outcome]

    @property
    def updated(self) -> list[RepoResult]:
        return self._with(Outcome.UPDATED)

    @property
    def no_op(self) -> list[RepoResult]:
        return self._with(Outcome.NO_OP)

    @property
    def failed(self) -> list[RepoResult]:
        return self._with(Outcome.FAILED)


class RepoVersion(BaseModel):
    """A package's declared version in one repository, for comparisons."""

    repo: str
    version: str | None = None
    error: str | None = None


class RepoStatus(BaseModel):
    """Working-copy summary shown by list-repos."""

    repo: str
    has_changes: bool = False
    branch: str | None = None
    manager: PackageManager | None = None
    error: str | None = None
