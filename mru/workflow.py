"""Per-repository update workflow: branch → edit → install → commit → push → PR.

For each repository the workflow:
1. Captures the checked-out branch as the restore point
2. Creates (or reuses) the working branch update-<package>-<version>
3. Rewrites package.json in every dependency class declaring the package
4. Runs the package manager's install to refresh the lock file
5. Stages package.json plus any lock files and commits
6. Pushes the working branch with upstream tracking
7. Optionally opens a pull request
8. Checks the original branch out again

If the manifest already declares the target version everywhere, steps 4-7
are skipped and the run is a no-op, so re-running an update is safe. The
original branch is restored on every exit path; after a failure this is
best-effort and the original error is what gets reported.

Dry-run is handled by the adapters, which are built in SIMULATE mode: the
state sequence and the returned RepoResult are the same as a live run.
"""

from __future__ import annotations

from pathlib import Path

from .config import Config
from .errors import MruError, RepositoryUpdateError
from .git import GitAdapter
from .github import GitHubClient
from .install import LOCK_FILES, InstallRunner, resolve_manager
from .manifest import (
    MANIFEST_NAME,
    Manifest,
    parse_manifest,
    read_manifest,
    set_version,
    stale_occurrences,
    write_manifest,
)
from .models import (
    Outcome,
    RepoResult,
    RepositoryRef,
    UpdateRequest,
    WorkflowContext,
    WorkflowState,
)
from .shell import info, step, warn

# Errors that fail a repository rather than the whole run
_FAILURES = (MruError, OSError)

_UPDATE_FILES = (MANIFEST_NAME, *LOCK_FILES)


class UpdateWorkflow:
    """Runs one UpdateRequest against repositories, one at a time.

    Adapters default to ones built in the request's execution mode; tests
    pass fakes.
    """

    def __init__(
        self,
        request: UpdateRequest,
        config: Config,
        vcs: GitAdapter | None = None,
        installer: InstallRunner | None = None,
        host: GitHubClient | None = None,
    ) -> None:
        self.request = request
        self.config = config
        self.vcs = vcs or GitAdapter(request.mode)
        self.installer = installer or InstallRunner(request.mode)
        self.host = host or GitHubClient(request.mode)
        self.commit_message = request.commit_message(config.default_commit_message)

    def run(self, repo: RepositoryRef) -> RepoResult:
        """Update one repository.

        Returns:
            RepoResult with outcome UPDATED or NO_OP.

        Raises:
            RepositoryUpdateError: If any step fails. The original branch has
                been restored where possible.
        """
        step(f"Processing repository: {repo.path}")
        ctx = WorkflowContext(repo=repo, branch=self.request.branch_name)

        try:
            path = self._start(ctx)
        except _FAILURES as exc:
            raise RepositoryUpdateError(repo.path, ctx.state.value, exc) from exc

        try:
            self._branch(ctx, path)
            if self._edit(ctx, path):
                self._install(ctx, path)
                self._commit(ctx, path)
                self._push(ctx, path)
                if self.request.pull_request:
                    self._pull_request(ctx, path)
        except _FAILURES as exc:
            failed_state = ctx.state
            self._restore_after_failure(ctx, path)
            raise RepositoryUpdateError(repo.path, failed_state.value, exc) from exc

        try:
            self._restore(ctx, path)
        except _FAILURES as exc:
            raise RepositoryUpdateError(repo.path, ctx.state.value, exc) from exc

        if ctx.changed:
            verb = "Would update" if self.request.dry_run else "Updated"
            info(f"✓ {verb} {self.request.package} to {self.request.version} in {repo.path}")

        return RepoResult(
            repo=repo.path,
            outcome=Outcome.UPDATED if ctx.changed else Outcome.NO_OP,
            branch=ctx.branch,
            pr_url=ctx.pr_url,
            commit=ctx.commit,
            steps=list(ctx.steps),
        )

    def _start(self, ctx: WorkflowContext) -> Path:
        ctx.enter(WorkflowState.START)
        path = ctx.repo.validate_checkout()
        ctx.original_branch = self.vcs.current_branch(path)
        info(f"Current branch: {ctx.original_branch}")
        return path

    def _branch(self, ctx: WorkflowContext, path: Path) -> None:
        ctx.enter(WorkflowState.BRANCHING)
        if self.vcs.branch_exists(path, ctx.branch):
            info(f"Branch '{ctx.branch}' already exists, reusing it")
            ctx.reused_branch = True
            self.vcs.checkout(path, ctx.branch)
        else:
            self.vcs.create_and_checkout(path, ctx.branch)

    def _edit(self, ctx: WorkflowContext, path: Path) -> bool:
        """Update the manifest; return False when already at the target."""
        ctx.enter(WorkflowState.EDITING)
        package, version = self.request.package, self.request.version
        manifest = self._read_manifest(ctx, path)

        stale = stale_occurrences(manifest, package, version)
        changed, updated = set_version(manifest, package, version)
        ctx.changed = changed
        if not changed:
            info(
                f"Package '{package}' is already at version '{version}' "
                "or not declared, skipping"
            )
            return False

        prefix = "Would update" if self.request.dry_run else "Updating"
        for record in stale:
            info(
                f"{prefix} {package} in {record.dep_class.value} "
                f"from {record.version} to {version}"
            )
        if not self.request.dry_run:
            write_manifest(path, updated)
            info(f"Saved changes to {MANIFEST_NAME}")
        return True

    def _read_manifest(self, ctx: WorkflowContext, path: Path) -> Manifest:
        if self.request.dry_run and ctx.reused_branch:
            # The simulated checkout left the original branch in the working tree
            source = f"{ctx.branch}:{MANIFEST_NAME}"
            return parse_manifest(self.vcs.show_file(path, ctx.branch, MANIFEST_NAME), source)
        return read_manifest(path)

    def _install(self, ctx: WorkflowContext, path: Path) -> None:
        ctx.enter(WorkflowState.INSTALLING)
        ctx.manager = resolve_manager(path, self.config.default_package_manager)
        self.installer.install(path, ctx.manager)

    def _commit(self, ctx: WorkflowContext, path: Path) -> None:
        ctx.enter(WorkflowState.COMMITTING)
        self.vcs.stage(path, list(_UPDATE_FILES))
        ctx.commit = self.vcs.commit(path, self.commit_message)

    def _push(self, ctx: WorkflowContext, path: Path) -> None:
        ctx.enter(WorkflowState.PUSHING)
        self.vcs.push(path, ctx.branch, ctx.repo.remote)

    def _pull_request(self, ctx: WorkflowContext, path: Path) -> None:
        """Open a PR. Failures only warn: the change is already pushed."""
        ctx.enter(WorkflowState.PULL_REQUEST)
        body = (
            f"Updates `{self.request.package}` to `{self.request.version}`.\n\n"
            f"{self.commit_message}"
        )
        try:
            ctx.pr_url = self.host.create_pr(
                path,
                ctx.repo.remote_url,
                ctx.branch,
                self.commit_message,
                draft=self.request.draft,
                body=body,
            )
        except MruError as exc:
            warn(f"Failed to create PR: {exc}")

    def _restore(self, ctx: WorkflowContext, path: Path) -> None:
        ctx.enter(WorkflowState.RESTORING)
        self.vcs.checkout(path, ctx.original_branch)

    def _restore_after_failure(self, ctx: WorkflowContext, path: Path) -> None:
        try:
            self._restore(ctx, path)
        except _FAILURES as exc:
            warn(
                f"Could not restore branch '{ctx.original_branch}' "
                f"in {ctx.repo.path}: {exc}"
            )
            return
        self._warn_carried_over(ctx, path)

    def _warn_carried_over(self, ctx: WorkflowContext, path: Path) -> None:
        """Name update files left uncommitted on the original branch.

        Only a live run that wrote the manifest but never committed leaves
        such files behind; git keeps them in the working tree across the
        checkout.
        """
        if self.request.dry_run or not ctx.changed or ctx.commit is not None:
            return
        try:
            modified = self.vcs.modified_files(path)
        except _FAILURES as exc:
            warn(f"Could not check for leftover changes in {ctx.repo.path}: {exc}")
            return
        carried = [f for f in modified if f in _UPDATE_FILES]
        if carried:
            warn(
                f"Uncommitted changes carried over to '{ctx.original_branch}' "
                f"in {ctx.repo.path}: {', '.join(carried)}"
            )
