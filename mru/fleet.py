"""Fleet orchestration: run the update workflow over every configured repo.

Repositories are processed strictly one at a time in configured order. A
failing repository is reported and the operator decides whether to carry on;
nothing already done in earlier repositories is undone either way.

Also holds the read-only fleet queries behind list-repos, compare,
list-packages and pr-status.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence

import click

from .errors import MruError, RepositoryUpdateError
from .git import GitAdapter
from .github import GitHubClient
from .install import detect_manager
from .manifest import find_version, read_manifest
from .models import (
    Decision,
    FleetReport,
    Outcome,
    PackageManager,
    RepoResult,
    RepositoryRef,
    RepoStatus,
    RepoVersion,
    UpdateRequest,
)
from .shell import step, warn
from .workflow import UpdateWorkflow

DecisionFn = Callable[[RepositoryUpdateError], Decision]


def prompt_continue(error: RepositoryUpdateError) -> Decision:
    """Ask the operator whether to go on after a failed repository.

    Only "y" or "yes" (any case) continues; anything else, including EOF,
    aborts.
    """
    try:
        answer = click.prompt(
            "Continue with remaining repositories? [y/N]",
            default="",
            show_default=False,
        )
    except click.Abort:
        return Decision.ABORT
    return Decision.CONTINUE if answer.strip().lower() in ("y", "yes") else Decision.ABORT


def run_fleet(
    repos: Sequence[RepositoryRef],
    request: UpdateRequest,
    workflow: UpdateWorkflow,
    decide: DecisionFn = prompt_continue,
) -> FleetReport:
    """Update every repository in order, isolating failures.

    Args:
        repos: Fleet members, processed in this order.
        request: The update being applied.
        workflow: Workflow engine configured for request.
        decide: Called after each failure; ABORT stops before the next repo.

    Returns:
        FleetReport with one result per repository that was attempted.
    """
    report = FleetReport()
    if not repos:
        print("No repositories configured. Use 'mru add-repo' to add repositories.")
        return report

    if request.dry_run:
        print("DRY RUN MODE - No changes will be made")
    print(
        f"Updating package '{request.package}' to version '{request.version}' "
        f"in {len(repos)} repositories"
    )

    for repo in repos:
        try:
            report.results.append(workflow.run(repo))
        except RepositoryUpdateError as exc:
            print(f"Error processing repository {exc}", file=sys.stderr)
            report.results.append(
                RepoResult(
                    repo=repo.path,
                    outcome=Outcome.FAILED,
                    branch=request.branch_name,
                    error=str(exc.cause),
                )
            )
            if decide(exc) is not Decision.CONTINUE:
                print("Aborting update process")
                report.aborted = True
                break

    print_summary(report, total=len(repos))
    return report


def print_summary(report: FleetReport, total: int) -> None:
    step("Summary")
    print(f"  Updated: {len(report.updated)}")
    print(f"  Already up to date: {len(report.no_op)}")
    print(f"  Failed: {len(report.failed)}")
    skipped = total - len(report.results)
    if skipped:
        print(f"  Not processed: {skipped}")
    for result in report.updated:
        if result.pr_url:
            print(f"  PR {result.repo}: {result.pr_url}")
    for result in report.failed:
        print(f"  ✗ {result.repo}: {result.error}")


def compare_versions(repos: Sequence[RepositoryRef], package: str) -> list[RepoVersion]:
    """Look up package's declared version in each repository.

    A repository whose manifest can't be read reports the error instead of
    stopping the comparison.
    """
    versions: list[RepoVersion] = []
    for repo in repos:
        try:
            manifest = read_manifest(repo.expanded_path)
        except MruError as exc:
            versions.append(RepoVersion(repo=repo.path, error=str(exc)))
            continue
        versions.append(RepoVersion(repo=repo.path, version=find_version(manifest, package)))
    return versions


def describe_repos(
    repos: Sequence[RepositoryRef], vcs: GitAdapter
) -> list[RepoStatus]:
    """Collect status, branch and package manager for each repository."""
    statuses: list[RepoStatus] = []
    for repo in repos:
        try:
            path = repo.validate_checkout()
            statuses.append(
                RepoStatus(
                    repo=repo.path,
                    has_changes=vcs.status(path),
                    branch=vcs.current_branch(path),
                    manager=detect_manager(path),
                )
            )
        except MruError as exc:
            statuses.append(RepoStatus(repo=repo.path, error=str(exc)))
    return statuses


def pr_statuses(
    repos: Sequence[RepositoryRef], branch: str, host: GitHubClient
) -> list[tuple[str, str]]:
    """Return (repo path, PR state) for branch in each repository."""
    statuses: list[tuple[str, str]] = []
    for repo in repos:
        try:
            state = host.pr_status(repo.expanded_path, repo.remote_url, branch)
        except MruError as exc:
            state = f"error: {exc}"
        statuses.append((repo.path, state))
    return statuses


def merge_prs(
    repos: Sequence[RepositoryRef], branch: str, host: GitHubClient, method: str
) -> list[str]:
    """Merge branch's PR in each repository.

    Returns:
        Paths of repositories where the merge failed. Failures are warned
        about and do not stop the remaining merges.
    """
    failed: list[str] = []
    for repo in repos:
        step(f"Merging in {repo.path}")
        try:
            host.merge_pr(repo.expanded_path, repo.remote_url, branch, method)
        except MruError as exc:
            warn(str(exc))
            failed.append(repo.path)
    return failed


def default_manager_note(manager: PackageManager | None) -> str:
    return manager.value if manager else "<none>"
