"""CLI entry point for mru."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from .config import ConfigStore
from .errors import MruError
from .fleet import (
    compare_versions,
    default_manager_note,
    describe_repos,
    merge_prs,
    pr_statuses,
    run_fleet,
)
from .git import GitAdapter
from .github import MERGE_METHODS, GitHubClient
from .manifest import list_dependencies, read_manifest
from .models import DependencyClass, ExecutionMode, UpdateRequest
from .versions import branch_name, highest_version
from .workflow import UpdateWorkflow


@contextmanager
def _user_errors() -> Iterator[None]:
    """Turn expected failures into a clean error message and exit code 1."""
    try:
        yield
    except MruError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.version_option(package_name="mru")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file. (default: $MRU_CONFIG or ~/.config/mru/config.toml)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None) -> None:
    """Update a dependency across many repositories at once."""
    with _user_errors():
        ctx.obj = ConfigStore.load(config_path)


@cli.command()
@click.argument("package")
@click.argument("version")
@click.option("-m", "--message", default=None, help="Commit message.")
@click.option("-p", "--pull-request", is_flag=True, help="Create a pull request.")
@click.option("--draft", is_flag=True, help="Open the pull request as a draft.")
@click.option("-d", "--dry-run", is_flag=True, help="Show what would happen.")
@click.pass_obj
def update(
    store: ConfigStore,
    package: str,
    version: str,
    message: str | None,
    pull_request: bool,
    draft: bool,
    dry_run: bool,
) -> None:
    """Update PACKAGE to VERSION in every configured repository."""
    request = UpdateRequest(
        package=package,
        version=version,
        message=message,
        pull_request=pull_request,
        draft=draft,
        dry_run=dry_run,
    )
    workflow = UpdateWorkflow(request, store.config)
    run_fleet(store.config.repositories, request, workflow)


@cli.command("add-repo")
@click.argument("path")
@click.option("--remote-url", default=None, help="Code-host URL used for PRs.")
@click.pass_obj
def add_repo(store: ConfigStore, path: str, remote_url: str | None) -> None:
    """Add a repository to the config."""
    with _user_errors():
        store.add_repository(path, remote_url=remote_url)
    click.echo(f"✓ Repository added: {path}")


@cli.command("remove-repo")
@click.argument("path")
@click.pass_obj
def remove_repo(store: ConfigStore, path: str) -> None:
    """Remove a repository from the config."""
    with _user_errors():
        store.remove_repository(path)
    click.echo(f"✓ Repository removed: {path}")


@cli.command("list-repos")
@click.pass_obj
def list_repos(store: ConfigStore) -> None:
    """List configured repositories with their git status."""
    config = store.config
    if not config.repositories:
        click.echo("No repositories configured")
        return

    click.echo("Configured repositories:")
    for i, status in enumerate(describe_repos(config.repositories, GitAdapter()), 1):
        click.echo(f"{i}. Path: {status.repo}")
        if status.error:
            click.echo(f"   Status check failed: {status.error}")
            continue
        click.echo(f"   Status: {'Changes present' if status.has_changes else 'Clean'}")
        click.echo(f"   Branch: {status.branch}")
        if status.manager:
            click.echo(f"   Package Manager: {status.manager.value}")
    click.echo()
    click.echo(
        f"Default package manager: {default_manager_note(config.default_package_manager)}"
    )


@cli.command()
@click.argument("package")
@click.pass_obj
def compare(store: ConfigStore, package: str) -> None:
    """Compare PACKAGE's version across repositories."""
    repos = store.config.repositories
    if not repos:
        click.echo("No repositories configured")
        return

    click.echo(f"Comparing package '{package}' across repositories:")
    versions = compare_versions(repos, package)
    latest = highest_version([v.version for v in versions if v.version])
    for entry in versions:
        if entry.error:
            click.echo(f"{entry.repo}: Error: {entry.error}")
        elif entry.version is None:
            click.echo(f"{entry.repo}: Not found")
        else:
            marker = "" if latest is None or entry.version == latest else " (behind)"
            click.echo(f"{entry.repo}: {entry.version}{marker}")


@cli.command("list-packages")
@click.option("-r", "--repo", default=None, help="Only this repository.")
@click.pass_obj
def list_packages(store: ConfigStore, repo: str | None) -> None:
    """List dependencies declared in each repository."""
    config = store.config
    if repo is not None:
        found = config.find_repository(repo)
        if found is None:
            raise click.ClickException(f"Repository not found: {repo}")
        repos = [found]
    else:
        repos = config.repositories
    if not repos:
        click.echo("No repositories configured")
        return

    for ref in repos:
        click.echo(f"Packages in {ref.path}:")
        try:
            records = list_dependencies(read_manifest(ref.expanded_path))
        except MruError as exc:
            click.echo(f"  Error listing packages: {exc}")
            continue
        if not records:
            click.echo("  No packages found")
            continue
        for dep_class in DependencyClass:
            group = [r for r in records if r.dep_class is dep_class]
            if group:
                click.echo(f"  {dep_class.label}:")
                for record in group:
                    click.echo(f"    {record.name}: {record.version}")


@cli.command()
@click.argument("url")
@click.option("-o", "--output", default=None, help="Directory to clone into.")
@click.option("-a", "--add", is_flag=True, help="Add the clone to the config.")
@click.pass_obj
def clone(store: ConfigStore, url: str, output: str | None, add: bool) -> None:
    """Clone a repository from URL."""
    remote_url = url[: -len(".git")] if url.endswith(".git") else url
    dest = Path(output) if output else Path(remote_url.rstrip("/").rsplit("/", 1)[-1])
    with _user_errors():
        GitAdapter().clone(url, dest)
        if add:
            store.add_repository(str(dest.resolve()), remote_url=remote_url)
            click.echo(f"✓ Repository added: {dest.resolve()}")


@cli.command("set-package-manager")
@click.argument("name")
@click.pass_obj
def set_package_manager(store: ConfigStore, name: str) -> None:
    """Set the package manager used when no lock file is found."""
    with _user_errors():
        manager = store.set_package_manager(name)
    click.echo(f"✓ Default package manager set to: {manager.value}")


@cli.command("pr-status")
@click.argument("package")
@click.argument("version")
@click.pass_obj
def pr_status(store: ConfigStore, package: str, version: str) -> None:
    """Show the PR state of an update branch in each repository."""
    branch = branch_name(package, version)
    click.echo(f"Pull requests for '{branch}':")
    for repo, state in pr_statuses(store.config.repositories, branch, GitHubClient()):
        click.echo(f"  {repo}: {state}")


@cli.command()
@click.argument("package")
@click.argument("version")
@click.option(
    "--method",
    type=click.Choice(MERGE_METHODS),
    default="merge",
    show_default=True,
    help="How to merge the pull request.",
)
@click.option("-d", "--dry-run", is_flag=True, help="Show what would happen.")
@click.pass_obj
def merge(store: ConfigStore, package: str, version: str, method: str, dry_run: bool) -> None:
    """Merge the update PR for PACKAGE VERSION in each repository."""
    branch = branch_name(package, version)
    host = GitHubClient(ExecutionMode.from_dry_run(dry_run))
    failed = merge_prs(store.config.repositories, branch, host, method)
    if failed:
        raise click.ClickException(f"Merge failed in: {', '.join(failed)}")
