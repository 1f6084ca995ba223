"""Configuration store.

The fleet definition lives in a TOML file (by default
~/.config/mru/config.toml). tomlkit is used so that hand-written comments and
formatting survive when mru itself rewrites the file after add-repo,
remove-repo or set-package-manager.

Example:

    default_commit_message = "chore: update {package} to {version}"
    default_package_manager = "pnpm"

    [[repositories]]
    path = "~/src/web-app"
    remote_url = "https://github.com/acme/web-app"
"""

from __future__ import annotations

import os
from pathlib import Path

import tomlkit
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from tomlkit.exceptions import TOMLKitError

from .errors import ConfigError
from .models import DEFAULT_COMMIT_TEMPLATE, PackageManager, RepositoryRef

CONFIG_ENV_VAR = "MRU_CONFIG"


def default_config_path() -> Path:
    """Return the config file location, honouring $MRU_CONFIG."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "mru" / "config.toml"


class Config(BaseModel):
    """Validated contents of the config file.

    Attributes:
        default_commit_message: Commit message template; "{package}" and
            "{version}" are substituted.
        default_package_manager: Used when a repository has no lock file.
            None means such repositories fail at the install step.
        repositories: Fleet members, in update order.
    """

    default_commit_message: str = DEFAULT_COMMIT_TEMPLATE
    default_package_manager: PackageManager | None = PackageManager.NPM
    repositories: list[RepositoryRef] = Field(default_factory=list)

    @field_validator("default_commit_message")
    @classmethod
    def check_commit_template(cls, value: str) -> str:
        try:
            value.format(package="package", version="0.0.0")
        except (KeyError, IndexError, AttributeError, ValueError) as exc:
            raise ValueError(
                f"Invalid commit message template {value!r}: only {{package}} and "
                "{version} placeholders are supported (write literal braces as {{ and }})"
            ) from exc
        return value

    @model_validator(mode="after")
    def check_unique_paths(self) -> Config:
        seen: set[Path] = set()
        for repo in self.repositories:
            if repo.expanded_path in seen:
                raise ValueError(f"Duplicate repository path: {repo.path}")
            seen.add(repo.expanded_path)
        return self

    def find_repository(self, path: str) -> RepositoryRef | None:
        """Look up a configured repository by path, comparing expanded forms."""
        target = Path(path).expanduser()
        for repo in self.repositories:
            if repo.expanded_path == target:
                return repo
        return None


class ConfigStore:
    """Loads, edits and persists the config file.

    The parsed TOMLDocument is kept alongside the validated Config so saves
    rewrite only the keys mru owns.
    """

    def __init__(self, path: Path, doc: tomlkit.TOMLDocument, config: Config) -> None:
        self.path = path
        self.doc = doc
        self.config = config

    @classmethod
    def load(cls, path: Path | None = None) -> ConfigStore:
        """Read the config file, creating it with defaults if it is missing.

        Raises:
            ConfigError: If the file cannot be read, parsed or validated.
        """
        path = path or default_config_path()
        if not path.exists():
            store = cls(path, tomlkit.document(), Config())
            store.save()
            return store

        try:
            doc = tomlkit.parse(path.read_text())
        except OSError as exc:
            raise ConfigError(f"Failed to read config file {path}: {exc}") from exc
        except TOMLKitError as exc:
            raise ConfigError(f"Failed to parse config file {path}: {exc}") from exc

        try:
            config = Config.model_validate(doc.unwrap())
        except ValidationError as exc:
            raise ConfigError(f"Invalid config file {path}:\n{exc}") from exc
        return cls(path, doc, config)

    def save(self) -> None:
        """Write the current Config back to disk, preserving formatting."""
        doc = self.doc
        config = self.config
        doc["default_commit_message"] = config.default_commit_message
        if config.default_package_manager is not None:
            doc["default_package_manager"] = config.default_package_manager.value
        elif "default_package_manager" in doc:
            del doc["default_package_manager"]

        repos = tomlkit.aot()
        for repo in config.repositories:
            table = tomlkit.table()
            table["path"] = repo.path
            if repo.remote_url:
                table["remote_url"] = repo.remote_url
            if repo.remote != "origin":
                table["remote"] = repo.remote
            repos.append(table)
        doc["repositories"] = repos

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(tomlkit.dumps(doc))

    def add_repository(self, path: str, remote_url: str | None = None) -> RepositoryRef:
        """Append a repository to the fleet and save.

        The path is stored as given (e.g. with "~") but compared expanded.

        Raises:
            ConfigError: If the repository is already configured.
            RepositoryError: If the path is not a git checkout.
        """
        if self.config.find_repository(path) is not None:
            raise ConfigError(f"Repository already exists in config: {path}")
        repo = RepositoryRef(path=path, remote_url=remote_url)
        repo.validate_checkout()
        self.config.repositories.append(repo)
        self.save()
        return repo

    def remove_repository(self, path: str) -> None:
        """Remove a repository from the fleet and save.

        Raises:
            ConfigError: If no configured repository matches the path.
        """
        target = Path(path).expanduser()
        remaining = [r for r in self.config.repositories if r.expanded_path != target]
        if len(remaining) == len(self.config.repositories):
            raise ConfigError(f"Repository not found: {path}")
        self.config.repositories = remaining
        self.save()

    def set_package_manager(self, name: str) -> PackageManager:
        """Set the fallback package manager and save.

        Raises:
            ConfigError: If name is not a supported package manager.
        """
        try:
            manager = PackageManager(name)
        except ValueError:
            valid = ", ".join(m.value for m in PackageManager)
            raise ConfigError(
                f"Invalid package manager '{name}'. Must be one of: {valid}"
            ) from None
        self.config.default_package_manager = manager
        self.save()
        return manager
