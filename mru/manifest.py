"""package.json reading and editing.

The editor is a pure data transform: reading and writing touch only the
manifest file, and set_version returns a new document rather than mutating
its input. Key order is preserved so rewritten manifests stay diff-friendly.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

from .errors import ManifestError
from .models import DependencyClass, DependencyRecord

MANIFEST_NAME = "package.json"

Manifest = dict[str, Any]


def read_manifest(repo_path: Path) -> Manifest:
    """Load and parse a repository's package.json.

    Raises:
        ManifestError: If the file is missing, unreadable or not a JSON object.
    """
    path = repo_path / MANIFEST_NAME
    if not path.exists():
        raise ManifestError(f"{MANIFEST_NAME} not found in repository: {repo_path}")
    try:
        text = path.read_text()
    except OSError as exc:
        raise ManifestError(f"Failed to read {path}: {exc}") from exc
    return parse_manifest(text, str(path))


def parse_manifest(text: str, source: str) -> Manifest:
    """Parse package.json content; source names it in error messages.

    Raises:
        ManifestError: If the content is not a JSON object.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestError(f"Failed to parse {source}: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestError(f"{source} does not contain a JSON object")
    return data


def write_manifest(repo_path: Path, manifest: Manifest) -> None:
    """Save a manifest with npm's formatting (2-space indent, final newline)."""
    path = repo_path / MANIFEST_NAME
    path.write_text(json.dumps(manifest, indent=2, ensure_ascii=False) + "\n")


def _section(manifest: Manifest, dep_class: DependencyClass) -> dict[str, Any]:
    section = manifest.get(dep_class.value)
    return section if isinstance(section, dict) else {}


def stale_occurrences(
    manifest: Manifest, package: str, version: str
) -> list[DependencyRecord]:
    """Find every declaration of package whose version differs from version.

    Each dependency class is checked independently, so a package listed in
    both dependencies and devDependencies yields two records.
    """
    stale: list[DependencyRecord] = []
    for dep_class in DependencyClass:
        section = _section(manifest, dep_class)
        if package not in section:
            continue
        current = section[package]
        if current != version:
            # Non-string specs (e.g. objects) are reported verbatim
            stale.append(
                DependencyRecord(
                    name=package,
                    version=current if isinstance(current, str) else json.dumps(current),
                    dep_class=dep_class,
                )
            )
    return stale


def set_version(manifest: Manifest, package: str, version: str) -> tuple[bool, Manifest]:
    """Set package to version in every dependency class that declares it.

    Returns:
        Tuple of (changed, new manifest). When nothing changed the returned
        manifest is equal to the input.
    """
    stale = stale_occurrences(manifest, package, version)
    updated = copy.deepcopy(manifest)
    for record in stale:
        updated[record.dep_class.value][package] = version
    return bool(stale), updated


def find_version(manifest: Manifest, package: str) -> str | None:
    """Return the declared version of package, checking classes in order.

    Dependencies take precedence over devDependencies, which take precedence
    over peerDependencies.
    """
    for dep_class in DependencyClass:
        value = _section(manifest, dep_class).get(package)
        if isinstance(value, str):
            return value
    return None


def list_dependencies(manifest: Manifest) -> list[DependencyRecord]:
    """List every string-valued dependency declaration in the manifest."""
    records: list[DependencyRecord] = []
    for dep_class in DependencyClass:
        for name, value in _section(manifest, dep_class).items():
            if isinstance(value, str):
                records.append(
                    DependencyRecord(name=name, version=value, dep_class=dep_class)
                )
    return records
