"""Version string utilities.

Handles the two things mru needs to know about npm version strings: how to
turn one into a ref-safe branch name, and how to order them loosely when
comparing a package across repositories.
"""

from __future__ import annotations

import semver

RANGE_OPERATORS = ("^", "~")


def sanitize_version(version: str) -> str:
    """Strip range operators so the version is safe in a branch name.

    Only "^" and "~" are removed; every other character is kept as-is.

    Examples:
        "^1.2.3" → "1.2.3"
        "~0.4" → "0.4"
    """
    for op in RANGE_OPERATORS:
        version = version.replace(op, "")
    return version


def branch_name(package: str, version: str) -> str:
    """Derive the working branch for updating package to version.

    Example:
        branch_name("left-pad", "^1.2.3") → "update-left-pad-1.2.3"
    """
    return f"update-{package}-{sanitize_version(version)}"


def parse_version(version_str: str) -> semver.Version | None:
    """Parse a manifest version into a semver.Version, if possible.

    Leading range operators (^, ~, >=, =, v) are dropped and incomplete
    versions are padded with zeros:
    - "^1" → "1.0.0"
    - "~1.2" → "1.2.0"

    Returns None for anything that is not a plain version after that,
    e.g. "latest", "workspace:*" or "1.x".
    """
    cleaned = version_str.strip().lstrip("^~>=<v ")
    parts = cleaned.split(".")
    # Pad with zeros to ensure we have at least 3 parts
    while len(parts) < 3:
        parts.append("0")
    try:
        return semver.Version.parse(".".join(parts[:3]))
    except ValueError:
        return None


def highest_version(versions: list[str]) -> str | None:
    """Return the version string that parses to the highest semver.

    Unparseable versions are ignored; returns None if none parse.
    """
    best: tuple[semver.Version, str] | None = None
    for v in versions:
        parsed = parse_version(v)
        if parsed is None:
            continue
        if best is None or parsed > best[0]:
            best = (parsed, v)
    return best[1] if best else None
