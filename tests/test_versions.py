"""Tests for mru.versions."""

from __future__ import annotations

import semver

from mru.versions import branch_name, highest_version, parse_version, sanitize_version


class TestSanitizeVersion:
    def test_strips_caret(self) -> None:
        assert sanitize_version("^1.2.3") == "1.2.3"

    def test_strips_tilde(self) -> None:
        assert sanitize_version("~0.4") == "0.4"

    def test_leaves_other_characters(self) -> None:
        assert sanitize_version(">=1.0.0-beta.1") == ">=1.0.0-beta.1"


class TestBranchName:
    def test_range_operator_stripped(self) -> None:
        assert branch_name("left-pad", "^1.2.3") == "update-left-pad-1.2.3"

    def test_plain_version(self) -> None:
        assert branch_name("react", "18.2.0") == "update-react-18.2.0"

    def test_scoped_package_kept_verbatim(self) -> None:
        assert branch_name("@types/node", "~20.1.0") == "update-@types/node-20.1.0"


class TestParseVersion:
    def test_full_version(self) -> None:
        assert parse_version("1.2.3") == semver.Version(1, 2, 3)

    def test_range_prefix(self) -> None:
        assert parse_version("^1.2.3") == semver.Version(1, 2, 3)
        assert parse_version(">=2.0.1") == semver.Version(2, 0, 1)

    def test_pads_missing_parts(self) -> None:
        assert parse_version("~1.2") == semver.Version(1, 2, 0)
        assert parse_version("3") == semver.Version(3, 0, 0)

    def test_unparseable(self) -> None:
        assert parse_version("latest") is None
        assert parse_version("workspace:*") is None


class TestHighestVersion:
    def test_picks_highest(self) -> None:
        assert highest_version(["^1.2.3", "1.10.0", "~1.9.9"]) == "1.10.0"

    def test_ignores_unparseable(self) -> None:
        assert highest_version(["latest", "0.1.0"]) == "0.1.0"

    def test_none_when_nothing_parses(self) -> None:
        assert highest_version(["latest"]) is None
        assert highest_version([]) is None
