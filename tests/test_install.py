"""Tests for mru.install."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from mru.errors import ToolingError
from mru.install import InstallRunner, detect_manager, resolve_manager
from mru.models import ExecutionMode, PackageManager


class TestDetectManager:
    @pytest.mark.parametrize(
        ("lock_file", "expected"),
        [
            ("pnpm-lock.yaml", PackageManager.PNPM),
            ("yarn.lock", PackageManager.YARN),
            ("package-lock.json", PackageManager.NPM),
        ],
    )
    def test_detects_from_lock_file(
        self, tmp_path: Path, lock_file: str, expected: PackageManager
    ) -> None:
        (tmp_path / lock_file).write_text("")
        assert detect_manager(tmp_path) == expected

    def test_pnpm_wins_over_others(self, tmp_path: Path) -> None:
        (tmp_path / "package-lock.json").write_text("")
        (tmp_path / "pnpm-lock.yaml").write_text("")
        assert detect_manager(tmp_path) == PackageManager.PNPM

    def test_none_without_lock_file(self, tmp_path: Path) -> None:
        assert detect_manager(tmp_path) is None


class TestResolveManager:
    def test_detected_beats_default(self, tmp_path: Path) -> None:
        (tmp_path / "yarn.lock").write_text("")
        assert resolve_manager(tmp_path, PackageManager.NPM) == PackageManager.YARN

    def test_falls_back_to_default(self, tmp_path: Path) -> None:
        assert resolve_manager(tmp_path, PackageManager.PNPM) == PackageManager.PNPM

    def test_no_lock_and_no_default(self, tmp_path: Path) -> None:
        with pytest.raises(ToolingError, match="no default package manager"):
            resolve_manager(tmp_path, None)


class TestInstallRunner:
    @patch("mru.install.run")
    def test_runs_install(self, mock_run: MagicMock, tmp_path: Path) -> None:
        InstallRunner().install(tmp_path, PackageManager.PNPM)
        mock_run.assert_called_once_with("pnpm", "install", cwd=tmp_path)

    @patch("mru.install.run")
    def test_failure_propagates(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.side_effect = ToolingError("`npm install` exited with status 1")
        with pytest.raises(ToolingError):
            InstallRunner().install(tmp_path, PackageManager.NPM)

    @patch("mru.install.run")
    def test_simulate_does_not_run(self, mock_run: MagicMock, tmp_path: Path, capsys) -> None:
        InstallRunner(ExecutionMode.SIMULATE).install(tmp_path, PackageManager.YARN)

        mock_run.assert_not_called()
        assert f"Would run yarn install in {tmp_path}" in capsys.readouterr().out
