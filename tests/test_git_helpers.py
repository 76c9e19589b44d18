"""Tests for git_helpers module."""
import shutil
import subprocess

import pytest

from command_runner import CommandResult
import git_helpers


class TestRunGitCommand:

    def test_returns_tuple(self, fake_runner, tmp_path):
        fake_runner.results[("git",)] = CommandResult(0, "ok", "")

        assert git_helpers.run_git_command(["git", "status"], tmp_path, fake_runner) == (0, "ok", "")
        assert fake_runner.calls == [["git", "status"]]

    @pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
    def test_real_git_version(self, tmp_path):
        returncode, stdout, stderr = git_helpers.run_git_command(["git", "--version"], tmp_path)

        assert returncode == 0
        assert "git version" in stdout.lower()


class TestDiffStat:

    def test_passes_paths(self, fake_runner, tmp_path):
        fake_runner.results[("git", "diff")] = CommandResult(0, " package.nix | 4 ++--", "")

        out = git_helpers.diff_stat(["package.nix", "flake.lock"], tmp_path, fake_runner)

        assert out == " package.nix | 4 ++--"
        assert fake_runner.calls == [["git", "diff", "--stat", "--", "package.nix", "flake.lock"]]

    def test_failure_returns_empty(self, fake_runner, tmp_path):
        fake_runner.results[("git", "diff")] = CommandResult(128, "", "fatal: not a git repository")

        assert git_helpers.diff_stat(["package.nix"], tmp_path, fake_runner) == ""

    @pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
    def test_real_repository(self, tmp_path):
        def git(*args):
            subprocess.run(["git", *args], cwd=tmp_path, check=True, capture_output=True)

        git("init")
        git("config", "user.email", "test@test.com")
        git("config", "user.name", "Test User")
        package = tmp_path / "package.nix"
        package.write_text('version = "1.0";\n', encoding="utf-8")
        git("add", "package.nix")
        git("commit", "-m", "Initial commit")
        package.write_text('version = "2.0";\n', encoding="utf-8")

        out = git_helpers.diff_stat(["package.nix", "flake.lock"], tmp_path)

        assert "package.nix" in out
