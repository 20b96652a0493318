"""Tests for git integration.

Uses real git repositories in temporary directories.
"""

import os
import shutil
import subprocess

import pytest

from driftcheck.errors import HookInstallError, NoUpstreamError
from driftcheck.tools.git_tool import (
    HOOK_SCRIPT,
    get_diff,
    get_recent_commits,
    get_upstream,
    install_hook,
)

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def git(cwd, *args):
    subprocess.run(
        ["git", "-c", "user.name=Test", "-c", "user.email=test@example.com", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
    )


@pytest.fixture
def repo(tmp_path):
    git(tmp_path, "init", "-q")
    (tmp_path / "README.md").write_text("Timeout is 30s\n")
    git(tmp_path, "add", ".")
    git(tmp_path, "commit", "-q", "-m", "Initial commit")
    return tmp_path


class TestInstallHook:
    """Tests for install_hook."""

    def test_fresh_install(self, tmp_path):
        """Given no hook, should write an executable pre-push hook."""
        # Given
        (tmp_path / ".git").mkdir()

        # When
        hook = install_hook(tmp_path)

        # Then
        assert hook == tmp_path / ".git" / "hooks" / "pre-push"
        assert hook.read_text() == HOOK_SCRIPT
        assert "exec driftcheck hook" in hook.read_text()
        assert os.access(hook, os.X_OK)

    def test_reinstall_over_own_hook(self, tmp_path):
        (tmp_path / ".git").mkdir()
        install_hook(tmp_path)
        hook = install_hook(tmp_path)
        assert hook.read_text() == HOOK_SCRIPT

    def test_foreign_hook_refused(self, tmp_path):
        """Given someone else's hook, should refuse without force and leave it alone."""
        # Given
        hooks = tmp_path / ".git" / "hooks"
        hooks.mkdir(parents=True)
        (hooks / "pre-push").write_text("#!/bin/sh\nmake lint\n")

        # Then
        with pytest.raises(HookInstallError, match="--force"):
            install_hook(tmp_path)
        assert (hooks / "pre-push").read_text() == "#!/bin/sh\nmake lint\n"

    def test_foreign_hook_replaced_with_force(self, tmp_path):
        hooks = tmp_path / ".git" / "hooks"
        hooks.mkdir(parents=True)
        (hooks / "pre-push").write_text("#!/bin/sh\nmake lint\n")

        install_hook(tmp_path, force=True)

        assert (hooks / "pre-push").read_text() == HOOK_SCRIPT


@requires_git
class TestGitCommands:
    """Tests for commands run against a real repository."""

    def test_no_upstream(self, repo):
        with pytest.raises(NoUpstreamError):
            get_upstream(repo)
        with pytest.raises(NoUpstreamError):
            get_diff(None, repo)

    def test_diff_for_explicit_range(self, repo):
        """Given a second commit, the range diff should contain its change."""
        # Given
        (repo / "README.md").write_text("Timeout is 60s\n")
        git(repo, "commit", "-q", "-am", "Raise timeout")

        # When
        diff = get_diff("HEAD~1..HEAD", repo)

        # Then
        assert "diff --git a/README.md b/README.md" in diff
        assert "+Timeout is 60s" in diff

    def test_recent_commits(self, repo):
        log = get_recent_commits(5, repo)
        assert "Initial commit" in log
        assert "README.md" in log

    def test_recent_commits_disabled(self, repo):
        assert get_recent_commits(0, repo) == ""

    def test_recent_commits_outside_repo(self, tmp_path):
        assert get_recent_commits(5, tmp_path) == ""
