"""Git command wrappers."""

import os
import subprocess
from pathlib import Path
from typing import List, Optional, Union

from ..errors import GitError, HookInstallError, NoUpstreamError
from ..utils.logging import get_logger

logger = get_logger(__name__)

HOOK_MARKER = "driftcheck"

HOOK_SCRIPT = '''#!/bin/sh
# driftcheck pre-push hook
# This hook is called with the following parameters:
#   $1 -- Name of the remote to which the push is being done
#   $2 -- URL to which the push is being done

exec driftcheck hook
'''


def run_git_command(args: List[str], cwd: Optional[Union[str, Path]] = None) -> subprocess.CompletedProcess:
    """Run git with the given arguments, capturing text output."""
    try:
        return subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            errors="replace",
        )
    except OSError as e:
        raise GitError(str(e)) from e


def get_upstream(cwd: Optional[Union[str, Path]] = None) -> str:
    """Get the upstream tracking branch of HEAD, e.g. 'origin/main'."""
    result = run_git_command(
        ["rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}"], cwd
    )
    if result.returncode != 0:
        raise NoUpstreamError()
    return result.stdout.strip()


def get_diff(commit_range: Optional[str] = None, cwd: Optional[Union[str, Path]] = None) -> str:
    """
    Get the diff being pushed.

    Args:
        commit_range: Range to diff (default: <upstream>..HEAD)
        cwd: Repository directory

    Raises:
        NoUpstreamError: If no range is given and HEAD has no upstream
        GitError: If git diff fails
    """
    if commit_range is None:
        commit_range = f"{get_upstream(cwd)}..HEAD"

    result = run_git_command(["diff", commit_range], cwd)
    if result.returncode != 0:
        raise GitError(result.stderr.strip())
    return result.stdout


def get_recent_commits(count: int, cwd: Optional[Union[str, Path]] = None) -> str:
    """
    Get a short log of recent commits with the files they touched.

    Not fatal: returns an empty string when git fails.
    """
    if count <= 0:
        return ""
    try:
        result = run_git_command(
            ["log", f"-{count}", "--pretty=format:%h %s", "--name-only"], cwd
        )
    except GitError as e:
        logger.debug(f"git log failed: {e}")
        return ""
    if result.returncode != 0:
        logger.debug(f"git log failed: {result.stderr.strip()}")
        return ""
    return result.stdout


def install_hook(git_root: Union[str, Path], force: bool = False) -> Path:
    """
    Install the pre-push hook.

    An existing hook that does not mention driftcheck is only replaced
    with force.

    Returns:
        Path of the installed hook
    """
    hooks_dir = Path(git_root) / ".git" / "hooks"
    hook_path = hooks_dir / "pre-push"

    try:
        hooks_dir.mkdir(parents=True, exist_ok=True)

        if hook_path.exists() and not force:
            content = hook_path.read_text(encoding="utf-8", errors="replace")
            if HOOK_MARKER not in content:
                raise HookInstallError(
                    "A pre-push hook already exists. Use --force to overwrite, "
                    "or manually add 'driftcheck hook' to your existing hook."
                )

        hook_path.write_text(HOOK_SCRIPT, encoding="utf-8")
        os.chmod(hook_path, 0o755)
    except OSError as e:
        raise HookInstallError(str(e)) from e

    return hook_path
