#!/usr/bin/env python3
"""
driftcheck - Main Entry Point

Detects documentation that a code change has made wrong, before the change
is pushed. Runs as a git pre-push hook or on demand:

Usage:
    driftcheck init
    driftcheck check [--range origin/main..HEAD] [--no-tui]
"""

import argparse
import asyncio
import os
import shlex
import subprocess
import sys
from pathlib import Path
from typing import List

from dotenv import load_dotenv

from . import __version__
from .config import (
    DriftcheckConfig,
    find_config_path,
    find_git_root,
    is_debug,
    load_config,
)
from .errors import (
    ConfigInvalidError,
    ConfigNotFoundError,
    DisabledError,
    DriftcheckError,
    NoUpstreamError,
    NotGitRepoError,
    TUIError,
)
from .models import Issue
from .pipeline import analyze
from .tools import QueryCache
from .tools.git_tool import get_diff, get_recent_commits, install_hook
from .tui import run_review
from .utils import format_issue, get_logger, print_issues, setup_logging

logger = get_logger(__name__)

HOOK_BLOCKED_MESSAGE = """
Push blocked. Run `git push` from a terminal to review and fix issues,
or run `driftcheck check` to see details.

To bypass (not recommended): git push --no-verify"""


def load_env_files():
    """Load .env from the repository root, then from the current directory."""
    try:
        load_dotenv(find_git_root() / ".env")
    except NotGitRepoError:
        pass
    load_dotenv(Path.cwd() / ".env")


async def run_analysis(config: DriftcheckConfig, diff: str, root: Path) -> List[Issue]:
    """Run the analysis with recent commit history as extra context."""
    recent_commits = get_recent_commits(config.general.recent_commits, root)
    issues = await analyze(config, diff, root, recent_commits=recent_commits)
    for issue in issues:
        logger.debug(f"Detected issue:\n{format_issue(issue)}")
    return issues


async def review_issues(config: DriftcheckConfig, issues: List[Issue], root: Path):
    """
    Open the review screen.

    A fix still being written when the user aborts is allowed to finish
    before returning, so the file is never left half-written.

    Raises:
        TUIError: If the user aborted the review
    """
    result = await run_review(config, issues, root)

    if result.pending_fix is not None:
        print("Waiting for the fix in progress to finish...", file=sys.stderr)
        try:
            message = await result.pending_fix
            logger.info(message)
        except DriftcheckError as e:
            logger.warning(f"Fix did not complete: {e}")

    if result.aborted:
        raise TUIError("Push aborted by user")


def cmd_init(args) -> int:
    """Handle 'init' subcommand."""
    from .cli import init_repository

    success = init_repository(find_git_root(), force=args.force)
    return 0 if success else 1


def cmd_check(args) -> int:
    """Handle 'check' subcommand."""
    root = find_git_root()
    config = load_config(root)

    if not config.is_enabled():
        raise DisabledError()

    diff = get_diff(args.range, root)
    if not diff.strip():
        print("No changes to check.")
        return 0

    logger.info(f"Analyzing diff ({len(diff)} bytes)")
    issues = asyncio.run(run_analysis(config, diff, root))

    if not issues:
        print("No documentation issues detected.")
        return 0

    if not args.no_tui and sys.stdout.isatty():
        asyncio.run(review_issues(config, issues, root))
        return 0

    print_issues(issues)
    return 1


def cmd_config(args) -> int:
    """Handle 'config' subcommand."""
    root = find_git_root()

    if args.path:
        try:
            print(find_config_path(root))
        except ConfigNotFoundError:
            print("No configuration file found. Run 'driftcheck init' to create one.", file=sys.stderr)
        return 0

    if args.edit:
        path = find_config_path(root)
        editor = shlex.split(os.environ.get("EDITOR") or "vim")
        try:
            status = subprocess.run([*editor, str(path)])
        except OSError as e:
            raise ConfigInvalidError(f"Failed to open editor: {e}") from e
        if status.returncode != 0:
            raise ConfigInvalidError("Editor exited with error")
        return 0

    print(load_config(root).to_toml())
    return 0


def _set_enabled(enabled: bool) -> int:
    root = find_git_root()
    path = find_config_path(root)
    config = DriftcheckConfig.load(path)
    config.general.enabled = enabled
    config.save(path)
    print(f"driftcheck {'enabled' if enabled else 'disabled'}.")
    return 0


def cmd_enable(args) -> int:
    """Handle 'enable' subcommand."""
    return _set_enabled(True)


def cmd_disable(args) -> int:
    """Handle 'disable' subcommand."""
    return _set_enabled(False)


def cmd_cache(args) -> int:
    """Handle 'cache' subcommand."""
    root = find_git_root()
    try:
        config = load_config(root)
    except ConfigNotFoundError:
        config = DriftcheckConfig()

    cache = QueryCache(config.cache_dir(root), config.cache.ttl)

    if args.action == "clear":
        cache.clear()
        print("Cache cleared.")
    else:
        stats = cache.stats()
        print("Cache statistics:")
        print(f"  Entries: {stats.entries}")
        print(f"  Size: {stats.size_bytes} bytes")
        print(f"  Location: {stats.path}")
    return 0


def cmd_install_hook(args) -> int:
    """Handle 'install-hook' subcommand."""
    install_hook(find_git_root(), force=args.force)
    print("Pre-push hook installed.")
    return 0


def cmd_hook(args) -> int:
    """
    Handle 'hook' subcommand (called by the git pre-push hook).

    The push is allowed when driftcheck is not set up, is disabled, or the
    branch has no upstream yet. Analysis failures block the push unless
    general.allow_push_on_error is set.
    """
    root = find_git_root()

    try:
        config = load_config(root)
    except ConfigNotFoundError:
        logger.debug("No configuration, allowing push")
        return 0

    if not config.is_enabled():
        return 0

    try:
        diff = get_diff(None, root)
        if not diff.strip():
            return 0
        issues = asyncio.run(run_analysis(config, diff, root))
    except NoUpstreamError:
        logger.debug("No upstream branch, allowing push")
        return 0
    except DriftcheckError as e:
        if config.general.allow_push_on_error:
            print(f"driftcheck warning: {e}", file=sys.stderr)
            return 0
        raise

    if not issues:
        return 0

    if sys.stdout.isatty():
        asyncio.run(review_issues(config, issues, root))
        return 0

    print_issues(issues)
    print(HOOK_BLOCKED_MESSAGE, file=sys.stderr)
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="driftcheck",
        description="Documentation drift detection for Git"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging (same as DRIFTCHECK_DEBUG=1)"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # init command
    init_parser = subparsers.add_parser("init", help="Initialize driftcheck in the current repository")
    init_parser.add_argument(
        "-f", "--force",
        action="store_true",
        help="Overwrite existing configuration and hook"
    )

    # check command
    check_parser = subparsers.add_parser("check", help="Check for documentation drift")
    check_parser.add_argument(
        "-r", "--range",
        type=str,
        help="Commit range to check (default: @{u}..HEAD)"
    )
    check_parser.add_argument(
        "--no-tui",
        action="store_true",
        help="Print issues instead of opening the review screen"
    )

    # config command
    config_parser = subparsers.add_parser("config", help="Show or edit configuration")
    config_parser.add_argument(
        "-e", "--edit",
        action="store_true",
        help="Open configuration in $EDITOR"
    )
    config_parser.add_argument(
        "--path",
        action="store_true",
        help="Show the path to the configuration file"
    )

    subparsers.add_parser("enable", help="Enable driftcheck")
    subparsers.add_parser("disable", help="Disable driftcheck (without uninstalling)")

    # cache command
    cache_parser = subparsers.add_parser("cache", help="Cache management")
    cache_parser.add_argument(
        "action",
        choices=["clear", "stats"],
        help="clear: remove cached queries, stats: show cache statistics"
    )

    # install-hook command
    hook_install_parser = subparsers.add_parser("install-hook", help="Install or update the pre-push hook")
    hook_install_parser.add_argument(
        "-f", "--force",
        action="store_true",
        help="Overwrite an existing pre-push hook"
    )

    # hook command (internal, no help entry)
    subparsers.add_parser("hook")

    return parser


COMMANDS = {
    "init": cmd_init,
    "check": cmd_check,
    "config": cmd_config,
    "enable": cmd_enable,
    "disable": cmd_disable,
    "cache": cmd_cache,
    "install-hook": cmd_install_hook,
    "hook": cmd_hook,
}


def main(argv=None):
    """CLI entry point."""
    load_env_files()

    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(debug=args.debug or is_debug())

    handler = COMMANDS.get(args.command)
    if handler is None:
        # No subcommand - show help
        parser.print_help()
        sys.exit(0)

    try:
        code = handler(args)
    except DriftcheckError as e:
        logger.debug(f"{args.command} failed: {e!r}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception as e:
        logger.exception(f"{args.command} failed: {e}")
        sys.exit(1)

    sys.exit(code)


if __name__ == "__main__":
    main()
