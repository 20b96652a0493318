"""Initialize driftcheck in a repository."""

from pathlib import Path
from typing import Optional

from ..config import CONFIG_FILENAMES, DriftcheckConfig
from ..errors import NotGitRepoError
from ..tools.git_tool import install_hook


def init_repository(target_dir: Optional[Path] = None, force: bool = False) -> bool:
    """
    Initialize driftcheck in a repository.

    Creates:
      - .driftcheck.toml (default configuration)
      - .git/hooks/pre-push

    Returns:
        False if the configuration already exists and force is not set

    Raises:
        NotGitRepoError: If target is not a git repository root
        HookInstallError: If a foreign pre-push hook is in the way
    """
    target = target_dir or Path.cwd()

    # Check if git repo
    if not (target / ".git").exists():
        raise NotGitRepoError()

    config_path = target / CONFIG_FILENAMES[0]
    if config_path.exists() and not force:
        print(f"Configuration file already exists at {config_path}")
        print("Use --force to overwrite.")
        return False

    DriftcheckConfig().save(config_path)
    print(f"Created configuration file: {config_path}")

    install_hook(target, force=force)
    print("Installed pre-push hook")

    print("\ndriftcheck initialized successfully!")
    print("\nNext steps:")
    print("  1. Pick a backend in [llm] (claude, or openai with DRIFTCHECK_API_KEY set)")
    print(f"  2. Edit {CONFIG_FILENAMES[0]} to customize paths and settings")
    print("  3. Make some changes and push to test!")

    return True
