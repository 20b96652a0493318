"""Exception types raised across driftcheck."""

from pathlib import Path
from typing import Union


class DriftcheckError(Exception):
    """Base class for all driftcheck errors."""


class ConfigNotFoundError(DriftcheckError):
    def __init__(self):
        super().__init__("Configuration file not found. Run 'driftcheck init' to create one.")


class ConfigInvalidError(DriftcheckError):
    def __init__(self, reason: str):
        super().__init__(f"Invalid configuration: {reason}")


class NotGitRepoError(DriftcheckError):
    def __init__(self):
        super().__init__("Not a git repository (or any parent up to mount point)")


class GitError(DriftcheckError):
    def __init__(self, reason: str):
        super().__init__(f"Git command failed: {reason}")


class NoUpstreamError(DriftcheckError):
    def __init__(self):
        super().__init__("No upstream branch configured. Run 'git push -u origin <branch>' first.")


class RipgrepNotFoundError(DriftcheckError):
    def __init__(self):
        super().__init__(
            "ripgrep (rg) not found. Please install it: "
            "https://github.com/BurntSushi/ripgrep#installation"
        )


class SearchError(DriftcheckError):
    def __init__(self, reason: str):
        super().__init__(f"Search failed: {reason}")


class LLMError(DriftcheckError):
    def __init__(self, reason: str):
        super().__init__(f"LLM API error: {reason}")


class LLMTimeoutError(LLMError):
    def __init__(self, seconds: float):
        self.seconds = seconds
        DriftcheckError.__init__(self, f"LLM request timed out after {seconds:g} seconds")


class ApiKeyNotFoundError(DriftcheckError):
    def __init__(self):
        super().__init__(
            "API key not found. Set DRIFTCHECK_API_KEY or DRIFTCHECK_API_KEY_FILE."
        )


class LLMResponseParseError(DriftcheckError):
    def __init__(self, reason: str):
        super().__init__(f"Failed to parse LLM response: {reason}")


class CacheError(DriftcheckError):
    def __init__(self, reason: str):
        super().__init__(f"Cache error: {reason}")


class HookInstallError(DriftcheckError):
    def __init__(self, reason: str):
        super().__init__(f"Hook installation failed: {reason}")


class FixApplicationError(DriftcheckError):
    def __init__(self, path: Union[str, Path], reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to apply fix to {path}: {reason}")


class TUIError(DriftcheckError):
    def __init__(self, reason: str):
        super().__init__(f"TUI error: {reason}")


class DisabledError(DriftcheckError):
    def __init__(self):
        super().__init__("driftcheck is disabled. Run 'driftcheck enable' to re-enable.")
