"""Configuration for driftcheck."""

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import List, Optional
import os
import tomllib

import tomli_w

from .errors import ApiKeyNotFoundError, ConfigInvalidError, ConfigNotFoundError, NotGitRepoError


CONFIG_FILENAMES = (".driftcheck.toml", "driftcheck.toml")

DEFAULT_ANALYSIS_PROMPT = """You are a strict documentation consistency reviewer. Your job is to find ONLY clear, obvious documentation errors caused by code changes.

ONLY report an issue if:
1. Documentation explicitly states something that is NOW FACTUALLY WRONG due to the code change
2. A code example in the docs would NOW FAIL or produce different results
3. A function signature, parameter, or return type documented is NOW DIFFERENT in the code

DO NOT report:
- Stylistic improvements or suggestions
- Documentation that is vague but not technically wrong
- Potential improvements or clarifications
- Anything where the docs are still technically accurate
- Issues that appear to have been ALREADY FIXED in recent commits (check the git log provided)

If a documentation file was modified in the recent commits, assume the developer has already addressed issues in that file unless the docs are STILL wrong.

Be conservative. When in doubt, think twice. False positives waste developer time.

If there are no clear issues, return an empty array: []

Output as JSON array with objects containing:
- "file": the documentation file path
- "line": approximate line number (0 if unknown)
- "description": what is FACTUALLY WRONG (be specific)
- "doc_excerpt": the exact doc text that is wrong
- "suggested_fix": minimal fix (optional)"""

DEFAULT_SEARCH_QUERIES_PROMPT = """Given this code diff, output a JSON array of search patterns to find related documentation.
Focus on: function names, class names, API endpoints, CLI flags, config keys, error messages.
Output ONLY valid JSON, no explanation. Example: ["process_data", "API endpoint", "--verbose"]"""

DEFAULT_FIX_PROMPT = """You are a documentation editor. Given an issue description and the current documentation content, output the COMPLETE fixed documentation file.

Rules:
1. Output ONLY the fixed file content, no explanations
2. Make minimal changes - only fix what's necessary
3. Preserve all formatting, whitespace, and structure
4. If the issue mentions missing documentation, add it in the appropriate place"""


@dataclass
class GeneralConfig:
    """Top-level switches."""
    enabled: bool = True
    allow_push_on_error: bool = False  # Downgrade hook failures to warnings
    recent_commits: int = 5            # Commits of git log sent as context (0 = none)


@dataclass
class DocsConfig:
    """Which documentation to search and how much of it to send."""
    paths: List[str] = field(default_factory=lambda: ["README.md", "docs/**/*.md"])
    ignore: List[str] = field(default_factory=list)
    max_context_tokens: int = 8000
    context_lines: int = 3


@dataclass
class LLMConfig:
    """Language model backend."""
    provider: str = "claude"  # claude, openai
    model: str = ""           # Empty = backend default
    base_url: str = "https://api.openai.com/v1"
    timeout: int = 30         # Seconds per request attempt
    max_retries: int = 2
    temperature: float = 0.1


@dataclass
class PromptsConfig:
    """System prompts for each model call."""
    analysis: str = DEFAULT_ANALYSIS_PROMPT
    search_queries: str = DEFAULT_SEARCH_QUERIES_PROMPT
    fix: str = DEFAULT_FIX_PROMPT


@dataclass
class TUIConfig:
    """Interactive review settings."""
    theme: str = "default"  # default, minimal, colorful
    show_suggested_fix: bool = True


@dataclass
class CacheConfig:
    """Search query cache."""
    enabled: bool = True
    dir: str = ".git/driftcheck_cache"  # Relative to the git root
    ttl: int = 3600                     # Seconds


@dataclass
class DriftcheckConfig:
    """Complete configuration, one attribute per TOML table."""
    general: GeneralConfig = field(default_factory=GeneralConfig)
    docs: DocsConfig = field(default_factory=DocsConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    prompts: PromptsConfig = field(default_factory=PromptsConfig)
    tui: TUIConfig = field(default_factory=TUIConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "DriftcheckConfig":
        """Build a config from parsed TOML; unknown keys are ignored."""
        if not isinstance(data, dict):
            raise ConfigInvalidError("top level must be a table")

        sections = {}
        for section in fields(cls):
            raw = data.get(section.name, {})
            if not isinstance(raw, dict):
                raise ConfigInvalidError(f"[{section.name}] must be a table")
            sections[section.name] = _build_section(section.default_factory, section.name, raw)
        return cls(**sections)

    @classmethod
    def load(cls, path: Path) -> "DriftcheckConfig":
        """Load configuration from a specific path."""
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except OSError as e:
            raise ConfigInvalidError(f"cannot read {path}: {e}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigInvalidError(f"{path}: {e}") from e
        return cls.from_dict(data)

    def to_toml(self) -> str:
        return tomli_w.dumps(asdict(self))

    def save(self, path: Path):
        """Write the configuration as TOML."""
        try:
            Path(path).write_text(self.to_toml(), encoding="utf-8")
        except OSError as e:
            raise ConfigInvalidError(f"cannot write {path}: {e}") from e

    def is_enabled(self) -> bool:
        """Check if driftcheck is enabled (config + env var)."""
        if os.environ.get("DRIFTCHECK_DISABLED") == "1":
            return False
        return self.general.enabled

    def cache_dir(self, git_root: Path) -> Path:
        return Path(git_root) / self.cache.dir


def _build_section(factory, name: str, raw: dict):
    """Overlay a TOML table onto a section dataclass, checking value types."""
    section = factory()
    for f in fields(section):
        if f.name not in raw:
            continue
        value = raw[f.name]
        default = getattr(section, f.name)
        if isinstance(default, bool):
            ok = isinstance(value, bool)
        elif isinstance(default, int):
            ok = isinstance(value, int) and not isinstance(value, bool)
        elif isinstance(default, float):
            ok = isinstance(value, (int, float)) and not isinstance(value, bool)
            value = float(value) if ok else value
        elif isinstance(default, list):
            ok = isinstance(value, list) and all(isinstance(v, str) for v in value)
        else:
            ok = isinstance(value, str)
        if not ok:
            raise ConfigInvalidError(
                f"{name}.{f.name} should be {type(default).__name__}, got {type(value).__name__}"
            )
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value < 0:
            raise ConfigInvalidError(f"{name}.{f.name} must not be negative")
        setattr(section, f.name, value)
    return section


def find_git_root(start: Optional[Path] = None) -> Path:
    """Walk up from start (default: cwd) to the directory containing .git."""
    path = Path(start or Path.cwd()).resolve()
    for candidate in (path, *path.parents):
        if (candidate / ".git").exists():
            return candidate
    raise NotGitRepoError()


def find_config_path(git_root: Optional[Path] = None) -> Path:
    """
    Find the configuration file.

    Searches in order: DRIFTCHECK_CONFIG env var, .driftcheck.toml,
    driftcheck.toml (both at the git root).
    """
    env_path = os.environ.get("DRIFTCHECK_CONFIG")
    if env_path and Path(env_path).exists():
        return Path(env_path)

    root = git_root or find_git_root()
    for name in CONFIG_FILENAMES:
        candidate = root / name
        if candidate.exists():
            return candidate

    raise ConfigNotFoundError()


def load_config(git_root: Optional[Path] = None) -> DriftcheckConfig:
    """Find and load the configuration file."""
    return DriftcheckConfig.load(find_config_path(git_root))


def get_api_key() -> str:
    """
    Get the API key for HTTP backends.

    Checks DRIFTCHECK_API_KEY, then the file named by DRIFTCHECK_API_KEY_FILE.
    """
    key = os.environ.get("DRIFTCHECK_API_KEY")
    if key:
        return key

    key_file = os.environ.get("DRIFTCHECK_API_KEY_FILE")
    if key_file:
        try:
            key = Path(key_file).read_text(encoding="utf-8").strip()
        except OSError as e:
            raise ApiKeyNotFoundError() from e
        if key:
            return key

    raise ApiKeyNotFoundError()


def is_debug() -> bool:
    """Check if debug mode is enabled."""
    return os.environ.get("DRIFTCHECK_DEBUG") == "1"


# Default configurations
DEFAULT_CONFIG = DriftcheckConfig()
