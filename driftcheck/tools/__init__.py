"""Tools for documentation drift detection."""

from .diff_parser import Hunk, ParsedDiff, parse_diff, is_docs_only_diff
from .query_cache import QueryCache, CacheStats, cache_key
from .search import find_relevant_docs, find_relevant_docs_sync, check_ripgrep
from .llm_client import LLMClient
from . import git_tool

__all__ = [
    "Hunk",
    "ParsedDiff",
    "parse_diff",
    "is_docs_only_diff",
    "QueryCache",
    "CacheStats",
    "cache_key",
    "find_relevant_docs",
    "find_relevant_docs_sync",
    "check_ripgrep",
    "LLMClient",
    "git_tool",
]
