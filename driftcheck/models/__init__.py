"""Data models for documentation drift review."""

from .issue import Issue, IssueAction
from .docs import DocChunk

__all__ = [
    "Issue",
    "IssueAction",
    "DocChunk",
]
