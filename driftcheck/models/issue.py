"""Data models for documentation issues."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class IssueAction(Enum):
    """Review state of a single issue."""
    PENDING = "pending"     # Not yet decided
    APPLYING = "applying"   # Fix is being generated and written
    SKIP = "skip"           # User chose to leave the docs as they are
    APPLIED = "applied"     # Fix written to disk
    ERROR = "error"         # Fix generation or write failed


@dataclass(frozen=True)
class Issue:
    """A documentation passage the model believes is wrong after a code change."""
    file: str
    line: int
    description: str
    doc_excerpt: str = ""
    suggested_fix: Optional[str] = None

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line}"
