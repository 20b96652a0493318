"""Plain-text issue output for non-interactive runs."""

import sys
from typing import Sequence, TextIO

from ..models import Issue

SEPARATOR = "━" * 72
EXCERPT_LINES = 5


def print_issues(issues: Sequence[Issue], stream: TextIO = None):
    """Print all issues between separator banners (to stderr by default)."""
    stream = stream or sys.stderr

    def emit(text: str = ""):
        print(text, file=stream)

    emit()
    emit("driftcheck: Documentation drift detected!")
    emit()
    emit(SEPARATOR)
    emit()

    for i, issue in enumerate(issues, 1):
        emit(f"Issue {i}: {issue.location}")
        emit(f"  {issue.description}")

        if issue.doc_excerpt:
            emit()
            emit("  Documentation says:")
            for line in issue.doc_excerpt.splitlines()[:EXCERPT_LINES]:
                emit(f"    {line}")

        if issue.suggested_fix:
            emit()
            emit(f"  Suggested fix: {issue.suggested_fix}")

        emit()

    emit(SEPARATOR)


def format_issue(issue: Issue) -> str:
    """Format a single issue as a block of text."""
    parts = [
        f"{issue.location}\n",
        f"{'─' * 60}\n",
        f"{issue.description}\n",
    ]

    if issue.doc_excerpt:
        parts.append("\nDoc excerpt:\n")
        for line in issue.doc_excerpt.splitlines():
            parts.append(f"  {line}\n")

    if issue.suggested_fix:
        parts.append(f"\nSuggested fix: {issue.suggested_fix}\n")

    return ''.join(parts)
