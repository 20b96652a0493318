"""Tests for plain-text issue output and the progress line."""

import io

from driftcheck.models import Issue
from driftcheck.utils.output import SEPARATOR, format_issue, print_issues
from driftcheck.utils.progress import MultiProgress


ISSUE = Issue(
    file="README.md",
    line=42,
    description="Timeout changed from 30s to 60s",
    doc_excerpt="\n".join(f"line {i}" for i in range(1, 9)),
    suggested_fix="Update to 60 seconds",
)


class TestPrintIssues:
    """Tests for print_issues."""

    def test_banner_and_issue_block(self):
        """Given one issue, should print it between separators."""
        # Given
        out = io.StringIO()

        # When
        print_issues([ISSUE], out)

        # Then
        text = out.getvalue()
        assert "driftcheck: Documentation drift detected!" in text
        assert text.count(SEPARATOR) == 2
        assert "Issue 1: README.md:42" in text
        assert "  Timeout changed from 30s to 60s" in text
        assert "  Documentation says:" in text
        assert "  Suggested fix: Update to 60 seconds" in text

    def test_excerpt_capped_at_five_lines(self):
        out = io.StringIO()
        print_issues([ISSUE], out)
        assert "line 5" in out.getvalue()
        assert "line 6" not in out.getvalue()

    def test_numbering_and_optional_sections(self):
        out = io.StringIO()
        bare = Issue(file="docs/a.md", line=1, description="bare")

        print_issues([ISSUE, bare], out)

        text = out.getvalue()
        assert "Issue 2: docs/a.md:1" in text
        assert text.count("Documentation says:") == 1
        assert text.count("Suggested fix:") == 1

    def test_separator_width(self):
        assert SEPARATOR == "━" * 72


class TestFormatIssue:
    def test_format(self):
        text = format_issue(ISSUE)
        assert text.startswith("README.md:42\n")
        assert "Timeout changed from 30s to 60s" in text
        assert "  line 8" in text
        assert "Suggested fix: Update to 60 seconds" in text


class TestMultiProgress:
    """Tests for the step progress line."""

    def test_steps_and_detail(self):
        """Given an enabled progress line, should draw step counters and detail."""
        # Given
        out = io.StringIO()
        progress = MultiProgress(["Generating", "Searching"], out, enabled=True)

        # When
        progress.next_step()
        progress.next_step()
        progress.update("4 queries")
        progress.finish()

        # Then
        text = out.getvalue()
        assert "[1/2] Generating" in text
        assert "[2/2] Searching - 4 queries" in text
        assert text.endswith("\r")

    def test_disabled_for_non_tty(self):
        out = io.StringIO()
        progress = MultiProgress(["Generating"], out)

        progress.next_step()
        progress.finish()

        assert out.getvalue() == ""

    def test_extra_steps_ignored(self):
        out = io.StringIO()
        progress = MultiProgress(["Only"], out, enabled=True)
        progress.next_step()
        progress.next_step()
        assert "[2/1]" not in out.getvalue()
