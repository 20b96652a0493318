"""Tests for review screen rendering, themes and key decoding."""

import pytest

from driftcheck.models import Issue, IssueAction
from driftcheck.tui.app import SPINNER_FRAMES, ReviewState
from driftcheck.tui.render import fit, render
from driftcheck.tui.terminal import decode_keys
from driftcheck.tui.theme import DEFAULT_THEME, RESET, THEMES, Theme


PLAIN = Theme(
    name="plain",
    normal="",
    title="",
    highlight="",
    warning="",
    success="",
    muted="",
    border="",
    selected="",
)

ISSUES = (
    Issue(
        file="docs/api.md",
        line=12,
        description="process_data now takes a strict flag",
        doc_excerpt="\n".join(f"excerpt line {i}" for i in range(1, 8)),
        suggested_fix="Document the strict flag",
    ),
    Issue(file="README.md", line=3, description="install command changed"),
)


def make_state(**overrides):
    values = dict(
        issues=ISSUES,
        actions=(IssueAction.PENDING, IssueAction.PENDING),
        selected=0,
        show_help=False,
        status_message=None,
        spinner_frame=0,
        task_running=False,
    )
    values.update(overrides)
    return ReviewState(**values)


def screen(state, width=100, height=30, show_suggested_fix=True):
    return "\n".join(render(state, PLAIN, width, height, show_suggested_fix))


class TestRender:
    """Tests for render()."""

    def test_exact_dimensions(self):
        """Given a plain theme, every line should be exactly the terminal width."""
        lines = render(make_state(), PLAIN, 100, 30)
        assert len(lines) == 30
        assert all(len(line) == 100 for line in lines)

    def test_small_terminal_is_clamped(self):
        lines = render(make_state(), PLAIN, 10, 3)
        assert len(lines) == 10
        assert all(len(line) == 40 for line in lines)

    def test_header_counts(self):
        state = make_state(actions=(IssueAction.APPLIED, IssueAction.SKIP))
        assert "2 documentation issues (0 pending, 1 applied, 1 skipped)" in screen(state)

    def test_detail_pane(self):
        """Given the first issue selected, should show its location, description and fix."""
        # When
        text = screen(make_state())

        # Then
        assert "Issue 1/2" in text
        assert "docs/api.md:12" in text
        assert "process_data now takes a strict flag" in text
        assert "Documentation says:" in text
        assert "Document the strict flag" in text

    def test_excerpt_limited_to_five_lines(self):
        text = screen(make_state())
        assert "excerpt line 5" in text
        assert "excerpt line 6" not in text

    def test_suggested_fix_can_be_hidden(self):
        text = screen(make_state(), show_suggested_fix=False)
        assert "Suggested fix:" not in text
        assert "Document the strict flag" not in text

    def test_list_icons(self):
        state = make_state(actions=(IssueAction.APPLIED, IssueAction.ERROR))
        text = screen(state)
        assert "> ✓ api.md:12" in text
        assert "  ✗ README.md:3" in text

    def test_running_fix_shows_spinner_and_busy_footer(self):
        """Given a fix in flight, the list and status should show the spinner frame."""
        # Given
        state = make_state(
            actions=(IssueAction.APPLYING, IssueAction.PENDING),
            spinner_frame=2,
            task_running=True,
            status_message="Generating fix for docs/api.md...",
        )

        # When
        lines = render(state, PLAIN, 100, 30)

        # Then
        frame = SPINNER_FRAMES[2]
        assert lines[1].strip() == f"{frame} Generating fix for docs/api.md..."
        assert f"> {frame} api.md:12" in "\n".join(lines)
        assert "applying fix" in lines[-1]
        assert "s skip" not in lines[-1]

    def test_all_addressed_status(self):
        state = make_state(actions=(IssueAction.APPLIED, IssueAction.SKIP))
        assert "All issues addressed" in render(state, PLAIN, 100, 30)[1]

    def test_help_overlay(self):
        text = screen(make_state(show_help=True))
        assert "Abort and block the push" in text
        assert "Issue 1/2" not in text

    def test_list_scrolls_to_selection(self):
        """Given more issues than rows, the selected one should stay visible."""
        # Given
        issues = tuple(Issue(file=f"doc{i}.md", line=i, description="x") for i in range(30))
        state = make_state(
            issues=issues,
            actions=(IssueAction.PENDING,) * 30,
            selected=29,
        )

        # When
        text = screen(state, height=12)

        # Then
        assert "> ○ doc29.md:29" in text
        assert "doc0.md:0" not in text

    def test_themed_output_carries_escape_codes(self):
        lines = render(make_state(), DEFAULT_THEME, 100, 30)
        assert any(DEFAULT_THEME.title in line for line in lines)
        assert any(RESET in line for line in lines)


class TestFit:
    def test_pads(self):
        assert fit("ab", 4) == "ab  "

    def test_truncates_with_ellipsis(self):
        assert fit("abcdef", 4) == "abc…"

    def test_zero_width(self):
        assert fit("abc", 0) == ""


class TestTheme:
    def test_known_themes(self):
        assert set(THEMES) == {"default", "minimal", "colorful"}
        assert Theme.from_name("minimal").name == "minimal"

    def test_unknown_theme_falls_back_to_default(self):
        assert Theme.from_name("neon") is DEFAULT_THEME

    def test_paint(self):
        assert DEFAULT_THEME.paint("x", "success") == f"{DEFAULT_THEME.success}x{RESET}"
        assert DEFAULT_THEME.paint("x", "normal") == "x"
        assert DEFAULT_THEME.paint("", "success") == ""


class TestDecodeKeys:
    @pytest.mark.parametrize("data, keys", [
        ("a", ["a"]),
        ("jk?", ["j", "k", "?"]),
        ("\x1b[A\x1b[B", ["up", "down"]),
        ("\x1bOA", ["up"]),
        ("\x1b", ["esc"]),
        ("\r", ["enter"]),
        ("\n", ["enter"]),
        ("\x03", ["esc"]),
        ("\x1b[3~s", ["s"]),
    ])
    def test_decode(self, data, keys):
        assert decode_keys(data) == keys
