"""Draw the review screen as a list of terminal lines.

Rendering is a pure function of a ReviewState: it takes no input and
touches no terminal, so it can be tested by comparing strings.
"""

import textwrap
from pathlib import Path
from typing import List, Tuple

from ..models import IssueAction
from .app import ReviewState
from .theme import Theme

MAX_EXCERPT_LINES = 5
MIN_WIDTH = 40
MIN_HEIGHT = 10

ACTION_ICONS = {
    IssueAction.PENDING: "○",
    IssueAction.SKIP: "⊘",
    IssueAction.APPLIED: "✓",
    IssueAction.ERROR: "✗",
}

ACTION_ROLES = {
    IssueAction.PENDING: "normal",
    IssueAction.APPLYING: "warning",
    IssueAction.SKIP: "muted",
    IssueAction.APPLIED: "success",
    IssueAction.ERROR: "warning",
}

FOOTER_KEYS = "a apply  s skip  j/k move  Enter done  q abort  ? help"
FOOTER_KEYS_BUSY = "j/k move  q abort  ? help  (applying fix...)"

HELP_LINES = [
    "Keys",
    "",
    "  a          Apply the suggested fix to the documentation file",
    "  s          Skip this issue",
    "  j / Down   Next issue",
    "  k / Up     Previous issue",
    "  Enter      Finish review (jumps to pending issues first)",
    "  q / Esc    Abort and block the push",
    "  ?          Toggle this help",
    "",
    "Press any key to close",
]

# (text, role)
Cell = Tuple[str, str]


def fit(text: str, width: int) -> str:
    """Truncate or pad plain text to exactly `width` columns."""
    if width <= 0:
        return ""
    if len(text) > width:
        if width == 1:
            return text[:1]
        return text[:width - 1] + "…"
    return text.ljust(width)


def _cell(theme: Theme, cell: Cell, width: int) -> str:
    text, role = cell
    return theme.paint(fit(text, width), role)


def _header(state: ReviewState) -> str:
    total = len(state.issues)
    noun = "issue" if total == 1 else "issues"
    return (
        f" driftcheck - {total} documentation {noun}"
        f" ({state.count(IssueAction.PENDING)} pending,"
        f" {state.count(IssueAction.APPLIED)} applied,"
        f" {state.count(IssueAction.SKIP)} skipped)"
    )


def _status(state: ReviewState) -> Cell:
    if state.task_running:
        message = state.status_message or "Applying fix..."
        return f" {state.spinner} {message}", "warning"
    if state.status_message:
        return f" {state.status_message}", "highlight"
    if state.count(IssueAction.PENDING) == 0:
        return " All issues addressed. Press Enter to continue.", "success"
    return " Review each issue, then press Enter.", "muted"


def _list_cells(state: ReviewState, rows: int) -> List[Cell]:
    offset = max(0, state.selected - rows + 1)
    cells: List[Cell] = []
    for idx in range(offset, min(len(state.issues), offset + rows)):
        issue = state.issues[idx]
        action = state.actions[idx]
        icon = state.spinner if action is IssueAction.APPLYING else ACTION_ICONS[action]
        marker = ">" if idx == state.selected else " "
        text = f"{marker} {icon} {Path(issue.file).name}:{issue.line}"
        role = "selected" if idx == state.selected else ACTION_ROLES[action]
        cells.append((text, role))
    return cells


def _wrapped(text: str, width: int, role: str, indent: str = "") -> List[Cell]:
    lines = textwrap.wrap(
        text, width=max(width, 1), initial_indent=indent, subsequent_indent=indent
    ) or [indent]
    return [(line, role) for line in lines]


def _detail_cells(state: ReviewState, width: int, show_suggested_fix: bool) -> List[Cell]:
    if not state.issues:
        return [("No issues.", "muted")]

    idx = state.selected
    issue = state.issues[idx]
    action = state.actions[idx]

    title = f"Issue {idx + 1}/{len(state.issues)}"
    if action is IssueAction.APPLYING:
        title += f"  {state.spinner} generating fix"
    elif action is not IssueAction.PENDING:
        title += f"  [{action.value}]"

    cells: List[Cell] = [(title, "title"), (issue.location, "highlight"), ("", "normal")]
    cells.extend(_wrapped(issue.description, width, "normal"))

    if issue.doc_excerpt.strip():
        cells.append(("", "normal"))
        cells.append(("Documentation says:", "muted"))
        for line in issue.doc_excerpt.splitlines()[:MAX_EXCERPT_LINES]:
            cells.append((f"  {line}", "normal"))

    if show_suggested_fix:
        cells.append(("", "normal"))
        cells.append(("Suggested fix:", "muted"))
        if issue.suggested_fix:
            cells.extend(_wrapped(issue.suggested_fix, width, "success", indent="  "))
        else:
            cells.append(("  No fix suggested", "muted"))

    return cells


def _help_cells(rows: int) -> List[Cell]:
    top = max(0, (rows - len(HELP_LINES)) // 2)
    cells: List[Cell] = [("", "normal")] * top
    for i, line in enumerate(HELP_LINES):
        cells.append((f"    {line}", "title" if i == 0 else "normal"))
    return cells


def render(
    state: ReviewState,
    theme: Theme,
    width: int,
    height: int,
    show_suggested_fix: bool = True,
) -> List[str]:
    """
    Lay out the review screen.

    Args:
        state: Session snapshot
        theme: Colours to use
        width: Terminal columns
        height: Terminal rows
        show_suggested_fix: Whether the detail pane includes the fix text

    Returns:
        Exactly `height` lines, each `width` visible columns wide
    """
    width = max(width, MIN_WIDTH)
    height = max(height, MIN_HEIGHT)

    lines = [
        _cell(theme, (_header(state), "title"), width),
        _cell(theme, _status(state), width),
        theme.paint("─" * width, "border"),
    ]

    body_rows = height - 5
    if state.show_help:
        help_cells = _help_cells(body_rows)
        for row in range(body_rows):
            cell = help_cells[row] if row < len(help_cells) else ("", "normal")
            lines.append(_cell(theme, cell, width))
    else:
        left_width = max(20, width * 3 // 10)
        right_width = width - left_width - 3
        left = _list_cells(state, body_rows)
        right = _detail_cells(state, right_width, show_suggested_fix)
        divider = theme.paint(" │ ", "border")
        for row in range(body_rows):
            left_cell = left[row] if row < len(left) else ("", "normal")
            right_cell = right[row] if row < len(right) else ("", "normal")
            lines.append(
                _cell(theme, left_cell, left_width)
                + divider
                + _cell(theme, right_cell, right_width)
            )

    footer = FOOTER_KEYS_BUSY if state.task_running else FOOTER_KEYS
    lines.append(theme.paint("─" * width, "border"))
    lines.append(_cell(theme, (f" {footer}", "muted"), width))
    return lines
