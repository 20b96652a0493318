"""Review session state machine.

The app owns the per-issue actions and at most one in-flight fix task.
It never blocks: `poll_task` looks at the task without awaiting it, so the
screen keeps redrawing and keys keep being handled while a fix is generated.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple, Union

from ..models import Issue, IssueAction
from ..pipeline.fix import resolve_issue_path
from ..utils.logging import get_logger

logger = get_logger(__name__)

SPINNER_FRAMES = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]

Fixer = Callable[[Issue], Awaitable[str]]


class SessionOutcome(Enum):
    RUNNING = "running"
    QUIT = "quit"
    ABORTED = "aborted"


@dataclass
class ActiveTask:
    """The fix currently being generated."""
    issue_idx: int
    task: "asyncio.Task[str]"


@dataclass(frozen=True)
class ReviewState:
    """Read-only snapshot of the session, handed to the renderer."""
    issues: Tuple[Issue, ...]
    actions: Tuple[IssueAction, ...]
    selected: int
    show_help: bool
    status_message: Optional[str]
    spinner_frame: int
    task_running: bool

    @property
    def spinner(self) -> str:
        return SPINNER_FRAMES[self.spinner_frame % len(SPINNER_FRAMES)]

    def count(self, action: IssueAction) -> int:
        return sum(1 for a in self.actions if a is action)


@dataclass
class ReviewResult:
    """How the session ended, plus a fix still running after an abort."""
    outcome: SessionOutcome
    actions: List[IssueAction]
    pending_fix: Optional["asyncio.Task[str]"] = None

    @property
    def aborted(self) -> bool:
        return self.outcome is SessionOutcome.ABORTED


class ReviewApp:
    """Interactive review of detected issues."""

    def __init__(
        self,
        issues: Sequence[Issue],
        fixer: Fixer,
        root: Union[str, Path] = ".",
    ):
        self.issues = list(issues)
        self.fixer = fixer
        self.root = Path(root)
        self.actions = [IssueAction.PENDING] * len(self.issues)
        self.selected = 0
        self.show_help = False
        self.status_message: Optional[str] = None
        self.spinner_frame = 0
        self.active_task: Optional[ActiveTask] = None
        self.outcome = SessionOutcome.RUNNING

    @property
    def finished(self) -> bool:
        return self.outcome is not SessionOutcome.RUNNING

    @property
    def current_issue(self) -> Optional[Issue]:
        if not self.issues:
            return None
        return self.issues[self.selected]

    def snapshot(self) -> ReviewState:
        return ReviewState(
            issues=tuple(self.issues),
            actions=tuple(self.actions),
            selected=self.selected,
            show_help=self.show_help,
            status_message=self.status_message,
            spinner_frame=self.spinner_frame,
            task_running=self.active_task is not None,
        )

    # Navigation

    def next_issue(self) -> None:
        if self.issues:
            self.selected = (self.selected + 1) % len(self.issues)

    def prev_issue(self) -> None:
        if self.issues:
            self.selected = (self.selected - 1) % len(self.issues)

    def toggle_help(self) -> None:
        self.show_help = not self.show_help

    def _next_pending_from(self, start: int) -> Optional[int]:
        n = len(self.issues)
        for offset in range(1, n + 1):
            idx = (start + offset) % n
            if self.actions[idx] is IssueAction.PENDING:
                return idx
        return None

    def _first_pending(self) -> Optional[int]:
        for idx, action in enumerate(self.actions):
            if action is IssueAction.PENDING:
                return idx
        return None

    # Actions

    def apply(self) -> None:
        """Start generating a fix for the selected issue."""
        issue = self.current_issue
        if issue is None:
            return

        if self.active_task is not None:
            self.status_message = "A fix is already being applied, please wait"
            return

        action = self.actions[self.selected]
        if action not in (IssueAction.PENDING, IssueAction.ERROR):
            self.status_message = f"Issue already marked as {action.value}"
            return

        if not resolve_issue_path(issue, self.root).exists():
            self.status_message = f"File not found: {issue.file}"
            return

        idx = self.selected
        self.actions[idx] = IssueAction.APPLYING
        task = asyncio.get_running_loop().create_task(self.fixer(issue))
        self.active_task = ActiveTask(issue_idx=idx, task=task)
        self.status_message = f"Generating fix for {issue.file}..."
        logger.debug(f"Started fix task for issue {idx + 1}")

    def skip(self) -> None:
        """Mark the selected issue as skipped and move on."""
        if not self.issues:
            return
        if self.active_task is not None:
            self.status_message = "Wait for the current fix to finish"
            return
        if self.actions[self.selected] in (IssueAction.PENDING, IssueAction.ERROR):
            self.actions[self.selected] = IssueAction.SKIP
        self.next_issue()

    def confirm(self) -> None:
        """Finish the session, or jump to the first issue still pending."""
        if self.active_task is not None:
            self.status_message = "Wait for the current fix to finish"
            return
        pending = self._first_pending()
        if pending is None:
            self.outcome = SessionOutcome.QUIT
            return
        self.selected = pending
        self.status_message = "Some issues are still pending"

    def abort(self) -> None:
        """End the session and block the push. A running fix is left to finish."""
        self.outcome = SessionOutcome.ABORTED

    def poll_task(self) -> bool:
        """
        Consume the active task if it has finished.

        Returns:
            True if a transition was applied
        """
        active = self.active_task
        if active is None or not active.task.done():
            return False

        self.active_task = None
        idx = active.issue_idx
        task = active.task

        if task.cancelled():
            self.actions[idx] = IssueAction.ERROR
            self.status_message = "Fix was cancelled"
            return True

        error = task.exception()
        if error is not None:
            logger.debug(f"Fix for issue {idx + 1} failed: {error}")
            self.actions[idx] = IssueAction.ERROR
            self.status_message = f"Error: {error}"
            return True

        self.actions[idx] = IssueAction.APPLIED
        self.status_message = task.result()
        next_idx = self._next_pending_from(self.selected)
        if next_idx is not None:
            self.selected = next_idx
        return True

    def tick(self) -> None:
        self.spinner_frame = (self.spinner_frame + 1) % len(SPINNER_FRAMES)

    def handle_key(self, key: str) -> None:
        """Dispatch one decoded key (see Terminal.read_keys)."""
        if self.active_task is None:
            self.status_message = None

        if self.show_help:
            self.show_help = False
            return

        if key in ("q", "esc"):
            self.abort()
        elif key in ("j", "down"):
            self.next_issue()
        elif key in ("k", "up"):
            self.prev_issue()
        elif key == "a":
            self.apply()
        elif key == "s":
            self.skip()
        elif key == "enter":
            self.confirm()
        elif key == "?":
            self.toggle_help()
