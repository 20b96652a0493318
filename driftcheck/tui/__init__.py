"""Interactive review of detected documentation issues."""

import asyncio
from pathlib import Path
from typing import Optional, Sequence, Union

from ..config import DriftcheckConfig
from ..models import Issue
from ..pipeline.fix import apply_fix
from ..tools.llm_client import LLMClient
from ..utils.logging import get_logger
from .app import (
    SPINNER_FRAMES,
    ActiveTask,
    ReviewApp,
    ReviewResult,
    ReviewState,
    SessionOutcome,
)
from .render import render
from .terminal import Terminal, decode_keys
from .theme import THEMES, Theme

logger = get_logger(__name__)

ACTIVE_TICK = 0.08
IDLE_TICK = 0.1

__all__ = [
    "SPINNER_FRAMES",
    "ActiveTask",
    "ReviewApp",
    "ReviewResult",
    "ReviewState",
    "SessionOutcome",
    "render",
    "Terminal",
    "decode_keys",
    "THEMES",
    "Theme",
    "run_review",
]


async def run_review(
    config: DriftcheckConfig,
    issues: Sequence[Issue],
    root: Union[str, Path] = ".",
    terminal: Optional[Terminal] = None,
    client: Optional[LLMClient] = None,
) -> ReviewResult:
    """
    Run the review screen until the user finishes or aborts.

    The loop polls the in-flight fix, advances the spinner, redraws and
    handles pending keys, then sleeps briefly. Nothing in it blocks, so
    the fix task makes progress between frames.

    Args:
        config: Loaded configuration (theme, fix prompt, model settings)
        issues: Issues to review
        root: Repository root that issue paths are relative to
        terminal: Terminal to draw on (default: the controlling terminal)
        client: Model client for fixes (default: built from config.llm)

    Returns:
        ReviewResult; after an abort, `pending_fix` holds a fix that was
        still running so the caller can wait for it
    """
    theme = Theme.from_name(config.tui.theme)
    client = client or LLMClient(config.llm)

    async def fixer(issue: Issue) -> str:
        return await apply_fix(config, issue, root, client)

    app = ReviewApp(issues, fixer, root)
    terminal = terminal or Terminal()

    with terminal:
        while not app.finished:
            app.poll_task()
            app.tick()

            width, height = terminal.size()
            terminal.draw(render(app.snapshot(), theme, width, height, config.tui.show_suggested_fix))

            for key in terminal.read_keys():
                app.handle_key(key)
                if app.finished:
                    break

            if not app.finished:
                await asyncio.sleep(ACTIVE_TICK if app.active_task else IDLE_TICK)

    pending_fix = app.active_task.task if app.active_task else None
    logger.debug(f"Review finished: {app.outcome.value}")
    return ReviewResult(outcome=app.outcome, actions=list(app.actions), pending_fix=pending_fix)
