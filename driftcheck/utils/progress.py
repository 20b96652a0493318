"""Step progress shown while the analysis runs."""

import sys
from typing import Optional, Sequence, TextIO


class MultiProgress:
    """
    Multi-step progress line, e.g. "[2/3] Searching documentation - 4 queries".

    Only draws when the stream is a TTY (or enabled explicitly), so hook
    output captured by git stays clean.
    """

    def __init__(
        self,
        steps: Sequence[str],
        stream: Optional[TextIO] = None,
        enabled: Optional[bool] = None,
    ):
        self.steps = list(steps)
        self.current = 0
        self.stream = stream or sys.stderr
        if enabled is None:
            enabled = hasattr(self.stream, "isatty") and self.stream.isatty()
        self.enabled = enabled
        self._width = 0

    def _draw(self, message: str):
        if not self.enabled:
            return
        padding = " " * max(self._width - len(message), 0)
        self.stream.write(f"\r{message}{padding}")
        self.stream.flush()
        self._width = len(message)

    def next_step(self):
        """Start the next step."""
        if self.current < len(self.steps):
            step = self.steps[self.current]
            self.current += 1
            self._draw(f"[{self.current}/{len(self.steps)}] {step}")

    def update(self, detail: str):
        """Add detail to the current step."""
        if 0 < self.current <= len(self.steps):
            step = self.steps[self.current - 1]
            self._draw(f"[{self.current}/{len(self.steps)}] {step} - {detail}")

    def finish(self):
        """Clear the progress line."""
        if self.enabled and self._width:
            self.stream.write("\r" + " " * self._width + "\r")
            self.stream.flush()
        self._width = 0
