"""Raw terminal handling for the review screen.

Keys are read from the controlling terminal rather than stdin, since git
feeds the pre-push hook its ref list on stdin.
"""

import os
import select
import shutil
import sys
import termios
import tty
from typing import List, Optional, Sequence, TextIO, Tuple

from ..errors import TUIError
from ..utils.logging import get_logger

logger = get_logger(__name__)

ENTER_ALT_SCREEN = "\x1b[?1049h"
LEAVE_ALT_SCREEN = "\x1b[?1049l"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
CLEAR_TO_EOL = "\x1b[K"

ESCAPE_SEQUENCES = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
}


def decode_keys(data: str) -> List[str]:
    """
    Split raw terminal input into key names.

    Arrow sequences become "up"/"down"/"left"/"right", a lone ESC becomes
    "esc", CR/LF become "enter" and Ctrl-C is treated as "esc". Unknown
    escape sequences are dropped.
    """
    keys: List[str] = []
    i = 0
    while i < len(data):
        ch = data[i]
        if ch == "\x1b":
            seq = data[i:i + 3]
            if seq in ESCAPE_SEQUENCES:
                keys.append(ESCAPE_SEQUENCES[seq])
                i += 3
                continue
            if seq[1:2] in ("[", "O"):
                # Unknown sequence: skip to its final byte
                j = i + 2
                while j < len(data) and not data[j].isalpha() and data[j] != "~":
                    j += 1
                i = j + 1
                continue
            keys.append("esc")
        elif ch in ("\r", "\n"):
            keys.append("enter")
        elif ch == "\x03":
            keys.append("esc")
        elif ch.isprintable():
            keys.append(ch)
        i += 1
    return keys


class Terminal:
    """Alternate-screen, no-echo terminal session, used as a context manager."""

    def __init__(self, output: Optional[TextIO] = None):
        self.output = output or sys.stdout
        self._fd: Optional[int] = None
        self._owns_fd = False
        self._saved_attrs = None

    def __enter__(self) -> "Terminal":
        try:
            if sys.stdin.isatty():
                self._fd = sys.stdin.fileno()
            else:
                self._fd = os.open("/dev/tty", os.O_RDONLY)
                self._owns_fd = True
            self._saved_attrs = termios.tcgetattr(self._fd)
            tty.setcbreak(self._fd)
        except (OSError, termios.error) as e:
            self._close_fd()
            raise TUIError(f"Failed to set up terminal: {e}") from e

        self.output.write(ENTER_ALT_SCREEN + HIDE_CURSOR)
        self.output.flush()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.output.write(SHOW_CURSOR + LEAVE_ALT_SCREEN)
            self.output.flush()
        finally:
            if self._fd is not None and self._saved_attrs is not None:
                try:
                    termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved_attrs)
                except termios.error as e:
                    logger.warning(f"Failed to restore terminal: {e}")
            self._close_fd()

    def _close_fd(self) -> None:
        if self._owns_fd and self._fd is not None:
            os.close(self._fd)
        self._fd = None
        self._owns_fd = False

    def size(self) -> Tuple[int, int]:
        columns, lines = shutil.get_terminal_size((80, 24))
        return columns, lines

    def draw(self, lines: Sequence[str]) -> None:
        """Redraw the whole screen, one absolute-positioned line per row."""
        out = [f"\x1b[{row + 1};1H{line}{CLEAR_TO_EOL}" for row, line in enumerate(lines)]
        self.output.write("".join(out))
        self.output.flush()

    def read_keys(self) -> List[str]:
        """Return whatever keys are waiting, without blocking."""
        if self._fd is None:
            raise TUIError("Terminal is not active")
        try:
            ready, _, _ = select.select([self._fd], [], [], 0)
            if not ready:
                return []
            data = os.read(self._fd, 1024)
        except OSError as e:
            raise TUIError(f"Failed to read input: {e}") from e
        return decode_keys(data.decode("utf-8", errors="ignore"))
