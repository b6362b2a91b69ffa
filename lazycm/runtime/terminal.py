"""Terminal control helpers for the TUI session.

Owns the raw-mode lifecycle, alternate-screen switching and cursor
visibility. Ctrl-C keeps generating SIGINT in raw mode so the loop can
forward it to the running child.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import termios
import tty

_DISABLED_CHAR = b"\x00"


class TerminalController:
    """Manage terminal mode transitions for one stdin/stdout pair."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        """Capture tty state; raises ``termios.error`` when stdin is not a terminal."""
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)
        self._active = False

    def enable_tui_mode(self) -> None:
        """Enter raw alternate-screen mode with the cursor hidden."""
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        mode = termios.tcgetattr(self.stdin_fd)
        mode[tty.LFLAG] |= termios.ISIG
        # Only Ctrl-C may signal; quit and suspend would leave the terminal raw.
        mode[tty.CC][termios.VQUIT] = _DISABLED_CHAR
        mode[tty.CC][termios.VSUSP] = _DISABLED_CHAR
        termios.tcsetattr(self.stdin_fd, termios.TCSANOW, mode)
        os.write(self.stdout_fd, b"\x1b[?1049h\x1b[?25l")
        self._active = True

    def disable_tui_mode(self) -> None:
        """Show the cursor, leave the alternate screen and restore the saved tty state."""
        os.write(self.stdout_fd, b"\x1b[0m\x1b[?25h\x1b[?1049l")
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def size(self) -> tuple[int, int]:
        """Return ``(columns, lines)`` of the terminal."""
        term = shutil.get_terminal_size((80, 24))
        return term.columns, term.lines

    def write(self, payload: str) -> None:
        os.write(self.stdout_fd, payload.encode("utf-8", errors="replace"))

    @contextlib.contextmanager
    def raw_mode(self):
        """Context manager that brackets code with TUI enter/exit calls."""
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()
