"""Terminal control helpers for the TUI session.

Owns raw-mode lifecycle, alternate-screen switching and mouse toggles, and
lends the terminal to interactive ``jj`` subprocesses.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import termios
import tty

ENTER_TUI_SEQUENCE = b"\x1b[?1049h\x1b[?25l\x1b[?1000h\x1b[?1002h\x1b[?1006h"
EXIT_TUI_SEQUENCE = b"\x1b[?1000l\x1b[?1002l\x1b[?1006l\x1b[?25h\x1b[?1049l"


class TerminalController:
    """Manage terminal mode transitions for one interactive session."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        """Capture tty state and bind stdin/stdout file descriptors."""
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)
        self._tui_active = False

    def enable_tui_mode(self) -> None:
        """Enter raw alternate-screen mode with mouse reporting enabled."""
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        os.write(self.stdout_fd, ENTER_TUI_SEQUENCE)
        self._tui_active = True

    def disable_tui_mode(self) -> None:
        """Restore normal terminal state and disable TUI mouse mode."""
        os.write(self.stdout_fd, EXIT_TUI_SEQUENCE)
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)
        self._tui_active = False

    @property
    def tui_active(self) -> bool:
        return self._tui_active

    def size(self) -> tuple[int, int]:
        """Return ``(columns, rows)`` with a conventional fallback."""
        term = shutil.get_terminal_size((80, 24))
        return max(1, term.columns), max(1, term.lines)

    @contextlib.contextmanager
    def raw_mode(self):
        """Context manager that brackets code with TUI enter/exit calls."""
        try:
            self.enable_tui_mode()
            yield self
        finally:
            self.disable_tui_mode()

    @contextlib.contextmanager
    def suspended(self):
        """Hand the terminal back to a child process for the duration."""
        was_active = self._tui_active
        if was_active:
            self.disable_tui_mode()
        try:
            yield
        finally:
            if was_active:
                self.enable_tui_mode()
