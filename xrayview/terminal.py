"""Raw-mode and alternate-screen handling for the interactive view."""

from __future__ import annotations

import contextlib
import os
import shutil
import termios
import tty

ENTER_SCREEN = b"\x1b[?1049h\x1b[?25l"
LEAVE_SCREEN = b"\x1b[?25h\x1b[?1049l"
CLEAR_HOME = "\x1b[H\x1b[J"


class TerminalController:
    """Owns the tty while the view is on screen.

    ``disable_tui_mode`` and ``enable_tui_mode`` are handed to the editor and
    shell launchers so child processes get a cooked terminal.
    """

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._cooked = termios.tcgetattr(stdin_fd)

    def enable_tui_mode(self) -> None:
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        os.write(self.stdout_fd, ENTER_SCREEN)

    def disable_tui_mode(self) -> None:
        os.write(self.stdout_fd, LEAVE_SCREEN)
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._cooked)

    def draw(self, lines: list[str]) -> None:
        """Repaint the whole screen with ``lines``."""
        payload = CLEAR_HOME + "\r\n".join(lines)
        os.write(self.stdout_fd, payload.encode("utf-8", errors="replace"))

    @staticmethod
    def size() -> tuple[int, int]:
        columns, rows = shutil.get_terminal_size((80, 24))
        return columns, rows

    @contextlib.contextmanager
    def raw_mode(self):
        self.enable_tui_mode()
        try:
            yield self
        finally:
            self.disable_tui_mode()
