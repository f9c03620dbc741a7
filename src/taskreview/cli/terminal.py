"""
Terminal input modes.

The console reads single keystrokes (cbreak, no echo) most of the time and
switches back to the original line-buffered, echoing mode for prompts that
take a whole line. When stdin is not a tty (pipes, tests) both reads fall
back to plain stream reads.
"""

from __future__ import annotations

import logging
import sys
import termios
import tty
from types import TracebackType
from typing import TextIO

from rich.console import Console

logger = logging.getLogger(__name__)


class Terminal:
    """
    Single-keystroke terminal, usable as a context manager.

    Example:
        >>> with Terminal() as term:
        ...     key = term.read_key()
        ...     name = term.read_line("Enter description: ")
    """

    def __init__(self, stream: TextIO | None = None, console: Console | None = None):
        self.stream = stream or sys.stdin
        self.console = console or Console(highlight=False)
        self._saved: list | None = None

    @property
    def is_tty(self) -> bool:
        try:
            return self.stream.isatty()
        except ValueError:
            return False

    def __enter__(self) -> Terminal:
        if self.is_tty:
            fd = self.stream.fileno()
            self._saved = termios.tcgetattr(fd)
            tty.setcbreak(fd)
            attrs = termios.tcgetattr(fd)
            attrs[3] &= ~termios.ECHO
            termios.tcsetattr(fd, termios.TCSADRAIN, attrs)
            logger.debug("Terminal switched to single-key mode")
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.restore()

    def restore(self) -> None:
        """Put the terminal back the way it was found."""
        if self._saved is not None:
            termios.tcsetattr(self.stream.fileno(), termios.TCSADRAIN, self._saved)
            self._saved = None
            logger.debug("Terminal restored")

    def read_key(self) -> str:
        """Read one keystroke; returns "" at end of input."""
        return self.stream.read(1)

    def read_line(self, prompt: str) -> str:
        """Read one line with echo on, then go back to single-key mode."""
        self.console.print()
        self.console.print(prompt, end="", markup=False)
        if self._saved is None:
            return self.stream.readline().rstrip("\n")

        fd = self.stream.fileno()
        single_key = termios.tcgetattr(fd)
        termios.tcsetattr(fd, termios.TCSADRAIN, self._saved)
        try:
            return self.stream.readline().rstrip("\n")
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, single_key)

    def clear(self) -> None:
        self.console.clear()
        self.console.print()
