"""
Terminal abstraction.

Terminal is the surface DiffPager draws on; ProcessTerminal drives the
controlling tty (raw mode, alternate screen, SIGWINCH) and tests substitute
an in-memory implementation.
"""
from __future__ import annotations

import codecs
import logging
import os
import select
import signal
import sys
import threading
from abc import ABC, abstractmethod
from typing import Callable

from .keys import split_sequences

logger = logging.getLogger(__name__)

# Button tracking with SGR (1006) coordinates
MOUSE_ON = "\x1b[?1000h\x1b[?1002h\x1b[?1006h"
MOUSE_OFF = "\x1b[?1006l\x1b[?1002l\x1b[?1000l"


class Terminal(ABC):
    """Minimal terminal interface used by the pager."""

    @abstractmethod
    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
        on_close: Callable[[], None] | None = None,
    ) -> None:
        """
        Begin delivering key sequences to on_input and resizes to on_resize.

        on_close is called once if the input stream ends before stop().
        """

    @abstractmethod
    def stop(self) -> None:
        """Stop delivering events and restore the tty."""

    @abstractmethod
    def write(self, data: str) -> None:
        """Write output to the terminal."""

    @property
    @abstractmethod
    def columns(self) -> int:
        """Terminal width in columns."""

    @property
    @abstractmethod
    def rows(self) -> int:
        """Terminal height in rows."""

    @abstractmethod
    def hide_cursor(self) -> None:
        """Hide the cursor."""

    @abstractmethod
    def show_cursor(self) -> None:
        """Show the cursor."""

    @abstractmethod
    def clear_screen(self) -> None:
        """Erase the screen and home the cursor."""

    @abstractmethod
    def set_title(self, title: str) -> None:
        """Set terminal window title."""


class ProcessTerminal(Terminal):
    """
    The process tty.

    Puts stdin in raw mode, switches to the alternate screen, and reads input
    on a daemon thread. Each chunk read is split into single key sequences
    before being handed to the input handler. With mouse=True, SGR mouse
    reporting is switched on so wheel and click events arrive as input.
    """

    def __init__(self, mouse: bool = True) -> None:
        self.mouse = mouse
        self._input_handler: Callable[[str], None] | None = None
        self._resize_handler: Callable[[], None] | None = None
        self._close_handler: Callable[[], None] | None = None
        self._old_termios: list | None = None
        self._prev_sigwinch: object | None = None
        self._reading = False
        self._read_thread: threading.Thread | None = None

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
        on_close: Callable[[], None] | None = None,
    ) -> None:
        self._input_handler = on_input
        self._resize_handler = on_resize
        self._close_handler = on_close

        self._enable_raw_mode()
        sys.stdout.write("\x1b[?1049h")
        if self.mouse:
            sys.stdout.write(MOUSE_ON)
        sys.stdout.flush()

        if hasattr(signal, "SIGWINCH"):
            self._prev_sigwinch = signal.signal(signal.SIGWINCH, self._on_sigwinch)

        self._reading = True
        self._read_thread = threading.Thread(target=self._read_loop, daemon=True)
        self._read_thread.start()

    def _on_sigwinch(self, signum, frame) -> None:
        handler = self._resize_handler
        if handler is not None:
            handler()

    def _enable_raw_mode(self) -> None:
        """Put stdin in raw mode (no echo, no line buffering)."""
        import termios
        import tty
        try:
            fd = sys.stdin.fileno()
            self._old_termios = termios.tcgetattr(fd)
            tty.setraw(fd)
        except (termios.error, OSError, ValueError) as e:
            logger.debug("Raw mode unavailable: %s", e)
            self._old_termios = None

    def _disable_raw_mode(self) -> None:
        import termios
        if self._old_termios is None:
            return
        try:
            termios.tcsetattr(sys.stdin.fileno(), termios.TCSADRAIN, self._old_termios)
        except (termios.error, OSError, ValueError) as e:
            logger.debug("Could not restore terminal mode: %s", e)
        self._old_termios = None

    def _read_loop(self) -> None:
        fd = sys.stdin.fileno()
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while self._reading:
            try:
                ready, _, _ = select.select([fd], [], [], 0.05)
                if not ready:
                    continue
                data = os.read(fd, 1024)
            except (OSError, ValueError) as e:
                logger.debug("Input read failed: %s", e)
                break
            if not data:
                logger.debug("Input closed")
                break
            handler = self._input_handler
            if handler is None:
                continue
            for sequence in split_sequences(decoder.decode(data)):
                handler(sequence)

        on_close = self._close_handler
        if self._reading and on_close is not None:
            on_close()

    def stop(self) -> None:
        """Stop reading, restore the main screen, signal handler and tty mode."""
        self._reading = False
        self._input_handler = None
        self._resize_handler = None
        self._close_handler = None

        thread = self._read_thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=0.2)
        self._read_thread = None

        if self._prev_sigwinch is not None:
            signal.signal(signal.SIGWINCH, self._prev_sigwinch)
            self._prev_sigwinch = None

        if self.mouse:
            sys.stdout.write(MOUSE_OFF)
        sys.stdout.write("\x1b[?1049l")
        sys.stdout.flush()
        self._disable_raw_mode()

    def write(self, data: str) -> None:
        sys.stdout.write(data)
        sys.stdout.flush()

    @property
    def columns(self) -> int:
        try:
            return os.get_terminal_size().columns
        except OSError:
            return int(os.environ.get("COLUMNS", "80"))

    @property
    def rows(self) -> int:
        try:
            return os.get_terminal_size().lines
        except OSError:
            return int(os.environ.get("LINES", "24"))

    def hide_cursor(self) -> None:
        self.write("\x1b[?25l")

    def show_cursor(self) -> None:
        self.write("\x1b[?25h")

    def clear_screen(self) -> None:
        self.write("\x1b[2J\x1b[H")

    def set_title(self, title: str) -> None:
        self.write(f"\x1b]0;{title}\x07")
