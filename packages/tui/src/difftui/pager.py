"""
Full-screen interactive pager around a DiffView.

Terminal callbacks (reader thread, SIGWINCH handler) only enqueue events.
All state changes and rendering happen in run(), on the caller's thread.
End of input is an event too and ends run() like a quit key.
"""
from __future__ import annotations

import logging
import queue

from .components.diff_view import DiffView
from .keybindings import DiffKeybindingsManager, get_diff_keybindings
from .keys import parse_key
from .terminal import Terminal

logger = logging.getLogger(__name__)

_RESIZE = object()
_CLOSED = object()


class DiffPager:
    def __init__(
        self,
        terminal: Terminal,
        view: DiffView,
        title: str | None = None,
        keybindings: DiffKeybindingsManager | None = None,
    ) -> None:
        self.terminal = terminal
        self.view = view
        self.title = title
        self._keybindings = keybindings
        self._events: queue.Queue[object] = queue.Queue()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def _on_input(self, data: str) -> None:
        self._events.put(data)

    def _on_resize(self) -> None:
        self._events.put(_RESIZE)

    def _on_close(self) -> None:
        self._events.put(_CLOSED)

    def handle_key(self, data: str) -> bool:
        """Apply one key. Returns False when the key asks the pager to quit."""
        kb = self._keybindings or get_diff_keybindings()
        if kb.matches(data, "quit"):
            logger.debug("Quit on %s", parse_key(data) or repr(data))
            return False
        self.view.handle_input(data)
        return True

    def render_frame(self) -> None:
        rows = max(2, self.terminal.rows)
        if self.view.max_visible != rows - 1:
            self.view.max_visible = rows - 1
            self.view.controller.ensure_visible(self.view.max_visible)
        lines = self.view.render(self.terminal.columns)
        # Cursor home, then overwrite each row; raw mode needs explicit \r
        frame = "\x1b[H" + "\r\n".join(f"{line}\x1b[K" for line in lines) + "\x1b[J"
        self.terminal.write(frame)

    def run(self) -> None:
        """Block until the user quits, then restore the terminal."""
        self._running = True
        self.terminal.start(self._on_input, self._on_resize, self._on_close)
        try:
            self.terminal.hide_cursor()
            if self.title:
                self.terminal.set_title(self.title)
            self.terminal.clear_screen()
            self.render_frame()
            while self._running:
                event = self._events.get()
                if event is _CLOSED:
                    logger.debug("Input closed, leaving pager")
                    break
                if event is _RESIZE:
                    logger.debug("Resize to %dx%d", self.terminal.columns, self.terminal.rows)
                    self.terminal.clear_screen()
                elif not self.handle_key(event):  # type: ignore[arg-type]
                    break
                # Coalesce queued keys into a single frame
                if self._events.empty():
                    self.render_frame()
        finally:
            self._running = False
            self.terminal.show_cursor()
            self.terminal.stop()
