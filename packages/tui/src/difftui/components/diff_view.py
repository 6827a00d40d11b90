"""DiffView component — collapsible, scrollable unified diff viewer."""
from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from typing import Callable

from ..diff_model import DiffFile, DiffHunk, DiffLine, Document, LineType, diff_summary
from ..diff_state import DiffItem, DiffViewController
from ..keybindings import DiffKeybindingsManager, get_diff_keybindings
from ..keys import MouseEvent, parse_mouse
from ..utils import expand_tabs, pad_to_width, truncate_to_width, visible_width

Style = Callable[[str], str]


def _identity(s: str) -> str:
    return s


@dataclass
class DiffViewTheme:
    addition: Style = field(default=_identity)
    deletion: Style = field(default=_identity)
    context: Style = field(default=_identity)
    word_addition: Style = field(default=_identity)
    word_deletion: Style = field(default=_identity)
    file_header: Style = field(default=_identity)
    hunk_header: Style = field(default=_identity)
    line_number: Style = field(default=_identity)
    selected: Style = field(default=_identity)
    header_bar: Style = field(default=_identity)
    stats_addition: Style = field(default=_identity)
    stats_deletion: Style = field(default=_identity)
    scrollbar_thumb: Style = field(default=_identity)
    scrollbar_track: Style = field(default=_identity)
    hint: Style = field(default=_identity)
    expanded_indicator: str = "▼ "
    collapsed_indicator: str = "▶ "


def _sgr(*codes: str) -> Style:
    prefix = "\x1b[" + ";".join(codes) + "m"
    return lambda s: f"{prefix}{s}\x1b[0m"


def _rgb(r: int, g: int, b: int) -> str:
    return f"2;{r};{g};{b}"


def default_diff_theme() -> DiffViewTheme:
    """24-bit colour theme: green additions, red deletions, blue headers."""
    add_fg, add_bg = _rgb(80, 255, 80), _rgb(0, 60, 0)
    del_fg, del_bg = _rgb(255, 80, 80), _rgb(60, 0, 0)
    header_fg, header_bg = _rgb(150, 150, 255), _rgb(40, 40, 60)
    bar_bg = _rgb(50, 50, 70)
    return DiffViewTheme(
        addition=_sgr(f"38;{add_fg}", f"48;{add_bg}"),
        deletion=_sgr(f"38;{del_fg}", f"48;{del_bg}"),
        context=_sgr("37"),
        word_addition=_sgr(f"38;{add_fg}", f"48;{_rgb(0, 100, 0)}"),
        word_deletion=_sgr(f"38;{del_fg}", f"48;{_rgb(100, 0, 0)}"),
        file_header=_sgr(f"38;{header_fg}", f"48;{header_bg}", "1"),
        hunk_header=_sgr("38;5;245", f"48;{_rgb(30, 30, 50)}"),
        line_number=_sgr("38;5;240"),
        selected=_sgr("97", "44"),
        header_bar=_sgr("97", f"48;{bar_bg}"),
        stats_addition=_sgr(f"38;{add_fg}", f"48;{bar_bg}"),
        stats_deletion=_sgr(f"38;{del_fg}", f"48;{bar_bg}"),
        scrollbar_thumb=_sgr("36"),
        scrollbar_track=_sgr("38;5;240"),
        hint=_sgr("2"),
    )


@dataclass
class DiffViewOptions:
    show_line_numbers: bool = True
    line_number_width: int = 4
    show_scrollbar: bool = True


class DiffView:
    """
    Renders a parsed diff as a header bar plus a window of flat rows.

    max_visible is the number of diff rows shown below the header bar; the
    owner updates it when the available height changes.

    Mouse reports are handled too: the wheel scrolls the window by
    SCROLL_STEP rows and a left click selects and toggles the clicked row.
    """

    SCROLL_STEP = 3

    def __init__(
        self,
        max_visible: int,
        theme: DiffViewTheme | None = None,
        options: DiffViewOptions | None = None,
        keybindings: DiffKeybindingsManager | None = None,
    ) -> None:
        self.controller = DiffViewController()
        self.max_visible = max(1, max_visible)
        self.focused = True
        self._theme = theme or DiffViewTheme()
        self._options = options or DiffViewOptions()
        self._keybindings = keybindings

    # ── Content ──────────────────────────────────────────────────────────────

    @property
    def files(self) -> Document:
        return self.controller.files

    def set_content(self, diff_text: str, strict: bool = False) -> None:
        self.controller.set_content(diff_text, strict=strict)

    def set_files(self, files: Document) -> None:
        self.controller.files = files
        self.controller.state.reset()

    @property
    def on_selection_change(self) -> Callable[[DiffItem | None], None] | None:
        return self.controller.on_selection_change

    @on_selection_change.setter
    def on_selection_change(self, callback: Callable[[DiffItem | None], None] | None) -> None:
        self.controller.on_selection_change = callback

    @property
    def keybindings(self) -> DiffKeybindingsManager | None:
        return self._keybindings

    def invalidate(self) -> None:
        pass

    def _kb(self) -> DiffKeybindingsManager:
        return self._keybindings or get_diff_keybindings()

    # ── Input ────────────────────────────────────────────────────────────────

    def handle_input(self, data: str) -> None:
        mouse = parse_mouse(data)
        if mouse is not None:
            self._handle_mouse(mouse)
            return

        action = self._kb().action_for(data)
        ctl = self.controller
        height = self.max_visible

        if action == "selectUp":
            ctl.move_selection(-1)
        elif action == "selectDown":
            ctl.move_selection(1)
        elif action == "pageUp":
            ctl.page_up(height)
        elif action == "pageDown":
            ctl.page_down(height)
        elif action == "scrollTop":
            ctl.scroll_to_top()
        elif action == "scrollBottom":
            ctl.scroll_to_bottom(height)
        elif action == "toggle":
            ctl.toggle_selected()
            ctl.clamp_selection()
        elif action == "collapseAll":
            ctl.collapse_all()
            ctl.clamp_selection()
        elif action == "expandAll":
            ctl.expand_all()
            ctl.clamp_selection()
        else:
            return
        ctl.ensure_visible(height)

    def _handle_mouse(self, event: MouseEvent) -> None:
        ctl = self.controller
        height = self.max_visible
        if event.button == "wheelUp":
            ctl.scroll_by(-self.SCROLL_STEP, height)
        elif event.button == "wheelDown":
            ctl.scroll_by(self.SCROLL_STEP, height)
        elif event.button == "left" and event.action == "press":
            # Row 0 is the header bar
            if not 1 <= event.y <= height:
                return
            index = ctl.state.scroll_offset + event.y - 1
            if index >= ctl.total_rows():
                return
            ctl.select(index)
            ctl.toggle_selected()
            ctl.clamp_selection()
            ctl.ensure_visible(height)

    # ── Rendering ────────────────────────────────────────────────────────────

    def render(self, width: int) -> list[str]:
        if width <= 0:
            return []
        lines = [self._render_header(width)]

        if not self.files:
            lines.append(self._theme.hint(truncate_to_width("  No changes", width, "")))
            return lines

        total = self.controller.total_rows()
        height = self.max_visible
        show_scrollbar = self._options.show_scrollbar and total > height and width >= 2
        body_width = width - 1 if show_scrollbar else width

        rows = [
            self._render_row(item, body_width, index == self.controller.state.selected_index)
            for index, item in self.controller.visible_rows(height)
        ]

        if show_scrollbar:
            rows.extend(" " * body_width for _ in range(height - len(rows)))
            rows = [row + bar for row, bar in zip(rows, self._scrollbar(total, height))]

        lines.extend(rows)
        return lines

    def _render_header(self, width: int) -> str:
        t = self._theme
        files = self.files
        stats = f" {diff_summary(files)} "
        if visible_width(stats) >= width:
            return t.header_bar(pad_to_width(stats, width))

        left = pad_to_width(self._hints(), width - visible_width(stats))
        noun = "file" if len(files) == 1 else "files"
        return (
            t.header_bar(f"{left} {len(files)} {noun}  ")
            + t.stats_addition(f"+{self.controller.total_additions()}")
            + t.header_bar(" ")
            + t.stats_deletion(f"-{self.controller.total_deletions()}")
            + t.header_bar(" ")
        )

    def _hints(self) -> str:
        """Collapse/expand key hints, e.g. " [c]ollapse  [e]xpand "."""
        kb = self._kb()
        hints = []
        for action, word in (("collapseAll", "collapse"), ("expandAll", "expand")):
            keys = kb.get_keys(action)
            if not keys:
                continue
            key = keys[0]
            hints.append(f"[{key}]{word[1:]}" if key == word[0] else f"[{key}] {word}")
        return " " + "  ".join(hints) + " "

    def _render_row(self, item: DiffItem, width: int, selected: bool) -> str:
        if isinstance(item, DiffFile):
            return self._render_file_row(item, width, selected)
        if isinstance(item, DiffHunk):
            return self._render_hunk_row(item, width, selected)
        return self._render_line_row(item, width, selected)

    def _indicator(self, collapsed: bool) -> str:
        t = self._theme
        return t.collapsed_indicator if collapsed else t.expanded_indicator

    def _render_file_row(self, file: DiffFile, width: int, selected: bool) -> str:
        t = self._theme
        base = t.selected if selected and self.focused else t.file_header
        adds, dels = f"+{file.additions}", f"-{file.deletions}"
        stats_width = len(adds) + len(dels) + 3  # " +a -d "

        if stats_width + 4 > width:
            return base(pad_to_width(self._indicator(file.collapsed) + file.display_path, width))

        left = pad_to_width(self._indicator(file.collapsed) + file.display_path, width - stats_width)
        if selected and self.focused:
            return base(f"{left} {adds} {dels} ")
        return (
            base(f"{left} ")
            + t.stats_addition(adds)
            + base(" ")
            + t.stats_deletion(dels)
            + base(" ")
        )

    def _render_hunk_row(self, hunk: DiffHunk, width: int, selected: bool) -> str:
        t = self._theme
        base = t.selected if selected and self.focused else t.hunk_header
        text = "  " + self._indicator(hunk.collapsed) + hunk.header
        return base(pad_to_width(text, width))

    def _gutter(self, line: DiffLine) -> str:
        w = self._options.line_number_width
        old = str(line.old_line).rjust(w) if line.old_line is not None else " " * w
        new = str(line.new_line).rjust(w) if line.new_line is not None else " " * w
        return f"{old} {new}│"

    def _render_line_row(self, line: DiffLine, width: int, selected: bool) -> str:
        t = self._theme
        highlight = selected and self.focused
        if highlight:
            base = t.selected
        elif line.type is LineType.ADDITION:
            base = t.addition
        elif line.type is LineType.DELETION:
            base = t.deletion
        else:
            base = t.context

        out: list[str] = []
        used = 0
        if self._options.show_line_numbers:
            gutter = truncate_to_width(self._gutter(line), width, "")
            out.append(base(gutter) if highlight else t.line_number(gutter))
            used += visible_width(gutter)
        if used < width:
            out.append(base(line.prefix))
            used += 1

        for text, change in _content_segments(line, width - used):
            if highlight or change is None:
                out.append(base(text))
            elif change is LineType.ADDITION:
                out.append(t.word_addition(text))
            else:
                out.append(t.word_deletion(text))
            used += visible_width(text)

        if used < width:
            out.append(base(" " * (width - used)))
        return "".join(out)

    def _scrollbar(self, total: int, height: int) -> list[str]:
        t = self._theme
        thumb_height = max(1, height * height // total)
        max_scroll = total - height
        offset = min(self.controller.state.scroll_offset, max_scroll)
        thumb_pos = offset * (height - thumb_height) // max_scroll if max_scroll > 0 else 0
        return [
            t.scrollbar_thumb("█") if thumb_pos <= i < thumb_pos + thumb_height else t.scrollbar_track("│")
            for i in range(height)
        ]


def _content_segments(line: DiffLine, budget: int) -> list[tuple[str, LineType | None]]:
    """
    Split line content into runs sharing the same word-change type, cut to
    *budget* columns. Offsets in word_changes refer to the raw content.
    """
    if budget <= 0 or not line.content:
        return []

    marks: list[LineType | None] = [None] * len(line.content)
    for start, length, change in line.word_changes:
        for k in range(start, min(start + length, len(marks))):
            marks[k] = change

    segments: list[tuple[str, LineType | None]] = []
    used = 0
    for ch, mark in zip(line.content, marks):
        if ch != "\t" and unicodedata.category(ch) == "Cc":
            ch = "\ufffd"
        text = expand_tabs(ch)
        w = visible_width(text)
        if used + w > budget:
            break
        used += w
        if segments and segments[-1][1] is mark:
            segments[-1] = (segments[-1][0] + text, mark)
        else:
            segments.append((text, mark))
    return segments
