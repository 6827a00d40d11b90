"""
Navigation state over a parsed diff.

The document is addressed through a virtual list of flat rows:

- one row per file (its header);
- for an expanded file, one row per hunk header;
- for an expanded hunk, one row per line.

Every index-based operation, and any renderer, must walk the rows in this
order. iter_rows() is the single implementation of the walk; total_rows()
and item_at_index() are shortcuts that skip collapsed subtrees without
visiting them and agree with it row for row.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, Union

from .diff_model import DiffFile, DiffHunk, DiffLine, Document, total_additions, total_deletions
from .diff_parser import parse

DiffItem = Union[DiffFile, DiffHunk, DiffLine]


# ─────────────────────────────────────────────────────────────────────────────
# Flat row walk
# ─────────────────────────────────────────────────────────────────────────────

def iter_rows(files: Document, start: int = 0) -> Iterator[tuple[int, DiffItem]]:
    """Yield (flat_index, item) for every visible row from *start* on."""
    index = 0
    for file in files:
        if index >= start:
            yield index, file
        index += 1
        if file.collapsed:
            continue
        for hunk in file.hunks:
            if index >= start:
                yield index, hunk
            index += 1
            if hunk.collapsed:
                continue
            if index + len(hunk.lines) <= start:
                index += len(hunk.lines)
                continue
            for line in hunk.lines:
                if index >= start:
                    yield index, line
                index += 1


def total_rows(files: Document) -> int:
    count = 0
    for file in files:
        count += 1
        if file.collapsed:
            continue
        for hunk in file.hunks:
            count += 1
            if not hunk.collapsed:
                count += len(hunk.lines)
    return count


def item_at_index(files: Document, index: int) -> DiffItem | None:
    """Return the file, hunk or line at flat row *index*, or None."""
    if index < 0:
        return None
    current = 0
    for file in files:
        if current == index:
            return file
        current += 1
        if file.collapsed:
            continue
        for hunk in file.hunks:
            if current == index:
                return hunk
            current += 1
            if hunk.collapsed:
                continue
            if index < current + len(hunk.lines):
                return hunk.lines[index - current]
            current += len(hunk.lines)
    return None


def toggle(files: Document, index: int) -> DiffItem | None:
    """Flip the collapsed flag of the file or hunk at *index*. Lines are ignored."""
    item = item_at_index(files, index)
    if isinstance(item, (DiffFile, DiffHunk)):
        item.collapsed = not item.collapsed
    return item


def _set_collapsed(files: Document, collapsed: bool) -> None:
    for file in files:
        file.collapsed = collapsed
        for hunk in file.hunks:
            hunk.collapsed = collapsed


def collapse_all(files: Document) -> None:
    _set_collapsed(files, True)


def expand_all(files: Document) -> None:
    _set_collapsed(files, False)


# ─────────────────────────────────────────────────────────────────────────────
# View state
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class DiffViewState:
    selected_index: int = 0
    scroll_offset: int = 0

    def reset(self) -> None:
        self.selected_index = 0
        self.scroll_offset = 0


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


class DiffViewController:
    """
    Owns one parsed document and the selection/scroll state of one view.

    Collapse state lives on the document itself; selection and scroll live in
    ``state``. Changing the collapse state never remaps the selection to the
    same logical item; call clamp_selection() afterwards.
    """

    def __init__(self, files: Document | None = None) -> None:
        self.files: Document = files if files is not None else []
        self.state = DiffViewState()
        self.on_selection_change: Callable[[DiffItem | None], None] | None = None

    def set_content(self, diff_text: str, strict: bool = False) -> None:
        """Parse *diff_text*, replace the document and reset selection/scroll."""
        self.files = parse(diff_text, strict=strict)
        self.state.reset()

    # ── Queries ──────────────────────────────────────────────────────────────

    def total_rows(self) -> int:
        return total_rows(self.files)

    def item_at_index(self, index: int) -> DiffItem | None:
        return item_at_index(self.files, index)

    def selected_item(self) -> DiffItem | None:
        return item_at_index(self.files, self.state.selected_index)

    def total_additions(self) -> int:
        return total_additions(self.files)

    def total_deletions(self) -> int:
        return total_deletions(self.files)

    # ── Collapse / expand ────────────────────────────────────────────────────

    def toggle(self, index: int) -> DiffItem | None:
        return toggle(self.files, index)

    def toggle_selected(self) -> DiffItem | None:
        return toggle(self.files, self.state.selected_index)

    def collapse_all(self) -> None:
        collapse_all(self.files)

    def expand_all(self) -> None:
        expand_all(self.files)

    # ── Selection / scrolling ────────────────────────────────────────────────

    def _set_selected(self, index: int) -> None:
        last = max(0, self.total_rows() - 1)
        new_index = _clamp(index, 0, last)
        changed = new_index != self.state.selected_index
        self.state.selected_index = new_index
        if changed and self.on_selection_change:
            self.on_selection_change(self.selected_item())

    def clamp_selection(self) -> None:
        self._set_selected(self.state.selected_index)

    def select(self, index: int) -> None:
        self._set_selected(index)

    def scroll_by(self, delta: int, viewport_height: int) -> None:
        """Move the window by *delta* rows without touching the selection."""
        max_offset = max(0, self.total_rows() - max(1, viewport_height))
        self.state.scroll_offset = _clamp(self.state.scroll_offset + delta, 0, max_offset)

    def move_selection(self, delta: int) -> None:
        """Move the selection by *delta* rows, holding at either end."""
        self._set_selected(self.state.selected_index + delta)

    def page_up(self, viewport_height: int) -> None:
        self.move_selection(-max(1, viewport_height - 1))
        self.ensure_visible(viewport_height)

    def page_down(self, viewport_height: int) -> None:
        self.move_selection(max(1, viewport_height - 1))
        self.ensure_visible(viewport_height)

    def scroll_to_top(self) -> None:
        self._set_selected(0)
        self.state.scroll_offset = 0

    def scroll_to_bottom(self, viewport_height: int) -> None:
        self._set_selected(self.total_rows() - 1)
        self.ensure_visible(viewport_height)

    def ensure_visible(self, viewport_height: int) -> None:
        """Shift scroll_offset as little as possible to show the selection."""
        height = max(1, viewport_height)
        selected = self.state.selected_index
        if selected < self.state.scroll_offset:
            self.state.scroll_offset = selected
        elif selected >= self.state.scroll_offset + height:
            self.state.scroll_offset = selected - height + 1
        self.state.scroll_offset = max(0, self.state.scroll_offset)

    def visible_rows(self, viewport_height: int) -> list[tuple[int, DiffItem]]:
        """Rows in the window [scroll_offset, scroll_offset + viewport_height)."""
        rows: list[tuple[int, DiffItem]] = []
        for row in iter_rows(self.files, self.state.scroll_offset):
            if len(rows) >= viewport_height:
                break
            rows.append(row)
        return rows
