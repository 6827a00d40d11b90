"""
difftui — unified diff parsing and a collapsible terminal diff view.

Parses `diff -u` / `git diff` output into files, hunks and lines, computes
word-level changes between paired deletions and additions, and renders the
result as a scrollable, collapsible component.
"""
from .components import DiffView, DiffViewOptions, DiffViewTheme, default_diff_theme
from .config import VERSION, DiffViewSettings, SettingsManager
from .diff_model import (
    DiffFile,
    DiffHunk,
    DiffLine,
    Document,
    LineType,
    WordChange,
    diff_summary,
    total_additions,
    total_deletions,
)
from .diff_parser import DiffParseError, parse
from .diff_state import (
    DiffItem,
    DiffViewController,
    DiffViewState,
    collapse_all,
    expand_all,
    item_at_index,
    iter_rows,
    toggle,
    total_rows,
)
from .keybindings import (
    DEFAULT_DIFF_VIEW_KEYBINDINGS,
    DiffKeybindingsManager,
    get_diff_keybindings,
    set_diff_keybindings,
)
from .keys import MouseEvent, matches_key, parse_key, parse_mouse, split_sequences
from .pager import DiffPager
from .terminal import ProcessTerminal, Terminal
from .utils import pad_to_width, truncate_to_width, visible_width
from .word_diff import annotate_hunk, compute_inline_diff, compute_lcs, tokenize

__version__ = VERSION

__all__ = [
    # Model
    "DiffFile",
    "DiffHunk",
    "DiffLine",
    "Document",
    "LineType",
    "WordChange",
    "diff_summary",
    "total_additions",
    "total_deletions",
    # Parsing
    "DiffParseError",
    "parse",
    # Word diff
    "annotate_hunk",
    "compute_inline_diff",
    "compute_lcs",
    "tokenize",
    # State
    "DiffItem",
    "DiffViewController",
    "DiffViewState",
    "collapse_all",
    "expand_all",
    "item_at_index",
    "iter_rows",
    "toggle",
    "total_rows",
    # Components
    "DiffView",
    "DiffViewOptions",
    "DiffViewTheme",
    "default_diff_theme",
    # Keys
    "DEFAULT_DIFF_VIEW_KEYBINDINGS",
    "DiffKeybindingsManager",
    "MouseEvent",
    "get_diff_keybindings",
    "matches_key",
    "parse_key",
    "parse_mouse",
    "set_diff_keybindings",
    "split_sequences",
    # Terminal
    "DiffPager",
    "ProcessTerminal",
    "Terminal",
    # Config
    "DiffViewSettings",
    "SettingsManager",
    # Utils
    "pad_to_width",
    "truncate_to_width",
    "visible_width",
]
