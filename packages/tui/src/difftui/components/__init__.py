"""
difftui.components — renderable UI components.
"""
from .diff_view import DiffView, DiffViewOptions, DiffViewTheme, default_diff_theme

__all__ = [
    "DiffView",
    "DiffViewOptions",
    "DiffViewTheme",
    "default_diff_theme",
]
