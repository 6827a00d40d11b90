"""
Diff view keybindings.

Provides DiffViewAction type, DEFAULT_DIFF_VIEW_KEYBINDINGS, and the
DiffKeybindingsManager class that merges user overrides over the defaults.
"""
from __future__ import annotations

from typing import Literal

from .keys import KeyId, matches_key

DiffViewAction = Literal[
    # Selection
    "selectUp",
    "selectDown",
    "pageUp",
    "pageDown",
    "scrollTop",
    "scrollBottom",
    # Collapse state
    "toggle",
    "collapseAll",
    "expandAll",
    # Pager
    "quit",
]

DiffKeybindingsConfig = dict[str, "KeyId | list[KeyId]"]

DEFAULT_DIFF_VIEW_KEYBINDINGS: dict[str, list[KeyId]] = {
    "selectUp":     ["up", "k"],
    "selectDown":   ["down", "j"],
    "pageUp":       ["pageUp"],
    "pageDown":     ["pageDown"],
    "scrollTop":    ["home"],
    "scrollBottom": ["end"],
    "toggle":       ["enter", "space"],
    "collapseAll":  ["c"],
    "expandAll":    ["e"],
    "quit":         ["q", "escape", "ctrl+c"],
}


class DiffKeybindingsManager:
    """Maps diff view actions to key identifiers."""

    def __init__(self, config: DiffKeybindingsConfig | None = None) -> None:
        self._action_to_keys: dict[str, list[KeyId]] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: DiffKeybindingsConfig) -> None:
        self._action_to_keys.clear()
        for action, keys in DEFAULT_DIFF_VIEW_KEYBINDINGS.items():
            self._action_to_keys[action] = list(keys)
        for action, keys in config.items():
            if keys is None:
                continue
            self._action_to_keys[action] = keys if isinstance(keys, list) else [keys]

    def matches(self, data: str, action: str) -> bool:
        """Check if input data matches a specific action."""
        keys = self._action_to_keys.get(action)
        if not keys:
            return False
        return any(matches_key(data, k) for k in keys)

    def action_for(self, data: str) -> str | None:
        """First action (in definition order) bound to *data*, if any."""
        for action in self._action_to_keys:
            if self.matches(data, action):
                return action
        return None

    def get_keys(self, action: str) -> list[KeyId]:
        return self._action_to_keys.get(action, [])


_global_keybindings: DiffKeybindingsManager | None = None


def get_diff_keybindings() -> DiffKeybindingsManager:
    global _global_keybindings
    if _global_keybindings is None:
        _global_keybindings = DiffKeybindingsManager()
    return _global_keybindings


def set_diff_keybindings(manager: DiffKeybindingsManager | None) -> None:
    """Install *manager* as the shared instance; None restores the defaults."""
    global _global_keybindings
    _global_keybindings = manager
