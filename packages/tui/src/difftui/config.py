"""
Configuration paths and diff view settings.

Settings are read from a global file (~/.difftui/settings.json, directory
overridable with DIFFTUI_DIR) and a project file (<cwd>/.difftui/settings.json).
Project values override global ones; runtime overrides (command line flags)
override both and are never written to disk.
"""
from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import asdict, dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

APP_NAME: str = "difftui"
CONFIG_DIR_NAME: str = ".difftui"
VERSION: str = "0.1.0"

ENV_CONFIG_DIR: str = "DIFFTUI_DIR"


def get_config_dir() -> str:
    """Get the global config directory (e.g., ~/.difftui/)."""
    env_dir = os.environ.get(ENV_CONFIG_DIR)
    if env_dir:
        return os.path.expanduser(env_dir)
    return os.path.join(os.path.expanduser("~"), CONFIG_DIR_NAME)


def get_settings_path() -> str:
    return os.path.join(get_config_dir(), "settings.json")


def get_project_settings_path(cwd: str | None = None) -> str:
    return os.path.join(cwd or os.getcwd(), CONFIG_DIR_NAME, "settings.json")


def get_debug_log_path() -> str:
    return os.path.join(get_config_dir(), f"{APP_NAME}-debug.log")


# ─── Settings ────────────────────────────────────────────────────────────────

THEMES = ("default", "plain")


@dataclass
class DiffViewSettings:
    show_line_numbers: bool = True
    line_number_width: int = 4
    show_scrollbar: bool = True
    theme: str = "default"
    strict_parse: bool = False
    mouse: bool = True
    keybindings: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DiffViewSettings":
        known = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in data.items() if k in known}
        settings = cls(**filtered)
        if settings.theme not in THEMES:
            logger.warning("Unknown theme %r, using 'default'", settings.theme)
            settings.theme = "default"
        if not isinstance(settings.line_number_width, int) or settings.line_number_width < 1:
            logger.warning("Invalid lineNumberWidth %r, using 4", settings.line_number_width)
            settings.line_number_width = 4
        settings.keybindings = _valid_keybindings(settings.keybindings)
        return settings


def _valid_keybindings(value: Any) -> dict[str, Any]:
    if not isinstance(value, dict):
        logger.warning("Invalid keybindings %r, expected an object", value)
        return {}
    valid: dict[str, Any] = {}
    for action, keys in value.items():
        if isinstance(keys, str) or (
            isinstance(keys, list) and all(isinstance(k, str) for k in keys)
        ):
            valid[action] = keys
        else:
            logger.warning("Ignoring keybinding %r: %r is not a key or list of keys", action, keys)
    return valid


def _camel_to_snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def deep_merge_settings(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Merge override into base. Nested objects merge one level deep;
    arrays and primitives from override win. None values are skipped.
    """
    result = dict(base)
    for key, val in override.items():
        if val is None:
            continue
        base_val = result.get(key)
        if isinstance(val, dict) and isinstance(base_val, dict):
            result[key] = {**base_val, **val}
        else:
            result[key] = val
    return result


class SettingsManager:
    """
    Loads, merges and exposes diff view settings.

    Global settings:  $DIFFTUI_DIR/settings.json (default ~/.difftui)
    Project settings: <cwd>/.difftui/settings.json
    """

    def __init__(
        self,
        cwd: str | None = None,
        global_settings_file: str | None = None,
    ) -> None:
        self._global_settings_file = global_settings_file or get_settings_path()
        self._project_settings_file = get_project_settings_path(cwd)
        self._global_raw: dict[str, Any] = {}
        self._project_raw: dict[str, Any] = {}
        self._runtime_overrides: dict[str, Any] = {}
        self._merged: dict[str, Any] = {}
        self._errors: list[dict[str, Any]] = []
        self._loaded = False

    @classmethod
    def create(cls, cwd: str | None = None) -> "SettingsManager":
        mgr = cls(cwd=cwd)
        mgr.load()
        return mgr

    # ── Load ─────────────────────────────────────────────────────────────────

    def load(self) -> None:
        self._global_raw = self._load_file(self._global_settings_file, "global")
        self._project_raw = self._load_file(self._project_settings_file, "project")
        self._rebuild()
        self._loaded = True

    def _load_file(self, path: str, scope: str) -> dict[str, Any]:
        if not os.path.exists(path):
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                raw = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring %s settings file %s: %s", scope, path, e)
            self._errors.append({"scope": scope, "path": path, "error": str(e)})
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring %s settings file %s: not a JSON object", scope, path)
            self._errors.append({"scope": scope, "path": path, "error": "not a JSON object"})
            return {}
        logger.debug("Loaded %s settings from %s", scope, path)
        return raw

    def _rebuild(self) -> None:
        self._merged = deep_merge_settings(self._global_raw, self._project_raw)
        if self._runtime_overrides:
            self._merged = deep_merge_settings(self._merged, self._runtime_overrides)

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    def apply_overrides(self, overrides: dict[str, Any]) -> None:
        """Apply runtime overrides (not persisted to disk)."""
        self._runtime_overrides = deep_merge_settings(self._runtime_overrides, overrides)
        self._rebuild()

    # ── Read access ──────────────────────────────────────────────────────────

    def get(self) -> DiffViewSettings:
        """Merged settings (runtime overrides > project > global > defaults)."""
        self._ensure_loaded()
        mapped: dict[str, Any] = {}
        for key, value in self._merged.items():
            # keybinding action names stay camelCase
            mapped[_camel_to_snake(key)] = value
        return DiffViewSettings.from_dict(mapped)

    def drain_errors(self) -> list[dict[str, Any]]:
        """Drain and return all accumulated settings errors."""
        drained = list(self._errors)
        self._errors = []
        return drained
