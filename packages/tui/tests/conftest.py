"""Shared fixtures for difftui tests."""
from __future__ import annotations

import pytest

from difftui.keybindings import set_diff_keybindings


SIMPLE_DIFF = """\
diff --git a/foo.txt b/foo.txt
--- a/foo.txt
+++ b/foo.txt
@@ -1,2 +1,2 @@
-hello world
+hello there
 unchanged
"""

MULTI_DIFF = """\
diff --git a/a.py b/a.py
index 1234567..89abcde 100644
--- a/a.py
+++ b/a.py
@@ -1,2 +1,3 @@
 import os
+import sys
 print(os.name)
diff --git a/b.py b/b.py
--- a/b.py
+++ b/b.py
@@ -1,2 +1,1 @@
-x = 1
 y = 2
@@ -10,3 +9,3 @@ def main():
 a
-b
+c
 d
"""


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the global config dir at a temp directory and run from another."""
    config_dir = tmp_path / "config"
    work_dir = tmp_path / "work"
    work_dir.mkdir()
    monkeypatch.setenv("DIFFTUI_DIR", str(config_dir))
    monkeypatch.chdir(work_dir)
    return config_dir


@pytest.fixture(autouse=True)
def reset_keybindings():
    set_diff_keybindings(None)
    yield
    set_diff_keybindings(None)


@pytest.fixture
def simple_diff() -> str:
    return SIMPLE_DIFF


@pytest.fixture
def multi_diff() -> str:
    return MULTI_DIFF
