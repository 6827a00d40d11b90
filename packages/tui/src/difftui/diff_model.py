"""
Diff document model.

A parsed diff is a plain list of DiffFile objects (the "document"). Each file
owns its hunks and each hunk owns its lines; nothing points back up the tree.
Navigation over the tree is done by flat row index (see diff_state.py).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple


class LineType(Enum):
    CONTEXT = "context"
    ADDITION = "addition"
    DELETION = "deletion"
    HEADER = "header"
    FILE_HEADER = "file_header"


class WordChange(NamedTuple):
    """Highlighted span inside a line's content (character offsets)."""
    start: int
    length: int
    type: LineType


@dataclass
class DiffLine:
    type: LineType
    content: str
    old_line: int | None = None
    new_line: int | None = None
    word_changes: list[WordChange] = field(default_factory=list)

    @property
    def prefix(self) -> str:
        if self.type is LineType.ADDITION:
            return "+"
        if self.type is LineType.DELETION:
            return "-"
        return " "


@dataclass
class DiffHunk:
    header: str
    old_start: int = 0
    old_count: int = 0
    new_start: int = 0
    new_count: int = 0
    lines: list[DiffLine] = field(default_factory=list)
    collapsed: bool = False

    @property
    def additions(self) -> int:
        return sum(1 for line in self.lines if line.type is LineType.ADDITION)

    @property
    def deletions(self) -> int:
        return sum(1 for line in self.lines if line.type is LineType.DELETION)


@dataclass
class DiffFile:
    old_path: str = ""
    new_path: str = ""
    hunks: list[DiffHunk] = field(default_factory=list)
    collapsed: bool = False
    binary: bool = False
    new_file: bool = False
    deleted_file: bool = False
    renamed: bool = False

    @property
    def display_path(self) -> str:
        """Path shown in file headers; renames show both sides."""
        if self.renamed:
            return f"{self.old_path} → {self.new_path}"
        if self.deleted_file:
            return self.old_path
        return self.new_path or self.old_path

    @property
    def status(self) -> str:
        if self.new_file:
            return "added"
        if self.deleted_file:
            return "deleted"
        if self.renamed:
            return "renamed"
        if self.binary:
            return "binary"
        return "modified"

    @property
    def additions(self) -> int:
        return sum(h.additions for h in self.hunks)

    @property
    def deletions(self) -> int:
        return sum(h.deletions for h in self.hunks)


Document = list[DiffFile]


def total_additions(files: Document) -> int:
    return sum(f.additions for f in files)


def total_deletions(files: Document) -> int:
    return sum(f.deletions for f in files)


def diff_summary(files: Document) -> str:
    """One-line summary, e.g. ``2 files  +10 -3``."""
    count = len(files)
    noun = "file" if count == 1 else "files"
    return f"{count} {noun}  +{total_additions(files)} -{total_deletions(files)}"
