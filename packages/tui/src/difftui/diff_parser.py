"""
Unified diff parser.

parse() makes a single forward pass over the text, classifying each line
against an ordered rule table (first match wins), then a second pass runs
the word-level aligner over every hunk.

Parsing is lenient by default: unrecognized lines and content lines that
appear outside a hunk are dropped, so clipped or hand-edited diffs still
display. parse(text, strict=True) raises DiffParseError instead.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable

from .diff_model import DiffFile, DiffHunk, DiffLine, Document, LineType
from .word_diff import annotate_hunk

logger = logging.getLogger(__name__)

HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)?")

_DIFF_GIT_RE = re.compile(r"^diff --git a/(.*) b/(.*)")
_OLD_PATH_RE = re.compile(r"^--- (.+)")
_NEW_PATH_RE = re.compile(r"^\+\+\+ (.+)")
_BINARY_RE = re.compile(r"^Binary files .* differ")
_RENAME_FROM_RE = re.compile(r"^rename from (.+)")
_RENAME_TO_RE = re.compile(r"^rename to (.+)")

DEV_NULL = "/dev/null"


class DiffParseError(ValueError):
    """Raised by strict parsing when the diff text is malformed."""

    def __init__(self, message: str, line_number: int, line: str) -> None:
        super().__init__(f"line {line_number}: {message}: {line!r}")
        self.line_number = line_number
        self.line = line


@dataclass
class _ParseState:
    strict: bool
    files: Document = field(default_factory=list)
    # Cursors are indices into files / files[file_index].hunks
    file_index: int | None = None
    hunk_index: int | None = None
    old_line: int = 0
    new_line: int = 0
    line_number: int = 0
    dropped: int = 0

    @property
    def current_file(self) -> DiffFile | None:
        if self.file_index is None:
            return None
        return self.files[self.file_index]

    @property
    def current_hunk(self) -> DiffHunk | None:
        file = self.current_file
        if file is None or self.hunk_index is None:
            return None
        return file.hunks[self.hunk_index]

    def fail(self, message: str, line: str) -> None:
        raise DiffParseError(message, self.line_number, line)

    def drop(self, line: str, reason: str) -> None:
        if self.strict:
            self.fail(reason, line)
        self.dropped += 1


# ─────────────────────────────────────────────────────────────────────────────
# Rule handlers
# ─────────────────────────────────────────────────────────────────────────────

def _on_diff_git(state: _ParseState, m: re.Match[str], line: str) -> None:
    _close_hunk(state)
    state.files.append(DiffFile(old_path=m.group(1), new_path=m.group(2)))
    state.file_index = len(state.files) - 1
    state.hunk_index = None


def _on_old_path(state: _ParseState, m: re.Match[str], line: str) -> None:
    file = state.current_file
    if file is None:
        state.dropped += 1
        return
    path = m.group(1)
    if path == DEV_NULL:
        file.new_file = True
    else:
        file.old_path = path.removeprefix("a/")


def _on_new_path(state: _ParseState, m: re.Match[str], line: str) -> None:
    file = state.current_file
    if file is None:
        state.dropped += 1
        return
    path = m.group(1)
    if path == DEV_NULL:
        file.deleted_file = True
    else:
        file.new_path = path.removeprefix("b/")


def _on_hunk_header(state: _ParseState, m: re.Match[str], line: str) -> None:
    file = state.current_file
    if file is None:
        state.drop(line, "hunk header outside of a file")
        return
    _close_hunk(state)
    old_start = int(m.group(1))
    new_start = int(m.group(3))
    file.hunks.append(DiffHunk(
        header=line,
        old_start=old_start,
        old_count=int(m.group(2)) if m.group(2) is not None else 1,
        new_start=new_start,
        new_count=int(m.group(4)) if m.group(4) is not None else 1,
    ))
    state.hunk_index = len(file.hunks) - 1
    state.old_line = old_start
    state.new_line = new_start


def _on_binary(state: _ParseState, m: re.Match[str], line: str) -> None:
    file = state.current_file
    if file is None:
        state.dropped += 1
        return
    file.binary = True


def _on_rename_from(state: _ParseState, m: re.Match[str], line: str) -> None:
    file = state.current_file
    if file is None:
        state.dropped += 1
        return
    file.old_path = m.group(1)
    file.renamed = True


def _on_rename_to(state: _ParseState, m: re.Match[str], line: str) -> None:
    file = state.current_file
    if file is None:
        state.dropped += 1
        return
    file.new_path = m.group(1)
    file.renamed = True


_Handler = Callable[[_ParseState, "re.Match[str]", str], None]

# Evaluated top to bottom; the first matching pattern handles the line.
_RULES: tuple[tuple[re.Pattern[str], _Handler], ...] = (
    (_DIFF_GIT_RE, _on_diff_git),
    (_OLD_PATH_RE, _on_old_path),
    (_NEW_PATH_RE, _on_new_path),
    (HUNK_HEADER_RE, _on_hunk_header),
    (_BINARY_RE, _on_binary),
    (_RENAME_FROM_RE, _on_rename_from),
    (_RENAME_TO_RE, _on_rename_to),
)


def _on_content(state: _ParseState, line: str) -> None:
    hunk = state.current_hunk
    # "---"/"+++" lines that are not path headers are never content
    is_header_like = line.startswith(("---", "+++"))
    is_content = (line[:1] in ("+", "-", " ") or not line) and not is_header_like

    if hunk is None:
        if line.startswith("\\") or not line:
            return
        if is_content:
            state.drop(line, "content line outside of a hunk")
        else:
            # git metadata (index, mode, similarity, ...) between headers
            state.dropped += 1
        return

    if is_header_like:
        state.drop(line, "malformed file header inside a hunk")
    elif line.startswith("+"):
        hunk.lines.append(DiffLine(LineType.ADDITION, line[1:], new_line=state.new_line))
        state.new_line += 1
    elif line.startswith("-"):
        hunk.lines.append(DiffLine(LineType.DELETION, line[1:], old_line=state.old_line))
        state.old_line += 1
    elif line.startswith(" ") or not line:
        hunk.lines.append(DiffLine(LineType.CONTEXT, line[1:], state.old_line, state.new_line))
        state.old_line += 1
        state.new_line += 1
    elif line.startswith("\\"):
        # "\ No newline at end of file"
        pass
    else:
        state.drop(line, "unrecognized line inside a hunk")


def _close_hunk(state: _ParseState) -> None:
    """In strict mode, check the finished hunk against its header counts."""
    hunk = state.current_hunk
    if hunk is None or not state.strict:
        return
    old_seen = state.old_line - hunk.old_start
    new_seen = state.new_line - hunk.new_start
    if old_seen != hunk.old_count or new_seen != hunk.new_count:
        state.fail(
            f"hunk expected -{hunk.old_count} +{hunk.new_count} lines, "
            f"found -{old_seen} +{new_seen}",
            hunk.header,
        )


def _split_lines(text: str) -> list[str]:
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def parse(text: str, strict: bool = False) -> Document:
    """
    Parse unified diff text into a list of DiffFile.

    Never raises in the default lenient mode; the result may be empty or
    partial. With strict=True, malformed input raises DiffParseError.
    """
    state = _ParseState(strict=strict)

    for line in _split_lines(text):
        state.line_number += 1
        for pattern, handler in _RULES:
            m = pattern.match(line)
            if m:
                handler(state, m, line)
                break
        else:
            _on_content(state, line)
    _close_hunk(state)

    pairs = 0
    for file in state.files:
        for hunk in file.hunks:
            pairs += annotate_hunk(hunk)

    logger.debug(
        "Parsed %d file(s) from %d line(s); %d line(s) dropped, %d line pair(s) aligned",
        len(state.files), state.line_number, state.dropped, pairs,
    )
    return state.files
