"""
Terminal text utilities.

Provides:
- visible_width(): terminal column width of a string (ANSI-aware, wide chars)
- truncate_to_width(): cut a string to a column budget, keeping ANSI codes
- pad_to_width(): right-pad with spaces to an exact column width
- expand_tabs(): replace tabs with the fixed tab width used for measuring
"""
from __future__ import annotations

import re
import unicodedata
from typing import NamedTuple

from wcwidth import wcwidth

TAB_WIDTH = 3

_ANSI_SGR_RE = re.compile(r"\x1b\[[0-9;]*[mGKHJA-Z]")
_ANSI_OSC_RE = re.compile(r"\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)")

_WIDTH_CACHE_SIZE = 512
_width_cache: dict[str, int] = {}


def _segment_graphemes(text: str) -> list[str]:
    """Group each base character with the combining marks that follow it."""
    clusters: list[str] = []
    for ch in text:
        if clusters and (
            unicodedata.category(ch) in ("Mn", "Me", "Cf")
            or ord(ch) in (0x200D, 0xFE0F, 0x20E3)
        ):
            clusters[-1] += ch
        else:
            clusters.append(ch)
    return clusters


def _grapheme_width(segment: str) -> int:
    if not segment:
        return 0
    w = wcwidth(segment[0])
    if w < 0:
        return 0
    # Emoji sequences joined with ZWJ / presentation selector render double width
    if len(segment) > 1 and ("\u200d" in segment or "\ufe0f" in segment):
        return 2
    return w


def visible_width(s: str) -> int:
    """Calculate the visible terminal column width of a string."""
    if not s:
        return 0

    # Fast path: pure ASCII printable
    if all(0x20 <= ord(c) <= 0x7e for c in s):
        return len(s)

    cached = _width_cache.get(s)
    if cached is not None:
        return cached

    clean = expand_tabs(s)
    if "\x1b" in clean:
        clean = _ANSI_SGR_RE.sub("", clean)
        clean = _ANSI_OSC_RE.sub("", clean)

    width = sum(_grapheme_width(g) for g in _segment_graphemes(clean))

    if len(_width_cache) >= _WIDTH_CACHE_SIZE:
        _width_cache.pop(next(iter(_width_cache)))
    _width_cache[s] = width
    return width


def expand_tabs(s: str) -> str:
    return s.replace("\t", " " * TAB_WIDTH) if "\t" in s else s


class _AnsiExtract(NamedTuple):
    code: str
    length: int


def extract_ansi_code(s: str, pos: int) -> _AnsiExtract | None:
    """Extract the ANSI escape sequence starting at *pos*, if any."""
    if pos + 1 >= len(s) or s[pos] != "\x1b":
        return None
    next_ch = s[pos + 1]

    if next_ch == "[":
        j = pos + 2
        while j < len(s) and s[j] not in "mGKHJABCDEFSTfu~":
            j += 1
        if j < len(s):
            return _AnsiExtract(s[pos:j + 1], j + 1 - pos)
        return None

    if next_ch == "]":
        j = pos + 2
        while j < len(s):
            if s[j] == "\x07":
                return _AnsiExtract(s[pos:j + 1], j + 1 - pos)
            if s[j] == "\x1b" and j + 1 < len(s) and s[j + 1] == "\\":
                return _AnsiExtract(s[pos:j + 2], j + 2 - pos)
            j += 1
    return None


def truncate_to_width(
    text: str,
    max_width: int,
    ellipsis: str = "...",
    pad: bool = False,
) -> str:
    """
    Truncate text to max_width columns, adding ellipsis if it was cut.
    ANSI codes are kept but don't count toward width. A reset is emitted
    after a cut that dropped styled text.
    """
    if max_width <= 0:
        return ""
    text = expand_tabs(text)
    text_visible = visible_width(text)
    if text_visible <= max_width:
        if pad:
            return text + " " * (max_width - text_visible)
        return text

    ellipsis_width = visible_width(ellipsis)
    target_width = max_width - ellipsis_width
    if target_width <= 0:
        return ellipsis[:max_width]

    result: list[str] = []
    saw_ansi = False
    current_width = 0
    i = 0
    while i < len(text):
        ansi = extract_ansi_code(text, i)
        if ansi:
            result.append(ansi.code)
            saw_ansi = True
            i += ansi.length
            continue

        end = i
        while end < len(text) and not extract_ansi_code(text, end):
            end += 1

        stop = False
        for g in _segment_graphemes(text[i:end]):
            gw = _grapheme_width(g)
            if current_width + gw > target_width:
                stop = True
                break
            result.append(g)
            current_width += gw
        if stop:
            break
        i = end

    truncated = "".join(result) + ("\x1b[0m" if saw_ansi else "") + ellipsis
    if pad:
        return truncated + " " * max(0, max_width - current_width - ellipsis_width)
    return truncated


def pad_to_width(text: str, width: int) -> str:
    """Pad (or cut) *text* so that it occupies exactly *width* columns."""
    return truncate_to_width(text, width, "", pad=True)
