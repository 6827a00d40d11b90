"""
Word-level alignment between paired deletion/addition lines.

Lines are split into tokens (runs of word characters, single whitespace
characters, single punctuation characters), aligned with a longest common
subsequence, and every token outside the LCS becomes a WordChange span.
"""
from __future__ import annotations

import re

from .diff_model import DiffHunk, DiffLine, LineType, WordChange

_TOKEN_RE = re.compile(r"\w+|\s|[^\w\s]")


def tokenize(content: str) -> list[str]:
    """
    Split *content* into tokens. Joining the tokens gives back *content*.

    >>> tokenize("foo(bar, 2)")
    ['foo', '(', 'bar', ',', ' ', '2', ')']
    """
    return _TOKEN_RE.findall(content)


def compute_lcs(old_tokens: list[str], new_tokens: list[str]) -> tuple[set[int], set[int]]:
    """
    Return the indices of tokens kept unchanged in each sequence.

    Standard O(m*n) dynamic programming table followed by a backtrack from
    the bottom-right corner. On ties the backtrack steps through the new
    sequence first.
    """
    m = len(old_tokens)
    n = len(new_tokens)
    dp = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(1, m + 1):
        row, prev = dp[i], dp[i - 1]
        old_tok = old_tokens[i - 1]
        for j in range(1, n + 1):
            if old_tok == new_tokens[j - 1]:
                row[j] = prev[j - 1] + 1
            else:
                row[j] = max(prev[j], row[j - 1])

    old_kept: set[int] = set()
    new_kept: set[int] = set()
    i, j = m, n
    while i > 0 and j > 0:
        if old_tokens[i - 1] == new_tokens[j - 1]:
            old_kept.add(i - 1)
            new_kept.add(j - 1)
            i -= 1
            j -= 1
        elif dp[i - 1][j] > dp[i][j - 1]:
            i -= 1
        else:
            j -= 1
    return old_kept, new_kept


def _spans(tokens: list[str], kept: set[int], change_type: LineType) -> list[WordChange]:
    spans: list[WordChange] = []
    offset = 0
    for idx, tok in enumerate(tokens):
        if idx not in kept:
            spans.append(WordChange(offset, len(tok), change_type))
        offset += len(tok)
    return spans


def compute_inline_diff(old_line: DiffLine, new_line: DiffLine) -> None:
    """Populate word_changes on a paired deletion and addition line."""
    old_tokens = tokenize(old_line.content)
    new_tokens = tokenize(new_line.content)
    old_kept, new_kept = compute_lcs(old_tokens, new_tokens)
    old_line.word_changes = _spans(old_tokens, old_kept, LineType.DELETION)
    new_line.word_changes = _spans(new_tokens, new_kept, LineType.ADDITION)


def annotate_hunk(hunk: DiffHunk) -> int:
    """
    Pair each run of deletions with the run of additions right after it and
    align the pairs index by index. Lines beyond the shorter run are left
    without spans. Returns the number of aligned pairs.
    """
    lines = hunk.lines
    pairs = 0
    i = 0
    while i < len(lines):
        if lines[i].type is not LineType.DELETION:
            i += 1
            continue

        deletions: list[DiffLine] = []
        while i < len(lines) and lines[i].type is LineType.DELETION:
            deletions.append(lines[i])
            i += 1
        additions: list[DiffLine] = []
        while i < len(lines) and lines[i].type is LineType.ADDITION:
            additions.append(lines[i])
            i += 1

        for old, new in zip(deletions, additions):
            compute_inline_diff(old, new)
            pairs += 1
    return pairs
