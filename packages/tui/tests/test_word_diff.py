"""Tests for difftui.word_diff"""
from difftui.diff_model import DiffHunk, DiffLine, LineType, WordChange
from difftui.word_diff import annotate_hunk, compute_inline_diff, compute_lcs, tokenize


def _del(content: str) -> DiffLine:
    return DiffLine(LineType.DELETION, content, old_line=1)


def _add(content: str) -> DiffLine:
    return DiffLine(LineType.ADDITION, content, new_line=1)


def _covered(line: DiffLine) -> set[int]:
    return {k for start, length, _ in line.word_changes for k in range(start, start + length)}


class TestTokenize:
    def test_words_and_punctuation(self):
        assert tokenize("foo(bar, 2)") == ["foo", "(", "bar", ",", " ", "2", ")"]

    def test_each_whitespace_char_is_a_token(self):
        assert tokenize("a  \tb") == ["a", " ", " ", "\t", "b"]

    def test_underscores_and_digits_join_words(self):
        assert tokenize("snake_case x1") == ["snake_case", " ", "x1"]

    def test_each_symbol_is_a_token(self):
        assert tokenize("->=") == ["-", ">", "="]

    def test_tokens_rebuild_content(self):
        s = "  if (a->b != c_d) { return 42; }"
        assert "".join(tokenize(s)) == s

    def test_empty(self):
        assert tokenize("") == []


class TestComputeLcs:
    def test_identical(self):
        old_kept, new_kept = compute_lcs(["a", "b"], ["a", "b"])
        assert old_kept == {0, 1}
        assert new_kept == {0, 1}

    def test_disjoint(self):
        assert compute_lcs(["a"], ["b"]) == (set(), set())

    def test_empty_side(self):
        assert compute_lcs([], ["a", "b"]) == (set(), set())

    def test_tie_steps_through_new_sequence_first(self):
        # Both "a" and "b" are an LCS of length 1; the backtrack keeps "b"
        assert compute_lcs(["a", "b"], ["b", "a"]) == ({1}, {0})

    def test_subsequence(self):
        old_kept, new_kept = compute_lcs(["x", "a", "y", "b"], ["a", "b", "z"])
        assert old_kept == {1, 3}
        assert new_kept == {0, 1}


class TestComputeInlineDiff:
    def test_identical_lines_have_no_spans(self):
        old, new = _del("same text here"), _add("same text here")
        compute_inline_diff(old, new)
        assert old.word_changes == []
        assert new.word_changes == []

    def test_changed_word(self):
        old, new = _del("hello world"), _add("hello there")
        compute_inline_diff(old, new)
        assert old.word_changes == [WordChange(6, 5, LineType.DELETION)]
        assert new.word_changes == [WordChange(6, 5, LineType.ADDITION)]

    def test_removed_prefix(self):
        old, new = _del("hello world"), _add("world")
        compute_inline_diff(old, new)
        assert old.word_changes == [
            WordChange(0, 5, LineType.DELETION),
            WordChange(5, 1, LineType.DELETION),
        ]
        assert new.word_changes == []

    def test_disjoint_lines_fully_covered(self):
        old, new = _del("a+b"), _add("c-d")
        compute_inline_diff(old, new)
        assert _covered(old) == set(range(3))
        assert _covered(new) == set(range(3))

    def test_spans_sorted_non_overlapping_in_bounds(self):
        old = _del("result = compute(alpha, beta)  # old")
        new = _add("result = compute_fast(alpha, gamma, beta)")
        compute_inline_diff(old, new)
        for line in (old, new):
            end = 0
            for start, length, _ in line.word_changes:
                assert start >= end
                assert length > 0
                end = start + length
            assert end <= len(line.content)

    def test_spans_carry_line_type(self):
        old, new = _del("a b"), _add("a c")
        compute_inline_diff(old, new)
        assert all(c.type is LineType.DELETION for c in old.word_changes)
        assert all(c.type is LineType.ADDITION for c in new.word_changes)


class TestAnnotateHunk:
    def test_pairs_up_to_shorter_run(self):
        d1, d2, a1 = _del("a1"), _del("a2"), _add("b1")
        trailing = _add("c")
        hunk = DiffHunk(header="@@", lines=[
            d1, d2, a1,
            DiffLine(LineType.CONTEXT, "ctx", 3, 2),
            trailing,
        ])
        assert annotate_hunk(hunk) == 1
        assert d1.word_changes == [WordChange(0, 2, LineType.DELETION)]
        assert a1.word_changes == [WordChange(0, 2, LineType.ADDITION)]
        assert d2.word_changes == []
        assert trailing.word_changes == []

    def test_additions_before_deletions_not_paired(self):
        a, d = _add("x"), _del("y")
        hunk = DiffHunk(header="@@", lines=[a, d])
        assert annotate_hunk(hunk) == 0
        assert a.word_changes == []
        assert d.word_changes == []

    def test_multiple_runs(self):
        lines = [
            _del("one"), _add("uno"),
            DiffLine(LineType.CONTEXT, "keep", 2, 2),
            _del("two"), _del("three"), _add("dos"), _add("tres"),
        ]
        assert annotate_hunk(DiffHunk(header="@@", lines=lines)) == 3

    def test_context_only(self):
        hunk = DiffHunk(header="@@", lines=[DiffLine(LineType.CONTEXT, "x", 1, 1)])
        assert annotate_hunk(hunk) == 0
