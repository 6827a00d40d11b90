"""Tests for difftui.utils"""
from difftui.utils import TAB_WIDTH, expand_tabs, pad_to_width, truncate_to_width, visible_width


class TestVisibleWidth:
    def test_ascii(self):
        assert visible_width("hello") == 5

    def test_empty(self):
        assert visible_width("") == 0

    def test_ansi_stripped(self):
        assert visible_width("\x1b[31mhello\x1b[0m") == 5

    def test_truecolor_stripped(self):
        assert visible_width("\x1b[38;2;80;255;80;48;2;0;60;0m+1\x1b[0m") == 2

    def test_unicode_cjk(self):
        assert visible_width("中文") == 4

    def test_box_drawing(self):
        assert visible_width("▼ a → b│█") == 9

    def test_tab(self):
        assert visible_width("\t") == TAB_WIDTH

    def test_newline_not_counted(self):
        assert visible_width("\n") == 0

    def test_combining_mark(self):
        assert visible_width("e\u0301") == 1


class TestTruncateToWidth:
    def test_short_string_unchanged(self):
        assert truncate_to_width("hello", 10) == "hello"

    def test_truncated_with_ellipsis(self):
        assert truncate_to_width("hello world", 8) == "hello..."

    def test_custom_ellipsis(self):
        assert truncate_to_width("hello world", 5, "") == "hello"

    def test_zero_width(self):
        assert truncate_to_width("hello", 0) == ""

    def test_pad(self):
        assert truncate_to_width("hi", 5, pad=True) == "hi   "

    def test_wide_char_not_split(self):
        result = truncate_to_width("中文字", 5, "")
        assert result == "中文"
        assert visible_width(result) <= 5

    def test_ansi_reset_after_cut(self):
        result = truncate_to_width("\x1b[31mhello world\x1b[0m", 8)
        assert result.endswith("\x1b[0m...")
        assert visible_width(result) == 8

    def test_tabs_expanded(self):
        assert truncate_to_width("a\tb", 10) == "a" + " " * TAB_WIDTH + "b"


class TestPadToWidth:
    def test_pads(self):
        assert pad_to_width("abc", 5) == "abc  "

    def test_cuts(self):
        assert pad_to_width("abcdef", 3) == "abc"

    def test_wide_boundary(self):
        result = pad_to_width("中文", 3)
        assert result == "中 "
        assert visible_width(result) == 3


class TestExpandTabs:
    def test_no_tabs(self):
        assert expand_tabs("abc") == "abc"

    def test_tabs(self):
        assert expand_tabs("\t\t") == " " * (2 * TAB_WIDTH)
