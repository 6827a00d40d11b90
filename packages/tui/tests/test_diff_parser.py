"""Tests for difftui.diff_parser"""
import pytest

from difftui.diff_model import LineType, WordChange
from difftui.diff_parser import DiffParseError, parse


NEW_FILE_DIFF = """\
diff --git a/new.txt b/new.txt
new file mode 100644
--- /dev/null
+++ b/new.txt
@@ -0,0 +1,2 @@
+first
+second
"""

DELETED_FILE_DIFF = """\
diff --git a/gone.txt b/gone.txt
deleted file mode 100644
--- a/gone.txt
+++ /dev/null
@@ -1 +0,0 @@
-bye
"""

RENAME_DIFF = """\
diff --git a/old_name.py b/new_name.py
similarity index 100%
rename from old_name.py
rename to new_name.py
"""

BINARY_DIFF = """\
diff --git a/logo.png b/logo.png
index 1234567..89abcde 100644
Binary files a/logo.png and b/logo.png differ
"""


class TestEndToEnd:
    def test_single_file(self, simple_diff):
        files = parse(simple_diff)
        assert len(files) == 1
        f = files[0]
        assert f.old_path == "foo.txt"
        assert f.new_path == "foo.txt"
        assert f.display_path == "foo.txt"

    def test_hunk_header_fields(self, simple_diff):
        hunk = parse(simple_diff)[0].hunks[0]
        assert hunk.header == "@@ -1,2 +1,2 @@"
        assert (hunk.old_start, hunk.old_count) == (1, 2)
        assert (hunk.new_start, hunk.new_count) == (1, 2)
        assert hunk.collapsed is False

    def test_lines(self, simple_diff):
        lines = parse(simple_diff)[0].hunks[0].lines
        assert [(ln.type, ln.content, ln.old_line, ln.new_line) for ln in lines] == [
            (LineType.DELETION, "hello world", 1, None),
            (LineType.ADDITION, "hello there", None, 1),
            (LineType.CONTEXT, "unchanged", 2, 2),
        ]

    def test_word_changes(self, simple_diff):
        deletion, addition, context = parse(simple_diff)[0].hunks[0].lines
        assert deletion.word_changes == [WordChange(6, 5, LineType.DELETION)]
        assert addition.word_changes == [WordChange(6, 5, LineType.ADDITION)]
        assert context.word_changes == []


class TestStructure:
    def test_one_file_per_diff_git_header(self, multi_diff):
        files = parse(multi_diff)
        assert [f.new_path for f in files] == ["a.py", "b.py"]

    def test_hunks_in_order(self, multi_diff):
        hunks = parse(multi_diff)[1].hunks
        assert [h.old_start for h in hunks] == [1, 10]
        assert hunks[1].header == "@@ -10,3 +9,3 @@ def main():"

    def test_line_numbers_increment_from_hunk_start(self, multi_diff):
        hunk = parse(multi_diff)[1].hunks[1]
        old = [ln.old_line for ln in hunk.lines if ln.type is not LineType.ADDITION]
        new = [ln.new_line for ln in hunk.lines if ln.type is not LineType.DELETION]
        assert old == [10, 11, 12]
        assert new == [9, 10, 11]

    def test_stats(self, multi_diff):
        a, b = parse(multi_diff)
        assert (a.additions, a.deletions) == (1, 0)
        assert (b.additions, b.deletions) == (1, 2)

    def test_empty_input(self):
        assert parse("") == []

    def test_text_without_diff_headers(self):
        assert parse("just some text\nnothing here\n") == []

    def test_crlf_line_endings(self, simple_diff):
        files = parse(simple_diff.replace("\n", "\r\n"))
        lines = files[0].hunks[0].lines
        assert [ln.content for ln in lines] == ["hello world", "hello there", "unchanged"]

    def test_counts_default_to_one(self):
        text = "diff --git a/x b/x\n--- a/x\n+++ b/x\n@@ -5 +5 @@\n-a\n+b\n"
        hunk = parse(text)[0].hunks[0]
        assert (hunk.old_start, hunk.old_count, hunk.new_start, hunk.new_count) == (5, 1, 5, 1)

    def test_no_newline_marker_ignored(self):
        text = (
            "diff --git a/x b/x\n--- a/x\n+++ b/x\n@@ -1 +1 @@\n"
            "-a\n\\ No newline at end of file\n+b\n"
        )
        lines = parse(text)[0].hunks[0].lines
        assert [ln.type for ln in lines] == [LineType.DELETION, LineType.ADDITION]

    def test_empty_line_in_hunk_is_context(self):
        text = "diff --git a/x b/x\n--- a/x\n+++ b/x\n@@ -1,3 +1,3 @@\n a\n\n c\n"
        lines = parse(text)[0].hunks[0].lines
        assert [ln.type for ln in lines] == [LineType.CONTEXT] * 3
        assert lines[1].content == ""
        assert (lines[2].old_line, lines[2].new_line) == (3, 3)


class TestFileFlags:
    def test_new_file(self):
        f = parse(NEW_FILE_DIFF)[0]
        assert f.new_file is True
        assert f.status == "added"
        assert f.display_path == "new.txt"
        assert [ln.new_line for ln in f.hunks[0].lines] == [1, 2]

    def test_deleted_file(self):
        f = parse(DELETED_FILE_DIFF)[0]
        assert f.deleted_file is True
        assert f.status == "deleted"
        assert f.display_path == "gone.txt"
        assert f.deletions == 1

    def test_rename(self):
        f = parse(RENAME_DIFF)[0]
        assert f.renamed is True
        assert f.old_path == "old_name.py"
        assert f.new_path == "new_name.py"
        assert f.display_path == "old_name.py → new_name.py"
        assert f.hunks == []

    def test_binary(self):
        f = parse(BINARY_DIFF)[0]
        assert f.binary is True
        assert f.status == "binary"
        assert f.hunks == []

    def test_path_prefixes_stripped(self):
        text = "diff --git a/src/x.py b/src/x.py\n--- a/src/x.py\n+++ b/src/y.py\n"
        f = parse(text)[0]
        assert f.old_path == "src/x.py"
        assert f.new_path == "src/y.py"


class TestLenient:
    def test_content_before_any_file_is_dropped(self):
        assert parse("+orphan\n-orphan\n context\n") == []

    def test_hunk_without_file_is_dropped(self):
        assert parse("@@ -1 +1 @@\n-a\n+b\n") == []

    def test_unrecognized_line_in_hunk_is_dropped(self):
        text = "diff --git a/x b/x\n--- a/x\n+++ b/x\n@@ -1,2 +1,2 @@\n a\nGARBAGE\n b\n"
        lines = parse(text)[0].hunks[0].lines
        assert [ln.content for ln in lines] == ["a", "b"]
        assert lines[1].old_line == 2

    def test_content_after_file_before_hunk_is_dropped(self):
        text = "diff --git a/x b/x\n+stray\n@@ -1 +1 @@\n-a\n+b\n"
        f = parse(text)[0]
        assert len(f.hunks) == 1
        assert len(f.hunks[0].lines) == 2

    @pytest.mark.parametrize("bad", ["---", "---x", "+++", "+++x"])
    def test_header_like_lines_in_hunk_are_dropped(self, bad):
        text = f"diff --git a/x b/x\n@@ -1,2 +1,1 @@\n{bad}\n a\n"
        lines = parse(text)[0].hunks[0].lines
        assert [(ln.type, ln.content, ln.old_line, ln.new_line) for ln in lines] == [
            (LineType.CONTEXT, "a", 1, 1),
        ]

    def test_count_mismatch_tolerated(self):
        text = "diff --git a/x b/x\n--- a/x\n+++ b/x\n@@ -1,5 +1,5 @@\n a\n"
        assert len(parse(text)[0].hunks[0].lines) == 1


class TestStrict:
    def test_valid_diffs_parse(self, simple_diff, multi_diff):
        assert len(parse(simple_diff, strict=True)) == 1
        assert len(parse(multi_diff, strict=True)) == 2
        assert len(parse(NEW_FILE_DIFF, strict=True)) == 1
        assert len(parse(DELETED_FILE_DIFF, strict=True)) == 1

    def test_metadata_lines_tolerated(self):
        assert parse(RENAME_DIFF, strict=True)[0].renamed
        assert parse(BINARY_DIFF, strict=True)[0].binary

    def test_content_outside_hunk(self):
        with pytest.raises(DiffParseError) as exc:
            parse("+orphan\n", strict=True)
        assert exc.value.line_number == 1
        assert exc.value.line == "+orphan"

    def test_hunk_without_file(self):
        with pytest.raises(DiffParseError) as exc:
            parse("\n@@ -1 +1 @@\n", strict=True)
        assert exc.value.line_number == 2

    def test_unrecognized_line_in_hunk(self):
        text = "diff --git a/x b/x\n--- a/x\n+++ b/x\n@@ -1,2 +1,2 @@\n a\nGARBAGE\n b\n"
        with pytest.raises(DiffParseError) as exc:
            parse(text, strict=True)
        assert exc.value.line_number == 6

    def test_header_like_line_in_hunk(self):
        text = "diff --git a/x b/x\n@@ -1 +1 @@\n---\n a\n"
        with pytest.raises(DiffParseError) as exc:
            parse(text, strict=True)
        assert exc.value.line_number == 3

    def test_count_mismatch(self):
        text = "diff --git a/x b/x\n--- a/x\n+++ b/x\n@@ -1,5 +1,5 @@\n a\n"
        with pytest.raises(DiffParseError, match="expected -5 \\+5"):
            parse(text, strict=True)

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            parse("+orphan\n", strict=True)
