"""Tests for unified diff parsing.

Given-When-Then structure, real diff text as input.
"""

from driftcheck.tools.diff_parser import (
    ParsedDiff,
    is_docs_only_diff,
    parse_diff,
    parse_hunk_header,
)


SAMPLE_DIFF = """diff --git a/src/main.rs b/src/main.rs
index 1234567..abcdefg 100644
--- a/src/main.rs
+++ b/src/main.rs
@@ -10,6 +10,8 @@ fn main() {
     let config = Config::load();
+    let timeout = 60;
+    println!("Timeout: {}", timeout);
     run(config);
 }
diff --git a/README.md b/README.md
--- a/README.md
+++ b/README.md
@@ -1,3 +1,3 @@
 # Project
-Default timeout is 30 seconds.
+Default timeout is 60 seconds.
"""


class TestParseHunkHeader:
    """Tests for hunk header parsing."""

    def test_full_header(self):
        """Given a header with both counts, should return all four numbers."""
        assert parse_hunk_header("@@ -10,6 +10,8 @@ fn main() {") == (10, 6, 10, 8)

    def test_counts_default_to_one(self):
        """Given a header without counts, counts should default to 1."""
        assert parse_hunk_header("@@ -5 +7 @@") == (5, 1, 7, 1)

    def test_unparsable_count_defaults_to_one(self):
        """Given a non-numeric count, should fall back to 1."""
        assert parse_hunk_header("@@ -5,x +7,2 @@") == (5, 1, 7, 2)

    def test_missing_range_is_rejected(self):
        """Given a header missing the new-side range, should return None."""
        assert parse_hunk_header("@@ -5,2 @@") is None
        assert parse_hunk_header("@@ garbage @@") is None


class TestParseDiff:
    """Tests for parse_diff."""

    def test_files_and_hunks_in_order(self):
        """Given a two-file diff, should list both files in order of appearance."""
        # When
        parsed = parse_diff(SAMPLE_DIFF)

        # Then
        assert parsed.files == ("src/main.rs", "README.md")
        assert len(parsed.hunks) == 2
        first = parsed.hunks[0]
        assert first.file == "src/main.rs"
        assert (first.old_start, first.old_count, first.new_start, first.new_count) == (10, 6, 10, 8)
        assert "+    let timeout = 60;" in first.content

    def test_empty_diff(self):
        """Given empty or blank text, should produce an empty ParsedDiff."""
        assert parse_diff("").is_empty
        assert parse_diff("   \n").is_empty
        assert parse_diff("") == ParsedDiff()

    def test_file_listed_once(self):
        """Given the same file twice, should list it only once."""
        # Given
        diff = (
            "diff --git a/a.py b/a.py\n@@ -1 +1 @@\n-x\n+y\n"
            "diff --git a/a.py b/a.py\n@@ -9 +9 @@\n-x\n+y\n"
        )

        # When
        parsed = parse_diff(diff)

        # Then
        assert parsed.files == ("a.py",)
        assert len(parsed.hunks) == 2

    def test_malformed_hunk_is_skipped(self):
        """Given a broken hunk header, should keep the file and the good hunks."""
        # Given
        diff = (
            "diff --git a/a.py b/a.py\n"
            "@@ broken @@\n+ignored\n"
            "@@ -3,1 +3,1 @@\n-old\n+new\n"
        )

        # When
        parsed = parse_diff(diff)

        # Then
        assert parsed.files == ("a.py",)
        assert len(parsed.hunks) == 1
        assert parsed.hunks[0].new_start == 3
        assert "+ignored" not in parsed.hunks[0].content

    def test_renamed_file_uses_new_path(self):
        """Given a rename, should record the new-side path."""
        parsed = parse_diff("diff --git a/old/name.md b/new/name.md\nsimilarity index 100%\n")
        assert parsed.files == ("new/name.md",)
        assert parsed.hunks == ()

    def test_quoted_paths(self):
        """Given quoted paths with spaces, should strip the quotes."""
        parsed = parse_diff('diff --git "a/my docs/x.md" "b/my docs/x.md"\n')
        assert parsed.files == ("my docs/x.md",)


class TestIsDocsOnlyDiff:
    """Tests for is_docs_only_diff."""

    def test_docs_only(self):
        parsed = parse_diff("diff --git a/README.md b/README.md\ndiff --git a/docs/a.rst b/docs/a.rst\n")
        assert is_docs_only_diff(parsed)

    def test_mixed(self):
        assert not is_docs_only_diff(parse_diff(SAMPLE_DIFF))

    def test_empty_is_not_docs_only(self):
        assert not is_docs_only_diff(parse_diff(""))
