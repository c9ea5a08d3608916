"""
Unit tests for text clean-up helpers.
"""

from link_metadata.text_utils import (
    MAX_TITLE_LENGTH,
    clip,
    collapse_whitespace,
    truncate_title,
)


class TestCollapseWhitespace:
    """Tests for collapse_whitespace()"""

    def test_collapses_runs(self):
        assert collapse_whitespace("a   b\t\tc") == "a b c"

    def test_collapses_blank_lines(self):
        assert collapse_whitespace("First line.\n\n\n   \nSecond line.") == "First line. Second line."

    def test_trims(self):
        assert collapse_whitespace("  padded  ") == "padded"

    def test_empty(self):
        assert collapse_whitespace("") == ""
        assert collapse_whitespace(None) == ""


class TestClip:
    """Tests for clip()"""

    def test_short_text_unchanged(self):
        assert clip("short", 10) == "short"

    def test_exact_limit_unchanged(self):
        assert clip("x" * 10, 10) == "x" * 10

    def test_long_text_gets_ellipsis(self):
        assert clip("x" * 12, 10) == "x" * 10 + "..."


class TestTruncateTitle:
    """Tests for truncate_title()"""

    def test_short_title(self):
        assert truncate_title("Hello World") == ("Hello World", False)

    def test_whitespace_is_collapsed(self):
        assert truncate_title("  Hello \n\t World  ") == ("Hello World", False)

    def test_control_characters_removed(self):
        assert truncate_title("Hello\x00 World\x07") == ("Hello World", False)

    def test_250_chars_becomes_exactly_200(self):
        title, was_truncated = truncate_title("A" * 250)
        assert was_truncated is True
        assert len(title) == MAX_TITLE_LENGTH == 200
        assert title.endswith("...")
        assert title == "A" * 197 + "..."

    def test_exactly_200_is_not_truncated(self):
        title, was_truncated = truncate_title("B" * 200)
        assert was_truncated is False
        assert title == "B" * 200

    def test_empty(self):
        assert truncate_title("") == ("", False)
        assert truncate_title(None) == ("", False)

    def test_whitespace_only(self):
        assert truncate_title("   \n  ") == ("", False)
