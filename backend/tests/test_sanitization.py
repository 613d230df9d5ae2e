"""
Unit tests for contact form input sanitization.
"""

from helpers.sanitization import sanitize_input


class TestSanitizeInput:
    """Tests for sanitize_input function."""

    def test_trims_and_removes_angle_brackets(self) -> None:
        """Whitespace is trimmed and every < and > removed."""
        assert sanitize_input(" <b>hi</b> ") == "bhi/b"

    def test_script_tag_is_defused(self) -> None:
        result = sanitize_input('<script>alert("x")</script>')
        assert "<" not in result
        assert ">" not in result
        assert result == 'scriptalert("x")/script'

    def test_clean_input_is_unchanged(self) -> None:
        """Clean input passes through untouched."""
        assert sanitize_input("Anna Svensson") == "Anna Svensson"

    def test_inner_whitespace_preserved(self) -> None:
        """Line breaks inside a message are kept."""
        assert sanitize_input("  line one\nline two  ") == "line one\nline two"

    def test_trim_happens_before_removal(self) -> None:
        """Whitespace exposed by removing a bracket is not trimmed again."""
        assert sanitize_input("< hello >") == " hello "

    def test_handles_none(self) -> None:
        """None input becomes an empty string."""
        assert sanitize_input(None) == ""

    def test_handles_empty_string(self) -> None:
        assert sanitize_input("") == ""

    def test_only_brackets_becomes_empty(self) -> None:
        assert sanitize_input("  <<>>  ") == ""

    def test_other_markup_characters_kept(self) -> None:
        """Only angle brackets are removed; quotes and ampersands stay."""
        assert sanitize_input("Tom & \"Jerry\"") == 'Tom & "Jerry"'
