"""Tests for balanced group scanning."""

from __future__ import annotations

from latex_infix.braces import (
    find_closing,
    is_wrapped,
    read_argument,
    read_group,
    skip_spaces,
)


class TestFindClosing:
    def test_nested(self):
        assert find_closing("{a{b}c}", 0) == 6
        assert find_closing("{a{b}c}", 2) == 4

    def test_parentheses_and_brackets(self):
        assert find_closing("(x+(y))", 0) == 6
        assert find_closing("[1]", 0) == 2

    def test_unbalanced(self):
        assert find_closing("{a", 0) is None
        assert find_closing("{{a}", 0) is None

    def test_escaped_braces_are_not_counted(self):
        assert find_closing(r"{a\}b}", 0) == 5

    def test_depth_is_unbounded(self):
        text = "{" * 50 + "x" + "}" * 50
        assert find_closing(text, 0) == len(text) - 1


class TestReadGroup:
    def test_returns_content_and_end(self):
        assert read_group("{ab}c", 0) == ("ab", 4)

    def test_not_a_group(self):
        assert read_group("ab", 0) is None
        assert read_group("", 0) is None

    def test_unclosed(self):
        assert read_group("{ab", 0) is None


class TestReadArgument:
    def test_single_characters(self):
        assert read_argument("12", 0) == ("1", 1)
        assert read_argument("12", 1) == ("2", 2)

    def test_brace_group_skips_leading_space(self):
        assert read_argument(" {x+1}", 0) == ("x+1", 6)

    def test_control_word(self):
        assert read_argument(r"\pi r", 0) == (r"\pi", 3)

    def test_control_symbol(self):
        assert read_argument(r"\{", 0) == (r"\{", 2)

    def test_operators_are_not_arguments(self):
        assert read_argument("+x", 0) is None
        assert read_argument("}", 0) is None
        assert read_argument("", 0) is None


def test_skip_spaces():
    assert skip_spaces("  x", 0) == 2
    assert skip_spaces("x", 0) == 0
    assert skip_spaces("   ", 0) == 3


def test_is_wrapped():
    assert is_wrapped("(a)")
    assert is_wrapped("((a)(b))")
    assert not is_wrapped("(a)(b)")
    assert not is_wrapped("a")
    assert is_wrapped("{x}", "{")
    assert not is_wrapped("{x}", "(")
