"""Tests for the notation normalizer stage."""

from __future__ import annotations

from latex_infix.stages.normalizer import (
    normalize,
    pair_bars,
    reduce_left_right,
    rewrite_explicit_abs,
    square_brackets,
)


class TestAbsoluteValue:
    def test_bare_bars_pair_by_parity(self):
        assert pair_bars("|x|+|y|") == "(abs(x))+(abs(y))"

    def test_odd_bar_leaves_open_call(self):
        assert pair_bars("|x") == "(abs(x"

    def test_escaped_bar_is_not_a_delimiter(self):
        assert pair_bars(r"a\|b") == r"a\|b"

    def test_left_right_bars(self):
        assert rewrite_explicit_abs(r"\left|x\right|") == "abs(x)"
        assert rewrite_explicit_abs(r"\left\lvert x\right\rvert") == "abs( x)"

    def test_lvert_rvert(self):
        assert rewrite_explicit_abs(r"\lvert x\rvert") == "abs( x)"

    def test_explicit_bars_nest(self):
        latex = r"\left|\left|x\right|-1\right|"
        assert rewrite_explicit_abs(latex) == "abs(abs(x)-1)"


class TestLeftRight:
    def test_parentheses(self):
        assert reduce_left_right(r"\left(x\right)") == "(x)"

    def test_brackets_and_braces(self):
        assert reduce_left_right(r"\left[x\right]") == "(x)"
        assert reduce_left_right(r"\left\{x\right\}") == "(x)"

    def test_invisible_delimiter(self):
        assert reduce_left_right(r"\left. x \right)") == " x )"

    def test_escaped_braces(self):
        assert reduce_left_right(r"\{a\}") == "(a)"


class TestSquareBrackets:
    def test_grouping_brackets(self):
        assert square_brackets("[x+1]") == "(x+1)"

    def test_root_index_is_kept(self):
        assert square_brackets(r"\sqrt[3]{x}") == r"\sqrt[3]{x}"
        assert square_brackets(r"[\sqrt[3]{x}]") == r"(\sqrt[3]{x})"


def test_normalize_full():
    assert normalize(r"3\left|x-y\right|") == "3abs(x-y)"
    assert normalize(" |a| ") == "(abs(a))"
    assert normalize(r"\left[ |x| \right]") == "( (abs(x)) )"
