"""Tests for the implicit-multiplication finisher."""

from __future__ import annotations

import pytest

from latex_infix.errors import (
    MissingArgument,
    UnknownControlSequence,
    UnsupportedCharacter,
)
from latex_infix.stages.disambiguator import disambiguate
from latex_infix.stages.finisher import finish, strip_backslashes
from latex_infix.tokens import Token, TokenKind


def _finish(expression: str, strict: bool = True) -> str:
    return finish(disambiguate(expression), strict)


class TestImplicitMultiplication:
    @pytest.mark.parametrize(
        "expression, expected",
        [
            ("2x", "2*x"),
            ("2pi", "2*pi"),
            ("2sin(x)", "2*sin(x)"),
            ("2(x+1)", "2*(x+1)"),
            ("(a)(b)", "(a)*(b)"),
            ("(a)2", "(a)*2"),
            ("(a)x", "(a)*x"),
            ("(a)sin(x)", "(a)*sin(x)"),
            ("x(a)", "x*(a)"),
            ("pi(a)", "pi*(a)"),
        ],
    )
    def test_inserts_times(self, expression, expected):
        assert _finish(expression) == expected

    @pytest.mark.parametrize(
        "expression",
        ["sin(x)", "log10(100)", "x+y", "2^3", "(x^2)+1", "log(8,2)"],
    )
    def test_leaves_explicit_expressions_alone(self, expression):
        assert _finish(expression) == expression

    def test_whitespace_is_dropped(self):
        tokens = [
            Token(TokenKind.NUMBER, "2"),
            Token(TokenKind.WHITESPACE, " "),
            Token(TokenKind.VARIABLE, "x"),
        ]
        assert finish(tokens) == "2*x"


class TestBackslashes:
    def test_strict_rejects(self):
        with pytest.raises(UnknownControlSequence) as excinfo:
            _finish("x+\\q")
        assert excinfo.value.fragment == "\\q"

    def test_lenient_strips(self):
        assert _finish("2\\q", strict=False) == "2*q"

    def test_strip_keeps_other_tokens(self):
        tokens = disambiguate("x\\")
        assert [t.text for t in strip_backslashes(tokens, strict=False)] == ["x"]


class TestLiterals:
    @pytest.mark.parametrize(
        "expression, fragment",
        [("x_1", "_"), ("x=y", "="), ("3!", "!")],
    )
    def test_strict_rejects(self, expression, fragment):
        with pytest.raises(UnsupportedCharacter) as excinfo:
            _finish(expression)
        assert excinfo.value.fragment == fragment

    @pytest.mark.parametrize(
        "expression",
        ["x_1", "x=y", "3!"],
    )
    def test_lenient_passes_through(self, expression):
        assert _finish(expression, strict=False) == expression


class TestCalls:
    @pytest.mark.parametrize(
        "expression, fragment",
        [("sin()", "sin"), ("atan", "atan"), ("2+exp", "exp"), ("log10()+1", "log10")],
    )
    def test_strict_rejects_missing_arguments(self, expression, fragment):
        with pytest.raises(MissingArgument) as excinfo:
            _finish(expression)
        assert excinfo.value.fragment == fragment

    def test_lenient_keeps_empty_call(self):
        assert _finish("sin()", strict=False) == "sin()"
