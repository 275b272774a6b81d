"""Implicit-multiplication finisher: close the remaining juxtaposition gaps.

Works on the classified token stream, so the function-call guard is
structural: a FUNCTION token followed by ``(`` is a call and is never
split, whatever text surrounds it.
"""

from __future__ import annotations

import logging

from latex_infix.errors import (
    MissingArgument,
    UnknownControlSequence,
    UnsupportedCharacter,
)
from latex_infix.tokens import LETTERLIKE, TIMES, Token, TokenKind, render

logger = logging.getLogger(__name__)


def _needs_times(left: Token, right: Token) -> bool:
    if left.kind is TokenKind.NUMBER:
        # 2x, 2sin(x), 2(x+1)
        return right.kind in LETTERLIKE or right.opens
    if left.closes:
        # (a)2, (a)(b), (a)x, (a)sin(x)
        return (
            right.kind is TokenKind.NUMBER
            or right.opens
            or right.kind in LETTERLIKE
        )
    if left.kind in (TokenKind.VARIABLE, TokenKind.CONSTANT):
        # x(a), pi(a); never sin(a)
        return right.opens
    return False


def insert_implicit_multiplication(tokens: list[Token]) -> list[Token]:
    result: list[Token] = []
    for token in tokens:
        if token.kind is TokenKind.WHITESPACE:
            continue
        if result and _needs_times(result[-1], token):
            result.append(TIMES)
        result.append(token)
    return result


def strip_backslashes(tokens: list[Token], strict: bool = True) -> list[Token]:
    """Drop leftover backslashes, or reject them in strict mode."""
    kept: list[Token] = []
    for index, token in enumerate(tokens):
        if token.kind is TokenKind.LITERAL and token.text == "\\":
            if strict:
                following = tokens[index + 1:index + 2]
                fragment = "\\" + (following[0].text if following else "")
                raise UnknownControlSequence(
                    "unrecognised control sequence", fragment=fragment,
                )
            logger.debug("dropping unrecognised control sequence")
            continue
        kept.append(token)
    return kept


def reject_literals(tokens: list[Token]) -> None:
    """Strict mode: nothing outside the infix grammar may reach the output."""
    for token in tokens:
        if token.kind is TokenKind.LITERAL:
            raise UnsupportedCharacter(
                f"{token.text!r} has no infix equivalent", fragment=token.text,
            )


def check_calls(tokens: list[Token]) -> None:
    """Every function name must be called on a non-empty group."""
    for index, token in enumerate(tokens):
        if token.kind is not TokenKind.FUNCTION:
            continue
        following = tokens[index + 1:index + 3]
        if not following or not following[0].opens:
            raise MissingArgument(
                f"{token.text} needs an argument", fragment=token.text,
            )
        if len(following) == 2 and following[1].closes:
            raise MissingArgument(
                f"{token.text}() has an empty argument", fragment=token.text,
            )


def finish(tokens: list[Token], strict: bool = True) -> str:
    """Run the finisher stage and render the output expression."""
    tokens = strip_backslashes(tokens, strict)
    if strict:
        reject_literals(tokens)
        check_calls(tokens)
    return render(insert_implicit_multiplication(tokens))
