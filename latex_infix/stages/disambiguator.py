"""Function/variable disambiguator: classify the brace-free stream.

Scans left to right with the known function table. A run of letters is
either one known name, a bare application such as ``sinx``, or a sequence
of single-letter variables. Multiplication is made explicit between
adjacent variables and constants but a function name is never split.
"""

from __future__ import annotations

from latex_infix.braces import find_closing
from latex_infix.tokens import (
    CLOSE,
    DELIMITER_CHARS,
    OPEN,
    OPERATOR_CHARS,
    TIMES,
    Token,
    TokenKind,
)
from latex_infix.vocabulary import DEFAULT_TABLE, KnownFunctionTable

_MULTIPLICANDS = frozenset({TokenKind.VARIABLE, TokenKind.CONSTANT})
_FOLLOWERS = frozenset({TokenKind.VARIABLE, TokenKind.CONSTANT, TokenKind.FUNCTION})


def _starts_number(text: str, pos: int) -> bool:
    if text[pos].isdigit():
        return True
    return text[pos] == "." and pos + 1 < len(text) and text[pos + 1].isdigit()


class Disambiguator:
    """Tokenize a whitespace-free infix string against a function table."""

    def __init__(self, table: KnownFunctionTable = DEFAULT_TABLE) -> None:
        self.table = table

    def tokenize(self, text: str) -> list[Token]:
        return _join_multiplicands(self._scan(text))

    # -- scanning ----------------------------------------------------------

    def _scan(self, text: str) -> list[Token]:
        tokens: list[Token] = []
        pos = 0
        while pos < len(text):
            char = text[pos]
            if _starts_number(text, pos):
                token, pos = self._number(text, pos)
                tokens.append(token)
            elif char.isalpha():
                word, pos = self._word(text, pos)
                tokens.extend(word)
            elif char in OPERATOR_CHARS:
                tokens.append(Token(TokenKind.OPERATOR, char))
                pos += 1
            elif char in DELIMITER_CHARS:
                tokens.append(Token(TokenKind.DELIMITER, char))
                pos += 1
            elif char.isspace():
                tokens.append(Token(TokenKind.WHITESPACE, char))
                pos += 1
            else:
                tokens.append(Token(TokenKind.LITERAL, char))
                pos += 1
        return tokens

    @staticmethod
    def _number(text: str, pos: int) -> tuple[Token, int]:
        end = pos
        seen_point = False
        while end < len(text):
            if text[end].isdigit():
                end += 1
            elif text[end] == "." and not seen_point:
                seen_point = True
                end += 1
            else:
                break
        return Token(TokenKind.NUMBER, text[pos:end]), end

    def _word(self, text: str, pos: int) -> tuple[list[Token], int]:
        """Classify the letters starting at ``pos``; return tokens and new pos."""
        name = self.table.match(text, pos)
        if name is not None:
            kind = (
                TokenKind.CONSTANT if self.table.is_constant(name)
                else TokenKind.FUNCTION
            )
            return [Token(kind, name)], pos + len(name)

        name = self.table.match_prefix(text, pos)
        if name is not None and self.table.is_constant(name):
            return [Token(TokenKind.CONSTANT, name)], pos + len(name)
        if name is not None:
            after = pos + len(name)
            if text[after].isalpha() or _starts_number(text, after):
                return self._bare_application(text, name, after)
            return [Token(TokenKind.FUNCTION, name)], after

        return [Token(TokenKind.VARIABLE, text[pos])], pos + 1

    def _bare_application(
        self, text: str, name: str, pos: int,
    ) -> tuple[list[Token], int]:
        """``sinx`` -> sin(x): the argument runs up to the next function name.

        A leading number belongs to the argument (``log2`` -> log(2)); a
        function written directly after the name nests (``sincosx``).
        """
        argument: list[Token] = []
        if _starts_number(text, pos):
            number, pos = self._number(text, pos)
            argument.append(number)
        while pos < len(text) and text[pos].isalpha():
            inner = self.table.match_prefix(text, pos)
            if inner is not None and self.table.is_function(inner):
                if argument:
                    break
                nested, pos = self._word(text, pos)
                argument.extend(nested)
                called = pos < len(text) and text[pos] == "("
                if nested[-1].kind is TokenKind.FUNCTION and called:
                    close = find_closing(text, pos)
                    if close is not None:
                        argument.extend(self._scan(text[pos:close + 1]))
                        pos = close + 1
                break
            if inner is not None:
                argument.append(Token(TokenKind.CONSTANT, inner))
                pos += len(inner)
            else:
                argument.append(Token(TokenKind.VARIABLE, text[pos]))
                pos += 1
        return [Token(TokenKind.FUNCTION, name), OPEN, *argument, CLOSE], pos


def _join_multiplicands(tokens: list[Token]) -> list[Token]:
    """Insert ``*`` after a variable or constant that abuts another letter."""
    joined: list[Token] = []
    for token in tokens:
        if (
            joined
            and joined[-1].kind in _MULTIPLICANDS
            and token.kind in _FOLLOWERS
        ):
            joined.append(TIMES)
        joined.append(token)
    return joined


def disambiguate(
    text: str, table: KnownFunctionTable = DEFAULT_TABLE,
) -> list[Token]:
    """Run the disambiguator stage; returns the classified token stream."""
    return Disambiguator(table).tokenize(text)
