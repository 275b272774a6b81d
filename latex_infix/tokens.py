"""Token stream produced by the disambiguator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenKind(str, Enum):
    """Classification of a token in the brace-free stream."""

    NUMBER = "number"
    VARIABLE = "variable"
    FUNCTION = "function"
    CONSTANT = "constant"
    DELIMITER = "delimiter"
    OPERATOR = "operator"
    WHITESPACE = "whitespace"
    LITERAL = "literal"


OPERATOR_CHARS = frozenset("+-*/^")
DELIMITER_CHARS = frozenset("(),")

# Tokens that read as a multiplicand when juxtaposed
LETTERLIKE = frozenset({TokenKind.VARIABLE, TokenKind.CONSTANT, TokenKind.FUNCTION})


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str

    @property
    def opens(self) -> bool:
        return self.kind is TokenKind.DELIMITER and self.text == "("

    @property
    def closes(self) -> bool:
        return self.kind is TokenKind.DELIMITER and self.text == ")"


TIMES = Token(TokenKind.OPERATOR, "*")
OPEN = Token(TokenKind.DELIMITER, "(")
CLOSE = Token(TokenKind.DELIMITER, ")")


def render(tokens: list[Token]) -> str:
    """Join a token stream back into text."""
    return "".join(token.text for token in tokens)
