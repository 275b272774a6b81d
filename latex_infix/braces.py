"""Stack-based balanced group scanning.

Every construct that reads a ``{...}`` (or ``(...)``, ``[...]``) group goes
through here, so nesting depth is unbounded. Functions return None for an
unbalanced group and leave the error policy to the caller.
"""

from __future__ import annotations

import re

_CONTROL_WORD = re.compile(r"\\[a-zA-Z]+")

PAIRS = {"{": "}", "(": ")", "[": "]"}

# Characters that can never start a TeX argument
_NOT_AN_ARGUMENT = frozenset("})]+-*/^_=,")


def _escaped(text: str, pos: int) -> bool:
    """True if the character at ``pos`` is preceded by a single backslash."""
    backslashes = 0
    i = pos - 1
    while i >= 0 and text[i] == "\\":
        backslashes += 1
        i -= 1
    return backslashes % 2 == 1


def skip_spaces(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def find_closing(text: str, pos: int) -> int | None:
    """Index of the delimiter closing the group opened at ``pos``."""
    opener = text[pos]
    closer = PAIRS[opener]
    depth = 0
    for i in range(pos, len(text)):
        char = text[i]
        if char not in (opener, closer) or _escaped(text, i):
            continue
        if char == opener:
            depth += 1
        else:
            depth -= 1
            if depth == 0:
                return i
    return None


def read_group(text: str, pos: int) -> tuple[str, int] | None:
    """Read the group opened at ``pos``; return (content, index after it)."""
    if pos >= len(text) or text[pos] not in PAIRS:
        return None
    end = find_closing(text, pos)
    if end is None:
        return None
    return text[pos + 1:end], end + 1


def read_argument(text: str, pos: int) -> tuple[str, int] | None:
    """Read one TeX macro argument starting at ``pos``.

    An argument is a brace group (returned without its braces), a control
    word such as ``\\pi``, or a single character, so ``\\frac12`` reads
    ``1`` and then ``2``.
    """
    pos = skip_spaces(text, pos)
    if pos >= len(text):
        return None
    char = text[pos]
    if char == "{":
        return read_group(text, pos)
    if char in _NOT_AN_ARGUMENT:
        return None
    if char == "\\":
        word = _CONTROL_WORD.match(text, pos)
        if word:
            return word.group(0), word.end()
        return text[pos:pos + 2], pos + 2
    return char, pos + 1


def is_wrapped(text: str, opener: str = "(") -> bool:
    """True if the whole string is a single balanced group."""
    if len(text) < 2 or text[0] != opener:
        return False
    return find_closing(text, 0) == len(text) - 1
