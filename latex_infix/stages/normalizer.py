"""Notation normalizer: unify delimiter forms before structural parsing.

Absolute value bars are rewritten to ``abs(...)`` and every other
``\\left``/``\\right`` bracket variant is reduced to plain parentheses.
"""

from __future__ import annotations

import re

# Explicit absolute value: unambiguous, so these may nest
_EXPLICIT_ABS = [
    (r"\\left\s*\\lvert", "abs("),
    (r"\\right\s*\\rvert", ")"),
    (r"\\left\s*\|", "abs("),
    (r"\\right\s*\|", ")"),
    (r"\\lvert(?![a-zA-Z])", "abs("),
    (r"\\rvert(?![a-zA-Z])", ")"),
]

_LEFT_RIGHT = [
    (r"\\left\s*(?:\(|\[|\\\{)", "("),
    (r"\\right\s*(?:\)|\]|\\\})", ")"),
    (r"\\left\s*\.", ""),
    (r"\\right\s*\.", ""),
]

_BARE_BAR = re.compile(r"(?<!\\)\|")


def rewrite_explicit_abs(text: str) -> str:
    result = text
    for pattern, replacement in _EXPLICIT_ABS:
        result = re.sub(pattern, replacement, result)
    return result


def pair_bars(text: str) -> str:
    """Pair bare ``|`` bars by parity: odd bars open, even bars close.

    Bars cannot nest without ``\\left``/``\\right``, which is handled first.
    An odd count leaves a dangling ``(abs(`` for the evaluator to reject.
    """
    count = 0

    def _bar(_match: re.Match) -> str:
        nonlocal count
        count += 1
        return "(abs(" if count % 2 == 1 else "))"

    return _BARE_BAR.sub(_bar, text)


def reduce_left_right(text: str) -> str:
    result = text
    for pattern, replacement in _LEFT_RIGHT:
        result = re.sub(pattern, replacement, result)
    result = result.replace(r"\{", "(").replace(r"\}", ")")
    return result


def square_brackets(text: str) -> str:
    """Turn grouping brackets into parentheses, keeping ``\\sqrt[n]`` indexes."""
    out: list[str] = []
    stack: list[bool] = []
    for i, char in enumerate(text):
        if char == "[":
            is_index = text[:i].rstrip().endswith("\\sqrt")
            stack.append(is_index)
            out.append("[" if is_index else "(")
        elif char == "]":
            is_index = stack.pop() if stack else False
            out.append("]" if is_index else ")")
        else:
            out.append(char)
    return "".join(out)


def normalize(text: str) -> str:
    """Run the normalizer stage on preprocessed LaTeX."""
    result = text.strip()
    result = rewrite_explicit_abs(result)
    result = pair_bars(result)
    result = reduce_left_right(result)
    result = square_brackets(result)
    return result
