"""Strict-mode checks over the caller's raw LaTeX.

Every check runs before preprocessing so reported offsets point into the
text the caller actually sent.
"""

from __future__ import annotations

import re

from latex_infix.braces import read_argument, skip_spaces
from latex_infix.errors import (
    AmbiguousExponentTarget,
    MalformedDelimiter,
    UnknownControlSequence,
    byte_offset,
)
from latex_infix.vocabulary import (
    KNOWN_COMMANDS,
    KNOWN_SYMBOLS,
    SUPPORTED_ENVIRONMENTS,
)

_COMMAND = re.compile(r"\\([a-zA-Z]+|.)", re.DOTALL)
_ENVIRONMENT = re.compile(r"\s*\{([a-zA-Z*]+)\}")

# Delimiters allowed right after \left / \right
_SIZED_DELIMITERS = ("\\lvert", "\\rvert", "\\{", "\\}", "(", ")", "[", "]", "|", ".")

_NO_BASE = frozenset("({[+-*/=,^_")
_NO_EXPONENT = frozenset(")}]+*/=,^_")


def check_control_sequences(latex: str) -> None:
    """Reject control sequences the pipeline has no rewrite for."""
    for match in _COMMAND.finditer(latex):
        name = match.group(1)
        if not name.isalpha():
            if name not in KNOWN_SYMBOLS:
                raise UnknownControlSequence(
                    f"unknown control symbol {match.group(0)!r}",
                    fragment=match.group(0),
                    offset=byte_offset(latex, match.start()),
                )
            continue
        if name not in KNOWN_COMMANDS:
            raise UnknownControlSequence(
                f"unknown control sequence {match.group(0)}",
                fragment=match.group(0),
                offset=byte_offset(latex, match.start()),
            )
        if name in ("begin", "end"):
            env = _ENVIRONMENT.match(latex, match.end())
            if env is None or env.group(1) not in SUPPORTED_ENVIRONMENTS:
                end = env.end() if env else match.end()
                raise UnknownControlSequence(
                    "unsupported environment",
                    fragment=latex[match.start():end],
                    offset=byte_offset(latex, match.start()),
                )


_SIZING = re.compile(r"\\(left|right)(?![a-zA-Z])\s*")


def _sized_delimiter(latex: str, pos: int) -> int:
    """Length of the delimiter after \\left or \\right at ``pos``, or 0."""
    for delimiter in _SIZED_DELIMITERS:
        if latex.startswith(delimiter, pos):
            return len(delimiter)
    return 0


def _malformed(
    latex: str, index: int, message: str, width: int = 1,
) -> MalformedDelimiter:
    return MalformedDelimiter(
        message,
        fragment=latex[index:index + width],
        offset=byte_offset(latex, index),
    )


# Closing delimiter -> opener kinds it may close. ( and [ form one class
# so half-open intervals such as [0, 1) pass.
_CLOSERS = {
    "}": ("{",),
    ")": ("(", "["),
    "]": ("(", "["),
    "\\}": ("\\{",),
    "\\rvert": ("\\lvert",),
}
_UNCLOSED = {
    "{": "unclosed {",
    "(": "unclosed bracket",
    "[": "unclosed bracket",
    "\\{": "unclosed \\{",
    "\\lvert": "unclosed \\lvert",
}


def _close(
    latex: str, stack: list[tuple[int, str]], index: int, closer: str,
) -> None:
    if not stack:
        raise _malformed(latex, index, f"unmatched {closer}", len(closer))
    opened_at, opener = stack[-1]
    if opener not in _CLOSERS[closer]:
        raise _malformed(
            latex, index,
            f"{closer} closes {opener} opened at {byte_offset(latex, opened_at)}",
            len(closer),
        )
    stack.pop()


def check_delimiters(latex: str) -> None:
    """Balance braces, brackets, \\left/\\right pairs and bare bars.

    Groups nest on one stack: ``}`` only closes ``{`` while ``)`` and
    ``]`` close either bracket kind.
    """
    stack: list[tuple[int, str]] = []
    sized: list[int] = []
    bars: list[int] = []
    i = 0
    while i < len(latex):
        char = latex[i]
        sizing = _SIZING.match(latex, i)
        if sizing:
            width = _sized_delimiter(latex, sizing.end())
            end = sizing.end() + width
            if not width:
                raise _malformed(
                    latex, i, f"\\{sizing.group(1)} without a delimiter",
                    end + 1 - i,
                )
            if sizing.group(1) == "left":
                sized.append(i)
            elif sized:
                sized.pop()
            else:
                raise _malformed(latex, i, "\\right without \\left", end - i)
            i = end
            continue
        if char == "\\":
            if latex.startswith(("\\{", "\\lvert"), i):
                opener = "\\{" if latex[i + 1] == "{" else "\\lvert"
                stack.append((i, opener))
                i += len(opener)
                continue
            if latex.startswith(("\\}", "\\rvert"), i):
                closer = "\\}" if latex[i + 1] == "}" else "\\rvert"
                _close(latex, stack, i, closer)
                i += len(closer)
                continue
            # skip the escaped character so \| and \\ never count as bars
            i += 2
            continue
        if char in "{([":
            stack.append((i, char))
        elif char in "})]":
            _close(latex, stack, i, char)
        elif char == "|":
            bars.append(i)
        i += 1
    if stack:
        opened_at, opener = stack[-1]
        raise _malformed(latex, opened_at, _UNCLOSED[opener], len(opener))
    if sized:
        raise _malformed(latex, sized[-1], "\\left without \\right", 5)
    if len(bars) % 2:
        raise _malformed(latex, bars[-1], "odd number of | bars")


def _previous_significant(latex: str, index: int) -> int | None:
    """Index of the nearest non-space character before ``index``."""
    i = index - 1
    while i >= 0:
        if latex[i].isspace():
            i -= 1
        elif i > 0 and latex[i - 1] == "\\" and not latex[i].isalpha():
            i -= 2  # control symbol such as \, counts as spacing
        else:
            return i
    return None


def check_exponents(latex: str) -> None:
    """Every ``^`` needs a base and one operand, never a second ``^``."""
    for i, char in enumerate(latex):
        if char != "^":
            continue
        left = _previous_significant(latex, i)
        if left is None or latex[left] in _NO_BASE:
            raise AmbiguousExponentTarget(
                "exponent without a base",
                fragment=latex[i:i + 2].strip(),
                offset=byte_offset(latex, i),
            )
        j = skip_spaces(latex, i + 1)
        empty_group = (
            j < len(latex) and latex[j] == "{"
            and latex[skip_spaces(latex, j + 1):skip_spaces(latex, j + 1) + 1] == "}"
        )
        if j >= len(latex) or latex[j] in _NO_EXPONENT or empty_group:
            raise AmbiguousExponentTarget(
                "exponent without an operand",
                fragment=latex[left:j + 2].strip() if j < len(latex) else latex[left:],
                offset=byte_offset(latex, i),
            )
        operand = read_argument(latex, j)
        k = skip_spaces(latex, operand[1]) if operand else len(latex)
        if k < len(latex) and latex[k] == "^":
            # TeX rejects a double superscript; the grouping is ambiguous
            raise AmbiguousExponentTarget(
                "double superscript, group the exponent with braces",
                fragment=latex[left:k + 1],
                offset=byte_offset(latex, k),
            )


def validate(latex: str) -> None:
    """Run every strict check; raises the first TranslationError found."""
    check_control_sequences(latex)
    check_delimiters(latex)
    check_exponents(latex)
