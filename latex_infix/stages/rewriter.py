"""Structural rewriter: resolve every brace-delimited LaTeX construct.

Runs an ordered list of resolutions over the normalized string. Later
resolutions assume earlier ones already fired: inverse trig with a bare
argument is resolved before ``\\sin^{-1}`` collapses to ``asin``, function
powers before generic exponents, and the reciprocal trig functions travel
as SEC/CSC/COT placeholders until the power rule has seen them.
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from latex_infix.braces import (
    find_closing,
    is_wrapped,
    read_argument,
    read_group,
    skip_spaces,
)
from latex_infix.errors import (
    AmbiguousExponentTarget,
    MalformedDelimiter,
    MissingArgument,
)
from latex_infix.vocabulary import DEFAULT_TABLE, PLACEHOLDERS, KnownFunctionTable

logger = logging.getLogger(__name__)

# Longest alternatives first so `acos` is never read as `a` + `cos`
_APPLICABLE = r"asin|acos|atan|log10|sqrt|sin|cos|tan|log(?!10)|exp|abs|SEC|CSC|COT"
_POWERABLE = r"asin|acos|atan|log10|sin|cos|tan|log(?!10)|SEC|CSC|COT"
_NUMBER = r"\d+(?:\.\d+)?"

_INVERSE_HEAD = r"\\(sin|cos|tan)\s*\^\s*\{\s*-\s*1\s*\}"
_INVERSE_BARE = re.compile(_INVERSE_HEAD + r"\s*([a-zA-Z]+)")
_INVERSE_GROUP = re.compile(_INVERSE_HEAD + r"(?=\s*\{)")
_INVERSE_PLAIN = re.compile(_INVERSE_HEAD)
_ARC = re.compile(r"\\arc(sin|cos|tan)(?![a-zA-Z])")
_NO_OPERAND = frozenset(")}]+-*/=,^_")

_SPACE_LETTER = re.compile(
    rf"({_APPLICABLE})\s+(?!(?:{_APPLICABLE}))"
    r"([a-zA-Z](?:\s*\^\s*(?:\{[^{}]*\}|[a-zA-Z0-9]))?)"
)
_DIGIT_ARGUMENT = re.compile(rf"({_APPLICABLE})\s*({_NUMBER})([a-zA-Z]*)")
_FUNCTION_POWER = re.compile(rf"({_POWERABLE})\s*\^\s*(?=\{{|\d)")
_BARE_OPERAND = re.compile(rf"{_NUMBER}[a-zA-Z]*|pi|Infinity|[a-zA-Z]")

_OPERATORS = [
    (r"\\cdot(?![a-zA-Z])", "*"),
    (r"\\times(?![a-zA-Z])", "*"),
    (r"\\div(?![a-zA-Z])", "/"),
    (r"\\pm(?![a-zA-Z])", "+"),
]

_CONSTANTS = [
    (r"\\pi(?![a-zA-Z])", "pi"),
    (r"\\e(?![a-zA-Z])", "e"),
    (r"\\infty(?![a-zA-Z])", "Infinity"),
]

_E_BRACE = re.compile(r"e\^\{([^{}]*)\}")
_E_SIMPLE = re.compile(r"e\^([a-zA-Z0-9])")
_POWER_BRACE = re.compile(rf"([a-zA-Z0-9]+(?:\.\d+)?)\^\{{([^{{}}]*)\}}")
# An operand followed by another ^ is left for the outer power: ^ is
# right-associative
_POWER_SIMPLE = re.compile(
    r"([a-zA-Z0-9]+(?:\.\d+)?)\^(pi|Infinity|[a-zA-Z0-9])(?!\^)"
)


def _excerpt(text: str, start: int, width: int = 24) -> str:
    return text[start:start + width]


def _operand(text: str) -> str:
    """Parenthesise unless the text already is one group."""
    text = text.strip()
    return text if is_wrapped(text) else f"({text})"


def _resolve_command(
    text: str,
    command: str,
    build: Callable[[str, int, bool], tuple[str, int] | None],
    strict: bool,
) -> str:
    """Rewrite every ``command`` occurrence, rightmost first.

    The rightmost occurrence never has another one inside its arguments, so
    each pass resolves an innermost construct; the loop stops at a fixed
    point. ``build`` receives the index after the command name and the mode
    and returns the replacement and the index where the construct ends.
    """
    limit = len(text)
    passes = 0
    while True:
        start = text.rfind(command, 0, limit)
        if start == -1:
            break
        after = start + len(command)
        if after < len(text) and text[after].isalpha():
            limit = start
            continue
        built = build(text, after, strict)
        if built is None:
            if strict:
                raise MalformedDelimiter(
                    f"cannot read the arguments of {command}",
                    fragment=_excerpt(text, start),
                )
            limit = start
            continue
        replacement, end = built
        text = text[:start] + replacement + text[end:]
        limit = start
        passes += 1
    if passes:
        logger.debug("resolved %d %s constructs", passes, command)
    return text


# ---------------------------------------------------------------------------
# 1-2: fractions and roots
# ---------------------------------------------------------------------------


def _require(body: str, command: str, strict: bool) -> None:
    if strict and not body.strip():
        raise MissingArgument(f"empty argument to {command}", fragment=command)


def _build_fraction(text: str, pos: int, strict: bool) -> tuple[str, int] | None:
    numerator = read_argument(text, pos)
    if numerator is None:
        return None
    denominator = read_argument(text, numerator[1])
    if denominator is None:
        return None
    _require(numerator[0], "\\frac", strict)
    _require(denominator[0], "\\frac", strict)
    return (
        f"({_operand(numerator[0])}/{_operand(denominator[0])})",
        denominator[1],
    )


def _build_root(text: str, pos: int, strict: bool) -> tuple[str, int] | None:
    pos = skip_spaces(text, pos)
    index = None
    if pos < len(text) and text[pos] == "[":
        close = find_closing(text, pos)
        if close is None:
            return None
        index = text[pos + 1:close].strip()
        pos = close + 1
    radicand = read_argument(text, pos)
    if radicand is None:
        return None
    body, end = radicand
    _require(body, "\\sqrt", strict)
    if index:
        return f"(({body})^(1/({index})))", end
    return f"(sqrt({body}))", end


def resolve_fractions(text: str, strict: bool = True) -> str:
    r"""``\frac{A}{B}`` -> ``((A)/(B))``, innermost first, any depth."""
    return _resolve_command(text, "\\frac", _build_fraction, strict)


def resolve_roots(text: str, strict: bool = True) -> str:
    r"""``\sqrt[n]{x}`` -> ``((x)^(1/(n)))`` and ``\sqrt{x}`` -> ``(sqrt(x))``."""
    return _resolve_command(text, "\\sqrt", _build_root, strict)


# ---------------------------------------------------------------------------
# 3-5: inverse, regular and reciprocal trig, named functions, logs
# ---------------------------------------------------------------------------


def _apply_to_groups(
    text: str, head: re.Pattern, build: Callable[[re.Match, str], str],
) -> str:
    """Replace ``head`` plus the group right after it, rightmost first."""
    for match in reversed(list(head.finditer(text))):
        group = read_group(text, skip_spaces(text, match.end()))
        if group is None:
            continue
        content, end = group
        text = text[:match.start()] + build(match, content) + text[end:]
    return text


def _check_inverse_operands(text: str) -> None:
    """An inverse trig name must be followed by something to apply to."""
    for pattern in (_INVERSE_PLAIN, _ARC):
        for match in pattern.finditer(text):
            pos = skip_spaces(text, match.end())
            if pos >= len(text) or text[pos] in _NO_OPERAND:
                raise MissingArgument(
                    f"inverse {match.group(1)} needs an argument",
                    fragment=match.group(0),
                )


def resolve_inverse_trig(
    text: str, table: KnownFunctionTable = DEFAULT_TABLE, strict: bool = True,
) -> str:
    r"""``\tan^{-1}xy`` -> ``atan(x*y)``; brace and bare forms -> short names."""

    def _bare(match: re.Match) -> str:
        letters = match.group(2)
        argument = table.leading_argument(letters)
        rest = letters[len(argument):]
        return f"a{match.group(1)}({'*'.join(argument)}){rest}"

    result = _INVERSE_BARE.sub(_bare, text)
    result = _apply_to_groups(
        result, _INVERSE_GROUP, lambda m, body: f"a{m.group(1)}({body})",
    )
    if strict:
        _check_inverse_operands(result)
    result = _ARC.sub(r"a\1", result)
    result = _INVERSE_PLAIN.sub(r"a\1", result)
    return result


def collapse_functions(text: str, strict: bool = True) -> str:
    """Short names for trig, exp and logs; park sec/csc/cot as placeholders."""
    result = re.sub(r"\\(sin|cos|tan)", r"\1", text)
    for placeholder in PLACEHOLDERS:
        result = re.sub(rf"\\{placeholder.lower()}", placeholder, result)
    result = _apply_to_groups(
        result, re.compile(r"\\exp(?=\s*\{)"), lambda m, body: f"exp({body})",
    )
    result = re.sub(r"\\exp(?![a-zA-Z])", "exp", result)
    return collapse_logs(result, strict)


def _build_log_base(text: str, pos: int) -> tuple[str, int] | None:
    pos = skip_spaces(text, pos)
    if pos >= len(text) or text[pos] != "_":
        return None
    base = read_argument(text, pos + 1)
    if base is None:
        return None
    pos = skip_spaces(text, base[1])
    group = read_group(text, pos)
    operand = _BARE_OPERAND.match(text, pos)
    if group is not None:
        argument, end = group
    elif operand is not None:
        argument, end = operand.group(0), operand.end()
    else:
        control = read_argument(text, pos)
        if control is None:
            return None
        argument, end = control
    return f"log({argument},{base[0]})", end


def collapse_logs(text: str, strict: bool = True) -> str:
    r"""``\ln`` -> ``log``, ``\log`` -> ``log10``, ``\log_b x`` -> ``log(x,b)``."""
    result = text
    for match in reversed(list(re.finditer(r"\\log(?![a-zA-Z])(?=\s*_)", result))):
        built = _build_log_base(result, match.end())
        if built is None:
            if strict:
                raise MissingArgument(
                    "logarithm with a base needs an argument",
                    fragment=_excerpt(result, match.start()),
                )
            continue
        replacement, end = built
        result = result[:match.start()] + replacement + result[end:]
    # A digit right after \ln must not fuse with the name into `log10`
    result = re.sub(r"\\ln(?![a-zA-Z])(?=\s*\d)", "log ", result)
    result = re.sub(r"\\ln(?![a-zA-Z])", "log", result)
    result = re.sub(r"\\log(?![a-zA-Z])", "log10", result)
    return result


# ---------------------------------------------------------------------------
# 6-7: implicit application of a function to what follows it
# ---------------------------------------------------------------------------


def apply_space_letter(text: str) -> str:
    """``sin x`` -> ``sin(x)``; only the first letter of a run is the argument.

    ``sin xy`` -> ``sin(x)y``, the finisher then multiplies by ``y``. A
    function name after the space is left for the disambiguator.
    """
    return _SPACE_LETTER.sub(r"\1(\2)", text)


def apply_digit_argument(
    text: str, table: KnownFunctionTable = DEFAULT_TABLE,
) -> str:
    """``cos2x`` -> ``cos(2x)`` and ``sin2`` -> ``sin(2)``."""

    def _apply(match: re.Match) -> str:
        name, number, letters = match.groups()
        argument = table.leading_argument(
            letters, extra=tuple(PLACEHOLDERS), start=0,
        )
        return f"{name}({number}{argument}){letters[len(argument):]}"

    return _DIGIT_ARGUMENT.sub(_apply, text)


def replace_constants(text: str) -> str:
    result = text
    for pattern, replacement in _CONSTANTS:
        result = re.sub(pattern, replacement, result)
    return result


# ---------------------------------------------------------------------------
# 10-11: function powers and reciprocal trig
# ---------------------------------------------------------------------------


def _read_applied_operand(
    text: str, pos: int, table: KnownFunctionTable,
) -> tuple[str, int] | None:
    """Read what a function (or function power) applies to."""
    pos = skip_spaces(text, pos)
    group = read_group(text, pos)
    if group is not None and text[pos] in "({":
        return group
    callables = sorted(table.functions + tuple(PLACEHOLDERS), key=len, reverse=True)
    for name in callables:
        if not text.startswith(name, pos):
            continue
        call = read_group(text, pos + len(name))
        if call is None or text[pos + len(name)] != "(":
            return None
        return text[pos:call[1]], call[1]
    operand = _BARE_OPERAND.match(text, pos)
    if operand is None:
        return None
    value = operand.group(0)
    if value[0].isdigit():
        digits = re.match(_NUMBER, value).group(0)
        letters = value[len(digits):]
        value = digits + table.leading_argument(
            letters, extra=tuple(PLACEHOLDERS), start=0,
        )
    return value, operand.start() + len(value)


def apply_function_powers(
    text: str, table: KnownFunctionTable = DEFAULT_TABLE, strict: bool = True,
) -> str:
    """``sin^2 x`` -> ``(sin(x)^2)`` and ``sin^{n} x`` -> ``(sin(x)^(n))``."""
    for match in reversed(list(_FUNCTION_POWER.finditer(text))):
        pos = match.end()
        if text[pos] == "{":
            group = read_group(text, pos)
            if group is None:
                continue
            exponent, pos = f"({group[0]})", group[1]
        else:
            digits = re.match(r"\d+", text[pos:]).group(0)
            exponent, pos = digits, pos + len(digits)
        operand = _read_applied_operand(text, pos, table)
        if operand is None:
            if strict:
                raise AmbiguousExponentTarget(
                    f"power of {match.group(1)} has nothing to apply to",
                    fragment=text[match.start():pos],
                )
            continue
        argument, end = operand
        replacement = f"({match.group(1)}({argument})^{exponent})"
        text = text[:match.start()] + replacement + text[end:]
    return text


def expand_placeholders(
    text: str, table: KnownFunctionTable = DEFAULT_TABLE, strict: bool = True,
) -> str:
    """``SEC(x)`` -> ``(1/cos(x))``; likewise CSC -> sin and COT -> tan."""
    for placeholder, function in PLACEHOLDERS.items():
        for match in reversed(list(re.finditer(placeholder, text))):
            operand = _read_applied_operand(text, match.end(), table)
            if operand is None:
                if strict:
                    raise MissingArgument(
                        f"\\{placeholder.lower()} needs an argument",
                        fragment=f"\\{placeholder.lower()}",
                    )
                continue
            argument, end = operand
            text = text[:match.start()] + f"(1/{function}({argument}))" + text[end:]
    return text


# ---------------------------------------------------------------------------
# 13-16: operators, exponents, leftover braces
# ---------------------------------------------------------------------------


def replace_operators(text: str) -> str:
    result = text
    for pattern, replacement in _OPERATORS:
        result = re.sub(pattern, replacement, result)
    return result


def group_powers(text: str) -> str:
    """``e^{x}`` -> ``exp(x)``; ``b^{x}`` -> ``(b^(x))``; ``b^2`` -> ``(b^2)``."""
    previous = None
    result = text
    while result != previous:
        previous = result
        result = _E_BRACE.sub(r"exp(\1)", result)
        result = _POWER_BRACE.sub(r"(\1^(\2))", result)
    result = _E_SIMPLE.sub(r"exp(\1)", result)
    result = _POWER_SIMPLE.sub(r"(\1^\2)", result)
    return result


def finalize_braces(text: str) -> str:
    """Juxtaposed groups multiply; other braces become parentheses."""
    result = re.sub(r"\}\s*\{", ")*(", text)
    result = result.replace("{", "(").replace("}", ")")
    return re.sub(r"\s+", "", result)


def rewrite(
    text: str, table: KnownFunctionTable = DEFAULT_TABLE, strict: bool = True,
) -> str:
    """Run every structural resolution in order."""
    result = resolve_fractions(text, strict)
    result = resolve_roots(result, strict)
    result = resolve_inverse_trig(result, table, strict)
    result = collapse_functions(result, strict)
    result = apply_space_letter(result)
    result = apply_digit_argument(result, table)
    result = replace_constants(result)
    result = apply_function_powers(result, table, strict)
    result = expand_placeholders(result, table, strict)
    result = replace_operators(result)
    result = group_powers(result)
    return finalize_braces(result)
