"""Reference evaluator for translated expressions, backed by SymPy.

Only used to check translations numerically (tests, CLI ``--at``, the
``bindings`` field of the service). It reads the same grammar a downstream
evaluator would: ``^`` is power, ``log`` is natural, ``log10`` base ten,
``e`` is Euler's number and every other single letter is a variable.
"""

from __future__ import annotations

import logging
import re
import string
import tokenize

import sympy
from sympy.parsing.sympy_parser import (
    convert_xor,
    parse_expr,
    standard_transformations,
)

from latex_infix.errors import EvaluationError
from latex_infix.vocabulary import CONSTANT_NAMES, FUNCTION_NAMES

logger = logging.getLogger(__name__)

MAX_EXPRESSION_LENGTH = 2000

# ---------------------------------------------------------------------------
# Input sanitization
# ---------------------------------------------------------------------------

_BLOCKED_PATTERNS = re.compile(
    r"(__|import|exec\s*\(|eval\s*\(|compile\s*\(|open\s*\(|lambda"
    r"|os\.|sys\.|subprocess|globals|locals|getattr|setattr|delattr"
    r"|Popen|system\(|popen)",
    re.IGNORECASE,
)
_ALLOWED_CHARS = re.compile(r"^[0-9A-Za-z+\-*/^().,\s]*$")
_IDENTIFIER = re.compile(r"[A-Za-z][A-Za-z0-9]*")
_KNOWN_IDENTIFIERS = frozenset(FUNCTION_NAMES + CONSTANT_NAMES) | {"e"}


def _validate_input(expression: str) -> bool:
    """Safety check before handing a string to the SymPy parser."""
    if not expression or len(expression) > MAX_EXPRESSION_LENGTH:
        return False
    if not _ALLOWED_CHARS.match(expression):
        return False
    if _BLOCKED_PATTERNS.search(expression):
        return False
    for identifier in _IDENTIFIER.findall(expression):
        if len(identifier) > 1 and identifier not in _KNOWN_IDENTIFIERS:
            return False
    return True


# ---------------------------------------------------------------------------
# Namespace
# ---------------------------------------------------------------------------


def _log10(value):
    return sympy.log(value, 10)


def _namespace() -> dict[str, object]:
    names: dict[str, object] = {
        letter: sympy.Symbol(letter) for letter in string.ascii_letters
    }
    names.update({
        "sin": sympy.sin, "cos": sympy.cos, "tan": sympy.tan,
        "asin": sympy.asin, "acos": sympy.acos, "atan": sympy.atan,
        "log": sympy.log, "log10": _log10, "sqrt": sympy.sqrt,
        "exp": sympy.exp, "abs": sympy.Abs,
        "pi": sympy.pi, "e": sympy.E, "Infinity": sympy.oo,
    })
    return names


_TRANSFORMATIONS = standard_transformations + (convert_xor,)


def parse(expression: str) -> sympy.Expr:
    """Parse a translated expression into a SymPy expression."""
    if not _validate_input(expression):
        raise EvaluationError(f"Refusing to evaluate {expression[:50]!r}")
    try:
        return parse_expr(
            expression,
            local_dict=_namespace(),
            transformations=_TRANSFORMATIONS,
        )
    except (SyntaxError, TypeError, ValueError, tokenize.TokenError) as exc:
        raise EvaluationError(f"Cannot parse {expression[:50]!r}: {exc}") from exc


def evaluate(expression: str, bindings: dict[str, float] | None = None) -> float:
    """Evaluate a translated expression numerically at ``bindings``."""
    expr = parse(expression)
    subs = {sympy.Symbol(name): value for name, value in (bindings or {}).items()}
    value = expr.evalf(subs=subs)
    if value.free_symbols:
        unbound = ", ".join(sorted(str(s) for s in value.free_symbols))
        raise EvaluationError(f"Unbound variables: {unbound}")
    if value in (sympy.zoo, sympy.nan):
        raise EvaluationError(f"Undefined value for {expression[:50]!r}")
    real, imag = value.as_real_imag()
    if abs(float(imag)) > 1e-12:
        raise EvaluationError(f"Non-real value for {expression[:50]!r}")
    logger.debug("evaluate %s -> %s", expression, real)
    return float(real)
