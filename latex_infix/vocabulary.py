"""Known function table and the recognised LaTeX command vocabulary."""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property

FUNCTION_NAMES = (
    "sin", "cos", "tan", "asin", "acos", "atan",
    "log", "log10", "sqrt", "exp", "abs",
)
CONSTANT_NAMES = ("pi", "Infinity")

# Characters after which a name stands alone rather than starting a longer word
BOUNDARY_CHARS = frozenset("(+-*/^),")

# Reciprocal trig placeholders used inside the rewriter
PLACEHOLDERS = {"SEC": "cos", "CSC": "sin", "COT": "tan"}


@dataclass(frozen=True)
class KnownFunctionTable:
    """Immutable vocabulary of names the target grammar recognises natively."""

    functions: tuple[str, ...] = FUNCTION_NAMES
    constants: tuple[str, ...] = CONSTANT_NAMES

    @cached_property
    def names(self) -> tuple[str, ...]:
        """All names, longest first so ``log10`` is tried before ``log``."""
        return tuple(
            sorted(self.functions + self.constants, key=len, reverse=True)
        )

    def __contains__(self, name: object) -> bool:
        return name in self.functions or name in self.constants

    def is_function(self, name: str) -> bool:
        return name in self.functions

    def is_constant(self, name: str) -> bool:
        return name in self.constants

    def match(self, text: str, pos: int) -> str | None:
        """Longest name at ``pos`` followed by end of input or a boundary."""
        for name in self.names:
            if not text.startswith(name, pos):
                continue
            end = pos + len(name)
            if end == len(text) or text[end] in BOUNDARY_CHARS:
                return name
        return None

    def match_prefix(self, text: str, pos: int) -> str | None:
        """Longest name starting at ``pos`` whatever follows it."""
        for name in self.names:
            if text.startswith(name, pos):
                return name
        return None

    def leading_argument(
        self, run: str, extra: tuple[str, ...] = (), start: int = 1,
    ) -> str:
        """Cut a letter run before the first known name at index >= start.

        ``sinxcosx`` style input reads as two applications, so the letters
        consumed as the argument of the first stop where ``cos`` begins.
        """
        stops = self.functions + extra
        for index in range(start, len(run)):
            if any(run.startswith(name, index) for name in stops):
                return run[:index]
        return run


DEFAULT_TABLE = KnownFunctionTable()

# ---------------------------------------------------------------------------
# LaTeX control words the pipeline knows how to rewrite or strip
# ---------------------------------------------------------------------------

STRUCTURAL_COMMANDS = frozenset({
    "frac", "dfrac", "tfrac", "cfrac", "sqrt",
    "sin", "cos", "tan", "sec", "csc", "cot",
    "arcsin", "arccos", "arctan",
    "ln", "log", "exp",
    "pi", "e", "infty",
    "left", "right", "lvert", "rvert",
    "cdot", "times", "div", "pm", "ast",
})

TYPOGRAPHICAL_COMMANDS = frozenset({
    "begin", "end",
    "displaystyle", "textstyle", "scriptstyle",
    "big", "Big", "bigg", "Bigg",
    "bigl", "Bigl", "biggl", "Biggl",
    "bigr", "Bigr", "biggr", "Biggr",
    "quad", "qquad", "nonumber", "label", "tag",
    "mathrm", "mathbf", "mathit", "text", "textit",
    "boldsymbol", "operatorname",
})

KNOWN_COMMANDS = STRUCTURAL_COMMANDS | TYPOGRAPHICAL_COMMANDS

# Non-letter control symbols: spacing, line break, escaped braces, display math
KNOWN_SYMBOLS = frozenset(",;:! \\{}[]()")

SUPPORTED_ENVIRONMENTS = frozenset({
    "equation", "equation*", "align", "align*", "gather", "gather*",
    "multline", "multline*", "eqnarray", "eqnarray*",
})
