"""LaTeX-to-infix translation engine.

Runs validation (strict mode only), preprocessing, and the four pipeline
stages in order: normalizer, structural rewriter, function/variable
disambiguator, implicit-multiplication finisher.

Usage:
    from latex_infix.translator import translate
    translate(r"\\frac{1}{2}x")   # -> "((1)/(2))*x"
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from latex_infix.errors import TranslationError, byte_offset
from latex_infix.preprocessing import preprocess_latex
from latex_infix.stages.disambiguator import Disambiguator
from latex_infix.stages.finisher import finish
from latex_infix.stages.normalizer import normalize
from latex_infix.stages.rewriter import rewrite
from latex_infix.tokens import Token, render
from latex_infix.validation import validate
from latex_infix.vocabulary import DEFAULT_TABLE, KnownFunctionTable

logger = logging.getLogger(__name__)

_CONTROL_WORD = re.compile(r"\\[a-zA-Z]+")


@dataclass
class TranslationTrace:
    """Intermediate output of every stage for one translation."""

    latex: str
    preprocessed: str = ""
    normalized: str = ""
    rewritten: str = ""
    tokens: list[Token] = field(default_factory=list)
    result: str = ""

    def stages(self) -> list[tuple[str, str]]:
        return [
            ("preprocessed", self.preprocessed),
            ("normalized", self.normalized),
            ("rewritten", self.rewritten),
            ("disambiguated", render(self.tokens)),
            ("result", self.result),
        ]


def _locate(latex: str, fragment: str) -> int | None:
    """Find a fragment reported by a later stage in the caller's input."""
    if not fragment:
        return None
    index = -1
    if not fragment.startswith("\\"):
        # the rewriter drops the backslash of commands it has collapsed
        index = latex.find("\\" + fragment)
    if index == -1:
        index = latex.find(fragment)
    if index == -1:
        word = _CONTROL_WORD.match(fragment)
        if word:
            index = latex.find(word.group(0))
    return byte_offset(latex, index) if index != -1 else None


class Translator:
    """Stateless translator bound to a function table and an error mode."""

    def __init__(
        self, table: KnownFunctionTable = DEFAULT_TABLE, lenient: bool = False,
    ) -> None:
        self.table = table
        self.lenient = lenient
        self._disambiguator = Disambiguator(table)

    @property
    def mode(self) -> str:
        return "lenient" if self.lenient else "strict"

    def translate(self, latex: str) -> str:
        """Translate LaTeX math into infix notation."""
        return self.trace(latex).result

    def trace(self, latex: str) -> TranslationTrace:
        """Translate and keep every intermediate stage output."""
        strict = not self.lenient
        trace = TranslationTrace(latex=latex)
        try:
            if strict:
                validate(latex)
            trace.preprocessed = preprocess_latex(latex)
            trace.normalized = normalize(trace.preprocessed)
            trace.rewritten = rewrite(trace.normalized, self.table, strict)
            trace.tokens = self._disambiguator.tokenize(trace.rewritten)
            trace.result = finish(trace.tokens, strict)
        except TranslationError as exc:
            if exc.offset is None:
                exc.offset = _locate(latex, exc.fragment)
            logger.info(
                "translate failed kind=%s offset=%s fragment=%r",
                exc.kind.value, exc.offset, exc.fragment,
            )
            raise
        for name, value in trace.stages():
            logger.debug("stage %s: %s", name, value)
        return trace


_STRICT = Translator()
_LENIENT = Translator(lenient=True)


def translate(latex: str, *, lenient: bool = False) -> str:
    """Translate with the default function table."""
    translator = _LENIENT if lenient else _STRICT
    return translator.translate(latex)
