"""LaTeX preprocessing pipeline ahead of translation.

Converts raw LaTeX pasted from papers or editors into the plain math
notation the normalizer expects, via a 5-phase pipeline: strip
environments, remove typographical commands, normalize synonyms, map
Unicode glyphs, clean whitespace.
"""

from __future__ import annotations

import re

from latex_infix.braces import is_wrapped

# Phase 1: Environment wrappers to strip
_ENV_PATTERNS = [
    r"\\begin\{equation\*?\}",    r"\\end\{equation\*?\}",
    r"\\begin\{align\*?\}",       r"\\end\{align\*?\}",
    r"\\begin\{gather\*?\}",      r"\\end\{gather\*?\}",
    r"\\begin\{multline\*?\}",    r"\\end\{multline\*?\}",
    r"\\begin\{eqnarray\*?\}",    r"\\end\{eqnarray\*?\}",
    r"\\\[",                       r"\\\]",
    r"\\\(",                       r"\\\)",
    r"\$\$",                       r"\$",
]

# Phase 2: Typographical commands to strip (\left/\right are structural here)
_STRIP_COMMANDS = [
    r"\\\\",
    r"\\displaystyle",  r"\\textstyle",  r"\\scriptstyle",
    r"\\[Bb]igg?[lr]?(?![a-zA-Z])",
    r"\\!",  r"&",  r"\\nonumber",  r"\\label\{[^}]*\}",
    r"\\tag\{[^}]*\}",
]

# Spacing commands become a plain space so `\sin\,x` still reads as `\sin x`
_SPACING_COMMANDS = [
    r"\\,",  r"\\;",  r"\\:",  r"\\ ",  r"\\qquad",  r"\\quad",
]

# Font commands: extract content from braces
_FONT_COMMANDS = [
    r"\\mathrm\{([^}]*)\}",
    r"\\mathbf\{([^}]*)\}",
    r"\\mathit\{([^}]*)\}",
    r"\\text\{([^}]*)\}",
    r"\\textit\{([^}]*)\}",
    r"\\boldsymbol\{([^}]*)\}",
    r"\\operatorname\{([^}]*)\}",
]

# Phase 3: Synonym mapping
_SYNONYMS = {
    r"\\dfrac":  r"\\frac",
    r"\\tfrac":  r"\\frac",
    r"\\cfrac":  r"\\frac",
    r"\\ast":    r"\\times",
}

# Phase 4: Unicode math glyphs
_GLYPHS = {
    "×": r"\times ",
    "·": r"\cdot ",
    "⋅": r"\cdot ",
    "÷": r"\div ",
    "−": "-",
    "–": "-",
    "±": r"\pm ",
    "π": r"\pi ",
    "∞": r"\infty ",
}

_SUPERSCRIPTS = str.maketrans("⁰¹²³⁴⁵⁶⁷⁸⁹⁻", "0123456789-")
_SUPERSCRIPT_RUN = re.compile(r"[⁰¹²³⁴⁵⁶⁷⁸⁹⁻]+")


def strip_environments(latex: str) -> str:
    """Phase 1: Remove math environment wrappers."""
    result = latex
    for pattern in _ENV_PATTERNS:
        result = re.sub(pattern, "", result)
    return result


def remove_typographical(latex: str) -> str:
    """Phase 2: Strip typographical commands and extract font command contents."""
    result = latex
    for pattern in _STRIP_COMMANDS:
        result = re.sub(pattern, "", result)
    for pattern in _SPACING_COMMANDS:
        result = re.sub(pattern, " ", result)
    for pattern in _FONT_COMMANDS:
        result = re.sub(pattern, r"\1", result)
    return result


def normalize_synonyms(latex: str) -> str:
    """Phase 3: Map alternative LaTeX commands to canonical forms."""
    result = latex
    for old, new in _SYNONYMS.items():
        result = re.sub(old + r"(?![a-zA-Z])", new, result)
    return result


def normalize_glyphs(latex: str) -> str:
    """Phase 4: Map Unicode operators, constants and superscripts to LaTeX."""
    result = latex
    for glyph, replacement in _GLYPHS.items():
        result = result.replace(glyph, replacement)
    return _SUPERSCRIPT_RUN.sub(
        lambda m: "^{" + m.group(0).translate(_SUPERSCRIPTS) + "}", result,
    )


def clean_whitespace(latex: str) -> str:
    """Phase 5: Collapse whitespace and remove one redundant outer brace group."""
    result = re.sub(r"\s+", " ", latex).strip()
    if is_wrapped(result, "{"):
        result = result[1:-1].strip()
    return result


def preprocess_latex(latex: str) -> str:
    """Full 5-phase LaTeX preprocessing pipeline."""
    result = latex
    result = strip_environments(result)
    result = remove_typographical(result)
    result = normalize_synonyms(result)
    result = normalize_glyphs(result)
    result = clean_whitespace(result)
    return result
