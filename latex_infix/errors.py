"""Error taxonomy for LaTeX-to-infix translation."""

from __future__ import annotations

from enum import Enum


def byte_offset(text: str, index: int) -> int:
    """Convert a character index into a byte offset in UTF-8."""
    return len(text[:index].encode("utf-8"))


class ErrorKind(str, Enum):
    """Classified translation failure kinds."""

    MALFORMED_DELIMITER = "MalformedDelimiter"
    UNKNOWN_CONTROL_SEQUENCE = "UnknownControlSequence"
    AMBIGUOUS_EXPONENT_TARGET = "AmbiguousExponentTarget"
    MISSING_ARGUMENT = "MissingArgument"
    UNSUPPORTED_CHARACTER = "UnsupportedCharacter"


class TranslationError(Exception):
    """Base class for strict-mode translation failures.

    ``offset`` is the byte offset of ``fragment`` in the caller's UTF-8
    input, or None when the fragment no longer exists in that form.
    """

    kind: ErrorKind = ErrorKind.MALFORMED_DELIMITER

    def __init__(
        self, message: str, fragment: str = "", offset: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.fragment = fragment
        self.offset = offset

    @property
    def code(self) -> str:
        """Upper-case error code used in HTTP responses."""
        return self.kind.name

    def __str__(self) -> str:
        where = f" at offset {self.offset}" if self.offset is not None else ""
        return f"{self.kind.value}{where}: {self.message}"

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind.value,
            "offset": self.offset,
            "fragment": self.fragment,
        }


class MalformedDelimiter(TranslationError):
    kind = ErrorKind.MALFORMED_DELIMITER


class UnknownControlSequence(TranslationError):
    kind = ErrorKind.UNKNOWN_CONTROL_SEQUENCE


class AmbiguousExponentTarget(TranslationError):
    kind = ErrorKind.AMBIGUOUS_EXPONENT_TARGET


class MissingArgument(TranslationError):
    kind = ErrorKind.MISSING_ARGUMENT


class UnsupportedCharacter(TranslationError):
    """A character with no meaning in the infix grammar, such as ``=``."""

    kind = ErrorKind.UNSUPPORTED_CHARACTER


class EvaluationError(Exception):
    """Raised by the reference evaluator for unsafe or non-real expressions."""
