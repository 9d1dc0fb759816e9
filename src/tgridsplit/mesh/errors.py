"""
Failure reporting for the Fluent mesh import.

Recoverable problems are reported as Diagnostic records and the import goes on;
fatal ones raise FatalDecodeError and end the import.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class FailureKind(Enum):
    """Tags for everything the import can report."""
    HEADER_MISMATCH = auto()
    DATA_LINE_MISMATCH = auto()
    UNSUPPORTED_DIMENSION = auto()
    FATAL_SHAPE_ERROR = auto()
    EMPTY_RESULT = auto()


@dataclass
class Diagnostic:
    """A reported import problem.

    Attributes:
        kind: Failure tag
        message: Human-readable description
        line_number: 1-based input line the problem was found on, if any
        section_id: Section being decoded, if any
        fatal: Whether the problem ended the import
    """

    kind: FailureKind
    message: str
    line_number: Optional[int] = None
    section_id: Optional[int] = None
    fatal: bool = False

    def __str__(self) -> str:
        where = []
        if self.section_id is not None:
            where.append(f"section {self.section_id}")
        if self.line_number is not None:
            where.append(f"line {self.line_number}")
        location = f" ({', '.join(where)})" if where else ""
        return f"[{self.kind.name.lower().replace('_', '-')}]{location} {self.message}"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.name,
            "message": self.message,
            "line_number": self.line_number,
            "section_id": self.section_id,
            "fatal": self.fatal,
        }


class FatalDecodeError(Exception):
    """Raised when the input is too malformed to keep decoding."""

    def __init__(self, diagnostic: Diagnostic):
        diagnostic.fatal = True
        super().__init__(str(diagnostic))
        self.diagnostic = diagnostic
