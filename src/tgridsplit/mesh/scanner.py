"""
Line scanning for Fluent mesh files.

Fluent files are made of parenthesised sections whose first token is a
decimal section id, e.g. ``(10 (1 1 2d 1 3)(``. This module finds those ids
and hands out the data lines that follow a section header.
"""

import re
from typing import IO, Iterator, List, Optional

from tgridsplit.mesh.errors import Diagnostic, FailureKind, FatalDecodeError

NO_SECTION = 0

_SECTION_PATTERN = re.compile(r'^\s*\(\s*([^\s()]+)')


def section_id(line: str) -> int:
    """Extract the section id from a header line.

    Args:
        line: One line of the input file

    Returns:
        The leading integer inside the first parenthesis, or NO_SECTION if the
        line is not a section header
    """
    match = _SECTION_PATTERN.match(line)
    if not match:
        return NO_SECTION
    try:
        return int(match.group(1))
    except ValueError:
        return NO_SECTION


def header_fields(line: str) -> List[str]:
    """Split a header line into its tokens with all parentheses removed.

    ``(13 (3 1 1c 3 0)(`` gives ``['13', '3', '1', '1c', '3', '0']``.
    """
    return line.replace('(', ' ').replace(')', ' ').split()


def data_values(line: str) -> List[str]:
    """Tokens of a data line, ignoring stray parentheses from block delimiters."""
    return line.replace('(', ' ').replace(')', ' ').split()


class LineStream:
    """Numbered line iterator over an open file.

    The section dispatcher iterates it for headers; decoders pull their data
    lines from the same stream with next_data_line(). A binary handle is
    decoded one line at a time, so a bad byte is reported on its own line.
    """

    def __init__(self, handle: IO, encoding: str = 'utf-8'):
        self._handle = handle
        self.encoding = encoding
        self.line_number = 0

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        try:
            line = self._handle.readline()
            if isinstance(line, bytes):
                line = line.decode(self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise FatalDecodeError(Diagnostic(
                FailureKind.DATA_LINE_MISMATCH,
                f"Unreadable input line: {e}",
                line_number=self.line_number + 1,
            ))
        if not line:
            raise StopIteration
        self.line_number += 1
        return line

    def next_data_line(self) -> Optional[str]:
        """Return the next line carrying data, or None at end of file.

        Blank lines and a lone ``(`` opening a data block are skipped.
        """
        for line in self:
            stripped = line.strip()
            if stripped and stripped != '(':
                return stripped
        return None
