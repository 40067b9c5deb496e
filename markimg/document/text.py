"""Text document model with line/character positions.

Positions follow the editor convention: zero-based line, zero-based
character within the line. Line breaks are ``\\n`` or ``\\r\\n``; the ``\\r``
of a CRLF pair is not part of the line text.
"""

import bisect
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from markimg.exceptions import EditConflictError


@dataclass(frozen=True, order=True)
class Position:
    """A zero-based (line, character) location in a document."""

    line: int
    character: int


@dataclass(frozen=True)
class Range:
    """A half-open span between two positions."""

    start: Position
    end: Position

    @classmethod
    def on_line(cls, line: int, start: int, end: int) -> "Range":
        """Build a single-line range."""
        return cls(Position(line, start), Position(line, end))


@dataclass(frozen=True)
class TextEdit:
    """Replace the text covered by ``range`` with ``new_text``."""

    range: Range
    new_text: str


class TextDocument(Protocol):
    """Read access to a document and its coordinate system."""

    @property
    def path(self) -> Path:
        """Location of the document on disk."""
        ...

    def get_text(self) -> str:
        """Full document text."""
        ...

    def offset_at(self, position: Position) -> int:
        """Convert a position to an absolute character offset."""
        ...

    def position_at(self, offset: int) -> Position:
        """Convert an absolute character offset to a position."""
        ...


class StringDocument:
    """In-memory document backed by a string."""

    def __init__(self, path: Path | str, text: str) -> None:
        self._path = Path(path)
        self._text = text
        # Offset of the first character of each line
        self._line_starts = [0]
        for index, char in enumerate(text):
            if char == "\n":
                self._line_starts.append(index + 1)

    @classmethod
    def from_file(cls, path: Path | str, encoding: str = "utf-8") -> "StringDocument":
        """Load a document from disk, keeping its line endings."""
        with open(path, encoding=encoding, newline="") as f:
            return cls(path, f.read())

    @property
    def path(self) -> Path:
        return self._path

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def get_text(self) -> str:
        return self._text

    def _line_end(self, line: int) -> int:
        """Offset just past the visible content of ``line`` (before any line break)."""
        if line + 1 < len(self._line_starts):
            end = self._line_starts[line + 1] - 1
            if end > self._line_starts[line] and self._text[end - 1] == "\r":
                end -= 1
            return end
        return len(self._text)

    def offset_at(self, position: Position) -> int:
        if position.line < 0:
            return 0
        if position.line >= len(self._line_starts):
            return len(self._text)
        start = self._line_starts[position.line]
        return min(start + max(position.character, 0), self._line_end(position.line))

    def position_at(self, offset: int) -> Position:
        offset = min(max(offset, 0), len(self._text))
        line = bisect.bisect_right(self._line_starts, offset) - 1
        character = min(offset, self._line_end(line)) - self._line_starts[line]
        return Position(line, character)


def apply_edits(document: TextDocument, edits: list[TextEdit]) -> str:
    """Apply a batch of edits to the document text as one mutation.

    All ranges are interpreted against the original text.

    Raises:
        EditConflictError: If two edits overlap.
    """
    text = document.get_text()
    spans = sorted(
        (
            (document.offset_at(edit.range.start), document.offset_at(edit.range.end), edit.new_text)
            for edit in edits
        ),
        key=lambda span: (span[0], span[1]),
    )

    for (_, prev_end, _), (start, _, _) in zip(spans, spans[1:], strict=False):
        if start < prev_end:
            raise EditConflictError(f"Overlapping edits at offset {start}")

    for start, end, new_text in reversed(spans):
        text = text[:start] + new_text + text[end:]
    return text
