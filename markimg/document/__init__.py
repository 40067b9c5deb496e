"""Document accessor: text, position conversion and edit batches."""

from markimg.document.text import (
    Position,
    Range,
    StringDocument,
    TextDocument,
    TextEdit,
    apply_edits,
)

__all__ = [
    "Position",
    "Range",
    "StringDocument",
    "TextDocument",
    "TextEdit",
    "apply_edits",
]
