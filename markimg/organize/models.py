"""Data model for one organize pass.

Every object here is created fresh for a pass and discarded once the edits
have been produced.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from markimg.config.constants import MAX_HEADING_LEVEL
from markimg.document import Range, TextEdit


class SyntaxKind(Enum):
    """Markup used by an image reference."""

    MARKDOWN = "markdown"
    HTML = "html"


@dataclass(frozen=True)
class ScannedRef:
    """A candidate image reference as found in the text."""

    path: str
    alt: str
    range: Range
    syntax: SyntaxKind
    line_text: str
    full_match: str


@dataclass(frozen=True)
class Placeholder:
    """A pasted image awaiting its final name."""

    timestamp: str
    source: Path


@dataclass(frozen=True)
class Managed:
    """An image file inside the managed directory."""

    source: Path
    pending: bool = False


@dataclass(frozen=True)
class OutOfScope:
    """A reference the organizer must leave untouched."""

    reason: str


Category = Placeholder | Managed | OutOfScope


@dataclass(frozen=True)
class ImageRef:
    """A classified image reference."""

    id: str
    scanned: ScannedRef
    category: Category

    @property
    def original_path(self) -> str:
        return self.scanned.path

    @property
    def original_alt(self) -> str:
        return self.scanned.alt

    @property
    def range(self) -> Range:
        return self.scanned.range

    @property
    def source(self) -> Path | None:
        """Where the file currently lives; None for out-of-scope references."""
        if isinstance(self.category, (Placeholder, Managed)):
            return self.category.source
        return None

    @property
    def in_scope(self) -> bool:
        return not isinstance(self.category, OutOfScope)

    @property
    def skip_reason(self) -> str | None:
        if isinstance(self.category, OutOfScope):
            return self.category.reason
        return None


@dataclass(frozen=True)
class FileOperation:
    """One planned copy from the staging or pending area to the final name."""

    ref: ImageRef
    materialize_from: Path
    target: Path
    target_relative_path: str
    target_name: str


@dataclass
class HeadingState:
    """Naming counters carried from one reference to the next."""

    counts: list[int] = field(default_factory=lambda: [0] * MAX_HEADING_LEVEL)
    image_index: int = 0
    line_cursor: int = 0

    def count(self, level: int) -> int:
        return self.counts[level - 1]


@dataclass(frozen=True)
class OrganizerLayout:
    """Directories involved in a pass, resolved against the document."""

    document_path: Path
    location: str
    images_dir: Path
    pending_dir: Path

    @property
    def document_dir(self) -> Path:
        return self.document_path.parent

    @property
    def document_name(self) -> str:
        return self.document_path.stem


@dataclass
class OrganizeResult:
    """Outcome of one organize pass.

    ``skipped`` lists references left untouched because they are out of
    scope; ``failures`` lists storage steps that failed and were skipped.
    """

    edits: list[TextEdit] = field(default_factory=list)
    operations: list[FileOperation] = field(default_factory=list)
    skipped: list[ImageRef] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)
    staging_dir: Path | None = None

    @property
    def changed(self) -> bool:
        return bool(self.edits)
