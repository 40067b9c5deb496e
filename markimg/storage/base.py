"""Storage capability interface.

The organizer never touches the file system directly; every operation goes
through an object implementing :class:`StorageProtocol`, so the engine can
run against the real disk or an in-memory fake.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol


class FileType(Enum):
    """Kind of a directory entry."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class FileStat:
    """Metadata returned by :meth:`StorageProtocol.stat`."""

    type: FileType
    size: int = 0


class StorageProtocol(Protocol):
    """Asynchronous storage operations.

    Missing paths raise ``StorageNotFoundError``; any other failure raises
    ``StorageError``.
    """

    async def stat(self, path: Path) -> FileStat:
        """Return metadata for ``path``."""
        ...

    async def create_directory(self, path: Path) -> None:
        """Create ``path`` and any missing parents; existing directories are fine."""
        ...

    async def read_directory(self, path: Path) -> list[tuple[str, FileType]]:
        """List the direct children of ``path`` as ``(name, type)`` pairs."""
        ...

    async def copy(self, source: Path, target: Path, overwrite: bool = False) -> None:
        """Copy a file. The target's parent directory must exist."""
        ...

    async def delete(self, path: Path, recursive: bool = False) -> None:
        """Delete a file, or a directory (non-empty ones need ``recursive``)."""
        ...

    async def write(self, path: Path, data: bytes) -> None:
        """Write bytes to a file, replacing any existing content."""
        ...
