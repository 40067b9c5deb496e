"""In-memory storage for tests and dry runs."""

from pathlib import Path, PurePosixPath

from markimg.exceptions import StorageError, StorageNotFoundError
from markimg.storage.base import FileStat, FileType


def _key(path: Path | str) -> str:
    return str(PurePosixPath(str(path).replace("\\", "/")))


class MemoryStorage:
    """A dictionary-backed file tree.

    Paths are compared as POSIX strings. Operations whose source or target
    path is listed in ``fail_on`` raise ``StorageError``, which lets tests
    exercise per-entry failure handling.
    """

    def __init__(self, fail_on: set[str] | None = None) -> None:
        self.files: dict[str, bytes] = {}
        self.directories: set[str] = {"/"}
        self.fail_on: set[str] = {_key(p) for p in fail_on or set()}

    # Test helpers

    def add_file(self, path: Path | str, data: bytes = b"") -> None:
        """Create a file and its parent directories."""
        key = _key(path)
        self._add_parents(key)
        self.files[key] = data

    def add_directory(self, path: Path | str) -> None:
        key = _key(path)
        self._add_parents(key)
        self.directories.add(key)

    def exists(self, path: Path | str) -> bool:
        key = _key(path)
        return key in self.files or key in self.directories

    def read(self, path: Path | str) -> bytes:
        return self.files[_key(path)]

    def listing(self, path: Path | str) -> list[str]:
        """Names of all files below ``path``, relative to it."""
        prefix = _key(path).rstrip("/") + "/"
        return sorted(k[len(prefix) :] for k in self.files if k.startswith(prefix))

    def _add_parents(self, key: str) -> None:
        for parent in PurePosixPath(key).parents:
            self.directories.add(str(parent))

    def _check(self, *paths: str) -> None:
        for key in paths:
            if key in self.fail_on:
                raise StorageError(key, "injected failure")

    # StorageProtocol

    async def stat(self, path: Path) -> FileStat:
        key = _key(path)
        self._check(key)
        if key in self.files:
            return FileStat(type=FileType.FILE, size=len(self.files[key]))
        if key in self.directories:
            return FileStat(type=FileType.DIRECTORY)
        raise StorageNotFoundError(path)

    async def create_directory(self, path: Path) -> None:
        key = _key(path)
        self._check(key)
        if key in self.files:
            raise StorageError(path, "a file with this name exists")
        self.add_directory(key)

    async def read_directory(self, path: Path) -> list[tuple[str, FileType]]:
        key = _key(path)
        self._check(key)
        if key not in self.directories:
            raise StorageNotFoundError(path)
        entries = [
            (PurePosixPath(k).name, FileType.FILE)
            for k in self.files
            if str(PurePosixPath(k).parent) == key
        ]
        entries += [
            (PurePosixPath(d).name, FileType.DIRECTORY)
            for d in self.directories
            if d != key and str(PurePosixPath(d).parent) == key
        ]
        return sorted(entries)

    async def copy(self, source: Path, target: Path, overwrite: bool = False) -> None:
        src, dst = _key(source), _key(target)
        self._check(src, dst)
        if src not in self.files:
            raise StorageNotFoundError(source)
        if str(PurePosixPath(dst).parent) not in self.directories:
            raise StorageNotFoundError(PurePosixPath(dst).parent)
        if dst in self.files and not overwrite:
            raise StorageError(target, "target exists")
        self.files[dst] = self.files[src]

    async def delete(self, path: Path, recursive: bool = False) -> None:
        key = _key(path)
        self._check(key)
        if key in self.files:
            del self.files[key]
            return
        if key not in self.directories:
            raise StorageNotFoundError(path)
        prefix = key + "/"
        children = [k for k in self.files if k.startswith(prefix)]
        children += [d for d in self.directories if d.startswith(prefix)]
        if children and not recursive:
            raise StorageError(path, "directory not empty")
        for child in children:
            self.files.pop(child, None)
            self.directories.discard(child)
        self.directories.discard(key)

    async def write(self, path: Path, data: bytes) -> None:
        key = _key(path)
        self._check(key)
        if str(PurePosixPath(key).parent) not in self.directories:
            raise StorageNotFoundError(PurePosixPath(key).parent)
        self.files[key] = bytes(data)
