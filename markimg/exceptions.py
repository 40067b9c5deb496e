"""Custom exceptions for MarkImg."""

from pathlib import Path


class MarkimgError(Exception):
    """Base exception class for MarkImg."""

    pass


class StorageError(MarkimgError):
    """A storage operation failed."""

    def __init__(self, path: Path | str, message: str, cause: Exception | None = None) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Storage operation failed for {path}: {message}")


class StorageNotFoundError(StorageError):
    """The requested file or directory does not exist."""

    def __init__(self, path: Path | str) -> None:
        super().__init__(path, "no such file or directory")


class EditConflictError(MarkimgError):
    """Two edits in one batch touch overlapping ranges."""

    pass


class ConfigurationError(MarkimgError):
    """Configuration error."""

    pass
