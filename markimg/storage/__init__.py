"""Storage accessor used by the organizer."""

from markimg.storage.base import FileStat, FileType, StorageProtocol
from markimg.storage.local import LocalStorage
from markimg.storage.memory import MemoryStorage

__all__ = [
    "FileStat",
    "FileType",
    "LocalStorage",
    "MemoryStorage",
    "StorageProtocol",
]
