"""Local file system storage.

Blocking calls run in a worker thread via ``anyio.to_thread`` so a pass
suspends on each storage step instead of blocking the event loop.
"""

import shutil
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import anyio

from markimg.exceptions import StorageError, StorageNotFoundError
from markimg.storage.base import FileStat, FileType
from markimg.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")


async def _run(path: Path, func: Callable[[], T]) -> T:
    """Run a blocking file operation and translate OS errors."""
    try:
        return await anyio.to_thread.run_sync(func)
    except FileNotFoundError as e:
        raise StorageNotFoundError(path) from e
    except OSError as e:
        raise StorageError(path, str(e), cause=e) from e


class LocalStorage:
    """Storage backed by the local file system."""

    async def stat(self, path: Path) -> FileStat:
        def _stat() -> FileStat:
            result = path.stat()
            kind = FileType.DIRECTORY if path.is_dir() else FileType.FILE
            return FileStat(type=kind, size=result.st_size)

        return await _run(path, _stat)

    async def create_directory(self, path: Path) -> None:
        await _run(path, lambda: path.mkdir(parents=True, exist_ok=True))

    async def read_directory(self, path: Path) -> list[tuple[str, FileType]]:
        def _list() -> list[tuple[str, FileType]]:
            return sorted(
                (entry.name, FileType.DIRECTORY if entry.is_dir() else FileType.FILE)
                for entry in path.iterdir()
            )

        return await _run(path, _list)

    async def copy(self, source: Path, target: Path, overwrite: bool = False) -> None:
        def _copy() -> None:
            if not source.is_file():
                raise FileNotFoundError(source)
            if target.exists() and not overwrite:
                raise FileExistsError(target)
            shutil.copy2(source, target)

        await _run(source, _copy)

    async def delete(self, path: Path, recursive: bool = False) -> None:
        def _delete() -> None:
            if path.is_dir():
                if recursive:
                    shutil.rmtree(path)
                else:
                    path.rmdir()
            else:
                path.unlink()

        await _run(path, _delete)

    async def write(self, path: Path, data: bytes) -> None:
        try:
            async with await anyio.open_file(path, "wb") as f:
                await f.write(data)
        except FileNotFoundError as e:
            raise StorageNotFoundError(path) from e
        except OSError as e:
            raise StorageError(path, str(e), cause=e) from e
        log.debug("File written", path=str(path), size=len(data))
