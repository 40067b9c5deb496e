"""Tests for local file system storage."""

import pytest

from markimg.exceptions import StorageError, StorageNotFoundError
from markimg.storage import FileType, LocalStorage


class TestLocalStorage:
    """Tests for LocalStorage."""

    @pytest.fixture
    def store(self):
        """Create a local storage instance."""
        return LocalStorage()

    @pytest.mark.asyncio
    async def test_stat(self, store, tmp_path):
        """Test stat on files, directories and missing paths."""
        image = tmp_path / "a.png"
        image.write_bytes(b"abc")

        assert (await store.stat(image)).type is FileType.FILE
        assert (await store.stat(image)).size == 3
        assert (await store.stat(tmp_path)).type is FileType.DIRECTORY
        with pytest.raises(StorageNotFoundError):
            await store.stat(tmp_path / "missing.png")

    @pytest.mark.asyncio
    async def test_create_and_read_directory(self, store, tmp_path):
        """Test creating nested directories and listing entries."""
        await store.create_directory(tmp_path / "images" / "tmp")
        await store.create_directory(tmp_path / "images" / "tmp")
        (tmp_path / "images" / "a.png").write_bytes(b"a")

        entries = await store.read_directory(tmp_path / "images")

        assert entries == [("a.png", FileType.FILE), ("tmp", FileType.DIRECTORY)]

    @pytest.mark.asyncio
    async def test_copy(self, store, tmp_path):
        """Test copy with and without overwrite."""
        source = tmp_path / "a.png"
        target = tmp_path / "b.png"
        source.write_bytes(b"new")
        target.write_bytes(b"old")

        with pytest.raises(StorageError):
            await store.copy(source, target)
        await store.copy(source, target, overwrite=True)

        assert target.read_bytes() == b"new"

    @pytest.mark.asyncio
    async def test_copy_missing_source(self, store, tmp_path):
        """Test copy from a missing file."""
        with pytest.raises(StorageNotFoundError):
            await store.copy(tmp_path / "none.png", tmp_path / "b.png", overwrite=True)

    @pytest.mark.asyncio
    async def test_delete(self, store, tmp_path):
        """Test deleting files and directory trees."""
        staging = tmp_path / ".staging-1"
        staging.mkdir()
        (staging / "a.png").write_bytes(b"a")

        with pytest.raises(StorageError):
            await store.delete(staging)
        await store.delete(staging, recursive=True)

        assert not staging.exists()
        with pytest.raises(StorageNotFoundError):
            await store.delete(staging)

    @pytest.mark.asyncio
    async def test_write(self, store, tmp_path):
        """Test writing bytes."""
        target = tmp_path / "paste_1.png"
        await store.write(target, b"\x89PNG")
        assert target.read_bytes() == b"\x89PNG"

        with pytest.raises(StorageNotFoundError):
            await store.write(tmp_path / "missing" / "x.png", b"")
