"""Tests for per-document organize sessions."""

from pathlib import Path

import anyio
import pytest

from markimg.session import OrganizeSession
from markimg.storage import MemoryStorage


class SlowStorage(MemoryStorage):
    """Memory storage whose directory listing waits for an event."""

    def __init__(self) -> None:
        super().__init__()
        self.release = anyio.Event()
        self.listing_started = anyio.Event()

    async def read_directory(self, path):
        self.listing_started.set()
        await self.release.wait()
        return await super().read_directory(path)


class TestOrganizeSession:
    """Tests for OrganizeSession."""

    @pytest.mark.asyncio
    async def test_runs_pass(self, storage, config, make_document, clock):
        """Test a session runs a normal pass."""
        storage.add_file("/notes/images/a.png")
        session = OrganizeSession(storage, clock=clock)

        result = await session.organize(make_document("![a](images/a.png)"), config)

        assert len(result.edits) == 1
        assert not session.is_busy(Path("/notes/doc.md"))

    @pytest.mark.asyncio
    async def test_skip_if_busy(self, config, make_document):
        """Test a second request is skipped while a pass is running."""
        store = SlowStorage()
        store.add_file("/notes/images/a.png")
        session = OrganizeSession(store)
        doc = make_document("![a](images/a.png)")
        results = []

        async def first() -> None:
            results.append(await session.organize(doc, config))

        async with anyio.create_task_group() as tg:
            tg.start_soon(first)
            await store.listing_started.wait()

            assert session.is_busy(doc.path)
            skipped = await session.organize(doc, config, skip_if_busy=True)
            assert skipped.edits == []
            assert skipped.operations == []

            store.release.set()

        assert len(results[0].edits) == 1

    @pytest.mark.asyncio
    async def test_queued_passes_run_in_turn(self, config, make_document):
        """Test a waiting request runs after the first and sees its result."""
        store = SlowStorage()
        store.add_file("/notes/images/a.png", b"A")
        session = OrganizeSession(store)
        results = {}

        async def run(name: str, text: str) -> None:
            results[name] = await session.organize(make_document(text), config)

        async with anyio.create_task_group() as tg:
            tg.start_soon(run, "first", "![a](images/a.png)")
            await store.listing_started.wait()
            tg.start_soon(run, "second", "![1](images/1.png)")
            await anyio.sleep(0.01)
            store.release.set()

        assert len(results["first"].edits) == 1
        assert results["second"].edits == []
        assert store.read("/notes/images/1.png") == b"A"
        assert session._locks == {}

    @pytest.mark.asyncio
    async def test_lock_released_after_pass(self, storage, config, make_document, clock):
        """Test finished passes leave no per-document locks behind."""
        storage.add_file("/notes/images/a.png")
        session = OrganizeSession(storage, clock=clock)

        for name in ("one", "two", "three"):
            doc = make_document("![a](images/a.png)", Path(f"/notes/{name}.md"))
            await session.organize(doc, config)

        assert session._locks == {}
        assert session._users == {}
