"""Tests for the organize pass."""

from dataclasses import replace
from pathlib import Path

import pytest

from markimg.document import StringDocument, apply_edits
from markimg.exceptions import StorageNotFoundError
from markimg.organize import organize_images
from markimg.storage import MemoryStorage


class LosingStorage(MemoryStorage):
    """Memory storage that cannot find files once they are staged."""

    async def stat(self, path):
        if ".staging-" in str(path) and Path(path).suffix:
            raise StorageNotFoundError(path)
        return await super().stat(path)


async def _run_and_apply(text, storage, config, clock):
    doc = StringDocument("/notes/doc.md", text)
    result = await organize_images(doc, storage, config, clock=clock)
    return result, apply_edits(doc, result.edits)


class TestShortCircuit:
    """Tests for passes that do nothing."""

    @pytest.mark.asyncio
    async def test_disabled(self, storage, config, make_document):
        """Test auto_organize=False returns no edits and touches nothing."""
        storage.add_file("/notes/images/a.png", b"a")
        doc = make_document("![a](images/a.png)")

        result = await organize_images(doc, storage, replace(config, auto_organize=False))

        assert result.edits == []
        assert storage.exists("/notes/images/a.png")
        assert not storage.exists("/notes/images/tmp")

    @pytest.mark.asyncio
    async def test_missing_directory(self, config, make_document):
        """Test a missing managed directory is not an error."""
        store = MemoryStorage()
        result = await organize_images(make_document("![a](images/a.png)"), store, config)

        assert result.edits == []
        assert result.operations == []

    @pytest.mark.asyncio
    async def test_no_managed_references(self, storage, config, make_document):
        """Test a document without managed images creates no staging directory."""
        storage.add_file("/notes/images/a.png", b"a")
        doc = make_document("![web](https://example.com/x.png)")

        result = await organize_images(doc, storage, config)

        assert result.edits == []
        assert result.staging_dir is None
        assert len(result.skipped) == 1
        assert storage.exists("/notes/images/a.png")
        assert storage.exists("/notes/images/tmp")


class TestScenarios:
    """End-to-end passes against in-memory storage."""

    @pytest.mark.asyncio
    async def test_simple_rename(self, storage, config, clock, fixed_ms):
        """Test a single image is renamed after its index."""
        storage.add_file("/notes/images/a.png", b"A")

        result, text = await _run_and_apply("![a](images/a.png)", storage, config, clock)

        assert text == f"![1](images/1.png?t={fixed_ms})"
        assert storage.read("/notes/images/1.png") == b"A"
        assert not storage.exists("/notes/images/a.png")
        assert storage.listing("/notes/images") == ["1.png"]
        assert result.failures == []

    @pytest.mark.asyncio
    async def test_placeholder_after_heading(self, storage, config, clock, fixed_ms):
        """Test a pasted placeholder is named after its heading."""
        storage.add_file("/notes/images/tmp/paste_1700000000000.png", b"P")
        config = replace(config, pattern="${h1Index}-${imgIndex}")

        _, text = await _run_and_apply(
            "# Intro\n\n![uploading-1700000000000]()\n", storage, config, clock
        )

        assert text == f"# Intro\n\n![1-1](images/1-1.png?t={fixed_ms})\n"
        assert storage.read("/notes/images/1-1.png") == b"P"

    @pytest.mark.asyncio
    async def test_center_alignment_wraps_isolated_line(self, storage, config, clock, fixed_ms):
        """Test a centered isolated image becomes a wrapped img tag."""
        storage.add_file("/notes/images/a.png")

        _, text = await _run_and_apply(
            "![a](images/a.png)", storage, replace(config, align="center"), clock
        )

        assert text == f'<div align="center"><img src="images/1.png?t={fixed_ms}" alt="1" /></div>'

    @pytest.mark.asyncio
    async def test_unreferenced_images_dropped(self, storage, config, clock):
        """Test images no longer referenced are removed by the rebuild."""
        storage.add_file("/notes/images/a.png", b"A")
        storage.add_file("/notes/images/old.png", b"O")

        await _run_and_apply("![a](images/a.png)", storage, config, clock)

        assert storage.listing("/notes/images") == ["1.png"]

    @pytest.mark.asyncio
    async def test_swap_order(self, storage, config, clock):
        """Test two images whose names swap keep their own contents."""
        storage.add_file("/notes/images/1.png", b"first")
        storage.add_file("/notes/images/2.png", b"second")

        await _run_and_apply("![2](images/2.png)\n![1](images/1.png)", storage, config, clock)

        assert storage.read("/notes/images/1.png") == b"second"
        assert storage.read("/notes/images/2.png") == b"first"

    @pytest.mark.asyncio
    async def test_collision_resolution(self, storage, config, clock, fixed_ms):
        """Test equal rendered names get -2 in document order."""
        storage.add_file("/notes/images/a.png", b"A")
        storage.add_file("/notes/images/b.png", b"B")
        config = replace(config, pattern="shot")

        _, text = await _run_and_apply(
            "![a](images/a.png)\n![b](images/b.png)", storage, config, clock
        )

        assert text == (
            f"![shot](images/shot.png?t={fixed_ms})\n![shot-2](images/shot-2.png?t={fixed_ms})"
        )
        assert storage.read("/notes/images/shot.png") == b"A"
        assert storage.read("/notes/images/shot-2.png") == b"B"

    @pytest.mark.asyncio
    async def test_crlf_document(self, storage, config, clock, fixed_ms):
        """Test CRLF line endings are preserved."""
        storage.add_file("/notes/images/a.png")
        config = replace(config, pattern="${h1Index}-${imgIndex}")

        _, text = await _run_and_apply("# A\r\n![a](images/a.png)\r\n", storage, config, clock)

        assert text == f"# A\r\n![1-1](images/1-1.png?t={fixed_ms})\r\n"


class TestIdempotence:
    """Tests that a second pass changes nothing."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("align", ["left", "center", "right"])
    async def test_second_pass_is_empty(self, storage, config, align):
        """Test applying the first pass's edits leaves nothing for the second."""
        storage.add_file("/notes/images/x.png", b"X")
        storage.add_file("/notes/images/y.png", b"Y")
        storage.add_file("/notes/images/tmp/paste_5.png", b"P")
        config = replace(config, pattern="${h1Index}-${imgIndex}", align=align)
        text = (
            "# One\n"
            "![x](images/x.png) inline ![Custom](images/y.png)\n"
            "# Two\n"
            "![uploading-5]()\n"
            '<img src="images/y.png" alt="y" width="10">\n'
        )

        first, text = await _run_and_apply(text, storage, config, lambda: 1000)
        second, again = await _run_and_apply(text, storage, config, lambda: 2000)

        assert first.edits
        assert second.edits == []
        assert again == text
        assert storage.listing("/notes/images") == [
            "1-1.png",
            "1-2.png",
            "2-1.png",
            "2-2.png",
            "tmp/paste_5.png",
        ]
        assert storage.read("/notes/images/2-1.png") == b"P"
        assert storage.read("/notes/images/2-2.png") == b"Y"


class TestContainment:
    """Tests that out-of-scope references are never touched."""

    @pytest.mark.asyncio
    async def test_out_of_scope_untouched(self, storage, config, clock):
        """Test references outside the managed tree produce no edits or file operations."""
        storage.add_file("/notes/images/a.png", b"A")
        storage.add_file("/notes/other/b.png", b"B")
        storage.add_file("/notes/images/c.txt", b"C")
        text = (
            "![b](other/b.png)\n"
            "![c](images/c.txt)\n"
            "![web](http://example.com/images/a.png)\n"
            "![abs](/notes/images/a.png)\n"
            "![a](images/a.png)\n"
        )

        result, new_text = await _run_and_apply(text, storage, config, clock)

        assert len(result.operations) == 1
        assert len(result.edits) == 1
        assert new_text.splitlines()[:4] == text.splitlines()[:4]
        assert storage.read("/notes/other/b.png") == b"B"
        assert [r.skip_reason for r in result.skipped] == [
            "outside managed directory",
            "unsupported extension .txt",
            "url",
            "absolute path",
        ]


class TestFailures:
    """Tests for partial failure handling."""

    @pytest.mark.asyncio
    async def test_missing_source_still_rewrites(self, storage, config, clock, fixed_ms):
        """Test a reference whose file is missing is still pointed at its new name."""
        storage.add_file("/notes/images/b.png", b"B")

        result, text = await _run_and_apply(
            "![a](images/a.png)\n![b](images/b.png)", storage, config, clock
        )

        assert text == f"![1](images/1.png?t={fixed_ms})\n![2](images/2.png?t={fixed_ms})"
        assert storage.read("/notes/images/2.png") == b"B"
        assert result.failures == ["missing a.png"]
        assert not storage.exists(result.staging_dir)

    @pytest.mark.asyncio
    async def test_failed_copy_keeps_staging(self, config, clock):
        """Test an image that could not be copied back survives in staging."""
        store = MemoryStorage(fail_on={"/notes/images/1.png"})
        store.add_file("/notes/images/a.png", b"A")

        result, _ = await _run_and_apply("![a](images/a.png)", store, config, clock)

        assert result.staging_dir is not None
        assert store.read(result.staging_dir / "a.png") == b"A"
        assert len(result.failures) == 1

    @pytest.mark.asyncio
    async def test_percent_encoded_reference(self, storage, config, clock, fixed_ms):
        """Test an encoded link is matched with its file and keeps its bytes."""
        storage.add_file("/notes/images/my pic.png", b"P")

        result, text = await _run_and_apply("![shot](images/my%20pic.png)", storage, config, clock)

        assert text == f"![shot](images/1.png?t={fixed_ms})"
        assert storage.read("/notes/images/1.png") == b"P"
        assert storage.listing("/notes/images") == ["1.png"]
        assert result.failures == []

    @pytest.mark.asyncio
    async def test_unstaged_image_survives_later_pass(self, config, clock, fixed_ms):
        """Test an image that could not be staged is left in place and organized next time."""
        store = MemoryStorage(fail_on={"/notes/images/a.png"})
        store.add_file("/notes/images/a.png", b"A")

        first, text = await _run_and_apply("![a](images/a.png)", store, config, clock)

        assert text == "![a](images/a.png)"
        assert first.edits == []
        assert store.read("/notes/images/a.png") == b"A"
        assert not store.exists("/notes/images/1.png")

        store.fail_on.clear()
        _, text = await _run_and_apply(text, store, config, clock)

        assert text == f"![1](images/1.png?t={fixed_ms})"
        assert store.read("/notes/images/1.png") == b"A"

    @pytest.mark.asyncio
    async def test_missing_staged_image_keeps_staging(self, config, clock):
        """Test staging survives when a staged image cannot be found again."""
        store = LosingStorage()
        store.add_file("/notes/images/a.png", b"A")

        result, _ = await _run_and_apply("![a](images/a.png)", store, config, clock)

        assert "missing a.png" in result.failures
        assert store.read(result.staging_dir / "a.png") == b"A"

    @pytest.mark.asyncio
    async def test_unexpected_error_never_escapes(self, storage, config, make_document):
        """Test an unexpected exception yields an empty edit list."""
        storage.add_file("/notes/images/a.png", b"A")

        async def broken_copy(*args, **kwargs):
            raise RuntimeError("boom")

        storage.copy = broken_copy  # type: ignore[method-assign]

        result = await organize_images(make_document("![a](images/a.png)"), storage, config)

        assert result.edits == []
        # Nothing was staged, so the original file is untouched
        assert storage.exists(Path("/notes/images/a.png"))
