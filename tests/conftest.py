"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from markimg.config.settings import OrganizerConfig
from markimg.document import StringDocument
from markimg.organize.classifier import build_layout
from markimg.storage import MemoryStorage

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

# Fixed clock used wherever a change token or staging name appears
FIXED_MS = 1_700_000_123_456

DOC_PATH = Path("/notes/doc.md")
IMAGES_DIR = Path("/notes/images")


@pytest.fixture
def fixed_ms() -> int:
    """The value returned by the ``clock`` fixture."""
    return FIXED_MS


@pytest.fixture
def clock():
    """Millisecond clock returning a fixed value."""
    return lambda: FIXED_MS


@pytest.fixture
def storage() -> MemoryStorage:
    """In-memory storage with an empty managed directory next to the document."""
    store = MemoryStorage()
    store.add_directory(IMAGES_DIR)
    return store


@pytest.fixture
def layout():
    """Directories for a document at /notes/doc.md with images/ beside it."""
    return build_layout(DOC_PATH, "images")


@pytest.fixture
def config() -> OrganizerConfig:
    """Organizer configuration with auto-organize enabled and left alignment."""
    return OrganizerConfig(
        auto_organize=True,
        location="images",
        pattern="${imgIndex}",
        align="left",
    )


@pytest.fixture
def make_document():
    """Build an in-memory document at /notes/doc.md."""

    def _make(text: str, path: Path = DOC_PATH) -> StringDocument:
        return StringDocument(path, text)

    return _make


@pytest.fixture
def isolated_settings(tmp_path, monkeypatch):
    """Run settings tests in an isolated directory without markimg.yaml."""
    monkeypatch.chdir(tmp_path)
    for key in ("MARKIMG_LOG_LEVEL", "MARKIMG_UPLOADS__PATTERN", "MARKIMG_UPLOADS__ALIGN"):
        monkeypatch.delenv(key, raising=False)

    from markimg.config.settings import get_settings

    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()
