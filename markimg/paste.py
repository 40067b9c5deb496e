"""Store pasted images in the pending area.

A pasted image is written as ``paste_<timestamp>.png`` and a reference to it
is returned. When auto-organize is on, the file goes to the pending
sub-directory and receives its final name on the next organize pass.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from markimg.config.constants import CHANGE_TOKEN_PARAM, PENDING_DIR_NAME, PLACEHOLDER_PREFIX
from markimg.config.settings import OrganizerConfig
from markimg.document import TextDocument
from markimg.organize.classifier import pending_file_name
from markimg.organize.pipeline import now_ms
from markimg.storage.base import StorageProtocol
from markimg.utils.fs import normalize_location, resolve_reference
from markimg.utils.logging import get_logger

log = get_logger(__name__)

_PLACEHOLDER_TIMESTAMP = re.compile(rf"{re.escape(PLACEHOLDER_PREFIX)}(\d+)")


@dataclass
class PasteResult:
    """A stored paste and the markup that references it."""

    path: Path
    relative_path: str
    markup: str
    placeholder: str | None = None


def placeholder_markup(timestamp: int | str) -> str:
    """Markup inserted while a paste is still being written."""
    return f"![{PLACEHOLDER_PREFIX}{timestamp}]()"


def paste_markup(relative_path: str, name: str, align: str, token: int | str) -> str:
    """Reference markup for a freshly pasted image."""
    src = f"{relative_path}?{CHANGE_TOKEN_PARAM}={token}"
    if align == "left":
        return f"![{name}]({src})"
    return f'<div align="{align}"><img src="{src}" alt="{name}" /></div>'


async def store_pasted_image(
    document: TextDocument,
    storage: StorageProtocol,
    config: OrganizerConfig,
    data: bytes,
    placeholder: str | None = None,
    clock: Callable[[], int] = now_ms,
) -> PasteResult:
    """Write pasted image bytes and build the markup that replaces the placeholder.

    The timestamp comes from the placeholder when it carries one, so the
    organizer can later find the file from the placeholder alone.

    Args:
        document: Document the image is pasted into
        storage: Storage accessor
        config: Configuration snapshot
        data: Image bytes
        placeholder: Optional ``![uploading-<ts>]()`` marker being replaced
        clock: Millisecond clock used when there is no placeholder

    Returns:
        PasteResult with the written path and the markup
    """
    timestamp = str(clock())
    if placeholder:
        match = _PLACEHOLDER_TIMESTAMP.search(placeholder)
        if match:
            timestamp = match.group(1)

    location = normalize_location(config.location)
    directory = f"{location}/{PENDING_DIR_NAME}" if config.auto_organize else location
    file_name = pending_file_name(timestamp)
    relative_path = f"{directory}/{file_name}"
    target = resolve_reference(document.path.parent, relative_path)

    await storage.create_directory(target.parent)
    await storage.write(target, data)
    log.info("Pasted image stored", path=str(target), size=len(data))

    markup = paste_markup(relative_path, Path(file_name).stem, config.align, timestamp)
    return PasteResult(
        path=target, relative_path=relative_path, markup=markup, placeholder=placeholder
    )
