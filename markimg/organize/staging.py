"""Staging area for the clean rebuild of the managed directory."""

import secrets
from pathlib import Path

from markimg.config.constants import STAGING_DIR_PREFIX
from markimg.exceptions import StorageError
from markimg.organize.models import OrganizerLayout
from markimg.storage.base import FileType, StorageProtocol
from markimg.utils.logging import get_logger

log = get_logger(__name__)


def staging_dir_name(now_ms: int) -> str:
    """Unique staging directory name for a pass started at ``now_ms``."""
    return f"{STAGING_DIR_PREFIX}{now_ms}-{secrets.token_hex(3)}"


async def prepare_staging(
    storage: StorageProtocol,
    layout: OrganizerLayout,
    now_ms: int,
    failures: list[str] | None = None,
) -> tuple[Path, set[str]]:
    """Move every top-level file of the managed directory into a new staging directory.

    Each file is copied first and deleted afterwards, so a failure at any
    point leaves at least one copy behind. Sub-directories (the pending
    area included) are not touched.

    Args:
        storage: Storage accessor
        layout: Directories of the current pass
        now_ms: Pass start time in milliseconds
        failures: Optional list collecting descriptions of failed entries

    Returns:
        Tuple of (staging directory, names of the files moved into it)
    """
    staging_dir = layout.images_dir / staging_dir_name(now_ms)

    try:
        await storage.create_directory(staging_dir)
        entries = await storage.read_directory(layout.images_dir)
    except StorageError as e:
        log.error("Staging preparation failed", staging_dir=str(staging_dir), error=str(e))
        if failures is not None:
            failures.append(f"prepare staging: {e}")
        return staging_dir, set()

    staged: set[str] = set()
    for name, kind in entries:
        if kind is not FileType.FILE:
            continue

        source = layout.images_dir / name
        try:
            await storage.copy(source, staging_dir / name, overwrite=True)
            staged.add(name)
            await storage.delete(source)
        except StorageError as e:
            log.warning("Failed to move image to staging", name=name, error=str(e))
            if failures is not None:
                failures.append(f"stage {name}: {e}")

    log.debug("Staging prepared", staging_dir=str(staging_dir), files=len(staged))
    return staging_dir, staged


async def cleanup_staging(storage: StorageProtocol, staging_dir: Path) -> None:
    """Delete the staging directory. Errors are logged and ignored."""
    try:
        await storage.delete(staging_dir, recursive=True)
    except StorageError as e:
        log.debug("Staging cleanup failed", staging_dir=str(staging_dir), error=str(e))
