"""Serialize organize passes per document.

Two passes over the same managed directory must never overlap. A session
keeps one lock per document; a second request either waits for the running
pass or, with ``skip_if_busy``, is skipped.
"""

from collections.abc import Callable
from pathlib import Path

import anyio

from markimg.config.settings import OrganizerConfig
from markimg.document import TextDocument
from markimg.organize.models import OrganizeResult
from markimg.organize.pipeline import now_ms, organize_images
from markimg.storage.base import StorageProtocol
from markimg.utils.fs import path_key
from markimg.utils.logging import get_logger

log = get_logger(__name__)


class OrganizeSession:
    """Runs at most one organize pass per document at a time."""

    def __init__(self, storage: StorageProtocol, clock: Callable[[], int] = now_ms) -> None:
        self.storage = storage
        self.clock = clock
        self._locks: dict[str, anyio.Lock] = {}
        # Passes holding or waiting for each lock
        self._users: dict[str, int] = {}

    def is_busy(self, path: Path) -> bool:
        """Check whether a pass is running for ``path``."""
        lock = self._locks.get(path_key(path))
        return lock is not None and lock.locked()

    async def organize(
        self,
        document: TextDocument,
        config: OrganizerConfig,
        skip_if_busy: bool = False,
    ) -> OrganizeResult:
        """Run a pass for ``document`` once no other pass holds its lock.

        Args:
            document: Document accessor
            config: Configuration snapshot for this pass
            skip_if_busy: Return an empty result instead of waiting

        Returns:
            The pass result, or an empty result when skipped
        """
        key = path_key(document.path)
        if skip_if_busy and self.is_busy(document.path):
            log.info("Organize pass already running, skipping", document=str(document.path))
            return OrganizeResult()

        lock = self._locks.setdefault(key, anyio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                return await organize_images(document, self.storage, config, clock=self.clock)
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]
