"""Organize pass: scan, classify, stage, name, copy, rewrite, clean up."""

import time
from collections.abc import Callable

from markimg.config.settings import OrganizerConfig
from markimg.document import TextDocument
from markimg.exceptions import StorageError, StorageNotFoundError
from markimg.organize.classifier import build_layout, classify_all
from markimg.organize.edits import generate_edits
from markimg.organize.materializer import materialize
from markimg.organize.models import OrganizeResult
from markimg.organize.naming import resolve_operations
from markimg.organize.scanner import scan_document
from markimg.organize.staging import cleanup_staging, prepare_staging
from markimg.storage.base import FileType, StorageProtocol
from markimg.utils.logging import get_logger

log = get_logger(__name__)


def now_ms() -> int:
    """Current wall-clock time in milliseconds."""
    return time.time_ns() // 1_000_000


async def organize_images(
    document: TextDocument,
    storage: StorageProtocol,
    config: OrganizerConfig,
    clock: Callable[[], int] = now_ms,
) -> OrganizeResult:
    """Run one organize pass over a document.

    The returned edits must be applied to the document as a single batch
    before it is written. This function never raises: unexpected errors are
    logged and an empty edit list is returned so the save can go ahead.

    Args:
        document: Document accessor
        storage: Storage accessor
        config: Configuration snapshot for this pass
        clock: Millisecond clock used for the staging name and change token

    Returns:
        OrganizeResult with edits, operations, skipped references and failures
    """
    result = OrganizeResult()
    if not config.auto_organize:
        return result

    try:
        await _run_pass(document, storage, config, clock, result)
    except Exception as e:
        log.exception("Organize pass failed", document=str(document.path), error=str(e))
        result.edits = []
    return result


async def _run_pass(
    document: TextDocument,
    storage: StorageProtocol,
    config: OrganizerConfig,
    clock: Callable[[], int],
    result: OrganizeResult,
) -> None:
    layout = build_layout(document.path, config.location)

    try:
        stat = await storage.stat(layout.images_dir)
    except StorageNotFoundError:
        log.debug("Managed directory missing, skipping", images_dir=str(layout.images_dir))
        return
    if stat.type is not FileType.DIRECTORY:
        log.debug("Managed location is not a directory", images_dir=str(layout.images_dir))
        return

    try:
        await storage.create_directory(layout.pending_dir)
    except StorageError as e:
        log.debug("Could not create pending directory", path=str(layout.pending_dir), error=str(e))

    refs, skipped = classify_all(scan_document(document), layout)
    result.skipped = skipped
    for ref in skipped:
        log.debug("Reference left untouched", path=ref.original_path, reason=ref.skip_reason)
    if not refs:
        return

    started = clock()
    staging_dir, staged = await prepare_staging(storage, layout, started, result.failures)
    result.staging_dir = staging_dir
    # Kept unless every staged image that is still referenced was copied back
    keep_staging = True
    try:
        operations = resolve_operations(
            refs, document.get_text(), layout, config.pattern, staging_dir, staged
        )
        result.operations = operations
        report = await materialize(storage, operations, result.failures)
        keep_staging = bool(report.unrecovered_from(staging_dir))
        # A reference whose copy failed keeps pointing at its current file
        stranded = {id(op) for op in report.stranded}
        rewritten = [op for op in operations if id(op) not in stranded]
        result.edits = generate_edits(rewritten, config.align, str(started))
    finally:
        if keep_staging:
            log.warning("Keeping staging directory with unrecovered images", path=str(staging_dir))
        else:
            await cleanup_staging(storage, staging_dir)

    log.info(
        "Images organized",
        document=document.path.name,
        images=len(result.operations),
        edits=len(result.edits),
        skipped=len(result.skipped),
        failures=len(result.failures),
    )
