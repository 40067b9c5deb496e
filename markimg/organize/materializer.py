"""Copy planned images to their final names."""

from dataclasses import dataclass, field
from pathlib import Path

from markimg.exceptions import StorageError, StorageNotFoundError
from markimg.organize.models import FileOperation
from markimg.storage.base import StorageProtocol
from markimg.utils.fs import is_within, path_key
from markimg.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class MaterializeReport:
    """Operations grouped by how their copy went.

    ``missing`` sources could not be found; ``stranded`` sources may still
    exist but could not be copied.
    """

    copied: list[FileOperation] = field(default_factory=list)
    missing: list[FileOperation] = field(default_factory=list)
    stranded: list[FileOperation] = field(default_factory=list)

    def unrecovered_from(self, directory: Path) -> list[FileOperation]:
        """Operations sourced from ``directory`` that were not copied out of it."""
        return [
            op for op in self.missing + self.stranded if is_within(op.materialize_from, directory)
        ]


def _in_place(op: FileOperation) -> bool:
    return path_key(op.materialize_from.parent) == path_key(op.target.parent)


async def materialize(
    storage: StorageProtocol,
    operations: list[FileOperation],
    failures: list[str] | None = None,
) -> MaterializeReport:
    """Copy each operation's source to its target, one at a time.

    Sources that sit in their target's directory (files that could not be
    staged) are copied first. If one of them fails, no other copy may land
    on its path. A failed copy is logged and skipped; the caller decides
    whether the reference is still rewritten.
    """
    report = MaterializeReport()
    held: set[str] = set()
    in_place = [op for op in operations if _in_place(op)]
    others = [op for op in operations if not _in_place(op)]

    for op in in_place + others:
        if path_key(op.target) in held:
            log.warning("Target holds an uncopied image", target=str(op.target))
            report.stranded.append(op)
            if failures is not None:
                failures.append(f"copy {op.materialize_from.name} -> {op.target_name}: target busy")
            continue

        try:
            await storage.stat(op.materialize_from)
            if path_key(op.materialize_from) != path_key(op.target):
                await storage.copy(op.materialize_from, op.target, overwrite=True)
            report.copied.append(op)
        except StorageNotFoundError as e:
            log.warning("Image source missing", source=str(op.materialize_from), error=str(e))
            report.missing.append(op)
            if failures is not None:
                failures.append(f"missing {op.materialize_from.name}")
        except StorageError as e:
            log.warning(
                "Failed to process image",
                source=str(op.materialize_from),
                target=str(op.target),
                error=str(e),
            )
            report.stranded.append(op)
            if _in_place(op):
                held.add(path_key(op.materialize_from))
            if failures is not None:
                failures.append(f"copy {op.materialize_from.name} -> {op.target_name}: {e}")

    log.debug("Images materialized", copied=len(report.copied), planned=len(operations))
    return report
