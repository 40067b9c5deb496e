"""Deterministic naming of managed images.

Names depend only on the ordered reference list, the headings that precede
each reference and the configured pattern. Heading counters and the set of
names already taken are passed around explicitly, so every step can be
tested on its own.
"""

import re
from collections.abc import Collection
from dataclasses import replace
from pathlib import Path, PurePosixPath

from markimg.config.constants import MAX_HEADING_LEVEL
from markimg.organize.models import (
    FileOperation,
    HeadingState,
    ImageRef,
    Managed,
    OrganizerLayout,
    Placeholder,
)
from markimg.organize.scanner import split_lines
from markimg.utils.fs import path_key, safe_filename

HEADING = re.compile(rf"^(#{{1,{MAX_HEADING_LEVEL}}})\s")
UNRESOLVED_TOKEN = re.compile(r"\$\{[^}]*\}")


def heading_level(line: str) -> int | None:
    """Return the ATX heading level of ``line``, or None for other lines."""
    match = HEADING.match(line)
    return len(match.group(1)) if match else None


def advance_headings(state: HeadingState, lines: list[str], line: int) -> HeadingState:
    """Move the line cursor up to and including ``line``, counting headings.

    A level-1 heading also resets the image index.
    """
    counts = list(state.counts)
    image_index = state.image_index
    cursor = state.line_cursor

    while cursor <= line and cursor < len(lines):
        level = heading_level(lines[cursor])
        if level is not None:
            counts[level - 1] += 1
            if level == 1:
                image_index = 0
        cursor += 1

    return HeadingState(counts=counts, image_index=image_index, line_cursor=cursor)


def next_image(state: HeadingState) -> HeadingState:
    """Count one more image under the current top-level heading."""
    return replace(state, image_index=state.image_index + 1)


def render_name(pattern: str, document_name: str, state: HeadingState, extension: str) -> str:
    """Render the naming pattern for the current state.

    Every recognised token is substituted; unknown tokens are dropped. The
    extension is appended unless the rendered name already ends with it.
    """
    tokens = {"fileName": document_name, "imgIndex": str(state.image_index)}
    for level in range(1, MAX_HEADING_LEVEL + 1):
        tokens[f"h{level}Index"] = str(state.count(level))

    name = pattern
    for token, value in tokens.items():
        name = name.replace(f"${{{token}}}", value)
    name = safe_filename(UNRESOLVED_TOKEN.sub("", name))

    if not name or name.lower() == extension.lower():
        name = str(state.image_index) + name

    if not name.lower().endswith(extension.lower()):
        name += extension
    return name


def ensure_unique(name: str, seen: set[str]) -> str:
    """Return ``name`` or the first free ``<stem>-N<ext>`` variant, and record it.

    Comparison is case-insensitive.
    """
    path = PurePosixPath(name)
    stem, suffix = name[: len(name) - len(path.suffix)], path.suffix

    unique = name
    counter = 2
    while unique.lower() in seen:
        unique = f"{stem}-{counter}{suffix}"
        counter += 1

    seen.add(unique.lower())
    return unique


def _staged_name(name: str, staged: Collection[str]) -> str | None:
    if name in staged:
        return name
    folded = {entry.lower(): entry for entry in staged}
    return folded.get(name.lower())


def copy_source(
    ref: ImageRef,
    layout: OrganizerLayout,
    staging_dir: Path,
    staged: Collection[str] | None = None,
) -> Path:
    """Where a reference's file is copied from during materialization.

    Placeholders and pending images stay in the pending area. Files that
    were moved out of the managed directory are read from staging; anything
    else, including a file that failed to stage, is copied in place.
    ``staged`` names the files actually moved; ``None`` means all of them.
    """
    category = ref.category
    if isinstance(category, Placeholder):
        return category.source
    if not isinstance(category, Managed):
        raise ValueError(f"Reference {ref.id!r} is out of scope")
    if category.pending:
        return category.source
    if path_key(category.source.parent) != path_key(layout.images_dir):
        return category.source
    if staged is None:
        return staging_dir / category.source.name
    name = _staged_name(category.source.name, staged)
    return staging_dir / name if name is not None else category.source


def resolve_operations(
    refs: list[ImageRef],
    text: str,
    layout: OrganizerLayout,
    pattern: str,
    staging_dir: Path,
    staged: Collection[str] | None = None,
) -> list[FileOperation]:
    """Assign a final, unique name to every in-scope reference.

    Args:
        refs: In-scope references
        text: Full document text, used to count headings
        layout: Directories of the current pass
        pattern: Naming pattern
        staging_dir: Staging directory holding the previous contents
        staged: Names of the files moved into staging (all when omitted)

    Returns:
        One operation per reference, in document order
    """
    lines = split_lines(text)
    ordered = sorted(refs, key=lambda ref: ref.range.start)

    state = HeadingState()
    seen: set[str] = set()
    operations: list[FileOperation] = []

    for ref in ordered:
        state = next_image(advance_headings(state, lines, ref.range.start.line))

        source = ref.source
        assert source is not None
        name = render_name(pattern, layout.document_name, state, source.suffix)
        name = ensure_unique(name, seen)

        operations.append(
            FileOperation(
                ref=ref,
                materialize_from=copy_source(ref, layout, staging_dir, staged),
                target=layout.images_dir / name,
                target_relative_path=f"{layout.location}/{name}",
                target_name=name,
            )
        )

    return operations
