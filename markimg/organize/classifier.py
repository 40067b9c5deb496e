"""Decide which scanned references the organizer may manage.

Anything that is not clearly an image inside the managed directory is
classified :class:`OutOfScope` and left untouched in the document.
"""

import re
from pathlib import Path, PurePosixPath
from urllib.parse import unquote

from markimg.config.constants import (
    IMAGE_EXTENSIONS,
    PASTE_EXTENSION,
    PASTE_PREFIX,
    PENDING_DIR_NAME,
    PLACEHOLDER_PREFIX,
)
from markimg.organize.models import (
    ImageRef,
    Managed,
    OrganizerLayout,
    OutOfScope,
    Placeholder,
    ScannedRef,
    SyntaxKind,
)
from markimg.utils.fs import (
    has_url_scheme,
    is_absolute_reference,
    is_within,
    normalize_location,
    resolve_reference,
    strip_query,
)

PLACEHOLDER_ALT = re.compile(rf"^{re.escape(PLACEHOLDER_PREFIX)}(\d+)$")


def build_layout(document_path: Path, location: str) -> OrganizerLayout:
    """Resolve the managed and pending directories for a document."""
    location = normalize_location(location)
    images_dir = resolve_reference(document_path.parent, location)
    return OrganizerLayout(
        document_path=document_path,
        location=location,
        images_dir=images_dir,
        pending_dir=images_dir / PENDING_DIR_NAME,
    )


def pending_file_name(timestamp: str) -> str:
    """File name a pasted image is stored under in the pending area."""
    return f"{PASTE_PREFIX}{timestamp}{PASTE_EXTENSION}"


def reference_extension(path: str) -> str:
    """Lower-cased extension of a reference path, ignoring any query string."""
    return PurePosixPath(strip_query(path).replace("\\", "/")).suffix.lower()


def classify(ref: ScannedRef, layout: OrganizerLayout) -> ImageRef:
    """Classify a single scanned reference."""
    if ref.syntax is SyntaxKind.MARKDOWN and ref.path == "":
        match = PLACEHOLDER_ALT.match(ref.alt)
        if match:
            timestamp = match.group(1)
            return ImageRef(
                id=f"placeholder:{timestamp}",
                scanned=ref,
                category=Placeholder(
                    timestamp=timestamp,
                    source=layout.pending_dir / pending_file_name(timestamp),
                ),
            )

    if not ref.path:
        return ImageRef(id=ref.path, scanned=ref, category=OutOfScope("empty path"))
    if is_absolute_reference(ref.path):
        return ImageRef(id=ref.path, scanned=ref, category=OutOfScope("absolute path"))
    if has_url_scheme(ref.path):
        return ImageRef(id=ref.path, scanned=ref, category=OutOfScope("url"))

    extension = reference_extension(ref.path)
    if extension not in IMAGE_EXTENSIONS:
        return ImageRef(
            id=ref.path,
            scanned=ref,
            category=OutOfScope(f"unsupported extension {extension or '(none)'}"),
        )

    # Links may percent-encode the file name, e.g. `my%20pic.png`
    source = resolve_reference(layout.document_dir, unquote(strip_query(ref.path)))
    if not is_within(source, layout.images_dir) or source == layout.images_dir:
        return ImageRef(id=ref.path, scanned=ref, category=OutOfScope("outside managed directory"))

    return ImageRef(
        id=ref.path,
        scanned=ref,
        category=Managed(source=source, pending=is_within(source, layout.pending_dir)),
    )


def classify_all(
    refs: list[ScannedRef], layout: OrganizerLayout
) -> tuple[list[ImageRef], list[ImageRef]]:
    """Classify references, keeping document order.

    Returns:
        Tuple of (in-scope references, out-of-scope references)
    """
    managed: list[ImageRef] = []
    skipped: list[ImageRef] = []
    for ref in refs:
        image = classify(ref, layout)
        (managed if image.in_scope else skipped).append(image)
    return managed, skipped
