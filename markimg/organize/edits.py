"""Text edits that point references at their new files."""

import re
from pathlib import PurePosixPath
from urllib.parse import unquote

from markimg.config.constants import CHANGE_TOKEN_PARAM, PASTE_PREFIX
from markimg.document import Range, TextEdit
from markimg.organize.models import FileOperation, ImageRef, Placeholder, SyntaxKind
from markimg.utils.fs import strip_query
from markimg.utils.logging import get_logger

log = get_logger(__name__)

HTML_SRC = re.compile(r"\ssrc=([\"'])(.*?)\1", re.IGNORECASE)
HTML_ALT = re.compile(r"\salt=([\"'])(.*?)\1", re.IGNORECASE)
NUMERIC = re.compile(r"^\d+$")


def file_stem(path: str) -> str:
    """Base name without extension of a reference path."""
    return PurePosixPath(unquote(strip_query(path)).replace("\\", "/")).stem


def infer_alt(ref: ImageRef, target_name: str) -> str:
    """Pick the alt text for a rewritten reference.

    Alt text that looks generated (the old file name, a paste name, a number,
    a placeholder or nothing at all) follows the new file name; anything else
    was written by the author and is kept.
    """
    alt = ref.original_alt
    if (
        isinstance(ref.category, Placeholder)
        or alt == ""
        or alt == file_stem(ref.original_path)
        or alt.startswith(PASTE_PREFIX)
        or NUMERIC.match(alt)
    ):
        return PurePosixPath(target_name).stem
    return alt


def with_change_token(path: str, token: str) -> str:
    return f"{path}?{CHANGE_TOKEN_PARAM}={token}"


def _points_at(reference: str, relative_path: str) -> bool:
    """True when a reference already names ``relative_path`` (query ignored)."""
    return unquote(strip_query(reference)).replace("\\", "/") == relative_path


def _html_edits(op: FileOperation, new_path: str, new_alt: str) -> list[TextEdit]:
    ref = op.ref
    line = ref.range.start.line
    base = ref.range.start.character
    edits: list[TextEdit] = []

    src = HTML_SRC.search(ref.scanned.full_match)
    if src is None:
        log.debug("No src attribute to rewrite", tag=ref.scanned.full_match)
        return edits
    if not _points_at(src.group(2), op.target_relative_path):
        edits.append(TextEdit(Range.on_line(line, base + src.start(2), base + src.end(2)), new_path))

    alt = HTML_ALT.search(ref.scanned.full_match)
    if alt is not None and alt.group(2) != new_alt:
        edits.append(TextEdit(Range.on_line(line, base + alt.start(2), base + alt.end(2)), new_alt))

    return edits


def _markdown_edit(op: FileOperation, new_path: str, new_alt: str, align: str) -> TextEdit | None:
    ref = op.ref
    use_html = False
    wrap = False

    if align in ("center", "right"):
        line_text = ref.scanned.line_text
        before = line_text[: ref.range.start.character]
        after = line_text[ref.range.end.character :]
        opener = re.compile(rf"<div\s+align=[\"']{align}[\"']\s*>$", re.IGNORECASE)

        if opener.search(before.rstrip()) and re.match(r"</div>", after.lstrip(), re.IGNORECASE):
            use_html = True
        elif before.strip() == "" and after.strip() == "":
            use_html = True
            wrap = True

    if use_html:
        alt_attr = new_alt.replace('"', "&quot;")
        replacement = f'<img src="{new_path}" alt="{alt_attr}" />'
        if wrap:
            replacement = f'<div align="{align}">{replacement}</div>'
    else:
        replacement = f"![{new_alt}]({new_path})"
        if ref.original_alt == new_alt and _points_at(ref.original_path, op.target_relative_path):
            return None

    return TextEdit(ref.range, replacement)


def generate_edits(operations: list[FileOperation], align: str, token: str) -> list[TextEdit]:
    """Produce the edit batch for a pass.

    References that already point at their target with the right alt text
    and markup produce no edit, so a second pass over an organized document
    returns nothing.

    Args:
        operations: Resolved operations in document order
        align: Configured alignment (left, center or right)
        token: Change token appended as ``?t=<token>``

    Returns:
        Edits against the original document coordinates
    """
    edits: list[TextEdit] = []

    for op in operations:
        new_path = with_change_token(op.target_relative_path, token)
        new_alt = infer_alt(op.ref, op.target_name)

        if op.ref.scanned.syntax is SyntaxKind.HTML:
            edits.extend(_html_edits(op, new_path, new_alt))
        else:
            edit = _markdown_edit(op, new_path, new_alt, align)
            if edit is not None:
                edits.append(edit)

    return edits
