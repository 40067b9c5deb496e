"""Find Markdown and HTML image references in document text."""

import re

from markimg.document import Range, TextDocument
from markimg.organize.models import ScannedRef, SyntaxKind

MARKDOWN_IMAGE = re.compile(r"!\[(.*?)\]\((.*?)\)")
HTML_IMAGE = re.compile(r"<img[^>]*\ssrc=[\"'](.*?)[\"'][^>]*>", re.IGNORECASE)
HTML_ALT = re.compile(r"\salt=[\"'](.*?)[\"']", re.IGNORECASE)

_LINE_BREAK = re.compile(r"\r?\n")


def split_lines(text: str) -> list[str]:
    """Split text on ``\\n`` and ``\\r\\n`` line breaks."""
    return _LINE_BREAK.split(text)


def extract_html_alt(tag: str) -> str:
    """Return the alt attribute of an ``<img>`` tag, or an empty string."""
    match = HTML_ALT.search(tag)
    return match.group(1) if match else ""


def scan_line(line: str, line_number: int) -> list[ScannedRef]:
    """Find every image reference on a single line, left to right."""
    found: list[ScannedRef] = []

    for match in MARKDOWN_IMAGE.finditer(line):
        found.append(
            ScannedRef(
                path=match.group(2),
                alt=match.group(1),
                range=Range.on_line(line_number, match.start(), match.end()),
                syntax=SyntaxKind.MARKDOWN,
                line_text=line,
                full_match=match.group(0),
            )
        )

    for match in HTML_IMAGE.finditer(line):
        found.append(
            ScannedRef(
                path=match.group(1),
                alt=extract_html_alt(match.group(0)),
                range=Range.on_line(line_number, match.start(), match.end()),
                syntax=SyntaxKind.HTML,
                line_text=line,
                full_match=match.group(0),
            )
        )

    found.sort(key=lambda ref: ref.range.start.character)
    return found


def scan_document(document: TextDocument) -> list[ScannedRef]:
    """Scan the whole document and return references in document order.

    Ranges are line/character positions in the original text and stay valid
    for the edit batch produced at the end of the pass.
    """
    refs: list[ScannedRef] = []
    for line_number, line in enumerate(split_lines(document.get_text())):
        refs.extend(scan_line(line, line_number))
    return refs
