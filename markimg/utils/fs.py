"""Path helpers shared by the organizer and the paste writer.

All helpers are pure string/path manipulation; none of them touch the
file system.
"""

import os
import re
from pathlib import Path

from markimg.config.constants import DEFAULT_LOCATION

_URL_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
_WINDOWS_DRIVE = re.compile(r"^[A-Za-z]:[\\/]")


def safe_filename(filename: str, max_length: int = 255) -> str:
    """Create a safe filename by removing/replacing problematic characters.

    Args:
        filename: Original filename
        max_length: Maximum filename length

    Returns:
        Safe filename
    """
    replacements = {
        "/": "_",
        "\\": "_",
        ":": "_",
        "*": "_",
        "?": "_",
        '"': "_",
        "<": "_",
        ">": "_",
        "|": "_",
        "\0": "",
    }

    result = filename
    for old, new in replacements.items():
        result = result.replace(old, new)

    result = result.strip(" ")

    # Truncate if too long (preserve extension)
    if len(result) > max_length:
        stem, suffix = os.path.splitext(result)
        result = stem[: max_length - len(suffix)] + suffix

    return result


def normalize_location(location: str) -> str:
    """Normalize a configured image location to a forward-slash relative path.

    Examples:
        >>> normalize_location("assets\\\\img/")
        'assets/img'
        >>> normalize_location("")
        'images'
    """
    rel = location.replace("\\", "/")
    while "//" in rel:
        rel = rel.replace("//", "/")
    rel = rel.rstrip("/")
    return rel or DEFAULT_LOCATION


def strip_query(reference: str) -> str:
    """Drop the query string from a reference path."""
    return reference.split("?", 1)[0]


def has_url_scheme(reference: str) -> bool:
    """True for ``http:``, ``data:`` and other scheme-prefixed references."""
    return bool(_URL_SCHEME.match(reference)) and not _WINDOWS_DRIVE.match(reference)


def is_absolute_reference(reference: str) -> bool:
    """True for POSIX, UNC and drive-letter absolute paths."""
    return reference.startswith(("/", "\\")) or bool(_WINDOWS_DRIVE.match(reference))


def resolve_reference(base_dir: Path, reference: str) -> Path:
    """Resolve a relative reference against ``base_dir`` without touching disk."""
    rel = reference.replace("\\", "/")
    if rel.startswith("./"):
        rel = rel[2:]
    return Path(os.path.normpath(base_dir / rel))


def path_key(path: Path | str) -> str:
    """Case-insensitive, separator-normalized comparison key for a path."""
    return str(path).replace("\\", "/").rstrip("/").lower()


def is_within(path: Path | str, directory: Path | str) -> bool:
    """Check whether ``path`` is ``directory`` itself or one of its descendants."""
    child = path_key(path)
    parent = path_key(directory)
    return child == parent or child.startswith(parent + "/")
