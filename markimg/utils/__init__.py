"""Utility module for MarkImg."""

from markimg.utils.fs import normalize_location, path_key, safe_filename

__all__ = [
    "normalize_location",
    "path_key",
    "safe_filename",
]
