"""Image organizer: keeps image files named after the document structure."""

from markimg.organize.cache import bust_cache
from markimg.organize.models import (
    FileOperation,
    ImageRef,
    Managed,
    OrganizeResult,
    OutOfScope,
    Placeholder,
    ScannedRef,
    SyntaxKind,
)
from markimg.organize.pipeline import organize_images

__all__ = [
    "FileOperation",
    "ImageRef",
    "Managed",
    "OrganizeResult",
    "OutOfScope",
    "Placeholder",
    "ScannedRef",
    "SyntaxKind",
    "bust_cache",
    "organize_images",
]
