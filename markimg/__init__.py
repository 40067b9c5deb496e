"""MarkImg - keep Markdown image references and their files in sync."""

__version__ = "0.3.0"
