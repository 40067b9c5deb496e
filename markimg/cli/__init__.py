"""Command line interface for MarkImg."""
