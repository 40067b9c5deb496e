"""Allow running as ``python -m markimg``."""

from markimg.cli.main import app

app()
