"""CLI callback functions."""

import typer

from markimg.config.constants import ALIGN_OPTIONS


def validate_align(value: str | None) -> str | None:
    """Validate alignment option."""
    if value is not None and value not in ALIGN_OPTIONS:
        raise typer.BadParameter(f"Invalid alignment '{value}'. Options: {', '.join(ALIGN_OPTIONS)}")

    return value


def validate_placeholder(value: str | None) -> str | None:
    """Validate a ``uploading-<digits>`` placeholder, with or without markup."""
    from markimg.config.constants import PLACEHOLDER_PREFIX

    if value is None:
        return None

    core = value.removeprefix("![").removesuffix("]()")
    digits = core.removeprefix(PLACEHOLDER_PREFIX)
    if core == digits or not digits.isdigit():
        raise typer.BadParameter(f"Placeholder must look like {PLACEHOLDER_PREFIX}<digits>")

    return value
