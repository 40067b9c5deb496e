"""Cache busting for preview renderers.

A renderer that caches images by URL will not notice that ``images/1.png``
now holds a different picture. :func:`bust_cache` gives every local image
reference a fresh ``?t=`` token; the result is meant for display only and is
never written back to the document.
"""

import re

from markimg.config.constants import CHANGE_TOKEN_PARAM
from markimg.utils.fs import has_url_scheme

MARKDOWN_PATH = re.compile(rf"(!\[.*?\]\()([^\)]+?)(\?{CHANGE_TOKEN_PARAM}=\d+)?(\))")
HTML_SRC = re.compile(
    rf"(<img[^>]*\ssrc=[\"'])(.*?)(\?{CHANGE_TOKEN_PARAM}=\d+)?([\"'][^>]*>)", re.IGNORECASE
)


def bust_cache(text: str, token: str | int) -> str:
    """Append or refresh ``?t=<token>`` on every local image reference."""

    def _replace(match: re.Match[str]) -> str:
        opening, path, _, closing = match.groups()
        if has_url_scheme(path):
            return match.group(0)
        return f"{opening}{path}?{CHANGE_TOKEN_PARAM}={token}{closing}"

    text = MARKDOWN_PATH.sub(_replace, text)
    return HTML_SRC.sub(_replace, text)
