"""Text helpers for provider rich-text instructions."""

import html
import re

_TAG_RE = re.compile(r"<[^>]+>")
_BLOCK_TAG_RE = re.compile(r"<(?:div|br)[^>]*>", re.IGNORECASE)
_SPACE_RE = re.compile(r"\s+")


def strip_html(text: str | None) -> str:
    """
    Convert provider rich-text instructions to plain text.

    Block-level tags become spaces so that ``Turn left<div>Toll road</div>``
    reads as two words. Entities are unescaped and whitespace collapsed.
    """
    if not text:
        return ""
    text = _BLOCK_TAG_RE.sub(" ", text)
    text = _TAG_RE.sub("", text)
    return _SPACE_RE.sub(" ", html.unescape(text)).strip()
