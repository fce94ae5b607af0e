"""Text helpers used to derive search excerpts."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

ELLIPSIS = "..."

_NON_TEXT_TAGS = ("script", "style")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F]")
_WHITESPACE = re.compile(r"\s+")


def strip_html(text: str) -> str:
    """Return ``text`` with markup removed and whitespace collapsed.

    ``script`` and ``style`` elements are dropped along with their contents.

    Args:
        text: Rendered HTML.

    Returns:
        str: Plain text with entities unescaped and runs of whitespace
        replaced by single spaces.
    """

    soup = BeautifulSoup(text, "html.parser")
    for element in soup(_NON_TEXT_TAGS):
        element.decompose()
    stripped = _CONTROL_CHARS.sub(" ", soup.get_text(" "))
    return _WHITESPACE.sub(" ", stripped).strip()


def truncate(text: str, limit: int) -> str:
    """Cut ``text`` at a raw character boundary.

    Text no longer than ``limit`` is returned unchanged. Longer text keeps its
    first ``limit - 1`` characters and gains :data:`ELLIPSIS`; the marker takes
    the last slot of the limit.

    Args:
        text: Plain text to shorten.
        limit: Maximum number of characters, at least 1.

    Returns:
        str: Possibly shortened text.

    Raises:
        ValueError: If ``limit`` is smaller than 1.
    """

    if limit < 1:
        raise ValueError("limit must be at least 1")
    if len(text) <= limit:
        return text
    return text[: limit - 1] + ELLIPSIS


__all__ = ["ELLIPSIS", "strip_html", "truncate"]
