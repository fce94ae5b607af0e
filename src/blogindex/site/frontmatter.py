"""YAML front matter parsing."""

from __future__ import annotations

import re
from typing import Any

import yaml

_FRONT_MATTER = re.compile(r"\A---[ \t]*\r?\n(?P<meta>.*?)^---[ \t]*(?:\r?\n|\Z)", re.S | re.M)


class FrontMatterError(ValueError):
    """Raised when a post's front matter block cannot be parsed."""


def split_front_matter(text: str) -> tuple[dict[str, Any], str]:
    """Split ``text`` into its front matter mapping and body.

    Text without a leading ``---`` block has empty metadata.

    Raises:
        FrontMatterError: If the block is not valid YAML or not a mapping.
    """

    match = _FRONT_MATTER.match(text)
    if match is None:
        return {}, text

    try:
        meta = yaml.safe_load(match.group("meta")) or {}
    except yaml.YAMLError as exc:
        raise FrontMatterError(f"Invalid front matter: {exc}") from exc
    if not isinstance(meta, dict):
        raise FrontMatterError("Front matter must be a mapping.")
    return meta, text[match.end() :]


__all__ = ["FrontMatterError", "split_front_matter"]
