"""Flatten post taxonomies into label lists."""

from __future__ import annotations

from .models import ContentItem, TaxonomyKind


def extract_labels(item: ContentItem, kind: TaxonomyKind) -> list[str]:
    """Return the display names of the terms attached to ``item``.

    Terms without a name are skipped. Order follows the item's associations
    and duplicates are kept.

    Args:
        item: Content item to read.
        kind: Either ``"tags"`` or ``"categories"``.

    Returns:
        list[str]: One label per named term; empty when nothing is attached.
    """

    terms = getattr(item, kind)
    return [term.name for term in terms if term.name]


__all__ = ["extract_labels"]
