"""Convert rendered posts into search index documents."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from typing import List, TypedDict

from blogindex.config.models import SearchSettings
from blogindex.content import ContentItem, extract_labels, strip_html, truncate

from .errors import DocumentError

UPSERT_ACTION = "mergeOrUpload"

IndexDocument = TypedDict(
    "IndexDocument",
    {
        "postId": str,
        "title": str,
        "date": str,
        "excerpt": str,
        "permalink": str,
        "path": str,
        "tags": List[str],
        "categories": List[str],
        "@search.action": str,
    },
)


def format_date(value: datetime, default_tz: tzinfo = timezone.utc) -> str:
    """Render ``value`` as ``YYYY-MM-DDTHH:mm:ss.SSS+HH:MM``.

    Args:
        value: Timestamp to render.
        default_tz: Zone assumed when ``value`` carries no offset.

    Returns:
        str: ISO-8601 timestamp with millisecond precision and numeric offset.
    """

    if value.tzinfo is None:
        value = value.replace(tzinfo=default_tz)
    offset = value.utcoffset()
    # Local mean time offsets carry seconds, which the +HH:MM form cannot hold.
    if offset is not None and offset % timedelta(minutes=1):
        value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds")


def build_excerpt(item: ContentItem, limit: int) -> str:
    """Return the plain-text excerpt for ``item`` capped at ``limit`` characters."""

    source = item.excerpt if item.excerpt else item.content
    return truncate(strip_html(source), limit)


def transform(
    item: ContentItem,
    settings: SearchSettings,
    *,
    default_tz: tzinfo = timezone.utc,
) -> IndexDocument:
    """Build the index document for a single content item.

    Args:
        item: Rendered post.
        settings: Search settings supplying the excerpt limit.
        default_tz: Zone applied to naive publish dates.

    Returns:
        IndexDocument: Document ready for upload.

    Raises:
        DocumentError: If the item has no slug to use as the document key.
    """

    post_id = item.slug or ""
    if not post_id.strip():
        raise DocumentError(f"Content item {item.source or item.title!r} has no slug.")

    return {
        "postId": post_id,
        "title": item.title,
        "date": format_date(item.date, default_tz),
        "excerpt": build_excerpt(item, settings.excerpt_limit),
        "permalink": item.permalink,
        "path": item.path,
        "tags": extract_labels(item, "tags"),
        "categories": extract_labels(item, "categories"),
        "@search.action": UPSERT_ACTION,
    }


__all__ = ["UPSERT_ACTION", "IndexDocument", "format_date", "build_excerpt", "transform"]
