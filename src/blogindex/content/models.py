"""Content item models handed over by the site builder."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

TaxonomyKind = Literal["tags", "categories"]


class TaxonomyTerm(BaseModel):
    """A tag or category associated with a post.

    Attributes:
        name: Display name of the term; unnamed terms are ignored when indexing.
        slug: Optional URL-safe identifier assigned by the builder.
    """

    name: Optional[str] = None
    slug: Optional[str] = None


class ContentItem(BaseModel):
    """A rendered post produced by the site builder.

    Attributes:
        slug: Unique identifier of the post.
        title: Post title.
        date: Publish date; naive values are interpreted in the site timezone.
        permalink: Absolute URL of the rendered post.
        path: Site-relative path of the rendered post.
        content: Rendered HTML content.
        excerpt: Optional pre-truncated excerpt declared by the author.
        tags: Tag associations.
        categories: Category associations.
        published: Whether the post is published.
        source: Source file the post was rendered from, when known.
    """

    slug: Optional[str] = None
    title: str = ""
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    permalink: str = ""
    path: str = ""
    content: str = ""
    excerpt: str = ""
    tags: List[TaxonomyTerm] = Field(default_factory=list)
    categories: List[TaxonomyTerm] = Field(default_factory=list)
    published: bool = True
    source: Optional[str] = None


__all__ = ["TaxonomyKind", "TaxonomyTerm", "ContentItem"]
