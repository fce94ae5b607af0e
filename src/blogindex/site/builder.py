"""Site builder interface and a local reference implementation."""

from __future__ import annotations

import html
import logging
import re
import shutil
from datetime import date, datetime, time, tzinfo
from pathlib import Path
from typing import Any, Callable, List, Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from blogindex.config.models import SiteSettings
from blogindex.content import ContentItem, TaxonomyTerm

from .discovery import PostScanner, PostSource
from .frontmatter import FrontMatterError, split_front_matter

LOGGER = logging.getLogger(__name__)

PostHook = Callable[[ContentItem], ContentItem]

POSTS_DIRNAME = "_posts"
DEFAULT_CATEGORY = "uncategorized"

_MORE_MARKER = re.compile(r"<!--\s*more\s*-->", re.I)
_SLUG_UNSAFE = re.compile(r"[^\w-]+")
_PAGE_TEMPLATE = (
    "<!DOCTYPE html>\n<html><head><meta charset=\"utf-8\"><title>{title}</title></head>"
    "<body><article>{content}</article></body></html>\n"
)


class SiteBuilder(Protocol):
    """Lifecycle surface of a static site builder."""

    def clean(self) -> None:
        """Remove previously generated output."""

    def generate(self) -> None:
        """Render every post, passing each through the registered hooks."""

    def register_post_hook(self, hook: PostHook) -> None:
        """Run ``hook`` on each rendered post during :meth:`generate`."""

    def unregister_post_hook(self, hook: PostHook) -> None:
        """Stop running ``hook``."""


def resolve_timezone(name: str) -> tzinfo:
    """Return the zone called ``name``.

    Raises:
        ValueError: If the zone is unknown.
    """

    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone {name!r}") from exc


class LocalSiteBuilder:
    """Render posts found under ``<source_dir>/_posts`` into ``public_dir``.

    Bodies are kept as-is; converting markdown is the host builder's job.
    """

    def __init__(
        self,
        site_root: Path,
        settings: SiteSettings,
        *,
        scanner: PostScanner | None = None,
    ) -> None:
        self.site_root = Path(site_root).expanduser().resolve()
        self.settings = settings
        self.scanner = scanner or PostScanner()
        self._hooks: List[PostHook] = []
        self._tz = resolve_timezone(settings.timezone)

    @property
    def posts_dir(self) -> Path:
        return self.site_root / self.settings.source_dir / POSTS_DIRNAME

    @property
    def public_dir(self) -> Path:
        return self.site_root / self.settings.public_dir

    def register_post_hook(self, hook: PostHook) -> None:
        self._hooks.append(hook)

    def unregister_post_hook(self, hook: PostHook) -> None:
        if hook in self._hooks:
            self._hooks.remove(hook)

    def clean(self) -> None:
        """Delete the public directory if present."""
        if self.public_dir.exists():
            shutil.rmtree(self.public_dir)
            LOGGER.info("Deleted %s.", self.public_dir)

    def generate(self) -> None:
        """Render every post source and write it below the public directory.

        Raises:
            FrontMatterError: If a post's front matter cannot be parsed.
        """
        count = 0
        for source in self.scanner.scan(self.posts_dir):
            item = self.render(source)
            for hook in self._hooks:
                item = hook(item)
            self._write(item)
            count += 1
        LOGGER.info("Generated %d post(s) from %s.", count, self.posts_dir)

    def render(self, source: PostSource) -> ContentItem:
        """Build the content item for one post source."""
        text = source.path.read_text(encoding="utf-8")
        try:
            meta, body = split_front_matter(text)
        except FrontMatterError as exc:
            raise FrontMatterError(f"{source.relative}: {exc}") from exc

        slug = str(meta.get("slug") or source.path.stem)
        categories = _terms(meta.get("categories", meta.get("category")))
        tags = _terms(meta.get("tags", meta.get("tag")))

        parts = _MORE_MARKER.split(body, maxsplit=1)
        excerpt = str(meta.get("excerpt") or (parts[0].strip() if len(parts) == 2 else ""))
        content = '<a id="more"></a>'.join(parts).strip()

        published_at = self._coerce_date(meta.get("date"), source.modified_at)
        path = self._expand_permalink(
            str(meta.get("permalink") or self.settings.permalink),
            slug=slug,
            name=source.path.stem,
            published_at=published_at,
            categories=categories,
        )
        return ContentItem(
            slug=slug,
            title=str(meta.get("title") or ""),
            date=published_at,
            permalink=f"{self.settings.url.rstrip('/')}/{path}",
            path=path,
            content=content,
            excerpt=excerpt,
            tags=tags,
            categories=categories,
            published=meta.get("published", True) is not False,
            source=str(source.relative),
        )

    def _coerce_date(self, value: Any, fallback: datetime) -> datetime:
        if isinstance(value, datetime):
            moment = value
        elif isinstance(value, date):
            moment = datetime.combine(value, time())
        elif isinstance(value, str) and value.strip():
            try:
                moment = datetime.fromisoformat(value.strip())
            except ValueError as exc:
                raise FrontMatterError(f"Invalid date {value!r}") from exc
        else:
            return fallback.astimezone(self._tz)
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=self._tz)
        return moment

    def _expand_permalink(
        self,
        pattern: str,
        *,
        slug: str,
        name: str,
        published_at: datetime,
        categories: List[TaxonomyTerm],
    ) -> str:
        category = next((term.name for term in categories if term.name), DEFAULT_CATEGORY)
        replacements = {
            ":year": f"{published_at.year:04d}",
            ":month": f"{published_at.month:02d}",
            ":day": f"{published_at.day:02d}",
            ":title": slug,
            ":name": name,
            ":category": _slugify(category),
        }
        path = pattern
        for token, replacement in replacements.items():
            path = path.replace(token, replacement)
        return path.lstrip("/")

    def _write(self, item: ContentItem) -> None:
        target = self.public_dir / item.path
        if not item.path or item.path.endswith("/"):
            target = target / "index.html"
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(
            _PAGE_TEMPLATE.format(title=html.escape(item.title), content=item.content),
            encoding="utf-8",
        )


def _terms(value: Any) -> List[TaxonomyTerm]:
    if value is None:
        return []
    if isinstance(value, (str, int, float)):
        value = [value]
    terms: List[TaxonomyTerm] = []
    for entry in value:
        if isinstance(entry, list):
            # Nested lists express a category hierarchy.
            terms.extend(_terms(entry))
        elif entry is None or entry == "":
            terms.append(TaxonomyTerm())
        else:
            terms.append(TaxonomyTerm(name=str(entry), slug=_slugify(str(entry))))
    return terms


def _slugify(value: str) -> str:
    return _SLUG_UNSAFE.sub("-", value.strip().lower()).strip("-")


__all__ = [
    "PostHook",
    "SiteBuilder",
    "LocalSiteBuilder",
    "POSTS_DIRNAME",
    "resolve_timezone",
]
