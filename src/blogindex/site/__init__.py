"""Static site builder collaborators."""

from .builder import POSTS_DIRNAME, LocalSiteBuilder, PostHook, SiteBuilder, resolve_timezone
from .discovery import PostScanner, PostSource
from .frontmatter import FrontMatterError, split_front_matter

__all__ = [
    "POSTS_DIRNAME",
    "LocalSiteBuilder",
    "PostHook",
    "SiteBuilder",
    "resolve_timezone",
    "PostScanner",
    "PostSource",
    "FrontMatterError",
    "split_front_matter",
]
