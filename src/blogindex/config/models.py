"""Configuration models describing blogindex settings."""

from __future__ import annotations

from typing import List, Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_API_VERSION = "2023-11-01"


class BlogIndexBaseModel(BaseModel):
    """Shared configuration for blogindex Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class SiteSettings(BlogIndexBaseModel):
    """Settings describing the static site being indexed.

    Attributes:
        url: Public base URL of the site.
        permalink: Permalink pattern used to derive post paths.
        source_dir: Directory (relative to the site root) holding sources.
        public_dir: Directory (relative to the site root) receiving output.
        timezone: IANA zone applied to post dates that carry no offset.
    """

    url: str = "http://example.com"
    permalink: str = ":year/:month/:day/:title/"
    source_dir: str = "source"
    public_dir: str = "public"
    timezone: str = "UTC"

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone {value!r}") from exc
        return value


class SearchSettings(BlogIndexBaseModel):
    """Connection and document-shaping options for the search service.

    Attributes:
        service_url: Base URL of the search service.
        index_name: Name of the index replaced on every run.
        admin_key: Administrative API key sent in the ``api-key`` header.
        api_version: Management API version pinned for this release.
        analyzer: Analyzer applied to all text-bearing fields; ``None`` keeps
            the service default.
        excerpt_limit: Maximum excerpt length in characters.
        chunk_size: Maximum number of documents per upload request.
        verbose: Whether full response bodies are logged.
        timeout_seconds: Per-request network timeout.
    """

    service_url: Optional[str] = None
    index_name: Optional[str] = None
    admin_key: Optional[str] = None
    api_version: str = DEFAULT_API_VERSION
    analyzer: Optional[str] = None
    excerpt_limit: int = Field(default=200, ge=1)
    chunk_size: int = Field(default=5000, ge=1)
    verbose: bool = False
    timeout_seconds: float = Field(default=30.0, gt=0)

    def missing_required(self) -> List[str]:
        """Return the names of required connection settings that are unset."""

        return [
            name
            for name in ("service_url", "index_name", "admin_key")
            if not getattr(self, name)
        ]


class LoggingSettings(BlogIndexBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


class BlogIndexConfig(BlogIndexBaseModel):
    """Top-level configuration struct for blogindex.

    Attributes:
        site: Static site settings.
        search: Search service settings.
        logging: Logging configuration.
    """

    site: SiteSettings = Field(default_factory=SiteSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


__all__ = [
    "DEFAULT_API_VERSION",
    "BlogIndexBaseModel",
    "SiteSettings",
    "SearchSettings",
    "LoggingSettings",
    "BlogIndexConfig",
]
