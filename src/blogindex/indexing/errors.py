"""Error types raised while building and synchronizing the search index."""

from __future__ import annotations

from typing import Any, Sequence


class BlogIndexError(Exception):
    """Base exception for blogindex failures."""


class LifecycleError(BlogIndexError):
    """Raised when the site builder's clean or generate step fails."""

    def __init__(self, phase: str, message: str) -> None:
        super().__init__(message)
        self.phase = phase


class DocumentError(BlogIndexError):
    """Raised when a content item cannot produce a valid index document."""


class SearchServiceError(BlogIndexError):
    """Raised when a call against the search management API fails.

    Attributes:
        operation: Name of the remote operation (``delete``, ``create``, ``upload``).
        status_code: HTTP status returned by the service, or ``None`` for
            transport-level faults.
        payload: Decoded response body when available.
    """

    def __init__(
        self,
        operation: str,
        message: str,
        *,
        status_code: int | None = None,
        payload: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code
        self.payload = payload


class TransientIndexAbsence(SearchServiceError):
    """Delete failed in a way the pipeline recovers from (usually a missing index)."""


class IndexDeleteError(SearchServiceError):
    """Delete failed in a way that makes index creation pointless."""


class SchemaApplyError(SearchServiceError):
    """Index creation failed."""


class UploadError(SearchServiceError):
    """A document chunk could not be uploaded.

    Attributes:
        chunk_index: Zero-based index of the failing chunk.
        failed_keys: Document keys the service reported as rejected.
    """

    def __init__(
        self,
        message: str,
        *,
        chunk_index: int,
        status_code: int | None = None,
        payload: Any | None = None,
        failed_keys: Sequence[str] = (),
    ) -> None:
        super().__init__("upload", message, status_code=status_code, payload=payload)
        self.chunk_index = chunk_index
        self.failed_keys = list(failed_keys)


__all__ = [
    "BlogIndexError",
    "LifecycleError",
    "DocumentError",
    "SearchServiceError",
    "TransientIndexAbsence",
    "IndexDeleteError",
    "SchemaApplyError",
    "UploadError",
]
