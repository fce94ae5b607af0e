"""Replace the remote index: delete, recreate from the schema, upload documents."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Sequence, TypeVar

import httpx

from blogindex.config.models import SearchSettings

from .client import SearchServiceClient
from .errors import IndexDeleteError, SchemaApplyError, TransientIndexAbsence, UploadError
from .schema import FieldDefinition, index_definition

LOGGER = logging.getLogger(__name__)

_CREDENTIAL_REJECTED = frozenset({401, 403})
_T = TypeVar("_T")


@dataclass(slots=True)
class UploadReport:
    """Outcome of a completed document upload.

    Attributes:
        uploaded: Number of documents acknowledged by the service.
        chunks: Number of requests issued.
    """

    uploaded: int
    chunks: int


def chunked(items: Sequence[_T], size: int) -> Iterator[Sequence[_T]]:
    """Yield consecutive slices of ``items`` holding at most ``size`` entries."""

    if size < 1:
        raise ValueError("size must be at least 1")
    for start in range(0, len(items), size):
        yield items[start : start + size]


class IndexLifecycleManager:
    """Drive the three management calls that replace the configured index."""

    def __init__(self, client: SearchServiceClient, settings: SearchSettings) -> None:
        self._client = client
        self._settings = settings
        self._index_name = settings.index_name or ""
        self.last_delete_failure: TransientIndexAbsence | None = None

    @property
    def index_name(self) -> str:
        return self._index_name

    def delete_index(self) -> bool:
        """Delete the index if it exists.

        Returns:
            bool: ``True`` when the service confirmed the deletion, ``False``
            when the failure was recovered (for example, no index existed).

        Raises:
            IndexDeleteError: If the request never reached the service or the
                credentials were rejected.
        """

        self.last_delete_failure = None
        LOGGER.info("Deleting index %s ...", self._index_name)
        try:
            response = self._client.delete_index(self._index_name)
        except httpx.TransportError as exc:
            LOGGER.error("Delete request for index %s failed: %s", self._index_name, exc)
            raise IndexDeleteError("delete", f"Could not reach search service: {exc}") from exc

        self._log_response("delete", response)
        if response.is_success:
            LOGGER.info("Index %s deleted.", self._index_name)
            return True

        payload = _decode(response)
        if response.status_code in _CREDENTIAL_REJECTED:
            LOGGER.error(
                "Search service rejected credentials while deleting %s: %s",
                self._index_name,
                payload,
            )
            raise IndexDeleteError(
                "delete",
                f"Credentials rejected with HTTP {response.status_code}.",
                status_code=response.status_code,
                payload=payload,
            )

        self.last_delete_failure = TransientIndexAbsence(
            "delete",
            f"Delete returned HTTP {response.status_code}.",
            status_code=response.status_code,
            payload=payload,
        )
        if response.status_code == 404:
            LOGGER.info("Index %s did not exist; continuing.", self._index_name)
        else:
            LOGGER.warning(
                "Failed to delete index %s (HTTP %s): %s; continuing.",
                self._index_name,
                response.status_code,
                payload,
            )
        return False

    def create_index(self, fields: Sequence[FieldDefinition]) -> None:
        """Create or replace the index with ``fields``.

        Raises:
            SchemaApplyError: If the request fails for any reason.
        """

        LOGGER.info("Creating index %s with %d fields ...", self._index_name, len(fields))
        definition = index_definition(self._index_name, list(fields))
        try:
            response = self._client.create_index(self._index_name, definition)
        except httpx.TransportError as exc:
            LOGGER.error("Create request for index %s failed: %s", self._index_name, exc)
            raise SchemaApplyError("create", f"Could not reach search service: {exc}") from exc

        self._log_response("create", response)
        if not response.is_success:
            payload = _decode(response)
            LOGGER.error(
                "Failed to create index %s (HTTP %s): %s",
                self._index_name,
                response.status_code,
                payload,
            )
            raise SchemaApplyError(
                "create",
                f"Index creation returned HTTP {response.status_code}.",
                status_code=response.status_code,
                payload=payload,
            )
        LOGGER.info("Index %s created.", self._index_name)

    def index_documents(self, documents: Sequence[Mapping[str, Any]]) -> UploadReport:
        """Upload ``documents`` in sequential chunks of ``chunk_size``.

        Chunks already acknowledged stay in the index when a later chunk fails.

        Raises:
            UploadError: On the first chunk that fails.
        """

        if not documents:
            LOGGER.info("No documents to upload.")
            return UploadReport(uploaded=0, chunks=0)

        chunks = list(chunked(documents, self._settings.chunk_size))
        LOGGER.info(
            "Indexing %d documents in %d chunk(s) ...", len(documents), len(chunks)
        )
        uploaded = 0
        for position, chunk in enumerate(chunks):
            self._upload_chunk(position, chunk)
            uploaded += len(chunk)
            LOGGER.info(
                "Chunk %d/%d uploaded (%d documents).", position + 1, len(chunks), len(chunk)
            )

        LOGGER.info("Indexing done. %d documents indexed.", uploaded)
        return UploadReport(uploaded=uploaded, chunks=len(chunks))

    def _upload_chunk(self, position: int, chunk: Sequence[Mapping[str, Any]]) -> None:
        try:
            response = self._client.index_documents(self._index_name, chunk)
        except httpx.TransportError as exc:
            LOGGER.error("Upload of chunk %d failed: %s", position + 1, exc)
            raise UploadError(
                f"Could not reach search service: {exc}", chunk_index=position
            ) from exc

        self._log_response("upload", response)
        payload = _decode(response)
        if not response.is_success:
            LOGGER.error(
                "Failed to index chunk %d (HTTP %s): %s",
                position + 1,
                response.status_code,
                payload,
            )
            raise UploadError(
                f"Document upload returned HTTP {response.status_code}.",
                chunk_index=position,
                status_code=response.status_code,
                payload=payload,
            )

        failed = _failed_keys(payload)
        if failed:
            LOGGER.error(
                "Service rejected %d document(s) in chunk %d: %s",
                len(failed),
                position + 1,
                ", ".join(failed),
            )
            raise UploadError(
                f"{len(failed)} document(s) were rejected by the search service.",
                chunk_index=position,
                status_code=response.status_code,
                payload=payload,
                failed_keys=failed,
            )

    def _log_response(self, operation: str, response: httpx.Response) -> None:
        LOGGER.info("%s %s: HTTP %s", operation, self._index_name, response.status_code)
        if self._settings.verbose:
            LOGGER.info("%s response body: %s", operation, response.text)


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _failed_keys(payload: Any) -> list[str]:
    if not isinstance(payload, dict):
        return []
    results = payload.get("value")
    if not isinstance(results, list):
        return []
    return [
        str(entry.get("key"))
        for entry in results
        if isinstance(entry, dict) and entry.get("status") is False
    ]


__all__ = ["IndexLifecycleManager", "UploadReport", "chunked"]
