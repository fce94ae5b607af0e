"""HTTP client for the search service management API."""

from __future__ import annotations

from typing import Any, Mapping, Sequence
from urllib.parse import quote

import httpx

from blogindex.config.models import SearchSettings


class SearchServiceClient:
    """Thin wrapper over :class:`httpx.Client` bound to one search service.

    Every request carries the ``api-key`` header and the ``api-version`` query
    parameter. Responses are returned as-is; interpreting status codes is left
    to the caller.
    """

    def __init__(
        self,
        service_url: str,
        admin_key: str,
        *,
        api_version: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=service_url.rstrip("/"),
            headers={"api-key": admin_key, "Content-Type": "application/json"},
            params={"api-version": api_version},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: SearchSettings,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> "SearchServiceClient":
        """Create a client from resolved search settings."""
        return cls(
            settings.service_url or "",
            settings.admin_key or "",
            api_version=settings.api_version,
            timeout=settings.timeout_seconds,
            transport=transport,
        )

    def delete_index(self, index_name: str) -> httpx.Response:
        return self._client.delete(self._index_path(index_name))

    def create_index(self, index_name: str, definition: Mapping[str, Any]) -> httpx.Response:
        return self._client.put(self._index_path(index_name), json=dict(definition))

    def index_documents(
        self, index_name: str, documents: Sequence[Mapping[str, Any]]
    ) -> httpx.Response:
        return self._client.post(
            f"{self._index_path(index_name)}/docs/index",
            json={"value": [dict(document) for document in documents]},
        )

    def close(self) -> None:
        """Release pooled connections."""
        self._client.close()

    def __enter__(self) -> "SearchServiceClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @staticmethod
    def _index_path(index_name: str) -> str:
        return f"/indexes/{quote(index_name, safe='')}"


__all__ = ["SearchServiceClient"]
