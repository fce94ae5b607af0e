"""Shared fixtures: an in-memory stand-in for the search management API."""

from __future__ import annotations

import json
from typing import Any, Callable, Union

import httpx
import pytest

from blogindex.config import SearchSettings
from blogindex.indexing import SearchServiceClient

SERVICE_URL = "https://blog.search.windows.net"
ADMIN_KEY = "admin-secret"
INDEX_NAME = "posts"

Reply = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


class FakeSearchService:
    """Record management calls and answer them with queued or default replies."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self._replies: dict[str, list[Reply]] = {"delete": [], "create": [], "upload": []}

    def reply(self, operation: str, reply: Reply) -> None:
        self._replies[operation].append(reply)

    @property
    def operations(self) -> list[str]:
        return [call["operation"] for call in self.calls]

    def bodies(self, operation: str) -> list[Any]:
        return [call["body"] for call in self.calls if call["operation"] == operation]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        operation = {"DELETE": "delete", "PUT": "create", "POST": "upload"}[request.method]
        body = json.loads(request.content) if request.content else None
        self.calls.append(
            {
                "operation": operation,
                "path": request.url.path,
                "params": dict(request.url.params),
                "headers": dict(request.headers),
                "body": body,
            }
        )
        queued = self._replies[operation]
        if queued:
            reply = queued.pop(0)
            if isinstance(reply, Exception):
                raise reply
            if callable(reply) and not isinstance(reply, httpx.Response):
                return reply(request)
            return reply
        return self._default(operation, body)

    @staticmethod
    def _default(operation: str, body: Any) -> httpx.Response:
        if operation == "delete":
            return httpx.Response(204)
        if operation == "create":
            return httpx.Response(201, json=body)
        results = [
            {"key": document["postId"], "status": True, "errorMessage": None, "statusCode": 201}
            for document in body["value"]
        ]
        return httpx.Response(200, json={"value": results})


@pytest.fixture
def fake_service() -> FakeSearchService:
    return FakeSearchService()


@pytest.fixture
def search_settings() -> SearchSettings:
    return SearchSettings(service_url=SERVICE_URL, index_name=INDEX_NAME, admin_key=ADMIN_KEY)


@pytest.fixture
def search_client(fake_service: FakeSearchService, search_settings: SearchSettings):
    client = SearchServiceClient.from_settings(search_settings, transport=fake_service.transport)
    yield client
    client.close()
