"""Tests for the remote index lifecycle manager."""

import logging

import httpx
import pytest

from blogindex.config import SearchSettings
from blogindex.indexing import (
    IndexDeleteError,
    IndexLifecycleManager,
    SchemaApplyError,
    TransientIndexAbsence,
    UploadError,
    build_schema,
    chunked,
)


def _documents(count: int) -> list[dict]:
    return [
        {"postId": f"post-{number}", "title": f"Post {number}", "@search.action": "mergeOrUpload"}
        for number in range(count)
    ]


def _manager(client, settings: SearchSettings, **updates) -> IndexLifecycleManager:
    return IndexLifecycleManager(client, settings.model_copy(update=updates))


def test_requests_carry_key_version_and_paths(fake_service, search_client, search_settings) -> None:
    manager = _manager(search_client, search_settings)

    manager.delete_index()
    manager.create_index(build_schema(search_settings))
    manager.index_documents(_documents(2))

    paths = [call["path"] for call in fake_service.calls]
    assert paths == ["/indexes/posts", "/indexes/posts", "/indexes/posts/docs/index"]
    for call in fake_service.calls:
        assert call["headers"]["api-key"] == "admin-secret"
        assert call["params"] == {"api-version": search_settings.api_version}


def test_delete_success_returns_true(search_client, search_settings) -> None:
    assert _manager(search_client, search_settings).delete_index() is True


def test_delete_not_found_is_recovered(
    fake_service, search_client, search_settings, caplog
) -> None:
    fake_service.reply("delete", httpx.Response(404, json={"error": {"message": "missing"}}))
    manager = _manager(search_client, search_settings)

    with caplog.at_level(logging.INFO, logger="blogindex"):
        assert manager.delete_index() is False

    assert isinstance(manager.last_delete_failure, TransientIndexAbsence)
    assert manager.last_delete_failure.status_code == 404
    assert "did not exist" in caplog.text


def test_delete_server_error_is_recovered(fake_service, search_client, search_settings) -> None:
    fake_service.reply("delete", httpx.Response(503, text="busy"))
    manager = _manager(search_client, search_settings)

    assert manager.delete_index() is False
    assert manager.last_delete_failure is not None
    assert manager.last_delete_failure.payload == "busy"


@pytest.mark.parametrize("status", [401, 403])
def test_delete_with_rejected_credentials_fails_fast(
    fake_service, search_client, search_settings, status: int
) -> None:
    fake_service.reply("delete", httpx.Response(status, json={"error": "denied"}))

    with pytest.raises(IndexDeleteError) as excinfo:
        _manager(search_client, search_settings).delete_index()

    assert excinfo.value.status_code == status
    assert excinfo.value.payload == {"error": "denied"}


def test_delete_transport_fault_fails_fast(fake_service, search_client, search_settings) -> None:
    fake_service.reply("delete", httpx.ConnectError("connection refused"))

    with pytest.raises(IndexDeleteError) as excinfo:
        _manager(search_client, search_settings).delete_index()

    assert excinfo.value.status_code is None


def test_create_sends_schema_and_cors(fake_service, search_client, search_settings) -> None:
    fields = build_schema(search_settings)

    _manager(search_client, search_settings).create_index(fields)

    (body,) = fake_service.bodies("create")
    assert body["name"] == "posts"
    assert [field["name"] for field in body["fields"]] == [field.name for field in fields]
    assert body["corsOptions"] == {"allowedOrigins": ["*"], "maxAgeInSeconds": 300}


def test_create_failure_raises_schema_error(fake_service, search_client, search_settings) -> None:
    fake_service.reply("create", httpx.Response(400, json={"error": {"message": "bad field"}}))

    with pytest.raises(SchemaApplyError) as excinfo:
        _manager(search_client, search_settings).create_index(build_schema(search_settings))

    assert excinfo.value.status_code == 400
    assert excinfo.value.payload == {"error": {"message": "bad field"}}


def test_create_transport_fault_raises_schema_error(
    fake_service, search_client, search_settings
) -> None:
    fake_service.reply("create", httpx.ReadTimeout("timed out"))

    with pytest.raises(SchemaApplyError):
        _manager(search_client, search_settings).create_index(build_schema(search_settings))


def test_upload_splits_into_sequential_chunks(fake_service, search_client, search_settings) -> None:
    documents = _documents(5)

    report = _manager(search_client, search_settings, chunk_size=2).index_documents(documents)

    assert report.uploaded == 5
    assert report.chunks == 3
    batches = [body["value"] for body in fake_service.bodies("upload")]
    assert [len(batch) for batch in batches] == [2, 2, 1]
    assert [doc["postId"] for batch in batches for doc in batch] == [
        doc["postId"] for doc in documents
    ]


def test_upload_small_collection_is_single_request(
    fake_service, search_client, search_settings
) -> None:
    report = _manager(search_client, search_settings).index_documents(_documents(3))

    assert report.chunks == 1
    assert fake_service.operations == ["upload"]


def test_upload_empty_collection_sends_nothing(
    fake_service, search_client, search_settings
) -> None:
    report = _manager(search_client, search_settings).index_documents([])

    assert report.uploaded == 0
    assert report.chunks == 0
    assert fake_service.calls == []


def test_upload_failure_stops_remaining_chunks(
    fake_service, search_client, search_settings
) -> None:
    fake_service.reply(
        "upload",
        lambda request: httpx.Response(
            200,
            json={"value": [{"key": "post-0", "status": True}, {"key": "post-1", "status": True}]},
        ),
    )
    fake_service.reply("upload", httpx.Response(500, json={"error": "boom"}))

    with pytest.raises(UploadError) as excinfo:
        _manager(search_client, search_settings, chunk_size=2).index_documents(_documents(6))

    assert excinfo.value.chunk_index == 1
    assert excinfo.value.status_code == 500
    assert len(fake_service.bodies("upload")) == 2


def test_upload_partial_rejection_raises(fake_service, search_client, search_settings) -> None:
    fake_service.reply(
        "upload",
        httpx.Response(
            207,
            json={
                "value": [
                    {"key": "post-0", "status": True, "statusCode": 201},
                    {"key": "post-1", "status": False, "statusCode": 400},
                ]
            },
        ),
    )

    with pytest.raises(UploadError) as excinfo:
        _manager(search_client, search_settings).index_documents(_documents(2))

    assert excinfo.value.failed_keys == ["post-1"]
    assert excinfo.value.chunk_index == 0


def test_verbose_logs_response_bodies(fake_service, search_client, search_settings, caplog) -> None:
    fake_service.reply("delete", httpx.Response(404, text="no such index"))

    with caplog.at_level(logging.INFO, logger="blogindex"):
        _manager(search_client, search_settings, verbose=True).delete_index()

    assert "no such index" in caplog.text


def test_chunked_rejects_invalid_size() -> None:
    with pytest.raises(ValueError):
        list(chunked([1, 2], 0))
