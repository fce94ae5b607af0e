"""CLI integration tests for `blogindex`."""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest
from click.testing import CliRunner

from blogindex.cli import cli
from blogindex.indexing import SearchServiceClient

SITE_CONFIG = """\
url: https://blog.example.com
AzureSearch:
  serviceURL: https://blog.search.windows.net
  indexName: posts
  adminKey: admin-secret
"""


def _make_site(tmp_path: Path, config: str = SITE_CONFIG) -> Path:
    site = tmp_path / "site"
    posts = site / "source" / "_posts"
    posts.mkdir(parents=True)
    (site / "_config.yml").write_text(config, encoding="utf-8")
    (posts / "hello.md").write_text(
        "---\ntitle: Hello\nslug: hello-world\ndate: 2024-01-02 03:04:05\ntags: [go]\n---\n"
        "<p>Hi there</p>\n",
        encoding="utf-8",
    )
    (posts / "draft.md").write_text(
        "---\ntitle: Draft\npublished: false\n---\nNot yet\n", encoding="utf-8"
    )
    return site


@pytest.fixture
def patched_client(monkeypatch: pytest.MonkeyPatch, fake_service):
    class _Client(SearchServiceClient):
        def __init__(self, *args, **kwargs) -> None:
            kwargs["transport"] = fake_service.transport
            super().__init__(*args, **kwargs)

    monkeypatch.setattr("blogindex.cli.SearchServiceClient", _Client)
    return fake_service


def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("BLOGINDEX__SEARCH__ADMIN_KEY", "BLOGINDEX__SEARCH__INDEX_NAME"):
        monkeypatch.delenv(key, raising=False)


def test_sync_uploads_published_posts(tmp_path: Path, patched_client, monkeypatch) -> None:
    _clean_env(monkeypatch)
    site = _make_site(tmp_path)

    result = CliRunner().invoke(cli, ["sync", str(site)])

    assert result.exit_code == 0, result.output
    assert "sync summary" in result.output
    assert "uploaded=1" in result.output
    assert "skipped=1" in result.output
    assert patched_client.operations == ["delete", "create", "upload"]
    (body,) = patched_client.bodies("upload")
    assert body["value"][0]["postId"] == "hello-world"
    assert body["value"][0]["excerpt"] == "Hi there"
    assert (site / "public" / "2024" / "01" / "02" / "hello-world" / "index.html").exists()


def test_sync_json_reports_counts(tmp_path: Path, patched_client, monkeypatch) -> None:
    _clean_env(monkeypatch)
    site = _make_site(tmp_path)

    result = CliRunner().invoke(cli, ["sync", str(site), "--json", "--index-name", "blog"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["state"] == "done"
    assert payload["counts"]["uploaded"] == 1
    assert payload["counts"]["skipped"] == 1
    assert patched_client.calls[0]["path"] == "/indexes/blog"


def test_sync_create_failure_exits_non_zero(tmp_path: Path, patched_client, monkeypatch) -> None:
    _clean_env(monkeypatch)
    patched_client.reply("create", httpx.Response(400, json={"error": {"message": "bad"}}))
    site = _make_site(tmp_path)

    result = CliRunner().invoke(cli, ["sync", str(site), "--json"])

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["error"]["code"] == "create_error"
    assert payload["error"]["details"]["status_code"] == 400
    assert "upload" not in patched_client.operations


def test_sync_requires_connection_settings(tmp_path: Path, patched_client, monkeypatch) -> None:
    _clean_env(monkeypatch)
    site = _make_site(tmp_path, config="url: https://blog.example.com\n")

    result = CliRunner().invoke(cli, ["sync", str(site)])

    assert result.exit_code != 0
    assert "Missing required search settings" in result.output
    assert patched_client.calls == []


def test_sync_rejects_conflicting_output_flags(tmp_path: Path, patched_client) -> None:
    site = _make_site(tmp_path)

    result = CliRunner().invoke(cli, ["sync", str(site), "--quiet", "--summary"])

    assert result.exit_code != 0
    assert "cannot both be enabled" in result.output


def test_schema_json_lists_fields(tmp_path: Path, monkeypatch) -> None:
    _clean_env(monkeypatch)
    site = _make_site(tmp_path)

    result = CliRunner().invoke(cli, ["schema", str(site), "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["name"] == "posts"
    assert [field["name"] for field in payload["fields"]] == [
        "postId",
        "title",
        "date",
        "excerpt",
        "permalink",
        "path",
        "tags",
        "categories",
    ]


def test_config_view_masks_admin_key(tmp_path: Path, monkeypatch) -> None:
    _clean_env(monkeypatch)
    site = _make_site(tmp_path)

    result = CliRunner().invoke(cli, ["config", "view", str(site)])

    assert result.exit_code == 0, result.output
    assert "index_name: posts" in result.output
    assert "admin-secret" not in result.output


def test_sync_help_notes_markdown_is_not_rendered() -> None:
    result = CliRunner().invoke(cli, ["sync", "--help"])

    assert result.exit_code == 0
    assert "Markdown is not rendered" in " ".join(result.output.split())
