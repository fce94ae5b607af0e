"""Configuration resolution helpers."""

from __future__ import annotations

import logging
from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Mapping

from pydantic import ValidationError

from .exceptions import ConfigError
from .models import BlogIndexConfig

LOGGER = logging.getLogger(__name__)

SEARCH_SECTION = "AzureSearch"
SITE_KEYS = ("url", "permalink", "source_dir", "public_dir", "timezone")
SEARCH_KEY_ALIASES = {
    "serviceURL": "service_url",
    "serviceUrl": "service_url",
    "indexName": "index_name",
    "adminKey": "admin_key",
    "apiKey": "admin_key",
    "apiVersion": "api_version",
    "excerptLimit": "excerpt_limit",
    "chunkSize": "chunk_size",
    "timeout": "timeout_seconds",
}
# Accepted from older site configs and ignored.
LEGACY_SEARCH_KEYS = frozenset({"fields"})


def resolve_with_precedence(
    *,
    defaults: BlogIndexConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> BlogIndexConfig:
    """Merge configuration sources: defaults < site file < environment < CLI."""
    baseline = defaults.model_dump(mode="python")

    merged = deepcopy(baseline)
    for name, source in (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    ):
        if source is None:
            continue
        overrides = _normalize_mapping(source, source_name=name)
        merged = _deep_merge(merged, overrides)

    try:
        return BlogIndexConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def overrides_from_site_document(document: Mapping[str, Any]) -> dict[str, Any]:
    """Extract blogindex overrides from a parsed site ``_config.yml`` mapping.

    Site-wide keys (``url``, ``permalink``, ...) live at the top level of the
    document while search settings live under the ``AzureSearch`` section
    using camelCase names. The legacy ``fields`` list is accepted and dropped
    with a warning.

    Args:
        document: Parsed YAML mapping of the site configuration file.

    Returns:
        dict[str, Any]: Nested overrides keyed by configuration section.

    Raises:
        ConfigError: If the search section is not a mapping.
    """

    overrides: dict[str, Any] = {}
    site = {key: document[key] for key in SITE_KEYS if document.get(key) not in (None, "")}
    if site:
        overrides["site"] = site

    section = document.get(SEARCH_SECTION)
    if section is None:
        return overrides
    if not isinstance(section, MappingABC):
        raise ConfigError(f"The '{SEARCH_SECTION}' section must be a mapping.")

    search: dict[str, Any] = {}
    for key, value in section.items():
        if key in LEGACY_SEARCH_KEYS:
            LOGGER.warning(
                "Ignoring %s.%s: the index schema is fixed and no longer configurable.",
                SEARCH_SECTION,
                key,
            )
            continue
        search[SEARCH_KEY_ALIASES.get(str(key), str(key))] = value
    overrides["search"] = search
    return overrides


def _normalize_mapping(source: Mapping[str, Any], *, source_name: str) -> dict[str, Any]:
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{source_name.capitalize()} overrides must be a mapping.")

    result: dict[str, Any] = {}
    for key, value in dict(source).items():
        if not isinstance(key, str):
            raise ConfigError(f"{source_name.capitalize()} override keys must be strings.")
        path = key.split(".") if "." in key else [key]
        _assign(result, path, value, source_name=source_name)
    return result


def _assign(target: dict[str, Any], path: list[str], value: Any, *, source_name: str) -> None:
    node = target
    for segment in path[:-1]:
        existing = node.get(segment)
        if existing is None:
            existing = {}
            node[segment] = existing
        elif not isinstance(existing, dict):
            joined = ".".join(path)
            raise ConfigError(
                f"{source_name.capitalize()} override for {joined} conflicts with existing value."
            )
        node = existing
    leaf = path[-1]
    if isinstance(value, MappingABC):
        nested = _normalize_mapping(value, source_name=source_name)
        existing_leaf = node.get(leaf, {})
        if not isinstance(existing_leaf, MappingABC):
            existing_leaf = {}
        node[leaf] = _deep_merge(existing_leaf, nested)
    else:
        node[leaf] = value


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for key, value in base.items():
        merged[key] = deepcopy(value)
    for key, value in overrides.items():
        if isinstance(value, MappingABC) and isinstance(merged.get(key), MappingABC):
            merged[key] = _deep_merge(dict(merged[key]), value)  # type: ignore[arg-type]
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = ["resolve_with_precedence", "overrides_from_site_document"]
