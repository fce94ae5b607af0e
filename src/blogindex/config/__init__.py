"""Configuration management for blogindex."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError, MissingSettingError
from .models import (
    DEFAULT_API_VERSION,
    BlogIndexConfig,
    LoggingSettings,
    SearchSettings,
    SiteSettings,
)
from .resolver import overrides_from_site_document, resolve_with_precedence

SITE_CONFIG_FILENAME = "_config.yml"
ENV_PREFIX = "BLOGINDEX__"


class ConfigManager:
    """Load site configuration, applying precedence rules."""

    def __init__(
        self,
        site_root: Path | str = ".",
        *,
        config_path: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._site_root = Path(site_root).expanduser()
        self._config_path = (config_path or self._site_root / SITE_CONFIG_FILENAME).expanduser()
        self._env = env if env is not None else os.environ

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> BlogIndexConfig:
        """Load configuration data from the site file, applying precedence rules."""
        file_data = overrides_from_site_document(self._read_file())
        env_data: Mapping[str, str] | None
        if include_env:
            env_data = env_overrides if env_overrides is not None else self._env
        else:
            env_data = None

        return resolve_with_precedence(
            defaults=BlogIndexConfig(),
            file_overrides=file_data,
            env_overrides=self._extract_env(env_data) if env_data else None,
            cli_overrides=cli_overrides,
        )

    # Internal helpers -------------------------------------------------

    def _read_file(self) -> dict[str, Any]:
        if not self._config_path.exists():
            return {}

        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")

        return raw

    def _extract_env(self, env: Mapping[str, str]) -> dict[str, Any]:
        overrides: dict[str, Any] = {}
        for key, raw_value in env.items():
            if not key.startswith(ENV_PREFIX):
                continue
            path = [segment for segment in key[len(ENV_PREFIX) :].split("__") if segment]
            if not path:
                continue
            parsed_value: Any
            try:
                parsed_value = yaml.safe_load(raw_value)
            except yaml.YAMLError:
                parsed_value = raw_value

            self._assign_nested(overrides, [segment.lower() for segment in path], parsed_value)

        return overrides

    def _assign_nested(self, target: dict[str, Any], path: list[str], value: Any) -> None:
        current = target
        for segment in path[:-1]:
            existing = current.get(segment)
            if not isinstance(existing, dict):
                existing = {}
                current[segment] = existing
            current = existing
        current[path[-1]] = value


def require_search_settings(settings: SearchSettings) -> SearchSettings:
    """Ensure the connection settings needed for a sync run are present.

    Raises:
        MissingSettingError: If any of ``service_url``, ``index_name`` or
            ``admin_key`` is unset.
    """

    missing = settings.missing_required()
    if missing:
        raise MissingSettingError("search", missing)
    return settings


__all__ = [
    "ConfigManager",
    "SITE_CONFIG_FILENAME",
    "DEFAULT_API_VERSION",
    "BlogIndexConfig",
    "SiteSettings",
    "SearchSettings",
    "LoggingSettings",
    "resolve_with_precedence",
    "overrides_from_site_document",
    "require_search_settings",
    "ConfigError",
    "MissingSettingError",
]
