"""Configuration errors."""

from __future__ import annotations

from typing import Sequence


class ConfigError(Exception):
    """Raised when configuration data cannot be read or validated."""


class MissingSettingError(ConfigError):
    """Raised when settings required for a sync run are unset.

    Attributes:
        keys: Names of the missing settings.
    """

    def __init__(self, section: str, keys: Sequence[str]) -> None:
        self.keys = list(keys)
        super().__init__(f"Missing required {section} settings: {', '.join(self.keys)}.")
