"""Post source discovery."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator

POST_SUFFIXES = frozenset({".md", ".markdown", ".html"})


@dataclass(slots=True)
class PostSource:
    """A post file found under the posts directory.

    Attributes:
        path: Absolute path to the source file.
        relative: Path relative to the posts directory.
        modified_at: Last modification time of the file.
    """

    path: Path
    relative: Path
    modified_at: datetime


def _is_hidden(path: Path) -> bool:
    return any(part.startswith((".", "_")) for part in path.parts if part not in (".", ".."))


class PostScanner:
    """Discover post sources beneath a directory in a stable order."""

    def __init__(self, *, suffixes: Iterable[str] = POST_SUFFIXES) -> None:
        self.suffixes = frozenset(suffix.lower() for suffix in suffixes)

    def scan(self, root: Path) -> Iterator[PostSource]:
        """Yield post files under ``root`` sorted by relative path."""
        root = root.expanduser().resolve()
        if not root.is_dir():
            return

        for path in sorted(root.rglob("*")):
            if not path.is_file() or path.suffix.lower() not in self.suffixes:
                continue
            relative = path.relative_to(root)
            if _is_hidden(relative):
                continue
            stat = path.stat()
            yield PostSource(
                path=path,
                relative=relative,
                modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            )


__all__ = ["POST_SUFFIXES", "PostSource", "PostScanner"]
