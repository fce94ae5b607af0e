"""Index static-site posts into a hosted full-text search service."""

from importlib import metadata

try:
    __version__ = metadata.version("blogindex")
except metadata.PackageNotFoundError:  # source checkout without an install
    __version__ = "0.0.0"

__all__ = ["__version__"]
