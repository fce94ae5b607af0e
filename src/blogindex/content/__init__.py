"""Content item models and text helpers."""

from .models import ContentItem, TaxonomyKind, TaxonomyTerm
from .taxonomy import extract_labels
from .text import ELLIPSIS, strip_html, truncate

__all__ = [
    "ContentItem",
    "TaxonomyKind",
    "TaxonomyTerm",
    "extract_labels",
    "ELLIPSIS",
    "strip_html",
    "truncate",
]
