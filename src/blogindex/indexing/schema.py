"""Static index schema for post documents."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from blogindex.config.models import SearchSettings

CORS_OPTIONS: Dict[str, Any] = {"allowedOrigins": ["*"], "maxAgeInSeconds": 300}


class FieldType(str, Enum):
    """Data type tags understood by the search service."""

    STRING = "Edm.String"
    DATE_TIME = "Edm.DateTimeOffset"
    STRING_COLLECTION = "Collection(Edm.String)"


class FieldDefinition(BaseModel):
    """Describes one field of the target index.

    Attributes:
        name: Field name, matching the document key.
        type: Data type tag.
        searchable: Whether full-text search covers the field.
        filterable: Whether the field can be used in filters.
        retrievable: Whether the field is returned in results.
        sortable: Whether results can be ordered by the field.
        facetable: Whether the field can be faceted.
        key: Whether the field is the document key.
        analyzer: Analyzer name; ``None`` keeps the service default.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    type: FieldType
    searchable: bool = False
    filterable: bool = False
    retrievable: bool = True
    sortable: bool = False
    facetable: bool = False
    key: bool = False
    analyzer: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """Return the JSON representation sent at index creation."""

        return self.model_dump(mode="json")


def build_schema(settings: SearchSettings) -> List[FieldDefinition]:
    """Return the ordered field list describing the post index.

    Text-bearing fields (title, excerpt, tags, categories) are searchable and
    use the configured analyzer; ``date`` is the only sortable field and
    ``postId`` is the key.
    """

    analyzer = settings.analyzer or None
    return [
        FieldDefinition(name="postId", type=FieldType.STRING, key=True),
        FieldDefinition(
            name="title", type=FieldType.STRING, searchable=True, analyzer=analyzer
        ),
        FieldDefinition(name="date", type=FieldType.DATE_TIME, sortable=True),
        FieldDefinition(
            name="excerpt", type=FieldType.STRING, searchable=True, analyzer=analyzer
        ),
        FieldDefinition(name="permalink", type=FieldType.STRING),
        FieldDefinition(name="path", type=FieldType.STRING),
        FieldDefinition(
            name="tags",
            type=FieldType.STRING_COLLECTION,
            searchable=True,
            analyzer=analyzer,
        ),
        FieldDefinition(
            name="categories",
            type=FieldType.STRING_COLLECTION,
            searchable=True,
            analyzer=analyzer,
        ),
    ]


def index_definition(name: str, fields: List[FieldDefinition]) -> Dict[str, Any]:
    """Return the body of the index create/replace request."""

    return {
        "name": name,
        "fields": [field.to_payload() for field in fields],
        "corsOptions": dict(CORS_OPTIONS),
    }


__all__ = ["CORS_OPTIONS", "FieldType", "FieldDefinition", "build_schema", "index_definition"]
