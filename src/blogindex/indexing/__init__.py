"""Index document construction and remote index lifecycle."""

from .client import SearchServiceClient
from .errors import (
    BlogIndexError,
    DocumentError,
    IndexDeleteError,
    LifecycleError,
    SchemaApplyError,
    SearchServiceError,
    TransientIndexAbsence,
    UploadError,
)
from .lifecycle import IndexLifecycleManager, UploadReport, chunked
from .schema import CORS_OPTIONS, FieldDefinition, FieldType, build_schema, index_definition
from .transform import UPSERT_ACTION, IndexDocument, format_date, transform

__all__ = [
    "SearchServiceClient",
    "BlogIndexError",
    "DocumentError",
    "IndexDeleteError",
    "LifecycleError",
    "SchemaApplyError",
    "SearchServiceError",
    "TransientIndexAbsence",
    "UploadError",
    "IndexLifecycleManager",
    "UploadReport",
    "chunked",
    "CORS_OPTIONS",
    "FieldDefinition",
    "FieldType",
    "build_schema",
    "index_definition",
    "UPSERT_ACTION",
    "IndexDocument",
    "format_date",
    "transform",
]
