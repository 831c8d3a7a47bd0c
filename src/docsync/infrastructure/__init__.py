"""Infrastructure adapters for document sync."""

from src.docsync.infrastructure.collection_cache import CollectionNameCache
from src.docsync.infrastructure.knowledge_client import OpenWebUIClient
from src.docsync.infrastructure.mapping_sqlite import SQLiteCollectionMappingRepository
from src.docsync.infrastructure.markdown_sink import MarkdownFileSink, StagedFile
from src.docsync.infrastructure.rate_limited import (
    RateLimitedClient,
    ResponseDecodeError,
    UnexpectedStatusError,
)
from src.docsync.infrastructure.source_client import OutlineClient

__all__ = [
    "CollectionNameCache",
    "MarkdownFileSink",
    "OpenWebUIClient",
    "OutlineClient",
    "RateLimitedClient",
    "ResponseDecodeError",
    "SQLiteCollectionMappingRepository",
    "StagedFile",
    "UnexpectedStatusError",
]
