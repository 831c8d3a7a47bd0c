"""Domain models and deterministic rules for document sync."""

from src.docsync.domain.models import (
    CollectionMapping,
    Document,
    ExportSummary,
    InvalidDocumentEntry,
    ItemOutcome,
    RunResult,
    SyncSummary,
)
from src.docsync.domain.rules import build_document_url, build_export_content, filename_safe, slugify

__all__ = [
    "build_document_url",
    "build_export_content",
    "CollectionMapping",
    "Document",
    "ExportSummary",
    "filename_safe",
    "InvalidDocumentEntry",
    "ItemOutcome",
    "RunResult",
    "slugify",
    "SyncSummary",
]
