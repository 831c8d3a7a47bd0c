from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Document:
    id: str
    title: str
    url_id: str
    collection_id: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Document":
        doc_id = payload.get("id")
        if not isinstance(doc_id, str) or not doc_id:
            raise ValueError(f"Document payload without id: {payload!r}")
        collection_id = payload.get("collectionId")
        return cls(
            id=doc_id,
            title=str(payload.get("title") or ""),
            url_id=str(payload.get("urlId") or ""),
            collection_id=str(collection_id) if collection_id else None,
        )


@dataclass(frozen=True)
class InvalidDocumentEntry:
    """A `documents.list` entry that could not be decoded into a Document."""

    position: int
    reason: str

    @property
    def label(self) -> str:
        return f"entry#{self.position}"


@dataclass(frozen=True)
class ItemOutcome:
    item: str
    ok: bool
    reason: str | None = None

    @classmethod
    def success(cls, item: str) -> "ItemOutcome":
        return cls(item=item, ok=True)

    @classmethod
    def failure(cls, item: str, exc: BaseException | str) -> "ItemOutcome":
        if isinstance(exc, BaseException):
            reason = f"{type(exc).__name__}: {exc}"
        else:
            reason = exc
        return cls(item=item, ok=False, reason=reason)


@dataclass(frozen=True)
class ExportSummary:
    pages_fetched: int
    documents_total: int
    exported_total: int
    failed_total: int
    outcomes: tuple[ItemOutcome, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SyncSummary:
    collections_cleared: int
    removed_total: int
    remove_failed_total: int
    files_total: int
    uploaded_total: int
    failed_total: int
    outcomes: tuple[ItemOutcome, ...] = field(default_factory=tuple)
    removal_outcomes: tuple[ItemOutcome, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RunResult:
    ok: bool
    message: str
    summary: ExportSummary | SyncSummary | None = None


@dataclass(frozen=True)
class CollectionMapping:
    id: int
    source_collection: str
    knowledge_collection_ids: tuple[str, ...]
    created_at: str
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source_collection": self.source_collection,
            "knowledge_collection_ids": list(self.knowledge_collection_ids),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
