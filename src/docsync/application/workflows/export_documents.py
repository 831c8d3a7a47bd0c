from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from tqdm import tqdm

from src.config.logger_config import logger
from src.docsync.domain.models import Document, ExportSummary, InvalidDocumentEntry, ItemOutcome
from src.docsync.domain.rules import build_document_url, build_export_content
from src.docsync.infrastructure.collection_cache import CollectionNameCache
from src.docsync.infrastructure.markdown_sink import MarkdownFileSink


class DocumentSource(Protocol):
    async def list_documents(self, offset: int, limit: int) -> list[Document | InvalidDocumentEntry]: ...

    async def export_document(self, document_id: str) -> str: ...

    async def fetch_collection_name(self, collection_id: str) -> str: ...


@dataclass(frozen=True)
class ExportWorkflowConfig:
    limit: int = 100
    docs_base_url: str = ""
    show_progress: bool = True


class ExportDocumentsWorkflow:
    def __init__(
        self,
        source: DocumentSource,
        sink: MarkdownFileSink,
        collection_cache: CollectionNameCache | None = None,
        config: ExportWorkflowConfig | None = None,
    ) -> None:
        self.source = source
        self.sink = sink
        if collection_cache is None:
            collection_cache = CollectionNameCache(source.fetch_collection_name)
        self.collection_cache = collection_cache
        self.config = config or ExportWorkflowConfig()
        if self.config.limit <= 0:
            raise ValueError("limit must be positive")

    async def run(self) -> ExportSummary:
        """Page through the source until an empty page, exporting every document.

        A failing page fetch propagates and ends the run. A failing document or an
        undecodable list entry is recorded and skipped.
        """
        offset = 0
        pages_fetched = 0
        outcomes: list[ItemOutcome] = []

        with tqdm(
            total=None,
            desc="Export documents",
            unit=" doc",
            leave=True,
            disable=not self.config.show_progress,
        ) as progress:
            while True:
                documents = await self.source.list_documents(offset, self.config.limit)
                if not documents:
                    break
                pages_fetched += 1
                logger.info("Fetched page {} ({} documents, offset {})", pages_fetched, len(documents), offset)

                for document in documents:
                    if isinstance(document, InvalidDocumentEntry):
                        logger.warning("Skipping malformed document entry {}: {}", document.label, document.reason)
                        outcomes.append(ItemOutcome.failure(document.label, document.reason))
                    else:
                        outcomes.append(await self._export_and_save(document))
                    progress.update(1)
                offset += self.config.limit

        exported_total = sum(1 for outcome in outcomes if outcome.ok)
        summary = ExportSummary(
            pages_fetched=pages_fetched,
            documents_total=len(outcomes),
            exported_total=exported_total,
            failed_total=len(outcomes) - exported_total,
            outcomes=tuple(outcomes),
        )
        logger.info(
            "Export finished: {} exported, {} failed across {} pages",
            summary.exported_total,
            summary.failed_total,
            summary.pages_fetched,
        )
        return summary

    async def export_document(self, document: Document) -> Path:
        document_url = build_document_url(self.config.docs_base_url, document.title, document.url_id)
        body = await self.source.export_document(document.id)
        collection_name = await self._collection_name_for(document)
        file_path = self.sink.write_markdown(
            document.title,
            build_export_content(document_url, body),
            collection_name=collection_name,
        )
        logger.info("Downloaded and saved: {}", file_path)
        return file_path

    async def _collection_name_for(self, document: Document) -> str | None:
        if not document.collection_id:
            return None
        try:
            return await self.collection_cache.resolve(document.collection_id)
        except Exception as exc:
            logger.warning(
                "Error fetching collection name for document {}: {}; saving to staging root",
                document.id,
                exc,
            )
            return None

    async def _export_and_save(self, document: Document) -> ItemOutcome:
        try:
            await self.export_document(document)
            return ItemOutcome.success(document.id)
        except Exception as exc:
            logger.error(
                "Error exporting document {} with error type {}: {}",
                document.id,
                type(exc).__name__,
                exc,
            )
            return ItemOutcome.failure(document.id, exc)
