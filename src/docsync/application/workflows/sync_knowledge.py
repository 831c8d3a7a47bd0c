from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Protocol, Sequence

from tqdm import tqdm

from src.config.logger_config import logger
from src.docsync.domain.models import ItemOutcome, SyncSummary
from src.docsync.infrastructure.markdown_sink import MarkdownFileSink, StagedFile


class KnowledgeSink(Protocol):
    async def list_knowledge_files(self, collection_id: str) -> list[str]: ...

    async def remove_file(self, collection_id: str, file_id: str) -> None: ...

    async def upload_file(self, file_path: str | Path) -> str: ...

    async def add_file(self, collection_id: str, file_id: str) -> None: ...


class SyncAbortedError(Exception):
    """A loop-level failure that stops the whole sync."""

    prefix = "Sync aborted"

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"{self.prefix}: {cause}")


class KnowledgeClearError(SyncAbortedError):
    prefix = "Error clearing knowledge collection"


class StagingDirectoryError(SyncAbortedError):
    prefix = "Error reading directory"


@dataclass(frozen=True)
class SyncWorkflowConfig:
    default_collection_id: str = ""
    show_progress: bool = True


class SyncKnowledgeWorkflow:
    """Replace the contents of the sink knowledge collections with the staged files.

    Clearing always completes before the first upload. Readers of the sink see
    an empty collection in between; nothing masks that window.
    """

    def __init__(
        self,
        knowledge: KnowledgeSink,
        sink: MarkdownFileSink,
        mappings: Mapping[str, Sequence[str]] | None = None,
        config: SyncWorkflowConfig | None = None,
    ) -> None:
        self.knowledge = knowledge
        self.sink = sink
        self.mappings = {name: list(ids) for name, ids in (mappings or {}).items()}
        self.config = config or SyncWorkflowConfig()

    def target_collections(self) -> list[str]:
        targets: list[str] = []
        if self.config.default_collection_id:
            targets.append(self.config.default_collection_id)
        for ids in self.mappings.values():
            for collection_id in ids:
                if collection_id and collection_id not in targets:
                    targets.append(collection_id)
        return targets

    def targets_for(self, staged: StagedFile) -> list[str]:
        if staged.collection is not None:
            mapped = [cid for cid in self.mappings.get(staged.collection, []) if cid]
            if mapped:
                return mapped
        if self.config.default_collection_id:
            return [self.config.default_collection_id]
        return []

    async def run(self) -> SyncSummary:
        collections = self.target_collections()
        removal_outcomes = await self.clear(collections)

        try:
            staged_files = self.sink.list_markdown_files()
        except OSError as exc:
            raise StagingDirectoryError(exc) from exc

        upload_outcomes = await self.populate(staged_files)

        removed_total = sum(1 for outcome in removal_outcomes if outcome.ok)
        uploaded_total = sum(1 for outcome in upload_outcomes if outcome.ok)
        summary = SyncSummary(
            collections_cleared=len(collections),
            removed_total=removed_total,
            remove_failed_total=len(removal_outcomes) - removed_total,
            files_total=len(upload_outcomes),
            uploaded_total=uploaded_total,
            failed_total=len(upload_outcomes) - uploaded_total,
            outcomes=tuple(upload_outcomes),
            removal_outcomes=tuple(removal_outcomes),
        )
        logger.info(
            "Sync finished: {} uploaded, {} failed, {} removed from {} collections",
            summary.uploaded_total,
            summary.failed_total,
            summary.removed_total,
            summary.collections_cleared,
        )
        return summary

    async def clear(self, collections: Sequence[str]) -> list[ItemOutcome]:
        # every listing must succeed before anything is removed
        listed: list[tuple[str, list[str]]] = []
        for collection_id in collections:
            try:
                file_ids = await self.knowledge.list_knowledge_files(collection_id)
            except Exception as exc:
                logger.error("Failed to list knowledge collection {}: {}", collection_id, exc)
                raise KnowledgeClearError(exc) from exc
            listed.append((collection_id, file_ids))

        outcomes: list[ItemOutcome] = []
        for collection_id, file_ids in listed:
            for position, file_id in enumerate(file_ids):
                if not file_id:
                    item = f"{collection_id}/entry#{position}"
                    logger.error("Cannot remove file {}: entry has no id", item)
                    outcomes.append(ItemOutcome.failure(item, "file entry without id"))
                    continue
                item = f"{collection_id}/{file_id}"
                try:
                    await self.knowledge.remove_file(collection_id, file_id)
                    outcomes.append(ItemOutcome.success(item))
                except Exception as exc:
                    logger.error("Error removing file {}: {}", item, exc)
                    outcomes.append(ItemOutcome.failure(item, exc))
            logger.info("Knowledge collection {} cleared.", collection_id)
        return outcomes

    async def populate(self, staged_files: Sequence[StagedFile]) -> list[ItemOutcome]:
        outcomes: list[ItemOutcome] = []
        with tqdm(
            total=len(staged_files),
            desc="Upload files",
            unit="file",
            leave=True,
            disable=not self.config.show_progress,
        ) as progress:
            for staged in staged_files:
                outcomes.append(await self._upload_and_register(staged))
                progress.update(1)
        return outcomes

    async def _upload_and_register(self, staged: StagedFile) -> ItemOutcome:
        item = str(staged.path)
        targets = self.targets_for(staged)
        if not targets:
            logger.error("No knowledge collection configured for {}", item)
            return ItemOutcome.failure(item, "no knowledge collection configured")

        try:
            file_id = await self.knowledge.upload_file(staged.path)
            for collection_id in targets:
                await self.knowledge.add_file(collection_id, file_id)
            return ItemOutcome.success(item)
        except Exception as exc:
            logger.error(
                "Error uploading file {} with error type {}: {}",
                item,
                type(exc).__name__,
                exc,
            )
            return ItemOutcome.failure(item, exc)
