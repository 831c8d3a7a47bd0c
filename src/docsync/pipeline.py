from __future__ import annotations
import asyncio

import aiohttp

from src.config.logger_config import logger
from src.config.settings import SyncSettings
from src.docsync.application.workflows.export_documents import ExportDocumentsWorkflow, ExportWorkflowConfig
from src.docsync.application.workflows.sync_knowledge import (
    SyncAbortedError,
    SyncKnowledgeWorkflow,
    SyncWorkflowConfig,
)
from src.docsync.domain.models import RunResult
from src.docsync.infrastructure.collection_cache import CollectionNameCache
from src.docsync.infrastructure.knowledge_client import OpenWebUIClient
from src.docsync.infrastructure.mapping_sqlite import SQLiteCollectionMappingRepository
from src.docsync.infrastructure.markdown_sink import MarkdownFileSink
from src.docsync.infrastructure.rate_limited import RateLimitedClient
from src.docsync.infrastructure.source_client import OutlineClient

EXPORT_COMPLETED = "Export completed."
UPLOAD_COMPLETED = "Upload completed."


def _new_session() -> aiohttp.ClientSession:
    connector = aiohttp.TCPConnector(limit=0, limit_per_host=10, ttl_dns_cache=300)
    return aiohttp.ClientSession(connector=connector)


async def run_export_async(
    settings: SyncSettings | None = None,
    *,
    show_progress: bool = True,
) -> RunResult:
    settings = settings or SyncSettings.from_env()
    sink = MarkdownFileSink(settings.documents_dir)

    async with _new_session() as session:
        source = OutlineClient(RateLimitedClient(session), settings.api_base_url, settings.api_token)
        workflow = ExportDocumentsWorkflow(
            source=source,
            sink=sink,
            collection_cache=CollectionNameCache(source.fetch_collection_name),
            config=ExportWorkflowConfig(
                limit=settings.limit,
                docs_base_url=settings.docs_base_url,
                show_progress=show_progress,
            ),
        )
        try:
            summary = await workflow.run()
        except Exception as exc:
            logger.error("Error fetching documents: {}", exc)
            return RunResult(ok=False, message=f"Error fetching documents: {exc}")

    return RunResult(ok=True, message=EXPORT_COMPLETED, summary=summary)


async def run_sync_async(
    settings: SyncSettings | None = None,
    *,
    show_progress: bool = True,
) -> RunResult:
    settings = settings or SyncSettings.from_env()
    mappings = load_collection_mappings(settings)
    sink = MarkdownFileSink(settings.documents_dir)

    async with _new_session() as session:
        knowledge = OpenWebUIClient(
            RateLimitedClient(session),
            settings.openwebui_api_url,
            settings.openwebui_api_token,
        )
        workflow = SyncKnowledgeWorkflow(
            knowledge=knowledge,
            sink=sink,
            mappings=mappings,
            config=SyncWorkflowConfig(
                default_collection_id=settings.knowledge_collection_id,
                show_progress=show_progress,
            ),
        )
        try:
            summary = await workflow.run()
        except SyncAbortedError as exc:
            logger.error("{}", exc)
            return RunResult(ok=False, message=str(exc))

    return RunResult(ok=True, message=UPLOAD_COMPLETED, summary=summary)


def load_collection_mappings(settings: SyncSettings) -> dict[str, list[str]]:
    if not settings.mappings_db_path.exists():
        return {}
    repo = SQLiteCollectionMappingRepository(settings.mappings_db_path)
    try:
        return repo.get_collection_mappings()
    finally:
        repo.close()


def run_export(settings: SyncSettings | None = None, *, show_progress: bool = True) -> RunResult:
    return asyncio.run(run_export_async(settings, show_progress=show_progress))


def run_sync(settings: SyncSettings | None = None, *, show_progress: bool = True) -> RunResult:
    return asyncio.run(run_sync_async(settings, show_progress=show_progress))
