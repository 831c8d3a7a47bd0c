import unittest
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

from src.config.settings import SyncSettings
from src.docsync.application.workflows.sync_knowledge import KnowledgeClearError
from src.docsync.domain.models import ExportSummary, RunResult, SyncSummary
from src.docsync.infrastructure.mapping_sqlite import SQLiteCollectionMappingRepository
from src.docsync.infrastructure.rate_limited import UnexpectedStatusError
from src.docsync.pipeline import (
    load_collection_mappings,
    run_export,
    run_export_async,
    run_sync,
    run_sync_async,
)
from tests.utils.tempdir import managed_temp_dir


def make_settings(root: Path) -> SyncSettings:
    return SyncSettings(
        api_token="t",
        api_base_url="https://docs.example.com/api",
        docs_base_url="https://view.example.com",
        openwebui_api_token="kb",
        openwebui_api_url="https://kb.example.com/api/v1",
        knowledge_collection_id="kc-default",
        documents_dir=root / "staging",
        limit=25,
        mappings_db_path=root / "mappings.db",
    )


EXPORT_SUMMARY = ExportSummary(pages_fetched=1, documents_total=2, exported_total=2, failed_total=0)
SYNC_SUMMARY = SyncSummary(
    collections_cleared=1,
    removed_total=0,
    remove_failed_total=0,
    files_total=2,
    uploaded_total=2,
    failed_total=0,
)


class PipelineApiTests(unittest.TestCase):
    def test_run_export_sync_wrapper(self):
        expected = RunResult(ok=True, message="Export completed.", summary=EXPORT_SUMMARY)
        with patch("src.docsync.pipeline.run_export_async", new=AsyncMock(return_value=expected)):
            result = run_export(make_settings(Path("tests/tmp/unused")))
        self.assertEqual(result, expected)

    def test_run_sync_sync_wrapper(self):
        expected = RunResult(ok=True, message="Upload completed.", summary=SYNC_SUMMARY)
        with patch("src.docsync.pipeline.run_sync_async", new=AsyncMock(return_value=expected)):
            result = run_sync(make_settings(Path("tests/tmp/unused")))
        self.assertEqual(result, expected)

    def test_load_collection_mappings_without_database(self):
        with managed_temp_dir("pipeline_no_db") as tmp:
            self.assertEqual(load_collection_mappings(make_settings(tmp)), {})
            self.assertFalse((tmp / "mappings.db").exists())

    def test_load_collection_mappings_reads_store(self):
        with managed_temp_dir("pipeline_db") as tmp:
            repo = SQLiteCollectionMappingRepository(tmp / "mappings.db")
            repo.create_mapping("HR_Team", ["kc-hr"])
            repo.close()

            self.assertEqual(load_collection_mappings(make_settings(tmp)), {"HR_Team": ["kc-hr"]})


class PipelineApiAsyncTests(unittest.IsolatedAsyncioTestCase):
    async def test_run_export_async_success_message(self):
        workflow = MagicMock()
        workflow.run = AsyncMock(return_value=EXPORT_SUMMARY)
        with managed_temp_dir("pipeline_export_ok") as tmp:
            with patch("src.docsync.pipeline.ExportDocumentsWorkflow", return_value=workflow) as workflow_cls:
                result = await run_export_async(make_settings(tmp), show_progress=False)

        self.assertTrue(result.ok)
        self.assertEqual(result.message, "Export completed.")
        self.assertEqual(result.summary, EXPORT_SUMMARY)
        config = workflow_cls.call_args.kwargs["config"]
        self.assertEqual(config.limit, 25)
        self.assertEqual(config.docs_base_url, "https://view.example.com")
        self.assertFalse(config.show_progress)

    async def test_run_export_async_reports_pagination_failure(self):
        workflow = MagicMock()
        workflow.run = AsyncMock(side_effect=UnexpectedStatusError("fetchDocuments", 500))
        with managed_temp_dir("pipeline_export_fail") as tmp:
            with patch("src.docsync.pipeline.ExportDocumentsWorkflow", return_value=workflow):
                result = await run_export_async(make_settings(tmp), show_progress=False)

        self.assertFalse(result.ok)
        self.assertTrue(result.message.startswith("Error fetching documents:"))
        self.assertIsNone(result.summary)

    async def test_run_sync_async_success_passes_mappings(self):
        workflow = MagicMock()
        workflow.run = AsyncMock(return_value=SYNC_SUMMARY)
        with managed_temp_dir("pipeline_sync_ok") as tmp:
            repo = SQLiteCollectionMappingRepository(tmp / "mappings.db")
            repo.create_mapping("HR_Team", ["kc-hr"])
            repo.close()
            with patch("src.docsync.pipeline.SyncKnowledgeWorkflow", return_value=workflow) as workflow_cls:
                result = await run_sync_async(make_settings(tmp), show_progress=False)

        self.assertEqual(result, RunResult(ok=True, message="Upload completed.", summary=SYNC_SUMMARY))
        kwargs = workflow_cls.call_args.kwargs
        self.assertEqual(kwargs["mappings"], {"HR_Team": ["kc-hr"]})
        self.assertEqual(kwargs["config"].default_collection_id, "kc-default")

    async def test_run_sync_async_reports_clear_failure(self):
        workflow = MagicMock()
        workflow.run = AsyncMock(side_effect=KnowledgeClearError(UnexpectedStatusError("listKnowledgeFiles", 401)))
        with managed_temp_dir("pipeline_sync_fail") as tmp:
            with patch("src.docsync.pipeline.SyncKnowledgeWorkflow", return_value=workflow):
                result = await run_sync_async(make_settings(tmp), show_progress=False)

        self.assertFalse(result.ok)
        self.assertTrue(result.message.startswith("Error clearing knowledge collection:"))
