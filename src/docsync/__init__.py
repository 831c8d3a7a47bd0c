"""Document export and knowledge-base sync package."""

from src.docsync.domain.models import ExportSummary, RunResult, SyncSummary
from src.docsync.pipeline import run_export, run_export_async, run_sync, run_sync_async

__all__ = [
    "ExportSummary",
    "run_export",
    "run_export_async",
    "run_sync",
    "run_sync_async",
    "RunResult",
    "SyncSummary",
]
