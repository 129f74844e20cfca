"""Job lifecycle: extraction, orchestration and the bounded job store."""

from ebook_analyzer.jobs.extraction import extract_text
from ebook_analyzer.jobs.orchestrator import JobOrchestrator, select_representative
from ebook_analyzer.jobs.store import JobStore

__all__ = [
    "JobOrchestrator",
    "JobStore",
    "extract_text",
    "select_representative",
]
