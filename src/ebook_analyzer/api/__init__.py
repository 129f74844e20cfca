"""HTTP API for submitting documents and polling jobs."""

from ebook_analyzer.api.app import build_orchestrator, create_app

__all__ = [
    "build_orchestrator",
    "create_app",
]
