"""FastAPI application exposing submission, status and result endpoints."""

import logging
import mimetypes
import os
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, FastAPI, File, HTTPException, Request, UploadFile, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ebook_analyzer import __version__
from ebook_analyzer.api.schemas import (
    ErrorResponse,
    FinalResultResponse,
    JobStatusResponse,
    StatusRequest,
    SubmitResponse,
)
from ebook_analyzer.config.models import AnalyzerConfig
from ebook_analyzer.errors import JobNotFoundError, ValidationError
from ebook_analyzer.jobs.orchestrator import JobOrchestrator
from ebook_analyzer.jobs.store import JobStore
from ebook_analyzer.llm.factory import create_llm_provider
from ebook_analyzer.oracle.client import OracleClient

logger = logging.getLogger("ebook_analyzer.api.app")

router = APIRouter(prefix="/api", tags=["analysis"])

GENERIC_MIME_TYPES = {"", "application/octet-stream", "binary/octet-stream"}


def build_orchestrator(config: AnalyzerConfig) -> JobOrchestrator:
    """Wire the default LLM-backed orchestrator from configuration."""
    oracle = OracleClient(
        llm_provider=create_llm_provider(config.llm),
        max_tokens=config.llm.max_tokens,
        temperature=config.llm.temperature,
        timeout_seconds=config.llm.timeout_seconds,
    )
    return JobOrchestrator(
        oracle=oracle,
        store=JobStore(max_terminal=config.jobs.max_terminal_jobs),
        chunking=config.chunking,
        jobs=config.jobs,
    )


def get_orchestrator(request: Request) -> JobOrchestrator:
    return request.app.state.orchestrator


def resolve_mime_type(filename: Optional[str], content_type: Optional[str]) -> Optional[str]:
    """Prefer the declared content type, fall back to the file extension."""
    declared = (content_type or "").split(";", 1)[0].strip().lower()
    if declared not in GENERIC_MIME_TYPES:
        return declared
    if filename:
        guessed, _ = mimetypes.guess_type(filename)
        if guessed:
            return guessed
        if filename.lower().endswith(".md"):
            return "text/markdown"
    return declared or None


@router.get("/analyze")
async def analyze_info() -> dict:
    """Lightweight check that the endpoint is reachable."""
    return {
        "message": "Analyze API endpoint is working. Send a POST request with a document to analyze.",
        "version": __version__,
    }


@router.post(
    "/analyze",
    response_model=SubmitResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}},
)
async def submit_document(
    background_tasks: BackgroundTasks,
    file: Optional[UploadFile] = File(None),
    orchestrator: JobOrchestrator = Depends(get_orchestrator),
) -> SubmitResponse:
    """Accept a document and start its analysis in the background."""
    if file is None:
        raise ValidationError("No file uploaded")

    try:
        payload = await file.read()
    finally:
        await file.close()

    mime_type = resolve_mime_type(file.filename, file.content_type)
    job = orchestrator.submit(payload, mime_type, filename=file.filename)

    # Runs after the response has been sent
    background_tasks.add_task(orchestrator.run, job.job_id, payload)

    return SubmitResponse(job_id=job.job_id)


@router.post(
    "/analyze/status",
    response_model=None,
)
async def job_status(
    body: StatusRequest,
    orchestrator: JobOrchestrator = Depends(get_orchestrator),
) -> JobStatusResponse | FinalResultResponse:
    """Report a job's progress, or its terminal result when ``finalResult`` is set."""
    if body.final_result:
        return FinalResultResponse.from_job(body.job_id, orchestrator.store.find(body.job_id))

    try:
        job = orchestrator.store.get(body.job_id)
    except JobNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="NotFound")
    return JobStatusResponse.from_job(job)


@router.get("/jobs", response_model=list[FinalResultResponse])
async def list_recent_jobs(
    orchestrator: JobOrchestrator = Depends(get_orchestrator),
) -> list[FinalResultResponse]:
    """Retained terminal jobs, oldest completion first."""
    return [
        FinalResultResponse.from_job(job.job_id, job)
        for job in orchestrator.store.list_terminal_by_age()
    ]


def create_app(
    config: Optional[AnalyzerConfig] = None,
    orchestrator: Optional[JobOrchestrator] = None,
) -> FastAPI:
    """Build the API application.

    Args:
        config: Analyzer configuration (defaults used if not provided).
        orchestrator: Pre-built orchestrator, mainly for tests.

    Returns:
        Configured FastAPI app.
    """
    config = config or AnalyzerConfig()
    app = FastAPI(title="eBook Analyzer API", version=__version__)
    app.state.orchestrator = orchestrator or build_orchestrator(config)

    origins_env = os.getenv("ANALYZER_CORS_ORIGINS", "")
    origins = [origin.strip() for origin in origins_env.split(",") if origin.strip()]
    if not origins:
        origins = ["http://localhost:3000", "http://127.0.0.1:3000"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        logger.info(f"Rejected submission: {exc}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(error=str(exc)).model_dump(),
        )

    app.include_router(router)

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        return JSONResponse(
            {
                "message": "eBook Analyzer API",
                "docs": "/docs",
                "health": "/api/analyze",
            }
        )

    return app
