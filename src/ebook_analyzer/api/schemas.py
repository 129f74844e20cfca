"""Request and response bodies for the HTTP API."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ebook_analyzer.models.enums import JobStatus
from ebook_analyzer.models.job import Job
from ebook_analyzer.models.report import Report


class CamelModel(BaseModel):
    """Serializes with camelCase keys, accepts either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SubmitResponse(CamelModel):
    job_id: str


class StatusRequest(CamelModel):
    job_id: str
    final_result: bool = False


class JobStatusResponse(CamelModel):
    job_id: str
    status: JobStatus
    progress_percent: int
    stage_label: str
    segments_total: int
    segments_planned: int
    segments_failed: int = 0
    error: Optional[str] = None

    @classmethod
    def from_job(cls, job: Job) -> "JobStatusResponse":
        return cls(
            job_id=job.job_id,
            status=job.status,
            progress_percent=job.progress_percent,
            stage_label=job.stage_label,
            segments_total=job.segments_total,
            segments_planned=job.segments_planned,
            segments_failed=job.segments_failed,
            error=job.error,
        )


FinalState = Literal["completed", "failed", "processing"]


class FinalResultResponse(CamelModel):
    """Terminal-result lookup.

    ``processing`` covers both a job still running here and a job this
    process has never seen (it may live in another process instance).
    """

    job_id: str
    status: FinalState
    report: Optional[Report] = None
    error: Optional[str] = None
    error_detail: Optional[str] = None
    completed_at: Optional[str] = None

    @classmethod
    def from_job(cls, job_id: str, job: Optional[Job]) -> "FinalResultResponse":
        if job is None or not job.is_terminal:
            return cls(job_id=job_id, status="processing")
        if job.status == JobStatus.FAILED:
            return cls(
                job_id=job_id,
                status="failed",
                error=job.error,
                error_detail=job.error_detail,
                completed_at=job.completed_at.isoformat() if job.completed_at else None,
            )
        return cls(
            job_id=job_id,
            status="completed",
            report=job.result,
            completed_at=job.completed_at.isoformat() if job.completed_at else None,
        )


class ErrorResponse(BaseModel):
    error: str
