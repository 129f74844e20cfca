"""Job record model and lifecycle rules."""

import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from ebook_analyzer.errors import InvalidTransitionError
from ebook_analyzer.models.enums import JobStatus
from ebook_analyzer.models.report import Report


def new_job_id() -> str:
    """Generate an opaque job identifier."""
    return uuid.uuid4().hex


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class Job(BaseModel):
    """Represents one document analysis job."""

    job_id: str = Field(default_factory=new_job_id, description="Unique job identifier")
    status: JobStatus = Field(default=JobStatus.RECEIVED)

    # Progress tracking
    progress_percent: int = Field(default=0, ge=0, le=100)
    stage_label: str = Field(default="Received")
    segments_total: int = Field(default=0, ge=0)
    segments_planned: int = Field(default=0, ge=0)
    segments_failed: int = Field(default=0, ge=0)

    # Submission metadata
    filename: Optional[str] = None
    mime_type: Optional[str] = None

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now)
    completed_at: Optional[datetime] = None

    # Outcome
    error: Optional[str] = None
    error_detail: Optional[str] = None
    result: Optional[Report] = None

    @property
    def is_terminal(self) -> bool:
        """Check if job is in a terminal state."""
        return self.status.is_terminal

    @property
    def duration_seconds(self) -> Optional[float]:
        """Seconds from creation to completion (or now, while running)."""
        end = self.completed_at or utc_now()
        return (end - self.created_at).total_seconds()

    def advance(
        self,
        status: JobStatus,
        progress: Optional[int] = None,
        stage_label: Optional[str] = None,
    ) -> None:
        """Move the job forward in its lifecycle.

        Progress only ever ratchets upwards while the job is active.

        Args:
            status: Target status.
            progress: Requested progress percentage.
            stage_label: New human-readable activity.

        Raises:
            InvalidTransitionError: On a move out of a terminal state, a move
                backwards, or re-entry into a state other than processing.
        """
        if self.is_terminal:
            raise InvalidTransitionError(
                f"Job {self.job_id} is {self.status.value}; cannot move to {status.value}"
            )
        if status == self.status and status != JobStatus.PROCESSING:
            raise InvalidTransitionError(f"Job {self.job_id} is already {status.value}")
        if status != JobStatus.FAILED and status.rank < self.status.rank:
            raise InvalidTransitionError(
                f"Job {self.job_id} cannot go back from {self.status.value} to {status.value}"
            )

        self.status = status
        if progress is not None:
            self.progress_percent = max(self.progress_percent, min(100, max(0, progress)))
        if stage_label is not None:
            self.stage_label = stage_label

    def complete(self, report: Report) -> None:
        """Mark the job completed with its final report."""
        self.advance(JobStatus.COMPLETED, progress=100, stage_label="Analysis complete")
        self.result = report
        self.segments_failed = report.segments_failed
        self.completed_at = utc_now()

    def fail(self, reason: str, detail: Optional[str] = None) -> None:
        """Mark the job failed. No report is produced."""
        self.advance(JobStatus.FAILED, stage_label="Analysis failed")
        self.error = reason
        self.error_detail = detail
        self.result = None
        self.completed_at = utc_now()
