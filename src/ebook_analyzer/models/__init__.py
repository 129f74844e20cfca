"""Data models for jobs, segments and reports."""

from ebook_analyzer.models.enums import FailureReason, JobStatus, Parameter
from ebook_analyzer.models.job import Job, new_job_id
from ebook_analyzer.models.report import AnalysisItem, Report, SegmentResult
from ebook_analyzer.models.segment import Segment

__all__ = [
    # Enums
    "FailureReason",
    "JobStatus",
    "Parameter",
    # Jobs
    "Job",
    "new_job_id",
    # Results
    "AnalysisItem",
    "Report",
    "SegmentResult",
    "Segment",
]
