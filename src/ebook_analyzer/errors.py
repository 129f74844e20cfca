"""Exception taxonomy for the analyzer."""

from typing import Optional


class AnalyzerError(Exception):
    """Base class for analyzer errors."""


class ValidationError(AnalyzerError):
    """A submission was rejected before a job record was created."""


class ExtractionError(AnalyzerError):
    """Text could not be extracted from the submitted document."""


class OracleFailure(AnalyzerError):
    """A single oracle call failed (transport, timeout, or malformed response)."""

    def __init__(self, reason: str, segment_index: Optional[int] = None):
        self.reason = reason
        self.segment_index = segment_index
        super().__init__(reason)


class JobNotFoundError(AnalyzerError):
    """The job is unknown to this process."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Job not found: {job_id}")


class InvalidTransitionError(AnalyzerError):
    """A job was asked to leave a terminal state or move backwards."""
