"""In-memory job store with bounded retention of terminal jobs."""

import logging
import threading
from typing import Optional

from ebook_analyzer.errors import InvalidTransitionError, JobNotFoundError
from ebook_analyzer.models.job import Job

logger = logging.getLogger("ebook_analyzer.jobs.store")

DEFAULT_MAX_TERMINAL = 10


class JobStore:
    """Holds one record per job, keyed by job ID.

    At most ``max_terminal`` completed or failed jobs are retained; storing
    one more evicts the job that finished earliest. Active jobs are never
    evicted. Records are copied on the way in and out, so callers never
    share mutable state with the store.
    """

    def __init__(self, max_terminal: int = DEFAULT_MAX_TERMINAL):
        """Initialize the store.

        Args:
            max_terminal: Number of terminal jobs to retain.
        """
        if max_terminal < 1:
            raise ValueError(f"max_terminal must be at least 1, got {max_terminal}")
        self._max_terminal = max_terminal
        self._jobs: dict[str, Job] = {}
        self._lock = threading.Lock()

    @property
    def max_terminal(self) -> int:
        """Retention bound for terminal jobs."""
        return self._max_terminal

    def put(self, job: Job) -> None:
        """Insert or replace a job record.

        Args:
            job: Record to store.

        Raises:
            InvalidTransitionError: If a terminal record would be replaced by
                a non-terminal one.
        """
        record = job.model_copy(deep=True)

        with self._lock:
            existing = self._jobs.get(record.job_id)
            if existing is not None and existing.is_terminal and not record.is_terminal:
                raise InvalidTransitionError(
                    f"Job {record.job_id} is already {existing.status.value}"
                )

            self._jobs[record.job_id] = record
            if record.is_terminal:
                self._evict_locked()

    def _evict_locked(self) -> None:
        terminal = [job for job in self._jobs.values() if job.is_terminal]
        overflow = len(terminal) - self._max_terminal
        if overflow <= 0:
            return

        terminal.sort(key=lambda j: j.completed_at or j.created_at)
        for job in terminal[:overflow]:
            del self._jobs[job.job_id]
            logger.debug(f"Evicted job {job.job_id} (completed {job.completed_at})")

    def get(self, job_id: str) -> Job:
        """Get a job by ID.

        Raises:
            JobNotFoundError: If the job is unknown to this store.
        """
        job = self.find(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def find(self, job_id: str) -> Optional[Job]:
        """Get a job by ID, or None if unknown."""
        with self._lock:
            job = self._jobs.get(job_id)
            return job.model_copy(deep=True) if job is not None else None

    def list_terminal_by_age(self) -> list[Job]:
        """Terminal jobs ordered by completion time, oldest first."""
        with self._lock:
            terminal = [job.model_copy(deep=True) for job in self._jobs.values() if job.is_terminal]
        terminal.sort(key=lambda j: j.completed_at or j.created_at)
        return terminal

    def active_count(self) -> int:
        """Number of jobs still running."""
        with self._lock:
            return sum(1 for job in self._jobs.values() if not job.is_terminal)

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def __contains__(self, job_id: object) -> bool:
        with self._lock:
            return job_id in self._jobs
