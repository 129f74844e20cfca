"""Job orchestrator driving a document through the analysis lifecycle."""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Protocol, Sequence

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ebook_analyzer.aggregation.aggregator import placeholder_result, reduce
from ebook_analyzer.chunking.chunker import split
from ebook_analyzer.config.models import ChunkingConfig, JobConfig
from ebook_analyzer.errors import ExtractionError, OracleFailure, ValidationError
from ebook_analyzer.jobs.extraction import TextExtractor, extract_text
from ebook_analyzer.jobs.store import JobStore
from ebook_analyzer.llm.prompts.ebook_analysis import PromptContext
from ebook_analyzer.models.enums import FailureReason, JobStatus
from ebook_analyzer.models.job import Job
from ebook_analyzer.models.report import Report, SegmentResult
from ebook_analyzer.models.segment import Segment

logger = logging.getLogger("ebook_analyzer.jobs.orchestrator")

# Progress bands (percent) per lifecycle stage
PROGRESS_RECEIVED = 0
PROGRESS_EXTRACTING = 10
PROGRESS_PREPROCESSING = 15
PROGRESS_PROCESSING_START = 20
PROGRESS_PROCESSING_END = 80
PROGRESS_FINALIZING = 90


class SegmentOracle(Protocol):
    """Anything that can analyze one segment (normally ``OracleClient``)."""

    async def submit(self, segment_text: str, context: PromptContext) -> SegmentResult:
        ...


def select_representative(segments: Sequence[Segment], ceiling: int) -> list[Segment]:
    """Choose the segments to analyze.

    Up to ``ceiling`` segments are all kept. Above it, only the first, middle
    (``len // 2``) and last segments are analyzed, in their original order.

    Args:
        segments: Full segmentation of the document.
        ceiling: Largest segment count analyzed in full.

    Returns:
        Planned segments in source order.
    """
    if len(segments) <= ceiling:
        return list(segments)

    indices = sorted({0, len(segments) // 2, len(segments) - 1})
    return [segments[i] for i in indices]


def processing_progress(attempted: int, planned: int) -> int:
    """Map segments attempted onto the processing band."""
    if planned <= 0:
        return PROGRESS_PROCESSING_END
    span = PROGRESS_PROCESSING_END - PROGRESS_PROCESSING_START
    return PROGRESS_PROCESSING_START + (span * attempted) // planned


class JobOrchestrator:
    """Accepts submissions and runs each job to a terminal state.

    The orchestrator owns a job's record while the job is active and
    publishes every change to the store. Segments of one job are analyzed
    strictly in order; a failed segment is replaced by a placeholder so the
    job still completes.
    """

    def __init__(
        self,
        oracle: SegmentOracle,
        store: Optional[JobStore] = None,
        extractor: TextExtractor = extract_text,
        chunking: Optional[ChunkingConfig] = None,
        jobs: Optional[JobConfig] = None,
    ):
        """Initialize the orchestrator.

        Args:
            oracle: Segment analysis client.
            store: Job store (a private one is created if not provided).
            extractor: Text extraction collaborator.
            chunking: Segmentation settings.
            jobs: Job handling settings.
        """
        self._oracle = oracle
        self._chunking = chunking or ChunkingConfig()
        self._jobs = jobs or JobConfig()
        self._store = store if store is not None else JobStore(max_terminal=self._jobs.max_terminal_jobs)
        self._extractor = extractor
        self._slots = asyncio.Semaphore(self._jobs.max_concurrent_jobs)
        self._tasks: set[asyncio.Task] = set()

    @property
    def store(self) -> JobStore:
        """The job store this orchestrator publishes to."""
        return self._store

    def validate_submission(self, payload: bytes, mime_type: Optional[str]) -> str:
        """Check a submission before any record exists.

        Returns:
            The normalized MIME type.

        Raises:
            ValidationError: If the submission cannot be accepted.
        """
        if not payload:
            raise ValidationError("Uploaded document is empty")
        if len(payload) > self._jobs.max_upload_bytes:
            raise ValidationError(
                f"Uploaded document is {len(payload)} bytes; "
                f"the limit is {self._jobs.max_upload_bytes}"
            )

        mime = (mime_type or "").split(";", 1)[0].strip().lower()
        if mime not in self._jobs.supported_mime_types:
            raise ValidationError(
                f"Unsupported document type: {mime_type or 'unknown'}. "
                f"Supported: {', '.join(self._jobs.supported_mime_types)}"
            )
        return mime

    def submit(
        self,
        payload: bytes,
        mime_type: Optional[str],
        filename: Optional[str] = None,
    ) -> Job:
        """Accept a submission and write its initial record.

        Args:
            payload: Raw document bytes.
            mime_type: Declared MIME type.
            filename: Original file name, used as the document title.

        Returns:
            The new job in ``received`` state.

        Raises:
            ValidationError: If the submission is malformed.
        """
        mime = self.validate_submission(payload, mime_type)

        job = Job(
            filename=filename,
            mime_type=mime,
            progress_percent=PROGRESS_RECEIVED,
            stage_label="Uploading file...",
        )
        self._store.put(job)

        logger.info(f"Accepted job {job.job_id} ({filename or 'unnamed'}, {len(payload)} bytes)")
        return job

    def start(self, job_id: str, payload: bytes) -> asyncio.Task:
        """Run a submitted job in the background (fire-and-forget).

        Must be called from a running event loop.
        """
        task = asyncio.create_task(self.run(job_id, payload), name=f"analyze-{job_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def process(
        self,
        payload: bytes,
        mime_type: Optional[str],
        filename: Optional[str] = None,
    ) -> Job:
        """Submit a document and wait for its terminal record."""
        job = self.submit(payload, mime_type, filename)
        return await self.run(job.job_id, payload)

    async def run(self, job_id: str, payload: bytes) -> Job:
        """Drive a submitted job to ``completed`` or ``failed``.

        Args:
            job_id: ID returned by ``submit``.
            payload: The document bytes given to ``submit``.

        Returns:
            The terminal job record.
        """
        job = self._store.get(job_id)

        async with self._slots:
            try:
                await self._run_stages(job, payload)
            except Exception as e:
                logger.exception(f"Job {job_id} failed: {e}")
                if not job.is_terminal:
                    job.fail(FailureReason.INTERNAL_ERROR.value, str(e))
                    self._publish(job)

        return job

    def _publish(self, job: Job) -> None:
        self._store.put(job)

    async def _run_stages(self, job: Job, payload: bytes) -> None:
        job.advance(JobStatus.EXTRACTING, PROGRESS_EXTRACTING, "Extracting text...")
        self._publish(job)

        try:
            text = await asyncio.to_thread(self._extractor, payload, job.mime_type or "")
        except ExtractionError as e:
            logger.warning(f"Job {job.job_id}: extraction failed: {e}")
            job.fail(FailureReason.EXTRACTION_ERROR.value, str(e))
            self._publish(job)
            return

        logger.info(f"Job {job.job_id}: extracted {len(text)} chars")

        job.advance(JobStatus.PREPROCESSING, PROGRESS_PREPROCESSING, "Splitting text into segments...")
        self._publish(job)

        segments = list(split(text, self._chunking.max_segment_chars))
        planned = select_representative(segments, self._chunking.sampling_ceiling)
        job.segments_total = len(segments)
        job.segments_planned = len(planned)

        if not planned:
            logger.info(f"Job {job.job_id}: no text to analyze")
            job.complete(Report())
            self._publish(job)
            return

        if len(planned) < len(segments):
            logger.info(
                f"Job {job.job_id}: sampling segments "
                f"{[s.index for s in planned]} of {len(segments)}"
            )

        job.advance(
            JobStatus.PROCESSING,
            PROGRESS_PROCESSING_START,
            f"Analyzing content (segment 1 of {len(planned)})...",
        )
        self._publish(job)

        results = await self._process_segments(job, planned)

        job.advance(JobStatus.PROCESSING, PROGRESS_FINALIZING, "Finalizing report...")
        self._publish(job)

        report = reduce(results)
        job.complete(report)
        self._publish(job)

        logger.info(
            f"Job {job.job_id} completed: {len(report.items)} items, "
            f"{report.segments_failed}/{len(planned)} segments failed"
        )

    async def _process_segments(self, job: Job, planned: list[Segment]) -> list[SegmentResult]:
        title = Path(job.filename).stem if job.filename else None
        results: list[SegmentResult] = []

        for position, segment in enumerate(planned):
            context = PromptContext(
                document_title=title,
                segment_index=segment.index,
                segment_count=job.segments_total,
            )

            try:
                result = await self._analyze_with_retry(segment, context)
            except OracleFailure as e:
                logger.warning(f"Job {job.job_id}: segment {segment.index} failed: {e.reason}")
                result = placeholder_result(segment.index, e.reason, context.parameters)
                job.segments_failed += 1

            results.append(result)

            attempted = position + 1
            label = (
                f"Analyzing content (segment {attempted + 1} of {len(planned)})..."
                if attempted < len(planned)
                else "Generating insights..."
            )
            job.advance(JobStatus.PROCESSING, processing_progress(attempted, len(planned)), label)
            self._publish(job)

        return results

    async def _analyze_with_retry(self, segment: Segment, context: PromptContext) -> SegmentResult:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._jobs.segment_attempts),
            wait=wait_exponential(multiplier=self._jobs.retry_wait_seconds, max=30),
            retry=retry_if_exception_type(OracleFailure),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        result = await retrying(self._oracle.submit, segment.text, context)
        result.segment_index = segment.index
        return result
