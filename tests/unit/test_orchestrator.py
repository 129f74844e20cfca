"""Tests for the job orchestrator."""

import asyncio

import pytest

from ebook_analyzer.config.models import ChunkingConfig, JobConfig
from ebook_analyzer.errors import ExtractionError, ValidationError
from ebook_analyzer.jobs import JobOrchestrator, JobStore, select_representative
from ebook_analyzer.jobs.orchestrator import processing_progress
from ebook_analyzer.models import JobStatus, Parameter
from ebook_analyzer.models.segment import Segment

FAST_JOBS = JobConfig(retry_wait_seconds=0)


class RecordingStore(JobStore):
    """JobStore that remembers every published snapshot."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.history: list[tuple[JobStatus, int]] = []

    def put(self, job):
        self.history.append((job.status, job.progress_percent))
        super().put(job)


def _segments(count: int) -> list[Segment]:
    return [Segment(index=i, text="x", start=i, end=i + 1) for i in range(count)]


class TestSelectRepresentative:
    """Tests for segment sampling."""

    @pytest.mark.parametrize("count", [0, 1, 2, 3])
    def test_at_or_below_ceiling_keeps_all(self, count):
        planned = select_representative(_segments(count), ceiling=3)
        assert [s.index for s in planned] == list(range(count))

    def test_above_ceiling_first_middle_last(self):
        planned = select_representative(_segments(7), ceiling=3)
        assert [s.index for s in planned] == [0, 3, 6]

    def test_four_segments(self):
        planned = select_representative(_segments(4), ceiling=3)
        assert [s.index for s in planned] == [0, 2, 3]

    def test_small_ceiling(self):
        """A ceiling below three still samples first, middle and last."""
        planned = select_representative(_segments(5), ceiling=1)
        assert [s.index for s in planned] == [0, 2, 4]


class TestProcessingProgress:
    def test_band(self):
        assert processing_progress(0, 3) == 20
        assert processing_progress(3, 3) == 80
        assert 20 < processing_progress(1, 3) < processing_progress(2, 3) < 80


class TestJobOrchestrator:
    """Tests for JobOrchestrator."""

    def _orchestrator(self, oracle, store=None, **kwargs) -> JobOrchestrator:
        return JobOrchestrator(oracle=oracle, store=store, jobs=kwargs.pop("jobs", FAST_JOBS), **kwargs)

    def test_submit_creates_received_record(self, fake_oracle):
        """A status read right after submission sees the received state."""
        orchestrator = self._orchestrator(fake_oracle)
        job = orchestrator.submit(b"hello", "text/plain", filename="book.txt")

        record = orchestrator.store.get(job.job_id)
        assert record.status == JobStatus.RECEIVED
        assert record.progress_percent == 0
        assert record.stage_label == "Uploading file..."

    def test_publishes_to_injected_store(self, fake_oracle):
        """An empty shared store is used as given, not replaced."""
        shared = JobStore()
        orchestrator = self._orchestrator(fake_oracle, store=shared)

        job = orchestrator.submit(b"hello", "text/plain")

        assert orchestrator.store is shared
        assert shared.get(job.job_id).status == JobStatus.RECEIVED

    @pytest.mark.parametrize(
        "payload,mime",
        [
            (b"", "text/plain"),
            (b"data", "application/zip"),
            (b"data", None),
        ],
    )
    def test_invalid_submission_creates_no_record(self, fake_oracle, payload, mime):
        orchestrator = self._orchestrator(fake_oracle)

        with pytest.raises(ValidationError):
            orchestrator.submit(payload, mime)
        assert len(orchestrator.store) == 0

    def test_oversized_submission(self, fake_oracle):
        orchestrator = self._orchestrator(
            fake_oracle, jobs=JobConfig(max_upload_bytes=10, retry_wait_seconds=0)
        )
        with pytest.raises(ValidationError, match="limit"):
            orchestrator.submit(b"x" * 11, "text/plain")

    def test_mime_parameters_ignored(self, fake_oracle):
        orchestrator = self._orchestrator(fake_oracle)
        job = orchestrator.submit(b"hi", "text/plain; charset=utf-8")
        assert job.mime_type == "text/plain"

    @pytest.mark.asyncio
    async def test_three_segments_all_analyzed(self, fake_oracle, sample_text):
        """Three segments each contribute their items, in order."""
        orchestrator = self._orchestrator(fake_oracle)

        job = await orchestrator.process(sample_text.encode(), "text/plain", "lighthouse.txt")

        assert job.status == JobStatus.COMPLETED
        assert job.progress_percent == 100
        assert job.segments_total == 3
        assert job.segments_planned == 3
        assert fake_oracle.calls == [0, 1, 2]
        assert job.result.item_count == 30
        assert [i.segment_index for i in job.result.items[::10]] == [0, 1, 2]
        assert job.result.summary == "Summary 0\nSummary 1\nSummary 2"

    @pytest.mark.asyncio
    async def test_long_document_sampled(self, fake_oracle):
        """50k characters (7 segments) analyzes segments 0, 3 and 6 only."""
        orchestrator = self._orchestrator(fake_oracle)

        job = await orchestrator.process(b"w" * 50000, "text/plain")

        assert job.segments_total == 7
        assert job.segments_planned == 3
        assert fake_oracle.calls == [0, 3, 6]
        assert sorted({i.segment_index for i in job.result.items}) == [0, 3, 6]

    @pytest.mark.asyncio
    async def test_all_segments_fail_still_completes(self, fake_oracle_factory):
        """Every segment failing yields a completed job of placeholders."""
        oracle = fake_oracle_factory(fail_indices={0, 1, 2})
        orchestrator = self._orchestrator(oracle)

        job = await orchestrator.process(b"q" * 20000, "text/plain")

        assert job.status == JobStatus.COMPLETED
        assert job.result.item_count == 3 * len(Parameter)
        assert all(item.score == 0 for item in job.result.items)
        assert all(item.is_placeholder for item in job.result.items)
        assert job.segments_failed == 3
        assert job.result.segments_failed == 3

    @pytest.mark.asyncio
    async def test_partial_failure(self, fake_oracle_factory):
        oracle = fake_oracle_factory(fail_indices={1}, items_per_segment=4)
        orchestrator = self._orchestrator(oracle)

        job = await orchestrator.process(b"q" * 20000, "text/plain")

        assert job.status == JobStatus.COMPLETED
        # 4 real rows, 10 placeholder rows, 4 real rows
        assert job.result.item_count == 4 + len(Parameter) + 4
        assert job.segments_failed == 1

    @pytest.mark.asyncio
    async def test_failed_segment_retried(self, fake_oracle_factory):
        """A transient failure is retried and does not leave a placeholder."""
        oracle = fake_oracle_factory(flaky_indices={1})
        orchestrator = self._orchestrator(oracle)

        job = await orchestrator.process(b"q" * 20000, "text/plain")

        assert oracle.calls == [0, 1, 1, 2]
        assert job.segments_failed == 0
        assert not any(item.is_placeholder for item in job.result.items)

    @pytest.mark.asyncio
    async def test_attempt_limit(self, fake_oracle_factory):
        oracle = fake_oracle_factory(fail_indices={0})
        orchestrator = self._orchestrator(
            oracle, jobs=JobConfig(segment_attempts=3, retry_wait_seconds=0)
        )

        await orchestrator.process(b"short", "text/plain")

        assert oracle.calls == [0, 0, 0]

    @pytest.mark.asyncio
    async def test_empty_text_completes_with_empty_report(self, fake_oracle):
        orchestrator = self._orchestrator(fake_oracle)

        job = await orchestrator.process(b"\xef\xbb\xbf", "text/plain")

        assert job.status == JobStatus.COMPLETED
        assert job.result.is_empty
        assert fake_oracle.calls == []

    @pytest.mark.asyncio
    async def test_extraction_failure_fails_job(self, fake_oracle):
        def broken_extractor(payload, mime_type):
            raise ExtractionError("PDF has no extractable text")

        orchestrator = self._orchestrator(fake_oracle, extractor=broken_extractor)

        job = await orchestrator.process(b"%PDF-1.4", "application/pdf")

        assert job.status == JobStatus.FAILED
        assert job.error == "extraction_error"
        assert "no extractable text" in job.error_detail
        assert job.result is None
        assert fake_oracle.calls == []

    @pytest.mark.asyncio
    async def test_unexpected_error_fails_job(self, fake_oracle):
        def crashing_extractor(payload, mime_type):
            raise RuntimeError("disk on fire")

        orchestrator = self._orchestrator(fake_oracle, extractor=crashing_extractor)

        job = await orchestrator.process(b"text", "text/plain")

        assert job.status == JobStatus.FAILED
        assert job.error == "internal_error"
        assert orchestrator.store.get(job.job_id).status == JobStatus.FAILED

    @pytest.mark.asyncio
    async def test_status_and_progress_monotonic(self, fake_oracle_factory, sample_text):
        """Published snapshots never move status or progress backwards."""
        store = RecordingStore()
        oracle = fake_oracle_factory(fail_indices={2})
        orchestrator = self._orchestrator(oracle, store=store)

        await orchestrator.process(sample_text.encode(), "text/plain")

        statuses = [status for status, _ in store.history]
        progress = [pct for _, pct in store.history]
        assert [s.rank for s in statuses] == sorted(s.rank for s in statuses)
        assert progress == sorted(progress)
        assert statuses[0] == JobStatus.RECEIVED
        assert statuses[-1] == JobStatus.COMPLETED
        assert JobStatus.EXTRACTING in statuses
        assert JobStatus.PREPROCESSING in statuses
        assert (JobStatus.PROCESSING, 90) in store.history

    @pytest.mark.asyncio
    async def test_chunking_config_respected(self, fake_oracle):
        orchestrator = self._orchestrator(
            fake_oracle,
            chunking=ChunkingConfig(max_segment_chars=10, sampling_ceiling=5),
        )

        job = await orchestrator.process(b"a" * 45, "text/plain")

        assert job.segments_total == 5
        assert fake_oracle.calls == [0, 1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_start_runs_in_background(self, fake_oracle):
        orchestrator = self._orchestrator(fake_oracle)
        job = orchestrator.submit(b"hello there", "text/plain")

        task = orchestrator.start(job.job_id, b"hello there")
        assert orchestrator.store.get(job.job_id).status == JobStatus.RECEIVED

        await asyncio.wait_for(task, timeout=5)
        assert orchestrator.store.get(job.job_id).status == JobStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_concurrent_jobs_isolated(self, fake_oracle):
        orchestrator = self._orchestrator(fake_oracle)

        first, second = await asyncio.gather(
            orchestrator.process(b"a" * 100, "text/plain", "a.txt"),
            orchestrator.process(b"b" * 100, "text/plain", "b.txt"),
        )

        assert first.job_id != second.job_id
        assert first.status == second.status == JobStatus.COMPLETED
        assert len(orchestrator.store.list_terminal_by_age()) == 2
