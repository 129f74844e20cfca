"""Tests for job and report models."""

import pytest

from ebook_analyzer.errors import InvalidTransitionError
from ebook_analyzer.models import AnalysisItem, Job, JobStatus, Parameter, Report


class TestParameter:
    """Tests for the parameter vocabulary."""

    def test_ten_parameters(self):
        """The vocabulary has ten entries."""
        assert len(list(Parameter)) == 10

    def test_from_label(self):
        """Labels resolve case-insensitively."""
        assert Parameter.from_label("Readability Score") is Parameter.READABILITY
        assert Parameter.from_label("  sentiment analysis ") is Parameter.SENTIMENT
        assert Parameter.from_label("key_insights") is Parameter.KEY_INSIGHTS

    def test_unknown_label(self):
        """Labels outside the vocabulary are rejected."""
        with pytest.raises(ValueError, match="Unknown analysis parameter"):
            Parameter.from_label("Humor")


class TestJobStatus:
    """Tests for JobStatus."""

    def test_terminal_states(self):
        assert JobStatus.COMPLETED.is_terminal
        assert JobStatus.FAILED.is_terminal
        assert not JobStatus.PROCESSING.is_terminal

    def test_rank_order(self):
        ranks = [
            JobStatus.RECEIVED.rank,
            JobStatus.EXTRACTING.rank,
            JobStatus.PREPROCESSING.rank,
            JobStatus.PROCESSING.rank,
            JobStatus.COMPLETED.rank,
        ]
        assert ranks == sorted(ranks)


class TestJob:
    """Tests for job lifecycle rules."""

    def test_defaults(self):
        """A new job starts received at zero progress."""
        job = Job()
        assert job.status == JobStatus.RECEIVED
        assert job.progress_percent == 0
        assert len(job.job_id) == 32
        assert job.completed_at is None

    def test_unique_ids(self):
        assert Job().job_id != Job().job_id

    def test_forward_path(self):
        """The normal path reaches completed at 100%."""
        job = Job()
        job.advance(JobStatus.EXTRACTING, 10)
        job.advance(JobStatus.PREPROCESSING, 15)
        job.advance(JobStatus.PROCESSING, 20)
        job.advance(JobStatus.PROCESSING, 50)
        job.complete(Report())

        assert job.status == JobStatus.COMPLETED
        assert job.progress_percent == 100
        assert job.result is not None
        assert job.completed_at is not None

    def test_progress_never_decreases(self):
        """A lower requested progress leaves the value unchanged."""
        job = Job()
        job.advance(JobStatus.EXTRACTING, 40)
        job.advance(JobStatus.PREPROCESSING, 15)
        assert job.progress_percent == 40

    def test_backwards_move_rejected(self):
        job = Job()
        job.advance(JobStatus.PROCESSING, 20)
        with pytest.raises(InvalidTransitionError):
            job.advance(JobStatus.EXTRACTING)

    def test_reentering_non_processing_state_rejected(self):
        job = Job()
        job.advance(JobStatus.EXTRACTING, 10)
        with pytest.raises(InvalidTransitionError):
            job.advance(JobStatus.EXTRACTING, 12)

    def test_terminal_is_final(self):
        """No transition leaves a terminal state."""
        job = Job()
        job.fail("extraction_error", "bad pdf")

        with pytest.raises(InvalidTransitionError):
            job.advance(JobStatus.PROCESSING)
        with pytest.raises(InvalidTransitionError):
            job.complete(Report())

    def test_fail_from_any_active_state(self):
        """Failure is reachable from every active state."""
        for status in (JobStatus.RECEIVED, JobStatus.EXTRACTING, JobStatus.PROCESSING):
            job = Job(status=status)
            job.fail("internal_error")
            assert job.status == JobStatus.FAILED
            assert job.result is None
            assert job.error == "internal_error"

    def test_duration(self):
        job = Job()
        job.complete(Report())
        assert job.duration_seconds is not None
        assert job.duration_seconds >= 0


class TestReport:
    """Tests for the Report model."""

    def _item(self, param: Parameter, score: float, placeholder: bool = False) -> AnalysisItem:
        return AnalysisItem(parameter=param, score=score, is_placeholder=placeholder)

    def test_item_count_serialized(self):
        """item_count is part of the serialized report."""
        report = Report(items=[self._item(Parameter.READABILITY, 8)])
        assert report.model_dump()["item_count"] == 1

    def test_empty(self):
        assert Report().is_empty
        assert not Report(summary="x").is_empty

    def test_average_scores_skips_placeholders(self):
        """Placeholders are excluded from averages by default."""
        report = Report(
            items=[
                self._item(Parameter.READABILITY, 8),
                self._item(Parameter.READABILITY, 6),
                self._item(Parameter.READABILITY, 0, placeholder=True),
            ]
        )
        assert report.average_scores() == {Parameter.READABILITY: 7.0}
        assert report.average_scores(include_placeholders=True) == {
            Parameter.READABILITY: 4.67
        }

    def test_score_bounds(self):
        """Scores outside 0-10 are rejected."""
        with pytest.raises(ValueError):
            AnalysisItem(parameter=Parameter.SENTIMENT, score=11)
