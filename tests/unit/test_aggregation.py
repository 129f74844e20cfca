"""Tests for result aggregation."""

from ebook_analyzer.aggregation import placeholder_result, reduce
from ebook_analyzer.models import AnalysisItem, Parameter, SegmentResult


def _result(index: int, params: list[Parameter], summary: str = "") -> SegmentResult:
    return SegmentResult(
        segment_index=index,
        items=[AnalysisItem(parameter=p, score=5, segment_index=index) for p in params],
        summary=summary,
        prologue=f"prologue {index}",
        critique="",
    )


class TestPlaceholder:
    """Tests for failure placeholders."""

    def test_one_row_per_parameter(self):
        """A placeholder covers the whole vocabulary at score zero."""
        result = placeholder_result(2, "timed out after 120s")

        assert result.failed is True
        assert result.failure_reason == "timed out after 120s"
        assert [i.parameter for i in result.items] == list(Parameter)
        assert all(i.score == 0 for i in result.items)
        assert all(i.is_placeholder for i in result.items)

    def test_justification_names_segment(self):
        """The justification identifies the segment (1-based) and the reason."""
        result = placeholder_result(0, "malformed response")
        assert result.items[0].justification == (
            "Analysis unavailable for segment 1: malformed response"
        )

    def test_restricted_vocabulary(self):
        params = [Parameter.READABILITY, Parameter.SENTIMENT]
        result = placeholder_result(1, "x", params)
        assert len(result.items) == 2


class TestReduce:
    """Tests for reduce."""

    def test_concatenates_in_segment_order(self):
        """Items follow segment order regardless of input order."""
        results = [
            _result(6, [Parameter.SENTIMENT]),
            _result(0, [Parameter.READABILITY]),
            _result(3, [Parameter.STRUCTURE]),
        ]
        report = reduce(results)

        assert [i.segment_index for i in report.items] == [0, 3, 6]
        assert report.segments_analyzed == 3

    def test_duplicates_preserved(self):
        """The same parameter from several segments yields several rows."""
        results = [_result(i, list(Parameter)) for i in range(3)]
        report = reduce(results)

        assert report.item_count == 30
        assert sum(1 for i in report.items if i.parameter == Parameter.READABILITY) == 3

    def test_text_joined_skipping_empty(self):
        """Free-text fields are joined, empty contributions dropped."""
        results = [
            _result(0, [], summary="First part."),
            _result(1, [], summary=""),
            _result(2, [], summary="  Last part.  "),
        ]
        report = reduce(results)

        assert report.summary == "First part.\nLast part."
        assert report.critique == ""
        assert report.prologue == "prologue 0\nprologue 1\nprologue 2"

    def test_counts_failures(self):
        results = [_result(0, list(Parameter)), placeholder_result(1, "boom")]
        report = reduce(results)

        assert report.segments_failed == 1
        assert report.item_count == 20

    def test_empty_input(self):
        """No results gives an empty report."""
        report = reduce([])
        assert report.is_empty
        assert report.segments_analyzed == 0
