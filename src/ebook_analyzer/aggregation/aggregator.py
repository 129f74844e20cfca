"""Fold per-segment results into a single report."""

import logging
from typing import Iterable, Optional, Sequence

from ebook_analyzer.models.enums import Parameter
from ebook_analyzer.models.report import (
    PLACEHOLDER_SCORE,
    AnalysisItem,
    Report,
    SegmentResult,
)

logger = logging.getLogger("ebook_analyzer.aggregation.aggregator")

TEXT_BOUNDARY = "\n"


def placeholder_result(
    segment_index: int,
    reason: str,
    parameters: Optional[Sequence[Parameter]] = None,
) -> SegmentResult:
    """Build the contribution recorded for a segment whose analysis failed.

    One zero-score row per parameter keeps the report's row count
    proportional to the number of planned segments.

    Args:
        segment_index: Index of the failed segment.
        reason: Failure reason from the oracle client.
        parameters: Vocabulary to cover (defaults to every parameter).

    Returns:
        SegmentResult flagged as failed.
    """
    params = list(parameters) if parameters else list(Parameter)
    justification = f"Analysis unavailable for segment {segment_index + 1}: {reason}"

    return SegmentResult(
        segment_index=segment_index,
        items=[
            AnalysisItem(
                parameter=param,
                score=PLACEHOLDER_SCORE,
                justification=justification,
                segment_index=segment_index,
                is_placeholder=True,
            )
            for param in params
        ],
        failed=True,
        failure_reason=reason,
    )


def _join_text(parts: Iterable[str]) -> str:
    return TEXT_BOUNDARY.join(part.strip() for part in parts if part and part.strip()).strip()


def reduce(results: Sequence[SegmentResult]) -> Report:
    """Merge segment results into one report.

    Results are ordered by segment index first, so the outcome does not
    depend on the order responses arrived in. Rows are concatenated without
    merging duplicate parameters.

    Args:
        results: One result (or placeholder) per planned segment.

    Returns:
        The aggregated Report.
    """
    ordered = sorted(results, key=lambda r: r.segment_index)

    items: list[AnalysisItem] = []
    for result in ordered:
        items.extend(result.items)

    report = Report(
        items=items,
        summary=_join_text(r.summary for r in ordered),
        prologue=_join_text(r.prologue for r in ordered),
        critique=_join_text(r.critique for r in ordered),
        segments_analyzed=len(ordered),
        segments_failed=sum(1 for r in ordered if r.failed),
    )

    logger.debug(
        f"Aggregated {len(ordered)} segments into {len(items)} items "
        f"({report.segments_failed} placeholders)"
    )
    return report
