"""Analysis result models."""

from typing import Optional

from pydantic import BaseModel, Field, computed_field

from ebook_analyzer.models.enums import Parameter

# Oracle scores live on a 1-10 scale; 0 is reserved for failure placeholders.
MIN_ORACLE_SCORE = 1.0
MAX_SCORE = 10.0
PLACEHOLDER_SCORE = 0.0


class AnalysisItem(BaseModel):
    """One row of the structured report."""

    parameter: Parameter
    score: float = Field(..., ge=PLACEHOLDER_SCORE, le=MAX_SCORE)
    justification: str = ""
    segment_index: int = 0
    is_placeholder: bool = False


class SegmentResult(BaseModel):
    """Structured contribution of a single segment (or its failure placeholder)."""

    segment_index: int
    items: list[AnalysisItem] = Field(default_factory=list)
    summary: str = ""
    prologue: str = ""
    critique: str = ""

    # Failure marker
    failed: bool = False
    failure_reason: Optional[str] = None

    token_usage: Optional[dict] = None


class Report(BaseModel):
    """Terminal aggregate of all segment contributions."""

    items: list[AnalysisItem] = Field(default_factory=list)
    summary: str = ""
    prologue: str = ""
    critique: str = ""
    segments_analyzed: int = 0
    segments_failed: int = 0

    @computed_field
    @property
    def item_count(self) -> int:
        """Number of analysis rows."""
        return len(self.items)

    @property
    def is_empty(self) -> bool:
        """Whether no segment contributed anything."""
        return not self.items and not (self.summary or self.prologue or self.critique)

    def average_scores(self, include_placeholders: bool = False) -> dict[Parameter, float]:
        """Average score per parameter, in first-seen order.

        Duplicates are kept in ``items``; this reduction is offered for
        presentation code only.

        Args:
            include_placeholders: Whether zero-score failure rows count.

        Returns:
            Mapping of parameter to mean score, rounded to two decimals.
        """
        totals: dict[Parameter, list[float]] = {}
        for item in self.items:
            if item.is_placeholder and not include_placeholders:
                continue
            totals.setdefault(item.parameter, []).append(item.score)

        return {
            param: round(sum(scores) / len(scores), 2)
            for param, scores in totals.items()
        }
