"""Enumerations for the eBook Analyzer."""

from enum import Enum


class JobStatus(str, Enum):
    """Lifecycle state of an analysis job."""

    RECEIVED = "received"
    EXTRACTING = "extracting"
    PREPROCESSING = "preprocessing"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transitions are possible."""
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)

    @property
    def rank(self) -> int:
        """Position in the forward lifecycle (both terminals share the top rank)."""
        return _STATUS_RANK[self]


_STATUS_RANK = {
    JobStatus.RECEIVED: 0,
    JobStatus.EXTRACTING: 1,
    JobStatus.PREPROCESSING: 2,
    JobStatus.PROCESSING: 3,
    JobStatus.COMPLETED: 4,
    JobStatus.FAILED: 4,
}


class Parameter(str, Enum):
    """Controlled vocabulary of analysis parameters."""

    READABILITY = "Readability Score"
    ORIGINALITY = "Content Originality & Plagiarism Detection"
    SENTIMENT = "Sentiment Analysis"
    KEYWORD_DENSITY = "Keyword Density & Topic Relevance"
    WRITING_STYLE = "Writing Style & Grammar Check"
    STRUCTURE = "Structure & Formatting Quality"
    ENGAGEMENT = "Engagement & Readability Flow"
    COMPLEXITY = "Complexity & Technical Depth"
    ENTITY_RECOGNITION = "Named Entity Recognition (NER) & Topic Categorization"
    KEY_INSIGHTS = "Summary & Key Insights Generation"

    @classmethod
    def from_label(cls, label: str) -> "Parameter":
        """Resolve a parameter from its display label or enum name.

        Matching ignores case and surrounding whitespace.

        Args:
            label: Label as written by the oracle, e.g. "Readability Score".

        Returns:
            Matching Parameter.

        Raises:
            ValueError: If the label is not part of the vocabulary.
        """
        normalized = label.strip().lower()
        for param in cls:
            if normalized in (param.value.lower(), param.name.lower()):
                return param
        raise ValueError(f"Unknown analysis parameter: {label!r}")


class FailureReason(str, Enum):
    """Reasons recorded on a failed job."""

    EXTRACTION_ERROR = "extraction_error"
    INTERNAL_ERROR = "internal_error"
