"""eBook Analyzer.

Splits long documents into bounded segments, scores each segment against a
fixed ten-parameter rubric with an LLM, and aggregates the partial results
into a single report. Jobs run in the background and are polled by clients
that cannot hold a connection open.
"""

__version__ = "0.1.0"

from ebook_analyzer.models.enums import JobStatus, Parameter

__all__ = [
    "__version__",
    "JobStatus",
    "Parameter",
]
