"""Aggregation of segment results."""

from ebook_analyzer.aggregation.aggregator import placeholder_result, reduce

__all__ = [
    "placeholder_result",
    "reduce",
]
