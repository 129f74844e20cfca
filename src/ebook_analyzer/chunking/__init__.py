"""Text segmentation."""

from ebook_analyzer.chunking.chunker import count_segments, split

__all__ = [
    "count_segments",
    "split",
]
