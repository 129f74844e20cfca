"""Split document text into bounded-size segments."""

import math
from typing import Iterator

from ebook_analyzer.models.segment import Segment


def split(text: str, max_segment_chars: int = 8000) -> Iterator[Segment]:
    """Lazily split text into consecutive segments of at most ``max_segment_chars``.

    Cuts are made on exact character offsets, so joining the segment texts
    reproduces the input. The output depends only on the arguments; calling
    again yields the same sequence.

    Args:
        text: Source text.
        max_segment_chars: Upper bound on segment length.

    Yields:
        Segments in source order. Empty text yields nothing.

    Raises:
        ValueError: If ``max_segment_chars`` is not positive.
    """
    if max_segment_chars <= 0:
        raise ValueError(f"max_segment_chars must be positive, got {max_segment_chars}")

    return _iter_segments(text, max_segment_chars)


def _iter_segments(text: str, max_segment_chars: int) -> Iterator[Segment]:
    for index, start in enumerate(range(0, len(text), max_segment_chars)):
        end = min(start + max_segment_chars, len(text))
        yield Segment(index=index, text=text[start:end], start=start, end=end)


def count_segments(text: str, max_segment_chars: int = 8000) -> int:
    """Number of segments ``split`` would produce, without building them."""
    if max_segment_chars <= 0:
        raise ValueError(f"max_segment_chars must be positive, got {max_segment_chars}")
    return math.ceil(len(text) / max_segment_chars)
