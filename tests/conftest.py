"""Pytest configuration and fixtures."""

import json
from typing import Callable, Optional

import pytest

from ebook_analyzer.errors import OracleFailure
from ebook_analyzer.llm.prompts.ebook_analysis import PromptContext
from ebook_analyzer.models.enums import Parameter
from ebook_analyzer.models.report import AnalysisItem, SegmentResult


def build_analysis_json(
    score: float = 7,
    parameters: Optional[list[Parameter]] = None,
    summary: str = "A short summary.",
    prologue: str = "A short prologue.",
    critique: str = "Pacing drags in places.",
) -> str:
    """Render an oracle response in the shape the prompt asks for."""
    params = parameters if parameters is not None else list(Parameter)
    return json.dumps(
        {
            "analysis": [
                {"Parameter": p.value, "Score": score, "Justification": f"{p.value} is fine."}
                for p in params
            ],
            "summary": summary,
            "prologue": prologue,
            "critique": critique,
        }
    )


class FakeOracle:
    """Scripted stand-in for OracleClient.

    Segments listed in ``fail_indices`` fail on every attempt; segments in
    ``flaky_indices`` fail once and then succeed.
    """

    def __init__(
        self,
        fail_indices: Optional[set[int]] = None,
        flaky_indices: Optional[set[int]] = None,
        items_per_segment: int = len(Parameter),
    ):
        self.fail_indices = fail_indices or set()
        self.flaky_indices = set(flaky_indices or set())
        self.items_per_segment = items_per_segment
        self.calls: list[int] = []

    async def submit(self, segment_text: str, context: PromptContext) -> SegmentResult:
        index = context.segment_index
        self.calls.append(index)

        if index in self.fail_indices:
            raise OracleFailure("scripted failure", segment_index=index)
        if index in self.flaky_indices:
            self.flaky_indices.discard(index)
            raise OracleFailure("transient failure", segment_index=index)

        params = list(Parameter)[: self.items_per_segment]
        return SegmentResult(
            segment_index=index,
            items=[
                AnalysisItem(
                    parameter=p,
                    score=6,
                    justification=f"segment {index}",
                    segment_index=index,
                )
                for p in params
            ],
            summary=f"Summary {index}",
            prologue=f"Prologue {index}",
            critique=f"Critique {index}",
        )


@pytest.fixture
def analysis_json() -> Callable[..., str]:
    """Factory for well-formed oracle responses."""
    return build_analysis_json


@pytest.fixture
def fake_oracle() -> FakeOracle:
    """Oracle that succeeds for every segment."""
    return FakeOracle()


@pytest.fixture
def fake_oracle_factory() -> type[FakeOracle]:
    """The FakeOracle class, for tests that script failures."""
    return FakeOracle


@pytest.fixture
def sample_text() -> str:
    """Roughly 20k characters of prose (three default-size segments)."""
    paragraph = (
        "The lighthouse keeper counted the ships each evening and wrote their "
        "names in a ledger that nobody else would ever read. "
    )
    return (paragraph * 200)[:20000]
