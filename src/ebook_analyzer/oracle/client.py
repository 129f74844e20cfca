"""Oracle client: one analysis call per segment with failure isolation."""

import asyncio
import logging
import time
from typing import Optional

from ebook_analyzer.errors import OracleFailure
from ebook_analyzer.llm.protocol import LLMMessage, LLMProvider
from ebook_analyzer.llm.prompts.ebook_analysis import (
    EBOOK_ANALYSIS_SYSTEM_PROMPT,
    PromptContext,
    build_segment_analysis_prompt,
)
from ebook_analyzer.llm.response_parser import parse_analysis_response
from ebook_analyzer.models.report import SegmentResult

logger = logging.getLogger("ebook_analyzer.oracle.client")


class OracleClient:
    """Wraps the LLM provider behind a fixed request/response contract.

    Every way a call can go wrong (transport error, timeout, truncated or
    malformed output, schema violation) surfaces as ``OracleFailure``. The
    client makes exactly one attempt per ``submit``.
    """

    def __init__(
        self,
        llm_provider: LLMProvider,
        max_tokens: int = 4096,
        temperature: float = 0.5,
        timeout_seconds: Optional[float] = None,
    ):
        """Initialize the oracle client.

        Args:
            llm_provider: LLM provider for analysis calls.
            max_tokens: Maximum tokens in each response.
            temperature: Sampling temperature.
            timeout_seconds: Optional wall-clock limit for a single call.
        """
        self._llm = llm_provider
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._timeout = timeout_seconds

    @property
    def model_name(self) -> str:
        """Get the name of the LLM model being used."""
        return self._llm.model_name

    async def submit(self, segment_text: str, context: PromptContext) -> SegmentResult:
        """Analyze one segment.

        Args:
            segment_text: Text of the segment.
            context: Prompt context for the segment.

        Returns:
            Parsed SegmentResult.

        Raises:
            OracleFailure: If the call fails or the response is unusable.
        """
        index = context.segment_index
        prompt = build_segment_analysis_prompt(segment_text, context)
        start_time = time.time()

        try:
            response = await asyncio.wait_for(
                self._llm.complete(
                    messages=[LLMMessage.user(prompt)],
                    system=EBOOK_ANALYSIS_SYSTEM_PROMPT,
                    max_tokens=self._max_tokens,
                    temperature=self._temperature,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            raise OracleFailure(f"timed out after {self._timeout:.0f}s", segment_index=index)
        except Exception as e:
            raise OracleFailure(f"{type(e).__name__}: {e}", segment_index=index) from e

        if response.was_truncated:
            raise OracleFailure("response truncated at max_tokens", segment_index=index)

        try:
            result = parse_analysis_response(response.content, segment_index=index)
        except ValueError as e:
            raise OracleFailure(f"malformed response: {e}", segment_index=index) from e

        result.token_usage = {
            "input_tokens": response.usage.input_tokens,
            "output_tokens": response.usage.output_tokens,
        }

        logger.debug(
            f"Segment {index} analyzed in {time.time() - start_time:.1f}s "
            f"({len(result.items)} items)"
        )
        return result
