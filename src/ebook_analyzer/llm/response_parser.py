"""Parse and validate LLM responses for segment analysis."""

import json
import logging
import re
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from ebook_analyzer.models.enums import Parameter
from ebook_analyzer.models.report import (
    MAX_SCORE,
    MIN_ORACLE_SCORE,
    AnalysisItem,
    SegmentResult,
)

logger = logging.getLogger("ebook_analyzer.llm.response_parser")


class RawAnalysisItem(BaseModel):
    """Raw analysis row from the LLM response."""

    parameter: str = Field(validation_alias=AliasChoices("Parameter", "parameter"))
    score: float = Field(
        ge=MIN_ORACLE_SCORE,
        le=MAX_SCORE,
        validation_alias=AliasChoices("Score", "score"),
    )
    justification: str = Field(
        default="",
        validation_alias=AliasChoices("Justification", "justification"),
    )

    @field_validator("parameter")
    @classmethod
    def _known_parameter(cls, value: str) -> str:
        return Parameter.from_label(value).value


class RawAnalysisResponse(BaseModel):
    """Raw analysis response from the LLM."""

    analysis: list[RawAnalysisItem] = Field(min_length=1)
    summary: Optional[str] = None
    prologue: Optional[str] = None
    critique: Optional[str] = None


def extract_json_from_response(content: str) -> str:
    """Extract JSON from an LLM response that may contain markdown.

    Args:
        content: Raw LLM response content.

    Returns:
        Extracted JSON string.
    """
    content = content.strip()

    # Try to find JSON in code blocks
    json_block_pattern = r"```(?:json)?\s*\n?([\s\S]*?)\n?```"
    matches = re.findall(json_block_pattern, content)
    if matches:
        return matches[0].strip()

    # Otherwise take the first complete object or array
    decoder = json.JSONDecoder()
    for match in re.finditer(r"[{\[]", content):
        start = match.start()
        try:
            _, end = decoder.raw_decode(content, start)
        except json.JSONDecodeError:
            continue
        return content[start:end]

    return content


def _normalize_payload(data: Any) -> dict:
    """Accept either ``{"analysis": [...], ...}`` or a bare list of rows."""
    if isinstance(data, list):
        return {"analysis": data}
    if isinstance(data, dict):
        return data
    raise ValueError(f"Expected a JSON object or array, got {type(data).__name__}")


def parse_analysis_response(content: str, segment_index: int) -> SegmentResult:
    """Parse an LLM analysis response into a SegmentResult.

    The response is accepted or rejected as a whole.

    Args:
        content: Raw LLM response content.
        segment_index: Index of the analyzed segment.

    Returns:
        Parsed SegmentResult.

    Raises:
        ValueError: If response cannot be parsed or fails validation.
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        try:
            data = json.loads(extract_json_from_response(content))
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse JSON: {e}")
            logger.debug(f"Content was: {content[:500]}")
            raise ValueError(f"Invalid JSON in LLM response: {e}")

    try:
        raw = RawAnalysisResponse.model_validate(_normalize_payload(data))
    except ValidationError as e:
        logger.error(f"Failed to validate response structure: {e}")
        raise ValueError(f"Invalid response structure: {e}")

    items = [
        AnalysisItem(
            parameter=Parameter(raw_item.parameter),
            score=raw_item.score,
            justification=raw_item.justification.strip(),
            segment_index=segment_index,
        )
        for raw_item in raw.analysis
    ]

    return SegmentResult(
        segment_index=segment_index,
        items=items,
        summary=(raw.summary or "").strip(),
        prologue=(raw.prologue or "").strip(),
        critique=(raw.critique or "").strip(),
    )
