"""Prompt templates for LLM analysis."""

from ebook_analyzer.llm.prompts.ebook_analysis import (
    EBOOK_ANALYSIS_SYSTEM_PROMPT,
    PromptContext,
    build_segment_analysis_prompt,
)

__all__ = [
    "EBOOK_ANALYSIS_SYSTEM_PROMPT",
    "PromptContext",
    "build_segment_analysis_prompt",
]
