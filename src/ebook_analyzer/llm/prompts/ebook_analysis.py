"""Prompts for eBook segment analysis."""

from typing import Optional, Sequence

from pydantic import BaseModel, Field

from ebook_analyzer.models.enums import Parameter

EBOOK_ANALYSIS_SYSTEM_PROMPT = """You are an experienced literary editor and content analyst.

You review one excerpt of a longer eBook at a time. Rate the excerpt against
every requested parameter on a scale of 1-10 and justify each score in one or
two sentences. Judge only the text you are given; do not invent content that
is not present.

Respond ONLY with a JSON object. Do not include any other text or markdown."""


class PromptContext(BaseModel):
    """Per-segment context handed to the oracle along with the text."""

    document_title: Optional[str] = None
    segment_index: int = 0
    segment_count: int = 1
    parameters: list[Parameter] = Field(default_factory=lambda: list(Parameter))

    @property
    def position_label(self) -> str:
        """Human-readable position of the segment in the document."""
        return f"excerpt {self.segment_index + 1} of {self.segment_count}"


def _format_parameters(parameters: Sequence[Parameter]) -> str:
    return "\n".join(f"{i}. {param.value}" for i, param in enumerate(parameters, 1))


def build_segment_analysis_prompt(segment_text: str, context: PromptContext) -> str:
    """Build the analysis prompt for a single segment.

    Args:
        segment_text: Text of the segment.
        context: Position and vocabulary for this call.

    Returns:
        Formatted prompt string.
    """
    title = context.document_title or "Untitled eBook"

    return f"""Analyze the following {context.position_label} of "{title}" based on these {len(context.parameters)} parameters. Rate each on a scale of 1-10 and provide justification:

{_format_parameters(context.parameters)}

## Text

{segment_text}

## Response Format

Respond with a JSON object in this format:

```json
{{
    "analysis": [
        {{"Parameter": "Readability Score", "Score": 8, "Justification": "Clear and well-structured sentences."}},
        {{"Parameter": "Content Originality & Plagiarism Detection", "Score": 7, "Justification": "Mostly original but some common phrases detected."}}
    ],
    "summary": "A concise summary of this excerpt (150-200 words)",
    "prologue": "A compelling prologue of about 100 words that captures the essence of this excerpt",
    "critique": "The main weaknesses an editor should address"
}}
```

Include exactly one entry per parameter, using the parameter names exactly as listed above."""
