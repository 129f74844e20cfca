"""Backend-neutral types for the model that scores eBook segments."""

from typing import Optional, Protocol, runtime_checkable

from pydantic import BaseModel, Field


class LLMMessage(BaseModel):
    """One turn sent to the scoring model."""

    role: str  # "user" or "system"
    content: str

    @classmethod
    def user(cls, content: str) -> "LLMMessage":
        return cls(role="user", content=content)

    @classmethod
    def system(cls, content: str) -> "LLMMessage":
        return cls(role="system", content=content)


class LLMUsage(BaseModel):
    """Tokens spent on one segment call, copied onto the segment result."""

    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class LLMResponse(BaseModel):
    """Raw text answer for one segment, before JSON parsing."""

    content: str
    model: str
    usage: LLMUsage = Field(default_factory=LLMUsage)
    stop_reason: Optional[str] = None

    @property
    def was_truncated(self) -> bool:
        """True when the answer hit the token limit.

        Anthropic reports ``max_tokens`` and Ollama reports ``length``. A cut
        off answer cannot hold the full analysis JSON, so the oracle client
        treats it as a failed segment.
        """
        return self.stop_reason in ("max_tokens", "length")


@runtime_checkable
class LLMProvider(Protocol):
    """A model backend the oracle client can send a segment prompt to.

    Implementations make exactly one outbound request per ``complete`` and
    raise on transport errors. Retries and placeholders for failed segments
    belong to the job orchestrator.
    """

    @property
    def model_name(self) -> str:
        """Model identifier reported by the oracle client."""
        ...

    async def complete(
        self,
        messages: list[LLMMessage],
        system: Optional[str] = None,
        max_tokens: int = 4096,
        temperature: float = 0.0,
    ) -> LLMResponse:
        """Request the analysis of one segment.

        Args:
            messages: The segment prompt (normally a single user message).
            system: Analyst instructions describing the JSON answer shape.
            max_tokens: Output budget; exceeding it marks the response truncated.
            temperature: Sampling temperature (0.0 keeps scores repeatable).

        Returns:
            The model's raw text answer with usage and stop reason.
        """
        ...
