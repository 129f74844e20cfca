"""Claude/Anthropic LLM provider implementation."""

import logging
from typing import Optional

from anthropic import AsyncAnthropic

from ebook_analyzer.llm.protocol import LLMMessage, LLMResponse, LLMUsage

logger = logging.getLogger("ebook_analyzer.llm.claude")


class ClaudeProvider:
    """Claude/Anthropic implementation of the LLM provider protocol."""

    def __init__(
        self,
        model: str = "claude-sonnet-4-20250514",
        timeout: float = 120.0,
        api_key: Optional[str] = None,
    ):
        """Initialize the Claude provider.

        Args:
            model: Claude model ID to use.
            timeout: Per-request timeout in seconds.
            api_key: Anthropic API key (defaults to ANTHROPIC_API_KEY env var).
        """
        # The SDK retries by default; retry policy belongs to the orchestrator.
        self._client = AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)
        self._model = model

    @property
    def model_name(self) -> str:
        """Return the model identifier."""
        return self._model

    async def complete(
        self,
        messages: list[LLMMessage],
        system: Optional[str] = None,
        max_tokens: int = 4096,
        temperature: float = 0.0,
    ) -> LLMResponse:
        """Send messages and get a completion.

        Args:
            messages: List of conversation messages.
            system: Optional system prompt.
            max_tokens: Maximum tokens in response.
            temperature: Sampling temperature.

        Returns:
            LLMResponse with the completion.
        """
        anthropic_messages = [
            {"role": msg.role, "content": msg.content}
            for msg in messages
            if msg.role != "system"  # System messages handled separately
        ]

        kwargs = {
            "model": self._model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": anthropic_messages,
        }

        if system:
            kwargs["system"] = system

        response = await self._client.messages.create(**kwargs)

        content = ""
        for block in response.content:
            if hasattr(block, "text"):
                content += block.text

        logger.debug(
            f"Claude returned {len(content)} chars "
            f"({response.usage.input_tokens} in / {response.usage.output_tokens} out)"
        )

        return LLMResponse(
            content=content,
            model=response.model,
            usage=LLMUsage(
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
            ),
            stop_reason=response.stop_reason,
        )
