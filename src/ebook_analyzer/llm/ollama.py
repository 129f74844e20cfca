"""Ollama LLM provider implementation for local models."""

import logging
from typing import Optional

import httpx

from ebook_analyzer.llm.protocol import LLMMessage, LLMResponse, LLMUsage

logger = logging.getLogger("ebook_analyzer.llm.ollama")

# Default Ollama API endpoint
DEFAULT_OLLAMA_URL = "http://localhost:11434"

# Local inference on an 8000-character segment can be slow
DEFAULT_OLLAMA_TIMEOUT = 600.0


class OllamaProvider:
    """Ollama implementation of the LLM provider protocol.

    Models that follow JSON instructions well (qwen2.5, llama3.2) give the
    fewest malformed responses.
    """

    def __init__(
        self,
        model: str = "llama3.2",
        base_url: str = DEFAULT_OLLAMA_URL,
        timeout: float = DEFAULT_OLLAMA_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the Ollama provider.

        Args:
            model: Ollama model name (e.g., "llama3.2", "qwen2.5").
            base_url: Ollama API base URL.
            timeout: Request timeout in seconds.
            client: Optional preconfigured HTTP client.
        """
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def model_name(self) -> str:
        """Return the model identifier."""
        return f"ollama/{self._model}"

    async def complete(
        self,
        messages: list[LLMMessage],
        system: Optional[str] = None,
        max_tokens: int = 4096,
        temperature: float = 0.0,
    ) -> LLMResponse:
        """Send messages and get a completion."""
        ollama_messages = []

        if system:
            ollama_messages.append({"role": "system", "content": system})

        for msg in messages:
            if msg.role == "system" and not system:
                ollama_messages.append({"role": "system", "content": msg.content})
            elif msg.role != "system":
                ollama_messages.append({"role": msg.role, "content": msg.content})

        try:
            response = await self._client.post(
                f"{self._base_url}/api/chat",
                json={
                    "model": self._model,
                    "messages": ollama_messages,
                    "stream": False,
                    "format": "json",
                    "options": {
                        "num_predict": max_tokens,
                        "temperature": temperature,
                    },
                },
            )
            response.raise_for_status()
        except httpx.ConnectError:
            logger.error(
                f"Cannot connect to Ollama at {self._base_url}. "
                "Make sure Ollama is running: `ollama serve`"
            )
            raise
        except httpx.HTTPStatusError as e:
            logger.error(f"Ollama API error: {e.response.text}")
            raise

        data = response.json()

        return LLMResponse(
            content=data.get("message", {}).get("content", ""),
            model=self._model,
            usage=LLMUsage(
                input_tokens=data.get("prompt_eval_count", 0),
                output_tokens=data.get("eval_count", 0),
            ),
            stop_reason=data.get("done_reason", "stop"),
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
