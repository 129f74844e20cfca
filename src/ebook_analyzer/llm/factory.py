"""Factory function for creating LLM providers."""

from typing import Optional

from ebook_analyzer.config.models import LLMConfig, LLMProviderType
from ebook_analyzer.llm.claude import ClaudeProvider
from ebook_analyzer.llm.ollama import OllamaProvider
from ebook_analyzer.llm.protocol import LLMProvider


def create_llm_provider(
    config: Optional[LLMConfig] = None,
    provider_type: Optional[LLMProviderType] = None,
    model: Optional[str] = None,
    api_key: Optional[str] = None,
) -> LLMProvider:
    """Create an LLM provider based on configuration.

    Args:
        config: LLMConfig object with provider settings.
        provider_type: Override provider type (defaults to config or Claude).
        model: Override model name.
        api_key: Override API key (only used for Claude).

    Returns:
        LLMProvider instance.

    Raises:
        ValueError: If provider type is not supported.
    """
    if config is None:
        config = LLMConfig()

    effective_provider = provider_type or config.provider
    effective_model = model or config.model

    if effective_provider == LLMProviderType.CLAUDE:
        return ClaudeProvider(
            model=effective_model,
            timeout=config.timeout_seconds,
            api_key=api_key,
        )
    elif effective_provider == LLMProviderType.OLLAMA:
        # A Claude model name means the user only switched the provider
        if effective_model.startswith("claude"):
            effective_model = "llama3.2"
        return OllamaProvider(
            model=effective_model,
            base_url=config.ollama_base_url,
            timeout=config.timeout_seconds,
        )
    else:
        raise ValueError(f"Unsupported LLM provider: {effective_provider}")


def get_available_providers() -> list[str]:
    """Get list of available provider types."""
    return [p.value for p in LLMProviderType]
