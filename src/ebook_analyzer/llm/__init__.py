"""LLM provider abstraction and implementations."""

from ebook_analyzer.llm.claude import ClaudeProvider
from ebook_analyzer.llm.factory import create_llm_provider
from ebook_analyzer.llm.ollama import OllamaProvider
from ebook_analyzer.llm.protocol import LLMMessage, LLMProvider, LLMResponse

__all__ = [
    "ClaudeProvider",
    "LLMMessage",
    "LLMProvider",
    "LLMResponse",
    "OllamaProvider",
    "create_llm_provider",
]
