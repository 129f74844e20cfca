"""Configuration management for the eBook Analyzer."""

from ebook_analyzer.config.loader import load_config
from ebook_analyzer.config.models import (
    AnalyzerConfig,
    ChunkingConfig,
    JobConfig,
    LLMConfig,
    LLMProviderType,
    PollerConfig,
)

__all__ = [
    "AnalyzerConfig",
    "ChunkingConfig",
    "JobConfig",
    "LLMConfig",
    "LLMProviderType",
    "PollerConfig",
    "load_config",
]
