"""Pydantic configuration models for the eBook Analyzer."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from ebook_analyzer.config.defaults import (
    DEFAULT_CLIENT_STATE_DB,
    DEFAULT_LLM_MODEL,
    DEFAULT_MAX_SEGMENT_CHARS,
    DEFAULT_MAX_TERMINAL_JOBS,
    DEFAULT_MAX_UPLOAD_BYTES,
    DEFAULT_SAMPLING_CEILING,
    DEFAULT_SERVER_URL,
    SUPPORTED_MIME_TYPES,
)


class LLMProviderType(str, Enum):
    """Supported LLM providers."""

    CLAUDE = "claude"
    OLLAMA = "ollama"


class LLMConfig(BaseModel):
    """LLM provider configuration."""

    provider: LLMProviderType = LLMProviderType.CLAUDE
    model: str = DEFAULT_LLM_MODEL
    max_tokens: int = Field(default=4096, ge=1, le=100000)
    temperature: float = Field(default=0.5, ge=0.0, le=1.0)
    timeout_seconds: float = Field(default=120.0, ge=1.0, le=3600.0)
    ollama_base_url: str = "http://localhost:11434"


class ChunkingConfig(BaseModel):
    """Segmentation and sampling configuration."""

    max_segment_chars: int = Field(default=DEFAULT_MAX_SEGMENT_CHARS, ge=1)
    sampling_ceiling: int = Field(default=DEFAULT_SAMPLING_CEILING, ge=1)


class JobConfig(BaseModel):
    """Server-side job handling configuration."""

    max_terminal_jobs: int = Field(default=DEFAULT_MAX_TERMINAL_JOBS, ge=1)
    segment_attempts: int = Field(default=2, ge=1, le=10)
    retry_wait_seconds: float = Field(default=1.0, ge=0.0, le=60.0)
    max_upload_bytes: int = Field(default=DEFAULT_MAX_UPLOAD_BYTES, ge=1)
    max_concurrent_jobs: int = Field(default=2, ge=1, le=50)
    supported_mime_types: list[str] = Field(default_factory=lambda: list(SUPPORTED_MIME_TYPES))


class PollerConfig(BaseModel):
    """Client-side polling configuration."""

    server_url: str = DEFAULT_SERVER_URL
    tick_interval: float = Field(default=1.5, gt=0.0)
    tick_step: int = Field(default=10, ge=1, le=100)
    estimate_cap: int = Field(default=90, ge=1, le=99)
    check_interval: float = Field(default=10.0, gt=0.0)
    grace_period: float = Field(default=30.0, ge=0.0)
    max_duration: float = Field(default=600.0, gt=0.0)
    request_timeout: float = Field(default=30.0, gt=0.0)
    state_db_path: Path = DEFAULT_CLIENT_STATE_DB


class AnalyzerConfig(BaseModel):
    """Root configuration model."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    chunking: ChunkingConfig = Field(default_factory=ChunkingConfig)
    jobs: JobConfig = Field(default_factory=JobConfig)
    poller: PollerConfig = Field(default_factory=PollerConfig)

    model_config = ConfigDict(extra="ignore")  # Ignore unknown fields in config file
