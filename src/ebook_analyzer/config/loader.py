"""Configuration loading and merging logic."""

import json
import os
from pathlib import Path
from typing import Any, Optional

from ebook_analyzer.config.defaults import CONFIG_SEARCH_PATHS
from ebook_analyzer.config.models import AnalyzerConfig


def find_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file.

    Args:
        explicit_path: Explicitly specified config file path (from CLI).

    Returns:
        Path to config file if found, None otherwise.
    """
    if explicit_path is not None:
        if explicit_path.exists():
            return explicit_path
        raise FileNotFoundError(f"Config file not found: {explicit_path}")

    for search_path in CONFIG_SEARCH_PATHS:
        if search_path.exists():
            return search_path

    return None


def load_config_file(path: Path) -> dict[str, Any]:
    """Load configuration from a JSON file."""
    with open(path) as f:
        return json.load(f)


def merge_overrides(
    config: AnalyzerConfig,
    provider: Optional[str] = None,
    model: Optional[str] = None,
    max_segment_chars: Optional[int] = None,
    sampling_ceiling: Optional[int] = None,
    server_url: Optional[str] = None,
    grace_period: Optional[float] = None,
    max_duration: Optional[float] = None,
) -> AnalyzerConfig:
    """Merge CLI overrides into the configuration.

    CLI arguments take precedence over config file values.

    Returns:
        Configuration with overrides applied.
    """
    data = config.model_dump()

    if provider is not None:
        data["llm"]["provider"] = provider
    if model is not None:
        data["llm"]["model"] = model

    if max_segment_chars is not None:
        data["chunking"]["max_segment_chars"] = max_segment_chars
    if sampling_ceiling is not None:
        data["chunking"]["sampling_ceiling"] = sampling_ceiling

    if server_url is not None:
        data["poller"]["server_url"] = server_url
    if grace_period is not None:
        data["poller"]["grace_period"] = grace_period
    if max_duration is not None:
        data["poller"]["max_duration"] = max_duration

    return AnalyzerConfig.model_validate(data)


def load_config(
    config_path: Optional[Path] = None,
    **overrides: Any,
) -> AnalyzerConfig:
    """Load configuration with overrides.

    Configuration is loaded from the following sources (in order of priority):
    1. CLI arguments (highest priority)
    2. Environment variables
    3. Config file (if found)
    4. Default values (lowest priority)

    Args:
        config_path: Explicit config file path (from --config CLI option).
        **overrides: CLI argument overrides, see ``merge_overrides``.

    Returns:
        Merged configuration object.
    """
    config = AnalyzerConfig()

    found_config = find_config_file(config_path)
    if found_config is not None:
        config = AnalyzerConfig.model_validate(load_config_file(found_config))

    # ANTHROPIC_API_KEY is read by the Claude provider itself
    env_overrides = {
        "provider": os.environ.get("EBOOK_ANALYZER_PROVIDER"),
        "model": os.environ.get("EBOOK_ANALYZER_MODEL"),
        "server_url": os.environ.get("EBOOK_ANALYZER_SERVER_URL"),
    }
    for key, value in env_overrides.items():
        if value and overrides.get(key) is None:
            overrides[key] = value

    # None means "not given on the command line"
    overrides = {key: value for key, value in overrides.items() if value is not None}

    return merge_overrides(config, **overrides)
