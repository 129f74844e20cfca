"""Default configuration values for the eBook Analyzer."""

from pathlib import Path

# Default configuration file name
DEFAULT_CONFIG_FILENAME = "ebook-analyzer.config.json"

# Search paths for configuration file (in order of priority)
CONFIG_SEARCH_PATHS = [
    Path.cwd() / DEFAULT_CONFIG_FILENAME,
    Path.home() / ".config" / "ebook-analyzer" / "config.json",
]

# Default LLM model
DEFAULT_LLM_MODEL = "claude-sonnet-4-20250514"

# Chunking
DEFAULT_MAX_SEGMENT_CHARS = 8000
DEFAULT_SAMPLING_CEILING = 3

# Terminal jobs kept in memory before the oldest is evicted
DEFAULT_MAX_TERMINAL_JOBS = 10

# Uploads larger than this are rejected (50MB)
DEFAULT_MAX_UPLOAD_BYTES = 50 * 1024 * 1024

SUPPORTED_MIME_TYPES = [
    "application/pdf",
    "text/plain",
    "text/markdown",
]

# Client-side state (active job slot and known-completed set)
DEFAULT_CLIENT_STATE_DB = Path.home() / ".ebook-analyzer" / "client.db"

DEFAULT_SERVER_URL = "http://127.0.0.1:8000"
