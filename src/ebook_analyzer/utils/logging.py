"""Logging configuration for the eBook analyzer."""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

QUIET_LIBRARIES = ["httpx", "anthropic", "aiosqlite", "uvicorn.access"]


def setup_logging(
    verbosity: int = 1,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """Set up logging with Rich formatting.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG, 3=DEBUG+libs).
        log_file: Optional path to log file.

    Returns:
        Configured package logger.
    """
    level_map = {
        0: logging.WARNING,
        1: logging.INFO,
        2: logging.DEBUG,
        3: logging.DEBUG,
    }
    level = level_map.get(verbosity, logging.INFO)

    logger = logging.getLogger("ebook_analyzer")
    logger.setLevel(level)
    logger.handlers.clear()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=verbosity >= 2,
        show_path=verbosity >= 2,
        rich_tracebacks=True,
        tracebacks_show_locals=verbosity >= 3,
    )
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)  # File always gets everything
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

    if verbosity < 3:
        for lib_logger in QUIET_LIBRARIES:
            logging.getLogger(lib_logger).setLevel(logging.WARNING)

    return logger


def get_logger(name: str = "ebook_analyzer") -> logging.Logger:
    """Get a logger under the package namespace.

    Args:
        name: Logger name (prefixed with "ebook_analyzer." if needed).
    """
    if not name.startswith("ebook_analyzer"):
        name = f"ebook_analyzer.{name}"
    return logging.getLogger(name)
