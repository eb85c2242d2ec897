"""Logging utilities for the deduplication plugin.

Wraps the standard ``logging`` module with helpers that attach structured
keyword context, serialized as JSON, to every message.
"""
import json
import logging
from typing import Any, Optional

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

logger = logging.getLogger('nmdedup')


def configure_logging(level: str = "INFO", fmt: Optional[str] = None) -> None:
    """Apply the configured level and, optionally, format to the logger.

    Args:
        level: Logging level name (``DEBUG``, ``INFO``, ...)
        fmt: Optional format string for the root handlers
    """
    logger.setLevel(level.upper())
    if fmt:
        formatter = logging.Formatter(fmt, datefmt='%Y-%m-%d %H:%M:%S')
        for handler in logging.getLogger().handlers:
            handler.setFormatter(formatter)


def safe_json(obj: Any, max_length: int = 1000) -> str:
    """Serialize log context to JSON, truncating long output.

    Args:
        obj: Object to serialize
        max_length: Maximum length of output string

    Returns:
        JSON string
    """
    try:
        json_str = json.dumps(obj, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return "<unable to serialize>"

    if len(json_str) > max_length:
        json_str = json_str[:max_length] + "... [truncated]"
    return json_str


def log_info(message: str, **kwargs) -> None:
    """Log info message with optional context."""
    if kwargs:
        logger.info(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.info(message)


def log_warning(message: str, **kwargs) -> None:
    """Log warning message with optional context."""
    if kwargs:
        logger.warning(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.warning(message)


def log_error(message: str, **kwargs) -> None:
    """Log error message with optional context."""
    if kwargs:
        logger.error(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.error(message)


def log_debug(message: str, **kwargs) -> None:
    """Log debug message with optional context.

    Skips serialization entirely when debug output is disabled, since this
    runs once per module resolution.
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return
    if kwargs:
        logger.debug(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.debug(message)


def log_dedup_progress(stage: str, **kwargs) -> None:
    """Log progress through the table-building stages.

    Args:
        stage: Current stage of processing
        **kwargs: Additional context
    """
    log_info(f"Dedup progress: {stage}", **kwargs)
