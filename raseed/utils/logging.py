"""
Logging utilities for the Raseed pipeline workers.

Provides standardized logger configuration following privacy rules.

RULES:
- NEVER log raw receipt images or binary data
- NEVER log full model output at INFO (truncate it, ERROR only)
- NEVER log Supabase keys, Google API keys, or broker credentials
- Keep monetary amounts at DEBUG

Acceptable logging:
- High-level events (e.g., "Processing receipt r1 for user u1")
- Non-sensitive metadata (e.g., "intent=shopping_list")
- Error classes and sanitized error messages
"""

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a configured logger for the specified module.

    Args:
        name: Module name (typically __name__)
        level: Optional logging level (defaults to INFO)

    Returns:
        Configured logger instance

    Usage:
        >>> from raseed.utils.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("High-level event occurred")
    """
    logger = logging.getLogger(name)

    if level is None:
        level = logging.INFO

    logger.setLevel(level)

    # Add handler if not already configured (avoid duplicate handlers)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt=LOG_FORMAT,
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        # Own handler attached; don't print twice through the root logger
        logger.propagate = False

    return logger


def truncate_for_log(text: str, limit: int = 500) -> str:
    """Shorten free text (model output, payloads) before it reaches a log line."""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}... [{len(text) - limit} more chars]"
