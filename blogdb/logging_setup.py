"""
Logging configuration for BlogDB processes.

The library itself only creates module loggers; processes that embed the
store (the demo driver, a host service) call setup_logging() once.
"""

from __future__ import annotations

import logging

import json_log_formatter

from .config import Settings


def setup_logging(settings: Settings) -> logging.Handler:
    """Configure logging based on settings.

    Args:
        settings: BlogDB settings

    Returns:
        The handler installed on the root logger
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.log_format == "json":
        formatter: logging.Formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    return handler
