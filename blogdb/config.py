"""
Configuration for BlogDB.

Uses pydantic-settings for environment variable loading. Every setting has
a default suitable for tests and local runs.

Invariants:
    - Settings are read once, when the store is constructed
    - initial_id is never negative
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Store configuration loaded from environment."""

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_format: Literal["text", "json"] = Field(default="text", description="Log output format")

    # Identity allocation
    initial_id: int = Field(default=1, ge=0, description="First id issued for every entity kind")

    # Statistics
    stats_precision: int = Field(default=2, ge=0, description="Decimal places for stats averages")

    model_config = {"env_prefix": "BLOGDB_"}

    def log_config(self) -> None:
        """Log configuration."""
        logger.info(
            "BlogDB configuration loaded",
            extra={
                "log_level": self.log_level,
                "log_format": self.log_format,
                "initial_id": self.initial_id,
                "stats_precision": self.stats_precision,
            },
        )
