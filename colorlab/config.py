"""
Configuration management for the coloring service.
"""

from __future__ import annotations

import os
from functools import lru_cache

from dotenv import load_dotenv

from colorlab.core.constants import (
    DEFAULT_BATCH_SIZE,
    LOCAL_SEARCH_DELAY_MS,
    PUBLISH_INTERVAL_MS,
)

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Execution
    BATCH_SIZE: int = int(os.getenv("COLORLAB_BATCH_SIZE", str(DEFAULT_BATCH_SIZE)))
    PUBLISH_INTERVAL_MS: int = int(
        os.getenv("COLORLAB_PUBLISH_INTERVAL_MS", str(PUBLISH_INTERVAL_MS))
    )
    LOCAL_SEARCH_DELAY_MS: int = int(
        os.getenv("COLORLAB_LOCAL_SEARCH_DELAY_MS", str(LOCAL_SEARCH_DELAY_MS))
    )
    CHANNEL_SIZE: int = int(os.getenv("COLORLAB_CHANNEL_SIZE", "64"))

    # Logging
    LOG_LEVEL: str = os.getenv("COLORLAB_LOG_LEVEL", "INFO")

    # API settings
    API_HOST: str = os.getenv("COLORLAB_API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("COLORLAB_API_PORT", "8000"))
    CORS_ORIGINS: list[str] = [
        origin.strip()
        for origin in os.getenv("COLORLAB_CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ]

    @property
    def publish_interval(self) -> float:
        """Minimum seconds between two published snapshots."""
        return self.PUBLISH_INTERVAL_MS / 1000

    @property
    def local_search_delay(self) -> float:
        return self.LOCAL_SEARCH_DELAY_MS / 1000

    def validate(self) -> list[str]:
        """Return a list of problems with the current settings."""
        problems = []
        if self.BATCH_SIZE < 1:
            problems.append("COLORLAB_BATCH_SIZE must be >= 1")
        if self.PUBLISH_INTERVAL_MS < 0:
            problems.append("COLORLAB_PUBLISH_INTERVAL_MS must be >= 0")
        if self.CHANNEL_SIZE < 1:
            problems.append("COLORLAB_CHANNEL_SIZE must be >= 1")
        return problems


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
