"""
Configuration settings for the resident quiz core.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

import sys
from functools import lru_cache
from pathlib import Path

from loguru import logger
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONTENT_DIR = Path(__file__).parent / "data" / "questions"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RESIDENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Content
    # ========================================
    content_dir: Path = Field(
        default=DEFAULT_CONTENT_DIR,
        description="Directory holding <domain>/<tier>.json and <domain>/banks.json",
    )
    strict_templates: bool = Field(
        default=False,
        description="Raise on unknown template placeholders instead of leaving them visible",
    )

    # ========================================
    # Selection
    # ========================================
    recent_question_cap: int = Field(
        default=50,
        ge=1,
        description="Maximum number of recently used question IDs tracked for anti-repetition",
    )
    default_mastery_percentage: float = Field(
        default=50.0,
        ge=0,
        le=100,
        description="Mastery percentage assumed when no learner mastery is known",
    )

    # ========================================
    # Mastery
    # ========================================
    connection_threshold: float = Field(
        default=0.65,
        ge=0,
        le=1,
        description="Topic-node mastery required before it can form knowledge connections",
    )
    recent_node_window: int = Field(
        default=10,
        ge=2,
        description="Number of recently answered topic nodes considered for connections",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: str = Field(
        default="INFO",
        description="Loguru level for the CLI sink",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Replace loguru's default sink with a compact stderr sink."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or get_settings().log_level).upper(),
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
