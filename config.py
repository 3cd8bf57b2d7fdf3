"""
Configuration settings for the quizz practice service.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Database
    # ========================================
    database_url: str = Field(
        default="sqlite:///./quizz.db",
        description="SQLAlchemy connection string",
    )

    # ========================================
    # API
    # ========================================
    api_host: str = Field(
        default="127.0.0.1",
        description="Host the HTTP API binds to",
    )
    api_port: int = Field(
        default=8043,
        description="Port the HTTP API binds to",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    # ========================================
    # Practice Engine
    # ========================================
    practice_default_count: int = Field(
        default=10,
        ge=1,
        description="Questions served per practice batch when the caller gives no count",
    )
    practice_max_count: int = Field(
        default=50,
        ge=1,
        description="Upper bound on questions served per practice batch",
    )
    recent_attempts_window: int = Field(
        default=10,
        ge=1,
        description="Attempts per question scanned for the per-question correct run",
    )
    streak_lookback: int = Field(
        default=50,
        ge=1,
        description="Most recent answers scanned when computing the global streak",
    )
    shuffle_choices: bool = Field(
        default=True,
        description="Shuffle presented choices of multiple choice/select questions",
    )
    stats_total_approved_only: bool = Field(
        default=False,
        description="Count only approved questions in total_questions",
    )

    # ========================================
    # Bulk Import
    # ========================================
    import_max_questions: int = Field(
        default=1000,
        ge=1,
        description="Maximum questions accepted by a single import",
    )

    def get_practice_config(self) -> dict[str, Any]:
        """Get practice engine configuration as a dictionary."""
        return {
            "default_count": self.practice_default_count,
            "max_count": self.practice_max_count,
            "recent_attempts_window": self.recent_attempts_window,
            "streak_lookback": self.streak_lookback,
            "shuffle_choices": self.shuffle_choices,
            "stats_total_approved_only": self.stats_total_approved_only,
        }

    def clamp_count(self, count: int | None) -> int:
        """Clamp a requested batch size into [1, practice_max_count]."""
        if count is None:
            count = self.practice_default_count
        return max(1, min(count, self.practice_max_count))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
