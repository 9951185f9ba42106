"""
Configuration settings for the practice engine.

Uses Pydantic Settings for environment variable management with .env file support.
Thresholds are read once per process; call ``get_settings.cache_clear()`` after
changing the environment to pick up new values.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
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
    # Mastery Thresholds (turns taken)
    # ========================================
    mastery_turn_threshold: int = Field(
        default=5,
        ge=1,
        description="Turns at or below this count classify as mastered",
    )
    competent_turn_threshold: int = Field(
        default=10,
        ge=1,
        description="Turns at or below this count classify as competent",
    )

    # ========================================
    # Topic Strength
    # ========================================
    weak_topic_threshold: float = Field(
        default=0.6,
        ge=0.0,
        le=1.0,
        description="Topics below this strength are prioritized for review",
    )
    strong_topic_threshold: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Topics at or above this strength count as strong",
    )
    default_strength: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Starting strength for topics with no history",
    )
    strength_decay_factor: float = Field(
        default=0.2,
        ge=0.0,
        description="Exponential recency decay for history-based strength",
    )

    # ========================================
    # Semantic Topic Classifier (OpenAI-compatible)
    # ========================================
    openai_api_key: str | None = Field(
        default=None,
        description="API key for the semantic topic classifier",
    )
    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of the chat-completions API",
    )
    topic_classifier_model: str = Field(
        default="gpt-4o-mini",
        description="Model used for semantic topic classification",
    )
    topic_classifier_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for a single classification request",
    )
    classification_cache_ttl_seconds: int = Field(
        default=24 * 60 * 60,
        gt=0,
        description="How long a semantic classification stays cached",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    @model_validator(mode="after")
    def _check_threshold_order(self) -> Settings:
        if self.mastery_turn_threshold > self.competent_turn_threshold:
            raise ValueError(
                "mastery_turn_threshold must not exceed competent_turn_threshold"
            )
        if self.weak_topic_threshold > self.strong_topic_threshold:
            raise ValueError(
                "weak_topic_threshold must not exceed strong_topic_threshold"
            )
        return self

    # ========================================
    # Helper Methods
    # ========================================
    def has_semantic_classifier(self) -> bool:
        """Check if the semantic topic classifier can be used."""
        return bool(self.openai_api_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
