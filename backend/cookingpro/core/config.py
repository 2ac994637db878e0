"""
Configuration module for the CookingPro API.
Loads settings from environment variables.
"""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "info"

    # Gemini
    gemini_api_key: Optional[str] = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_text_model: str = "gemini-3-flash-preview"
    gemini_image_model: str = "gemini-2.5-flash-image"

    # Generation
    llm_temperature: float = 0.7
    llm_timeout_seconds: float = 120.0

    # Retry policy (waits are base * multiplier ** attempt)
    llm_max_attempts: int = 3
    llm_retry_base_delay: float = 1.0
    llm_retry_multiplier: float = 2.0

    # Response cache
    cache_ttl_seconds: float = 30 * 60

    # Chat sessions
    session_idle_seconds: float = 2 * 60 * 60

    @property
    def has_api_key(self) -> bool:
        return bool(self.gemini_api_key)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
