"""
Application configuration using pydantic-settings.
Loads from environment variables with .env file support.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./progression.db"

    # OpenAI (diagnostic generation and answer grading)
    openai_api_key: str = ""
    diagnostic_model: str = "gpt-4o-mini"
    grading_model: str = "gpt-4o-mini"

    # Prerequisite gate
    weak_prerequisite_threshold: float = 60.0  # mastery % below this is weak
    diagnostic_pass_rate: float = 0.70
    max_diagnostic_questions: int = 5
    # What a grading payload without a confidence field counts as.
    # Only set to "high" if the grader guarantees that default.
    missing_confidence_default: Literal["high", "uncertain"] = "uncertain"

    # Application
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR

    # API Settings
    api_v1_prefix: str = "/api/v1"
    project_name: str = "Adaptive Progression Engine"
    version: str = "1.0.0"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
