"""
Configuration Management

Uses Pydantic Settings for environment-based configuration.
Loads from .env file automatically.
"""

from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Claude API (Required for research and content generation)
    ANTHROPIC_API_KEY: Optional[str] = None
    RESEARCH_MODEL: str = "claude-opus-4-20250514"
    CONTENT_MODEL: str = "claude-sonnet-4-20250514"
    THINKING_BUDGET: int = 10000
    MAX_OUTPUT_TOKENS: int = 16000
    LLM_MAX_RETRIES: int = 3

    # SerpAPI (Optional - enables live keyword and competitor data)
    SERPAPI_API_KEY: Optional[str] = None
    SEARCH_COUNTRY: str = "uk"
    SEARCH_LANGUAGE: str = "en"

    # Currency
    USD_TO_GBP: float = 0.79

    # Application Settings
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Rendering
    PDF_ENGINE: str = "reportlab"  # reportlab, chromium, weasyprint (classic template only)
    REFERENCE_DIR: str = "reference"

    # Storage
    STORAGE_PATH: Optional[str] = None
    PUBLIC_BASE_URL: Optional[str] = None

    # Timeouts
    API_TIMEOUT: int = 60
    GENERATION_TIMEOUT: int = 600

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra fields in .env file
        case_sensitive = False  # Allow both UPPERCASE and lowercase


@lru_cache
def get_settings() -> Settings:
    """Get or create cached settings instance."""
    return Settings()
