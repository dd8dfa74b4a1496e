"""
Configuration settings for the LLM orchestration core.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    
    # === Application ===
    APP_NAME: str = "LLM Orchestration Core"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"
    
    # === Provider Selection ===
    LLM_PROVIDER: Literal["openai", "gemini"] = "openai"
    LLM_TIMEOUT: float = 120.0  # seconds, per model call
    
    # === OpenAI ===
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o"
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    
    # === Gemini ===
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    
    # === Response Cache ===
    LLM_CACHE_ENABLED: bool = True
    LLM_CACHE_TTL: int = 3_600_000  # milliseconds
    LLM_CACHE_SIZE: int = 1000
    
    # === Retry & Regeneration ===
    RETRY_TEMPERATURE_STEP: float = 0.3
    RETRY_TEMPERATURE_CAP: float = 1.0
    INSTRUCTION_MAX_ATTEMPTS: int = 3
    EXECUTION_MAX_ATTEMPTS: int = 8
    EXTRACTION_MAX_ATTEMPTS: int = 5


# Global settings instance
settings = Settings()
