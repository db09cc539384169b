# competitor_email/core/config.py
from functools import lru_cache
from typing import Optional

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Runtime
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"

    # MongoDB (intelligence store)
    MONGODB_URI: str
    MONGODB_DATABASE: str = "competitor_intelligence"
    SIGNALS_COLLECTION: str = "website_signals"
    KNOWLEDGE_CHUNKS_COLLECTION: str = "knowledge_chunks"
    MONGODB_MAX_POOL_SIZE: int = 10
    MONGODB_MIN_POOL_SIZE: int = 5
    MONGODB_SERVER_SELECTION_TIMEOUT_MS: int = 5000
    MONGODB_SOCKET_TIMEOUT_MS: int = 10000

    # Anthropic
    ANTHROPIC_API_KEY: str
    ANTHROPIC_BASE_URL: Optional[str] = None
    LLM_MODEL: str = "claude-sonnet-4-5-20250929"
    LLM_TIMEOUT_SECONDS: float = 30.0

    # Request limits
    MAX_REQUEST_BODY_BYTES: int = 1024 * 1024  # 1 MB

    @field_validator("ENVIRONMENT", "LOG_LEVEL")
    @classmethod
    def normalize_case(cls, v: str, info: ValidationInfo) -> str:
        v = v.strip()
        return v.upper() if info.field_name == "LOG_LEVEL" else v.lower()

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
