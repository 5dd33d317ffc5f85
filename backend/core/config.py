"""
Configuration management for the Personalized Disaster Alert API.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

BACKEND_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings."""

    # Basic app settings
    DEBUG: bool = Field(default=True)
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)

    # CORS settings
    ALLOWED_ORIGINS: str = Field(
        default="http://localhost:5173,http://127.0.0.1:5173"
    )

    @field_validator('ALLOWED_ORIGINS', mode='before')
    @classmethod
    def parse_allowed_origins(cls, v):
        if isinstance(v, str):
            return v
        if isinstance(v, list):
            return ','.join(v)
        return v

    @property
    def allowed_origins_list(self) -> List[str]:
        """Get ALLOWED_ORIGINS as a list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(',')]

    # AI/LLM settings
    GEMINI_API_KEY: Optional[str] = Field(default=None)
    ANTHROPIC_API_KEY: Optional[str] = Field(default=None)
    OPENAI_API_KEY: Optional[str] = Field(default=None)
    LLM_MODEL: Optional[str] = Field(default=None)
    LLM_MAX_TOKENS: int = Field(default=2048, gt=0)
    LLM_TEMPERATURE: float = Field(default=0.7, ge=0.0, le=2.0)

    # Local logs
    LLM_LOG_DIR: str = Field(default="local_s3/llm_logs")
    ERROR_LOG_DIR: str = Field(default="logs/errors")

    # Reference data
    LOCATIONS_CONFIG_PATH: str = Field(
        default=str(BACKEND_DIR / "configs" / "locations.yml")
    )

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore"
    }


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
