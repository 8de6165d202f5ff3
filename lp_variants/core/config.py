"""Configuration and settings"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_TABLES_DIR = Path(__file__).resolve().parent.parent / "data"


class Settings(BaseSettings):
    """Application settings from environment variables (LP_VARIANTS_ prefix)"""

    model_config = SettingsConfigDict(
        env_prefix="LP_VARIANTS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # OpenAI API
    openai_api_key: str = Field(default="")
    generation_model: str = Field(default="gpt-4o")
    generation_temperature: float = Field(default=0.7, ge=0.0, le=2.0)

    # Per-call timeout for the content generation collaborator
    call_timeout_s: float = Field(default=120.0, gt=0)

    # Pipeline-level timeout for the whole generation batch; None disables it
    generation_timeout_s: Optional[float] = Field(default=None, gt=0)

    # Versioned classification/scoring tables
    tables_dir: Path = Field(default=DEFAULT_TABLES_DIR)

    # Logging
    log_level: str = Field(default="INFO")

    # Server
    host: str = Field(default="localhost")
    port: int = Field(default=8000)
    frontend_url: str = Field(default="http://localhost:5173")

    # API Configuration
    api_title: str = "Landing Page Variant API"
    api_version: str = "0.1.0"
    result_version: str = "1.0-variants"


def get_settings() -> Settings:
    """Build settings from the current environment"""
    return Settings()
