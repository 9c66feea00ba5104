# core/config.py

import logging
from typing import Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Loads application settings from .env file."""
    google_api_key: Optional[str] = None
    gemini_model: str = "gemini-3-flash-preview"

    # Retry policy for remote advisory calls
    max_retries: int = 3
    retry_base_delay_ms: float = 2000.0

    # Offline store
    local_store_path: str = "agriwise_local.db"
    local_store_version: int = 3

    default_language: str = "en"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

# Create a single, reusable instance of the settings
settings = Settings()


def configure_logging(level: Optional[str] = None):
    """Applies a basic console logging setup using the configured level."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
