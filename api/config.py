"""
Application configuration using Pydantic Settings.

This module manages all configuration from environment variables.
"""

from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from services.partition_service import PartitionConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        frozen=True,
    )

    # API Configuration
    API_TITLE: str = "Sheetpager Excel Export/Import API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "REST API for paged Excel exports and template-validated imports"
    API_PREFIX: str = "/api"

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = False
    RELOAD: bool = False

    # Export Configuration
    DOWNLOAD_DIR: str = str(Path.home() / "Downloads" / "sheetpager")
    PAGE_SIZE: int = 5000
    SHEET_SIZE: int = 10000  # Must be a multiple of PAGE_SIZE
    SHEET_NAME_TEMPLATE: str = "Page {}"
    EXPORT_FILE_PREFIX: str = "export"

    # Upload Configuration
    MAX_FILE_SIZE_MB: int = 100

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "api.log"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # CORS Configuration
    CORS_ORIGINS: List[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: List[str] = ["*"]
    CORS_ALLOW_HEADERS: List[str] = ["*"]

    # Security Configuration
    API_KEY_HEADER: str = "X-API-Key"
    ENABLE_API_KEY_AUTH: bool = False  # Set to True in production

    @model_validator(mode="after")
    def check_partition_sizes(self) -> "Settings":
        if self.PAGE_SIZE <= 0 or self.SHEET_SIZE % self.PAGE_SIZE != 0:
            raise ValueError(
                f"SHEET_SIZE ({self.SHEET_SIZE}) must be a multiple of PAGE_SIZE ({self.PAGE_SIZE})"
            )
        return self

    @property
    def partition(self) -> PartitionConfig:
        return PartitionConfig(page_size=self.PAGE_SIZE, sheet_size=self.SHEET_SIZE)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once.
    """
    return Settings()


# Create global settings instance
settings = get_settings()
