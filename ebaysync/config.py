"""
Configuration management.
Simple .env based config for VPS deployment.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8080

    # Database
    database_path: str = "./data/ebaysync.db"

    # Shopify (source platform)
    shopify_domain: str = "usedcameragear.myshopify.com"

    # Sync
    sync_interval_minutes: float = 5  # watch mode period, <= 0 disables
    sync_steps_module: Optional[str] = None  # e.g. "mysync.steps"

    # Pipeline
    pipeline_max_jobs: int = 200

    # Logging
    log_level: str = "INFO"


# Global settings instance
settings = Settings()
