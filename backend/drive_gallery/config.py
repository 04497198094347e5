"""
Application configuration using Pydantic Settings.
All environment variables are loaded here with sensible defaults.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    # Environment
    environment: str = "dev"
    log_level: str = "INFO"

    # CORS (gallery front end)
    cors_origins: List[str] = ["*"]

    # Google Drive
    drive_folder_id: Optional[str] = None  # Default folder listed by /api/images
    service_account_json: Optional[str] = None  # Raw service account JSON
    google_application_credentials: Optional[str] = None  # Path to service account JSON file
    list_page_size: int = 200  # Single page, no pagination beyond this
    stream_chunk_size: int = 1024 * 1024  # Bytes per download chunk when proxying

    # Uploads (feature flag - route is not registered unless enabled)
    enable_upload: bool = False
    upload_tmp_dir: Optional[str] = None  # Defaults to the system temp dir

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

