"""
DisasterAlert - Configuration Management
Centralized configuration using pydantic-settings.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Google Gemini (semantic geocoding + photo description)
    gemini_api_key: Optional[str] = None
    gemini_text_model: str = "gemini-1.5-flash"
    gemini_vision_model: str = "gemini-1.5-flash"

    # Google Geocoding API
    google_maps_api_key: Optional[str] = None

    # OpenStreetMap Nominatim (open-data fallback)
    nominatim_url: str = "https://nominatim.openstreetmap.org"
    nominatim_user_agent: str = "DisasterAlert/1.0"

    # Per-provider call budget
    provider_timeout_seconds: float = 30.0

    # Database
    database_url: str = "sqlite:///./disasteralert.db"

    # Uploaded photos
    upload_dir: str = "./uploads"
    upload_url_prefix: str = "/uploads"
    max_upload_bytes: int = 5 * 1024 * 1024

    # Nearby query
    nearby_default_radius_m: float = 5000.0
    nearby_result_limit: int = 10

    # Reported timestamps are shown at a fixed offset (IST)
    display_utc_offset_minutes: int = 330

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 3000


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
