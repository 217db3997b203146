"""Configuration settings using Pydantic Settings."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Find .env file - look in project root
# Go up from chicpic/config/settings.py -> chicpic/config -> chicpic -> project root
_project_root = Path(__file__).parent.parent.parent
_env_file = _project_root / ".env"

# Also check current working directory as fallback
_cwd_env_file = Path.cwd() / ".env"
if not _env_file.exists() and _cwd_env_file.exists():
    _env_file = _cwd_env_file


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(_env_file) if _env_file.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="",
    )

    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "chicpic_db"
    postgres_user: str = "chicpic_user"
    postgres_password: str = "change_me_strong_password"

    @property
    def database_url(self) -> str:
        """Construct PostgreSQL async database URL."""
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Google Gemini / Veo
    # Without a key every image generation path answers with a placeholder
    google_api_key: Optional[str] = None
    gemini_image_model: str = "gemini-2.5-flash-image-preview"
    gemini_text_model: str = "gemini-2.5-flash"
    veo_model: str = "veo-3.1-generate-preview"

    # Generation loop
    generation_max_attempts: int = 3
    quota_backoff_base_seconds: float = 5.0
    quota_backoff_cap_seconds: float = 60.0

    # Video generation
    video_poll_interval_seconds: float = 10.0
    video_duration_seconds: int = 8
    video_aspect_ratio: str = "16:9"
    video_resolution: str = "720p"

    # Object storage
    storage_backend: str = "local"  # "local" ou "supabase"
    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = None
    storage_bucket: str = "chic-pic-images"
    video_bucket: str = "cicibet-storage"
    # Local backend: files written here and served under /media
    local_storage_dir: str = "outputs/media"
    public_base_url: str = "http://localhost:8000"

    # Rate Limiting
    rate_limit_per_minute: int = 100
    rate_limit_generation_per_minute: int = 20

    # CORS
    cors_origins: list[str] = ["*"]

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def has_google_api_key(self) -> bool:
        """True when a non-blank Google API key is configured."""
        return bool(self.google_api_key and self.google_api_key.strip())


# Global settings instance
settings = Settings()
