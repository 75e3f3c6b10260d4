# ABOUTME: Centralized configuration using Pydantic Settings.
# ABOUTME: Loads database, logging, validation limits and SEO settings from the environment.

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "newsdesk"
    db_user: str = "newsdesk"
    db_password: SecretStr | None = None
    db_pool_size: int = 5
    db_pool_max_overflow: int = 10

    @property
    def database_url(self) -> str:
        """Build async PostgreSQL connection URL."""
        password = self.db_password.get_secret_value() if self.db_password else ""
        return f"postgresql+asyncpg://{self.db_user}:{password}@{self.db_host}:{self.db_port}/{self.db_name}"

    # Submission limits
    title_max_chars: int = 50
    subtitle_max_chars: int = 50
    content_max_words: int = 2000
    bullet_points_max_items: int = 5
    bullet_point_max_words: int = 5
    tags_max_items: int = 10

    # Categories
    category_similarity_threshold: float = 0.9

    # Web article / SEO
    slug_max_length: int = 120
    seo_title_max_chars: int = 60
    meta_description_max_words: int = 24
    meta_description_max_chars: int = 160
    seo_publisher_name: str = "Newsdesk"
    seo_publisher_logo: str = ""
    seo_publisher_logo_width: int | None = None
    seo_publisher_logo_height: int | None = None
    app_base_url: str = ""  # Canonical origin when the tenant has no domain

    # Newsroom clock used for datelines and audit timestamps
    newsroom_timezone: str = "Asia/Kolkata"

    # External article ids
    external_id_prefix: str = "ART"

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # "console" or "json"

    # Web / API
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    auth_user_header: str = "X-Authenticated-User"  # Set by the upstream auth gateway


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded from environment variables and .env file.
    """
    return Settings()
