# src/hottakes/core/settings.py
"""Application settings and configuration.

This module defines all configuration options for the Hot Takes service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Hot Takes", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite+aiosqlite:///./hottakes.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    auto_create_tables: bool = Field(default=True, alias="AUTO_CREATE_TABLES")

    # Tokens issued by the hosted identity provider
    jwt_secret: str = Field(alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_audience: str | None = Field(default="authenticated", alias="JWT_AUDIENCE")

    # Profile picture storage
    media_root: str = Field(default="./media", alias="MEDIA_ROOT")
    media_url_prefix: str = Field(default="/media", alias="MEDIA_URL_PREFIX")
    profile_picture_bucket: str = Field(default="DPs", alias="PROFILE_PICTURE_BUCKET")
    profile_picture_max_bytes: int = Field(
        default=5 * 1024 * 1024,
        alias="PROFILE_PICTURE_MAX_BYTES",
    )
    profile_picture_types: list[str] = Field(
        default=["image/jpeg", "image/png", "image/gif", "image/webp"],
        alias="PROFILE_PICTURE_TYPES",
    )
    display_name_max_length: int = Field(default=100, alias="DISPLAY_NAME_MAX_LENGTH")

    # News filler entries
    news_enabled: bool = Field(default=True, alias="NEWS_ENABLED")
    news_feed_url: str = Field(
        default=(
            "https://api.rss2json.com/v1/api.json"
            "?rss_url=https://feeds.bbci.co.uk/news/rss.xml"
        ),
        alias="NEWS_FEED_URL",
    )
    news_item_limit: int = Field(default=3, alias="NEWS_ITEM_LIMIT")
    news_timeout_seconds: float = Field(default=10.0, alias="NEWS_TIMEOUT_SECONDS")
    news_description_length: int = Field(default=120, alias="NEWS_DESCRIPTION_LENGTH")

    # Feed composition and submission throttling
    feed_filler_every: int = Field(default=3, alias="FEED_FILLER_EVERY")
    feed_default_limit: int | None = Field(default=None, alias="FEED_DEFAULT_LIMIT")
    submission_min_interval_seconds: float = Field(
        default=1.0,
        alias="SUBMISSION_MIN_INTERVAL_SECONDS",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )


settings = Settings()  # type: ignore[call-arg]
