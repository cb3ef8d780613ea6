"""Application settings and configuration.

This module defines all configuration options for the Huddle messaging core.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Huddle", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./huddle.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Presence: a user counts as online if seen within this window
    online_window_minutes: int = Field(default=5, alias="ONLINE_WINDOW_MINUTES")

    # Message ledger
    message_max_length: int = Field(default=10_000, alias="MESSAGE_MAX_LENGTH")
    messages_per_page: int = Field(default=50, alias="MESSAGES_PER_PAGE")
    max_page_size: int = Field(default=100, alias="MAX_PAGE_SIZE")

    # User directory
    search_per_page: int = Field(default=10, alias="SEARCH_PER_PAGE")
    search_max_per_page: int = Field(default=50, alias="SEARCH_MAX_PER_PAGE")
    search_min_query: int = Field(default=2, alias="SEARCH_MIN_QUERY")
    search_max_query: int = Field(default=255, alias="SEARCH_MAX_QUERY")
    suggestion_limit: int = Field(default=10, alias="SUGGESTION_LIMIT")
    suggestion_max_limit: int = Field(default=20, alias="SUGGESTION_MAX_LIMIT")

    # Avatars
    avatar_base_url: str = Field(default="/storage/avatars", alias="AVATAR_BASE_URL")
    gravatar_base_url: str = Field(
        default="https://www.gravatar.com/avatar",
        alias="GRAVATAR_BASE_URL",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()
