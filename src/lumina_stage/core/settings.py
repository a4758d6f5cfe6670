"""Application settings and configuration.

This module defines all configuration options for the Lumina Stage application.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    This class defines all configuration options for the Lumina Stage application.
    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Lumina Stage", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    admin_email: str | None = Field(default=None, alias="ADMIN_EMAIL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")
    password_hash_iterations: int = Field(default=120_000, alias="PASSWORD_HASH_ITERATIONS")

    # Database configuration
    database_url: str = Field(default="sqlite:///./lumina.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # JWT authentication settings
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Per-user cooldowns; administrators are exempt
    blog_cooldown_seconds: int = Field(default=600, alias="BLOG_COOLDOWN_SECONDS")
    comment_cooldown_seconds: int = Field(default=300, alias="COMMENT_COOLDOWN_SECONDS")
    edit_cooldown_seconds: int = Field(default=120, alias="EDIT_COOLDOWN_SECONDS")
    ai_cooldown_seconds: int = Field(default=60, alias="AI_COOLDOWN_SECONDS")

    # Content rules
    min_blog_words: int = Field(default=50, alias="MIN_BLOG_WORDS")
    reading_history_limit: int = Field(default=20, alias="READING_HISTORY_LIMIT")
    feed_page_size: int = Field(default=5, alias="FEED_PAGE_SIZE")
    notification_ttl_days: int = Field(default=30, alias="NOTIFICATION_TTL_DAYS")

    # Recommendation settings
    related_blogs_count: int = Field(default=3, alias="RELATED_BLOGS_COUNT")
    personalized_feed_size: int = Field(default=10, alias="PERSONALIZED_FEED_SIZE")
    feed_candidate_window_days: int = Field(default=90, alias="FEED_CANDIDATE_WINDOW_DAYS")

    # AI service (Gemini REST API)
    ai_api_key: str | None = Field(default=None, alias="GOOGLE_GEMINI_API_KEY")
    ai_light_api_key: str | None = Field(default=None, alias="GOOGLE_GEMINI_KEY_LIGHT")
    ai_embedding_api_key: str | None = Field(default=None, alias="GOOGLE_EMBEDDING_API_KEY")
    ai_model: str = Field(default="gemini-2.5-flash", alias="GOOGLE_GEMINI_MODEL")
    ai_summary_models: list[str] = Field(
        default=["gemini-2.0-flash", "gemini-flash-latest", "gemini-pro-latest"],
        alias="GOOGLE_GEMINI_SUMMARY_MODELS",
    )
    ai_embedding_model: str = Field(default="text-embedding-004", alias="GOOGLE_EMBEDDING_MODEL")
    ai_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        alias="GOOGLE_GEMINI_BASE_URL",
    )
    ai_http_timeout_seconds: float = Field(default=30.0, alias="AI_HTTP_TIMEOUT_SECONDS")

    # Content moderation
    moderation_ai_enabled: bool = Field(default=True, alias="MODERATION_AI_ENABLED")
    moderation_extra_words: list[str] = Field(
        default_factory=list,
        alias="MODERATION_EXTRA_WORDS",
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
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides.

        Returns:
            The active database URL (test database if in testing mode, otherwise production)
        """
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def moderation_api_key(self) -> str | None:
        """Key used for moderation checks; the light key is preferred."""
        return self.ai_light_api_key or self.ai_api_key

    @property
    def embedding_api_key(self) -> str | None:
        """Key used for embedding requests, falling back to the main key."""
        return self.ai_embedding_api_key or self.ai_api_key


settings = Settings()  # type: ignore[call-arg]
