"""Runtime configuration (environment / .env) and logging setup."""

import logging

import structlog
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-wide settings; field aliases are the environment variable names."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # History/stats store
    database_url: str = Field(default="sqlite+aiosqlite:///./shotlab.db", alias="DATABASE_URL")

    # Environment and logging
    app_env: str = Field(default="development", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Browser origins allowed by CORS (comma-separated)
    cors_origins: str = Field(default="http://localhost:5173", alias="CORS_ORIGINS")

    # HTTP server
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")

    # Generative backend (Gemini image models + Veo video)
    gemini_api_key: str = Field(default="", alias="GEMINI_API_KEY")

    # Dispatch / retry policy
    max_retries: int = Field(default=5, ge=0, alias="MAX_RETRIES")
    retry_base_delay_seconds: float = Field(default=1.0, ge=0, alias="RETRY_BASE_DELAY_SECONDS")
    retry_jitter_seconds: float = Field(default=1.0, ge=0, alias="RETRY_JITTER_SECONDS")
    dispatch_jitter_seconds: float = Field(default=2.0, ge=0, alias="DISPATCH_JITTER_SECONDS")

    # Video long-running operation polling
    video_poll_interval_seconds: float = Field(default=5.0, gt=0, alias="VIDEO_POLL_INTERVAL_SECONDS")
    video_poll_max_attempts: int = Field(default=120, ge=1, alias="VIDEO_POLL_MAX_ATTEMPTS")
    video_download_timeout_seconds: float = Field(
        default=120.0, gt=0, alias="VIDEO_DOWNLOAD_TIMEOUT_SECONDS"
    )

    # Sampling parameters
    compositing_temperature: float = Field(default=0.2, ge=0, le=2, alias="COMPOSITING_TEMPERATURE")
    generation_temperature: float = Field(default=0.9, ge=0, le=2, alias="GENERATION_TEMPERATURE")
    top_p: float = Field(default=0.95, gt=0, le=1, alias="TOP_P")
    top_k: int = Field(default=40, ge=1, alias="TOP_K")

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_test_env(self) -> bool:
        return self.app_env in ("test", "testing")

    @model_validator(mode="after")
    def require_api_key(self) -> "Settings":
        """Refuse to start without a backend credential (skipped under test)."""
        if self.is_test_env or self.gemini_api_key:
            return self

        raise ValueError(
            "CRITICAL: Missing required environment variable:\n\n"
            "  - GEMINI_API_KEY: Create a key at https://aistudio.google.com/apikey\n\n"
            "No batch can be dispatched without it.\n"
            "Set it in your environment or .env file and restart."
        )


def configure_logging(settings: Settings) -> None:
    """Configure structlog for the current environment.

    Production renders one JSON object per line; anything else uses the console
    renderer. Events below LOG_LEVEL are dropped.
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.app_env == "production"
        else structlog.dev.ConsoleRenderer()
    )
    processors = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if settings.app_env == "production":
        processors += [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
        ]

    structlog.configure(
        processors=[*processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
