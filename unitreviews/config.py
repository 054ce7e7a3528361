"""
Application Configuration
Uses Pydantic Settings for environment-based configuration
"""

from enum import Enum

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    PROJECT_NAME: str = "Unit Reviews API"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = Field(default="development", pattern="^(development|testing|staging|production)$")
    API_V1_STR: str = "/api/v1"

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # CORS
    # Allow str because it can be a comma-separated string in .env
    CORS_ORIGINS: str | list[str] = Field(default=["http://localhost:4200"])

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_ECHO: bool = False

    # Arq settings
    ARQ_REDIS_URL: str = Field(default="redis://localhost:6379/1")
    ARQ_KEEP_RESULT: int = 3600  # 1 hour

    # Scheduled job locking
    JOB_LOCK_TTL_SECONDS: int = 60 * 60  # 1 hour, longest expected sweep

    # Profile images
    AVATAR_STORAGE_PATH: str = "/unitreviews/avatars"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    # Tags
    MOST_REVIEWS_THRESHOLD: int = 10

    # AI overview (Gemini)
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-1.5-flash"
    GEMINI_TEMPERATURE: float = 0.3
    GEMINI_MAX_OUTPUT_TOKENS: int = 512
    AI_OVERVIEW_MAX_REVIEW_SAMPLES: int = 15
    AI_OVERVIEW_MAX_REVIEW_TEXT_LENGTH: int = 800
    AI_OVERVIEW_MAX_SETU_SEASONS: int = 4
    AI_OVERVIEW_REGENERATION_DAYS: int = 120  # roughly every semester
    AI_OVERVIEW_SWEEP_DELAY_SECONDS: float = 0.75

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from comma-separated string"""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v


# Create global settings instance

load_dotenv()
settings = Settings()  # type: ignore[call-arg]


class UnitTag:
    """Unit tag constants"""

    MOST_REVIEWS = "most-reviews"
    CONTROVERSIAL = "controversial"
    WAM_BOOSTER = "wam-booster"

    ALL = (MOST_REVIEWS, CONTROVERSIAL, WAM_BOOSTER)
    # most-reviews is only ever set by the tag refresh
    ADMIN_ASSIGNABLE = (CONTROVERSIAL, WAM_BOOSTER)
    MAX_PER_UNIT = 2


class NotificationKind:
    """Notification kind constants"""

    LIKE = "like"


class ReactionKind(str, Enum):
    """A user's reaction to a review. Like and dislike are mutually exclusive."""

    LIKE = "like"
    DISLIKE = "dislike"
