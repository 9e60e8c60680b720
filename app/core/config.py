# Defines application-wide settings using pydantic-settings
# Manages environment variables for various aspects of the application:
# API configuration (version, project name)
# Database connection and busy timeout
# Session cookie and lifetime
# Feed paging and content limits


from typing import List

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

class Settings(BaseSettings):
    # API configuration
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Forum API"
    VERSION: str = "0.1.0"

    # Database
    DATABASE_URL: str = "sqlite:///./forum.db"
    DB_BUSY_TIMEOUT_SECONDS: float = 5.0

    # Sessions
    SESSION_COOKIE_NAME: str = "session_id"
    SESSION_TTL_HOURS: int = 24
    SESSION_COOKIE_SECURE: bool = False
    SESSION_CLEANUP_INTERVAL_SECONDS: int = 60 * 60

    # Feed paging
    FEED_DEFAULT_LIMIT: int = 10
    FEED_MAX_LIMIT: int = 50

    # Content limits
    TITLE_MAX_LENGTH: int = 200
    CONTENT_MAX_LENGTH: int = 10000
    COMMENT_MAX_LENGTH: int = 2000

    DEFAULT_AVATAR_URL: str = "/static/default-avatar.png"

    # CORS, comma separated
    BACKEND_CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8080"

    # Development settings - set these differently in production
    DEBUG: bool = False
    ENVIRONMENT: str = "production"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @field_validator("DATABASE_URL")
    @classmethod
    def require_database_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DATABASE_URL environment variable is required")
        return v.strip()

    @field_validator("FEED_DEFAULT_LIMIT", "FEED_MAX_LIMIT")
    @classmethod
    def positive_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("feed limits must be positive")
        return v

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.BACKEND_CORS_ORIGINS.split(",") if origin.strip()]

# Create settings instance
settings = Settings()
