"""Application configuration loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite:///./ruckplan.db"

    # Single local user; identity is owned by the host app
    USER_ID: str = "local-user"

    # Enrollment policy
    MAX_ACTIVE_PROGRAMS: int = 2
    MIN_STARTING_WEIGHT: float = 10.0  # lbs
    MAX_STARTING_WEIGHT: float = 200.0  # lbs

    # Scheduling
    SCHEDULE_WINDOW_WEEKS: int = 2

    # Recommendations
    RECOMMENDATION_COOLDOWN_DAYS: int = 30
    RECOMMENDATION_LIMIT: int = 5
    FEATURED_FALLBACK_LIMIT: int = 3

    # Seed the catalog with the built-in programs on startup
    SEED_CATALOG: bool = True

    LOG_LEVEL: str = "INFO"

    # Frontend URL for CORS
    FRONTEND_URL: str = "http://localhost:5173"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
