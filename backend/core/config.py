from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database (sentence store)
    DATABASE_URL: str = "sqlite+aiosqlite:///./scheduler.db"

    # Backend
    BACKEND_HOST: str = "0.0.0.0"
    BACKEND_PORT: int = 8000
    APP_DEBUG: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for production (structured JSON), False for dev (colored)
    LOG_SQL: bool = False   # Enable SQLAlchemy query logging

    # Content
    CONTENT_DIR: str = "data/content"

    # Course defaults
    DEFAULT_SENTENCES_PER_DAY: int = 10
    DEFAULT_REVIEW_PATTERN: str = "4 / 3 / 2 / 1"
    DEFAULT_PAUSE_MILLIS: int = 1000
    MAX_SENTENCES_PER_DAY: int = 100
    MAX_REPETITIONS: int = 99

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
