"""Application configuration via environment variables."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from .env or environment."""

    DATABASE_URL: str = "sqlite:///./onboarding_portal.db"
    CORS_ORIGINS: str = "http://localhost:5173"
    LOG_LEVEL: str = "INFO"

    # Session cookie (Starlette SessionMiddleware)
    SESSION_SECRET_KEY: str = "change-me-in-production"
    SESSION_COOKIE_NAME: str = "portal_session"
    SESSION_MAX_AGE_SECONDS: int = 60 * 60 * 24 * 7
    SESSION_HTTPS_ONLY: bool = False

    BCRYPT_ROUNDS: int = 12

    UPCOMING_SIDEBAR_DEFAULT_LIMIT: int = 5
    UPCOMING_SIDEBAR_MAX_LIMIT: int = 50

    class Config:
        env_file = ".env"


settings = Settings()
