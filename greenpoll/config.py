"""Configuration settings for GreenPoll."""

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

PACKAGE_DIR = Path(__file__).resolve().parent


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./greenpoll.db")

    # Server
    PORT: int = int(os.getenv("PORT", "3000"))
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:8080")

    # Email
    EMAIL_ADDRESS: str = os.getenv("EMAIL_ADDRESS", "")
    EMAIL_APP_PASSWORD: str = os.getenv("EMAIL_APP_PASSWORD", "")
    EMAIL_SENDER_NAME: str = os.getenv("EMAIL_SENDER_NAME", "GreenPoll")
    SMTP_HOST: str = os.getenv("SMTP_HOST", "smtp.gmail.com")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    EMAIL_TEMPLATE_DIR: str = os.getenv("EMAIL_TEMPLATE_DIR", str(PACKAGE_DIR / "templates" / "emails"))

    # Credentials
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Sessions
    MAX_USER_SESSIONS: int = int(os.getenv("MAX_USER_SESSIONS", "4"))
    SESSION_EXPIRE_DAYS: int = int(os.getenv("SESSION_EXPIRE_DAYS", "30"))
    COOKIE_SECURE: bool = os.getenv("COOKIE_SECURE", "true").lower() == "true"

    # One-time tokens and pruning
    VERIFICATION_EXPIRE_MINUTES: int = int(os.getenv("VERIFICATION_EXPIRE_MINUTES", "60"))
    PASSWORD_RESET_EXPIRE_MINUTES: int = int(os.getenv("PASSWORD_RESET_EXPIRE_MINUTES", "60"))
    UNVERIFIED_USER_RETENTION_MINUTES: int = int(os.getenv("UNVERIFIED_USER_RETENTION_MINUTES", "60"))
    PRUNE_INTERVAL_SECONDS: int = int(os.getenv("PRUNE_INTERVAL_SECONDS", "300"))

    # Application
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    @property
    def email_configured(self) -> bool:
        return bool(self.EMAIL_ADDRESS and self.EMAIL_APP_PASSWORD)

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        errors = []
        if not self.email_configured:
            errors.append("EMAIL_ADDRESS/EMAIL_APP_PASSWORD not set - emails will be logged instead of sent")
        if self.UNVERIFIED_USER_RETENTION_MINUTES < self.VERIFICATION_EXPIRE_MINUTES:
            errors.append("UNVERIFIED_USER_RETENTION_MINUTES is shorter than VERIFICATION_EXPIRE_MINUTES")
        if not self.COOKIE_SECURE and self.APP_ENV == "production":
            errors.append("COOKIE_SECURE is disabled in production")
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
