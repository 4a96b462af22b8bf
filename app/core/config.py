"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

import logging
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "change-this-secret"


class Settings(BaseSettings):
    # App
    app_name: str = "Student Records API"
    environment: str = "development"
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "student_records"

    # JWT Auth
    jwt_secret_key: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expire_days: int = 30

    # Passwords
    bcrypt_rounds: int = 10

    # Who may log in, and whether /auth/register may create admins
    login_roles: List[str] = ["admin"]
    allow_admin_registration: bool = False

    # First admin, created on startup when email + password are set
    bootstrap_admin_name: str = "Administrator"
    bootstrap_admin_email: str = ""
    bootstrap_admin_password: str = ""

    @property
    def is_development(self) -> bool:
        return self.environment.strip().lower() == "development"

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def validate_runtime_config(settings: Settings) -> None:
    if settings.environment.lower() == "production" and settings.jwt_secret_key == DEFAULT_JWT_SECRET:
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")


def configure_logging(level: str = "INFO") -> None:
    """Install one stream handler on the root logger."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
