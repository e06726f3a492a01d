"""
Runtime configuration helpers for the SchoolConnect service.

Loads DATABASE_URL and the other variables from the environment, falling back
to the .env file located in the project root.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root
BASE_DIR = Path(__file__).resolve().parents[1]

# Absolute path to .env
ENV_PATH = BASE_DIR / ".env"

# Load .env defaults without overriding environment variables provided by the platform
load_dotenv(dotenv_path=ENV_PATH, override=False)


class Settings(BaseSettings):
    database_url: str = Field(default="sqlite+pysqlite:///./schoolconnect.db", alias="DATABASE_URL")

    app_name: str = Field(default="SchoolConnect", alias="APP_NAME")
    api_version: str = Field(default="0.1.0", alias="API_VERSION")
    contact_domain: str = Field(default="schoolconnect.app", alias="CONTACT_DOMAIN")

    # Comma separated handles that receive the admin role when they register
    admin_usernames: str = Field(default="", alias="ADMIN_USERNAMES")

    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_expires_minutes: int = Field(default=1440, alias="JWT_EXPIRES_MINUTES")

    poll_interval_seconds: float = Field(default=3.0, alias="POLL_INTERVAL_SECONDS")
    preview_length: int = Field(default=50, alias="PREVIEW_LENGTH")
    strict_status_transitions: bool = Field(default=False, alias="STRICT_STATUS_TRANSITIONS")

    cors_origins: str | None = Field(default=None, alias="CORS_ORIGINS")

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def admin_handles(self) -> set[str]:
        return {name.strip() for name in self.admin_usernames.split(",") if name.strip()}


@lru_cache()
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
