# app/core/config.py
"""
Application configuration using Pydantic Settings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
import json
from pydantic import field_validator


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables
    """

    # Application
    APP_NAME: str = "Lawdesk"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Storage
    DATABASE_URL: str = "sqlite:///./lawdesk.db"
    # Separate database for the session token; blank keeps it in DATABASE_URL
    SECURE_STORE_URL: str = ""
    SECURE_STORE_ENABLED: bool = True

    # Session tokens
    JWT_SECRET_KEY: str = "change-me-in-production-lawdesk-signing-key"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours

    # Demo directory
    DEMO_USER_PASSWORD: str = "password123"
    BIOMETRIC_DEMO_USER_EMAIL: str = "ali.khan@lawfirm.pk"
    BIOMETRIC_PROMPT: str = "Authenticate to access your law practice"

    # Hearing reminders
    REMINDERS_ENABLED: bool = True
    REMINDER_HOUR: int = 9

    # CORS
    CORS_ORIGINS: str = '["http://localhost:3000"]'

    @field_validator("JWT_SECRET_KEY", "DEMO_USER_PASSWORD", mode="before")
    @classmethod
    def strip_secret(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("REMINDER_HOUR")
    @classmethod
    def check_reminder_hour(cls, v: int) -> int:
        if not 0 <= v <= 23:
            raise ValueError("REMINDER_HOUR must be between 0 and 23")
        return v

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from string to list"""
        try:
            return json.loads(self.CORS_ORIGINS)
        except json.JSONDecodeError:
            return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def secure_store_url(self) -> str:
        return (self.SECURE_STORE_URL or "").strip() or self.DATABASE_URL


# Create settings instance
settings = Settings()
