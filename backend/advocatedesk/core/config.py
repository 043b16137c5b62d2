# advocatedesk/core/config.py
"""
Application configuration using Pydantic Settings
"""
import json
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables
    """

    # Application
    APP_NAME: str = "AdvocateDesk"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./advocatedesk.db"
    AUTO_CREATE_TABLES: bool = True

    # Session (JWT carried in an HTTP-only cookie or a Bearer header)
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours
    SESSION_COOKIE_NAME: str = "advocatedesk_session"
    SESSION_COOKIE_SECURE: bool = False

    # AWS / S3 object store
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    AWS_REGION: str = "ap-south-1"
    S3_BUCKET_NAME: str = "advocatedesk-files"
    S3_ENDPOINT_URL: Optional[str] = None
    SIGNED_URL_TTL_SECONDS: int = 24 * 3600

    # Upload limits
    MAX_CASE_DOCUMENT_BYTES: int = 10 * 1024 * 1024
    MAX_PROFILE_IMAGE_BYTES: int = 2 * 1024 * 1024

    # Email notifications
    EMAIL_PROVIDER: str = "smtp"  # smtp | resend | dev
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_USE_TLS: bool = True
    SMTP_FROM: str = ""
    SMTP_TIMEOUT_SECONDS: float = 10.0
    RESEND_API_KEY: str = ""
    FRONTEND_URL: str = "http://localhost:3000"

    # Backups
    BACKUP_DIR: str = "backups"

    # Orphaned-file sweep
    ORPHAN_SWEEP_ENABLED: bool = False
    ORPHAN_SWEEP_MIN_AGE_DAYS: int = 30
    ORPHAN_SWEEP_INTERVAL_HOURS: int = 24

    # CORS
    CORS_ORIGINS: str = '["http://localhost:3000"]'

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("EMAIL_PROVIDER", mode="before")
    @classmethod
    def normalize_email_provider(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from string to list"""
        try:
            if isinstance(self.CORS_ORIGINS, str):
                return json.loads(self.CORS_ORIGINS)
            return self.CORS_ORIGINS
        except json.JSONDecodeError:
            return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def smtp_configured(self) -> bool:
        return bool(self.SMTP_HOST and self.SMTP_PORT and self.SMTP_USER and self.SMTP_PASSWORD)


settings = Settings()
