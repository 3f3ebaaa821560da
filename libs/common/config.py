from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["local", "development", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    TIMEZONE: str = "Asia/Kolkata"
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "https://playgram.app"]

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Auth
    # Default placeholder values keep local/test runs from failing when the
    # identity provider is not configured. Real deployments override via env.
    AUTH_JWT_SECRET: str = "test-jwt-secret"
    AUTH_JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_TTL_MINUTES: int = 60 * 24 * 7
    IDENTITY_ADMIN_URL: str = "http://localhost:9999"
    IDENTITY_SERVICE_KEY: str = "test-service-key"

    # Notifications
    WHATSAPP_TOKEN: str = ""
    WHATSAPP_PHONE_NUMBER_ID: str = ""
    WHATSAPP_OTP_TEMPLATE: str = "playgram_otp"
    SENDGRID_API_KEY: str = ""
    EMAIL_FROM_ADDRESS: str = "no-reply@playgram.app"
    EMAIL_FROM_NAME: str = "PlayGram"
    NOTIFICATION_TIMEOUT_SECONDS: float = 10.0
    NOTIFICATION_MAX_ATTEMPTS: int = 3
    NOTIFICATION_RETRY_BACKOFF_SECONDS: float = 0.5

    # Payment gateway
    RAZORPAY_KEY_ID: str = ""
    RAZORPAY_KEY_SECRET: str = ""
    RAZORPAY_BASE_URL: str = "https://api.razorpay.com/v1"
    PAYMENT_CURRENCY: str = "INR"

    # Storage
    SUPABASE_URL: str = "http://localhost"
    SUPABASE_SERVICE_ROLE_KEY: str = "test-service-role-key"
    SUPABASE_STORAGE_BUCKET: str = "playgram-media"

    # Rate limiting
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    RATE_LIMIT_ENABLED: bool = True

    # Business rules
    ATTENDANCE_CODE_TTL_MINUTES: int = 30
    ATTENDANCE_POINTS: int = 10
    POINTS_PER_LEVEL: int = 100
    LEADERBOARD_SIZE: int = 50
    AUDIT_LOG_LIMIT: int = 100
    OTP_TTL_MINUTES: int = 5
    PASSWORD_RESET_TTL_MINUTES: int = 30
    STORE_RESTOCK_ON_CANCEL: bool = False
    INVOICE_SKIP_EXISTING_PENDING: bool = False

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+psycopg://", 1)
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
