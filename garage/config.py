"""
Configuration settings for the Garage Service Manager.
Uses Pydantic for type-safe configuration management.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Garage Service Manager"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    base_url: str = "http://localhost:8000"

    # Database
    database_url: str = "postgresql+asyncpg://garage_user:garage_pass@db:5432/garage_db"

    # Security
    secret_key: str = "your-secret-key-change-this-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 10080  # 7 days

    # CORS
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # API
    api_v1_prefix: str = "/api/v1"

    # Mail
    mail_server: str = "smtp.gmail.com"
    mail_port: int = 587
    mail_username: str = ""
    mail_password: str = ""
    mail_from: str = "noreply@example.com"
    mail_from_name: str = "Garage Service"
    mail_starttls: bool = True
    mail_ssl_tls: bool = False
    mail_suppress_send: bool = False
    mail_timeout: float = 30  # seconds, per message
    mail_batch_size: int = 5
    mail_batch_delay: float = 2.0  # seconds between bulk batches

    # Service reminders
    reminder_enabled: bool = True
    reminder_interval_hours: float = 24
    reminder_months: int = 3

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
