"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (transition audit log)
    database_url: str = "sqlite:///./bookkeeping.db"

    # Hosted database (Supabase REST)
    supabase_url: str = "http://localhost:54321"
    supabase_key: str = ""

    # Service
    service_name: str = "bookkeeping-gateway"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0

    # Pending view
    default_page_size: int = 10
    partial_reconciliation: bool = False  # Reconcile succeeded items when part of a batch fails
    notification_history_size: int = 50


settings = Settings()
