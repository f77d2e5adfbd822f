"""Configuration management using Pydantic Settings"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Remote record store (spreadsheet behind webhook workflows)
    records_url: Optional[str] = None
    create_webhook_url: Optional[str] = None
    update_webhook_url: Optional[str] = None
    delete_webhook_url: Optional[str] = None
    status_webhook_url: Optional[str] = None
    users_url: Optional[str] = None
    report_webhook_url: Optional[str] = None

    # Auth
    admin_username: str = "admin"

    # Eligibility policy: status stamped on a freshly created purchase
    status_after_create: str = "no_apto"

    # Listing / refresh
    refresh_delay_seconds: float = 30.0
    default_page_size: int = 20

    # Service
    service_name: str = "sales-gateway"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 10.0


settings = Settings()
