"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "payments-dashboard"
    log_level: str = "INFO"

    # Node payments API
    payments_api_base: str = "http://localhost:8001"
    payments_path: str = "/api/payments"

    # HTTP Client
    http_timeout_seconds: float = 5.0

    # Payments view
    page_size: int = 10
    max_visible_pages: int = 5  # Page buttons shown in the pager
    export_page_size: int = 100  # Node caps per_page at 100

    # BTC price feed
    price_api_url: str = "https://mempool.space/api/v1/prices"
    price_cache_seconds: float = 300.0


settings = Settings()
