"""
Configuration management for PluriDesk
"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "PluriDesk"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = "sqlite:///./pluridesk.db"
    # Single owner, low concurrency; ignored for SQLite
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 5

    # Single-tenant deployment: every record is scoped to this owner
    OWNER_ID: str = "00000000-0000-0000-0000-000000000001"

    # Billing
    DEFAULT_CURRENCY: str = "USD"
    INVOICE_DUE_DAYS: int = 30
    INVOICE_NUMBER_PREFIX: str = "INV"

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()
