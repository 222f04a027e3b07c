"""Storefront service configuration."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service settings from environment variables (and `.env`)."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Local-only default. Production must provide DATABASE_URL explicitly.
    database_url: str = "sqlite+pysqlite:///.local/storefront.db"
    db_auto_create: bool = True

    # Used for redirect URLs when the request carries no Origin header.
    site_url: str = "http://localhost:8080"

    # Payment gateway: mock | stripe
    payment_gateway: str = "mock"
    stripe_secret_key: str = ""
    currency: str = "gbp"

    # Auth backend: supabase | fake (fake accepts forged tokens, dev and tests only)
    auth_provider: str = "supabase"
    supabase_url: str = ""
    supabase_service_role_key: str = ""

    # Email: log | resend
    email_provider: str = "log"
    resend_api_key: str = ""
    email_from: str = "Storefront <orders@example.com>"
    admin_emails: str = ""

    tracking_prefix: str = "TRK"
    delivery_estimate_days: int = 10

    # reject: re-read catalog prices and refuse mismatches. trust: use the cart snapshot.
    catalog_price_policy: str = "reject"

    http_timeout_seconds: float = 10.0
    log_level: str = "INFO"

    @property
    def admin_email_list(self) -> list[str]:
        return [e.strip().lower() for e in self.admin_emails.split(",") if e.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
