"""
Centralized configuration for the Gatehouse backend.

All settings are loaded from environment variables (prefixed GATEHOUSE_)
with sensible defaults. Settings are grouped by concern below.
"""

from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GATEHOUSE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Gatehouse API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Principal storage
    store_backend: Literal["supabase", "memory"] = "supabase"
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_db_url: str = ""  # direct Postgres URI, migrations only

    # Tokens
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "gatehouse"
    session_token_ttl_minutes: int = 60 * 24
    pending_token_ttl_minutes: int = 10

    # One-time codes and audit
    otp_ttl_minutes: int = 10
    login_history_limit: int = 20
    max_page_size: int = 100

    # Outbound email
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_sender: str = "no-reply@gatehouse.local"
    smtp_starttls: bool = True
    smtp_timeout_seconds: float = 10.0

    # Roles allowed to manage principals
    management_roles: list[str] = ["admin"]


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
