"""
app/core/config.py

Centralised configuration loaded from environment variables.
Use a .env file locally; the deployment injects these at runtime.

The bot-challenge keys and the backend credentials have no defaults:
constructing ``Settings`` without them raises at import time, so a
misconfigured process fails on start-up instead of on first use.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ── Application ────────────────────────────────────────────────────────────
    app_name: str = "PDF Submission Form API"
    app_version: str = "1.0.0"
    debug: bool = False

    # ── Bot challenge (reCAPTCHA) ──────────────────────────────────────────────
    recaptcha_site_key: str = Field(min_length=1)
    recaptcha_secret: str = Field(min_length=1)
    recaptcha_verify_url: str = "https://www.google.com/recaptcha/api/siteverify"
    # When set, tokens are checked through a remote relay instead of in-process.
    recaptcha_relay_url: Optional[str] = None

    # ── Managed backend (Supabase) ─────────────────────────────────────────────
    supabase_url: str = Field(min_length=1)
    supabase_key: str = Field(min_length=1)
    storage_bucket: str = "agreements"
    storage_cache_control: int = 3600   # seconds
    submissions_table: str = "form_submissions"

    # ── Outbound calls ─────────────────────────────────────────────────────────
    ip_lookup_url: Optional[str] = None
    webhook_url: Optional[str] = None
    http_timeout: float = 30.0          # seconds, per request

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


# Single shared instance — import this everywhere.
settings = Settings()
