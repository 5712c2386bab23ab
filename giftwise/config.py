"""
GiftWise — Centralized configuration.

Loads all settings from .env and validates required keys.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (one level up from giftwise/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Datastore: "supabase" | "sqlite"
    STORE_PROVIDER: str = "supabase"

    # Supabase (only needed when STORE_PROVIDER=supabase)
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_KEY: str = ""
    SUPABASE_ANON_KEY: str = ""

    # SQLite (only needed when STORE_PROVIDER=sqlite)
    DATABASE_PATH: str = "data/giftwise.db"

    # Email: Resend
    RESEND_API_KEY: str = ""
    EMAIL_FROM: str = "GiftWise SG <noreply@giftwisesg.com>"
    APP_URL: str = "https://giftwisesg.com/"

    # LLM: provider-agnostic (openai, gemini, anthropic, cohere)
    LLM_PROVIDER: str = "openai"
    LLM_MODEL: str = ""          # empty → smart default per provider
    LLM_API_KEY: str

    # Notification schedule (crontab syntax, evaluated in TIMEZONE)
    NOTIFICATION_CRON: str = "0 8 * * *"
    TIMEZONE: str = "UTC"

    # Remote call bounds
    EMAIL_TIMEOUT_SECONDS: float = 10.0
    SUGGESTION_TIMEOUT_SECONDS: float = 30.0

    # Suggestion cache
    SUGGESTION_CACHE_TTL_SECONDS: int = 3600

    # Users processed in parallel per notification pass
    DISPATCH_CONCURRENCY: int = 4

    PORT: int = 5000

    @field_validator("EMAIL_TIMEOUT_SECONDS", "SUGGESTION_TIMEOUT_SECONDS", mode="before")
    @classmethod
    def parse_seconds(cls, v: str | float) -> float:
        return float(v)

    @field_validator(
        "SUGGESTION_CACHE_TTL_SECONDS", "DISPATCH_CONCURRENCY", "PORT", mode="before",
    )
    @classmethod
    def parse_int(cls, v: str | int) -> int:
        return int(v)

    @field_validator("DISPATCH_CONCURRENCY")
    @classmethod
    def at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("DISPATCH_CONCURRENCY must be >= 1")
        return v

    @property
    def supabase_key(self) -> str:
        """Service key if set (bypasses row-level security), else the anon key."""
        return self.SUPABASE_SERVICE_KEY or self.SUPABASE_ANON_KEY


def _load_settings() -> Settings:
    """Load settings from environment, validating required keys."""
    llm_api_key = os.getenv("LLM_API_KEY", "")
    store_provider = os.getenv("STORE_PROVIDER", "supabase")

    if not llm_api_key or llm_api_key.startswith("your-"):
        print("ERROR: LLM_API_KEY is missing or not set in .env", file=sys.stderr)
        sys.exit(1)

    if store_provider.lower() == "supabase":
        if not os.getenv("SUPABASE_URL"):
            print("ERROR: SUPABASE_URL is missing or not set in .env", file=sys.stderr)
            sys.exit(1)
        if not (os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_ANON_KEY")):
            print(
                "ERROR: set SUPABASE_SERVICE_KEY (or SUPABASE_ANON_KEY) in .env",
                file=sys.stderr,
            )
            sys.exit(1)

    return Settings(
        STORE_PROVIDER=store_provider,
        SUPABASE_URL=os.getenv("SUPABASE_URL", ""),
        SUPABASE_SERVICE_KEY=os.getenv("SUPABASE_SERVICE_KEY", ""),
        SUPABASE_ANON_KEY=os.getenv("SUPABASE_ANON_KEY", ""),
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/giftwise.db"),
        RESEND_API_KEY=os.getenv("RESEND_API_KEY", ""),
        EMAIL_FROM=os.getenv("EMAIL_FROM", "GiftWise SG <noreply@giftwisesg.com>"),
        APP_URL=os.getenv("APP_URL", "https://giftwisesg.com/"),
        LLM_PROVIDER=os.getenv("LLM_PROVIDER", "openai"),
        LLM_MODEL=os.getenv("LLM_MODEL", ""),
        LLM_API_KEY=llm_api_key,
        NOTIFICATION_CRON=os.getenv("NOTIFICATION_CRON", "0 8 * * *"),
        TIMEZONE=os.getenv("TIMEZONE", "UTC"),
        EMAIL_TIMEOUT_SECONDS=os.getenv("EMAIL_TIMEOUT_SECONDS", "10"),
        SUGGESTION_TIMEOUT_SECONDS=os.getenv("SUGGESTION_TIMEOUT_SECONDS", "30"),
        SUGGESTION_CACHE_TTL_SECONDS=os.getenv("SUGGESTION_CACHE_TTL_SECONDS", "3600"),
        DISPATCH_CONCURRENCY=os.getenv("DISPATCH_CONCURRENCY", "4"),
        PORT=os.getenv("PORT", "5000"),
    )


# Singleton, imported by all other modules as:
#   from giftwise.config import settings
settings = _load_settings()
