"""Shared test fixtures and configuration.

Sets up fake environment variables so giftwise.config doesn't sys.exit(),
and provides common fixtures like a temp DB and occasion builders.
"""

import os

# Patch env vars BEFORE any giftwise imports
os.environ.setdefault("LLM_API_KEY", "fake-llm-key-for-tests")
os.environ.setdefault("LLM_PROVIDER", "openai")
os.environ.setdefault("STORE_PROVIDER", "sqlite")
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "fake-service-key")
os.environ.setdefault("RESEND_API_KEY", "fake-resend-key")
os.environ.setdefault("TIMEZONE", "UTC")

from datetime import date

import pytest


@pytest.fixture
def today():
    return date(2025, 6, 1)


@pytest.fixture
def gift_db(tmp_path):
    """Return a GiftDB instance backed by a temp file."""
    from giftwise.data.db import GiftDB
    return GiftDB(db_path=str(tmp_path / "test_giftwise.db"))


@pytest.fixture
def make_occasion():
    """Factory for Occasion records with sensible defaults."""
    from giftwise.data.models import Occasion

    def _make(**overrides):
        fields = {
            "id": 1,
            "user_id": "user-1",
            "contact_id": 10,
            "occasion_type": "Birthday",
            "date": date(2025, 6, 15),
            "notes": None,
            "reminder_days_before": 14,
            "reminder_sent_date": None,
            "nudge_sent_date": None,
            "contact_name": "Alice",
        }
        fields.update(overrides)
        return Occasion(**fields)

    return _make
