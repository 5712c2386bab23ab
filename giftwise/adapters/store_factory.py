"""Store adapter factory — creates the right datastore based on config."""

from __future__ import annotations

from giftwise.config import settings
from giftwise.ports.store_port import StorePort


def create_store(db_path: str | None = None) -> StorePort:
    """Return the store matching the STORE_PROVIDER setting.

    Args:
        db_path: SQLite file override. Ignored for Supabase.
    """
    provider = settings.STORE_PROVIDER.lower()

    if provider == "supabase":
        from giftwise.adapters.supabase_store import SupabaseStore

        return SupabaseStore()

    if provider == "sqlite":
        from giftwise.data.db import GiftDB

        return GiftDB(db_path=db_path)

    raise ValueError(f"Unknown STORE_PROVIDER: {provider!r}")
