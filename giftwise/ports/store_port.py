"""Store port — abstract interface for the hosted datastore.

Core modules depend on this protocol, never on a specific database.
Calls are synchronous and may fail with StoreError.
"""

from __future__ import annotations

from typing import Any, Protocol

from giftwise.data.models import Occasion, Purchase, User


class StoreError(Exception):
    """Raised when any datastore operation fails."""


class StorePort(Protocol):
    """Data access facade used by the notification core."""

    def list_users(self) -> list[User]: ...

    def get_occasions(self, user_id: str) -> list[Occasion]: ...

    def get_purchases(self, user_id: str) -> list[Purchase]: ...

    def update_occasion(self, occasion_id: int, fields: dict[str, Any]) -> None: ...
