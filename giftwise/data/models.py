"""
GiftWise — Data Models.

Plain records shared by the store adapters and the notification core.
Only the fields the core reads are modelled; the rest of each row stays
in the datastore.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

DEFAULT_REMINDER_DAYS_BEFORE = 14


class NotificationKind(str, Enum):
    """The two emails an occasion can trigger."""

    REMINDER = "reminder"   # advance notice, reminder_days_before ahead
    NUDGE = "nudge"         # follow-up the day after, if nothing was bought


@dataclass
class User:
    """A GiftWise account. The email is the delivery target."""

    id: str
    email: str = ""
    name: str = ""


@dataclass
class Contact:
    """A gift recipient."""

    id: int
    user_id: str
    name: str
    relationship: str = ""
    notes: str = ""


@dataclass
class Occasion:
    """A dated event for one contact (birthday, anniversary, ...).

    The two *_sent_date fields are the only ones the notification core
    ever writes.
    """

    id: int
    user_id: str
    contact_id: int
    occasion_type: str
    date: date | None
    notes: str | None = None
    reminder_days_before: int = DEFAULT_REMINDER_DAYS_BEFORE
    reminder_sent_date: date | None = None
    nudge_sent_date: date | None = None
    contact_name: str = ""    # joined from contacts, for message text


@dataclass
class Gift:
    """A gift idea or plan, optionally tied to an occasion."""

    id: int
    user_id: str
    name: str
    contact_id: int | None = None
    occasion_id: int | None = None


@dataclass
class Purchase:
    """A bought gift. occasion_id is the gift's occasion, if any."""

    id: int
    user_id: str
    gift_id: int | None
    purchase_date: date | None = None
    amount: float = 0.0
    occasion_id: int | None = None


@dataclass
class GiftSuggestion:
    """One AI-generated gift idea."""

    name: str
    reason: str


@dataclass(frozen=True)
class SuggestionRequest:
    """Everything the suggestion generator is told about a recipient.

    past_purchases keeps the caller's order; it is part of the cache key.
    """

    recipient: str = ""
    relationship: str = ""
    contact_notes: str = ""
    occasion: str = ""
    occasion_notes: str = ""
    preferences: str = ""
    past_purchases: tuple[str, ...] = ()


def parse_date(raw: str | date | None) -> date | None:
    """Parse an ISO date (or the date part of an ISO timestamp)."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, date):
        return raw
    return date.fromisoformat(raw[:10])
