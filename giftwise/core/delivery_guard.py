"""Delivery guard — at most one email per occasion, kind and day.

Pure predicates over an occasion, its owner's purchases and today's
date. The dispatcher persists the marker after a confirmed send; this
module only decides and describes the patch.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable

from giftwise.core.occasion_window import matches
from giftwise.data.models import NotificationKind, Occasion, Purchase

_MARKER_FIELDS = {
    NotificationKind.REMINDER: "reminder_sent_date",
    NotificationKind.NUDGE: "nudge_sent_date",
}


def marker_field(kind: NotificationKind) -> str:
    """Name of the persisted sent-date column for this kind."""
    return _MARKER_FIELDS[kind]


def sent_marker(kind: NotificationKind, occasion: Occasion) -> date | None:
    return getattr(occasion, marker_field(kind))


def marker_update(kind: NotificationKind, today: date) -> dict[str, str]:
    """Partial-update payload recording a send on today's date."""
    return {marker_field(kind): today.isoformat()}


def is_satisfied(occasion: Occasion, purchases: Iterable[Purchase]) -> bool:
    """True if any purchase's gift belongs to this occasion."""
    return any(p.occasion_id == occasion.id for p in purchases)


def should_send(
    kind: NotificationKind,
    occasion: Occasion,
    today: date,
    purchases: Iterable[Purchase] = (),
) -> bool:
    """Decide whether `kind` is due for `occasion` today.

    True only if the window matches, the kind was not already sent today,
    and (for nudges) no purchase fulfils the occasion.
    """
    if not matches(kind, occasion, today):
        return False
    if sent_marker(kind, occasion) == today:
        return False
    if kind is NotificationKind.NUDGE and is_satisfied(occasion, purchases):
        return False
    return True
