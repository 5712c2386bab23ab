"""Reminder and nudge email payloads."""

from __future__ import annotations

import html
from dataclasses import dataclass

from giftwise.data.models import NotificationKind, Occasion, User

_LINK_STYLE = "color:#2563eb;text-decoration:underline;"


@dataclass
class EmailPayload:
    """A rendered notification, ready for the email port."""

    kind: NotificationKind
    user_id: str
    occasion_id: int
    to: str
    subject: str
    html: str


def _link(app_url: str, text: str) -> str:
    return (
        f'<a href="{html.escape(app_url, quote=True)}" style="{_LINK_STYLE}" '
        f'target="_blank">{html.escape(text)}</a>'
    )


def _who(occasion: Occasion) -> str:
    return occasion.contact_name or "your contact"


def build_reminder(user: User, occasion: Occasion, app_url: str) -> EmailPayload:
    """Advance notice that an occasion is coming up."""
    name = _who(occasion)
    subject = f"Upcoming Occasion: {name}'s {occasion.occasion_type}"
    body = (
        "<h2>Don't forget!</h2>"
        f"<p>{html.escape(name)}'s {html.escape(occasion.occasion_type)} is coming up on "
        f"<b>{occasion.date.isoformat()}</b>.</p>"
        f"<p>Notes: {html.escape(occasion.notes or 'None')}</p>"
        f"<p>{_link(app_url, 'Log in to GiftWise for gift ideas!')}</p>"
    )
    return EmailPayload(
        kind=NotificationKind.REMINDER,
        user_id=user.id,
        occasion_id=occasion.id,
        to=user.email,
        subject=subject,
        html=body,
    )


def build_nudge(user: User, occasion: Occasion, app_url: str) -> EmailPayload:
    """Follow-up the day after an occasion nobody bought a gift for."""
    name = _who(occasion)
    subject = f"Did you buy a gift for {name}'s {occasion.occasion_type}?"
    body = (
        "<h2>How did it go?</h2>"
        f"<p>Did you buy a gift for {html.escape(name)}'s "
        f"{html.escape(occasion.occasion_type)} on {occasion.date.isoformat()}?</p>"
        f"<p>{_link(app_url, 'Please update your purchase history in GiftWise!')}</p>"
    )
    return EmailPayload(
        kind=NotificationKind.NUDGE,
        user_id=user.id,
        occasion_id=occasion.id,
        to=user.email,
        subject=subject,
        html=body,
    )


def build_payload(
    kind: NotificationKind, user: User, occasion: Occasion, app_url: str,
) -> EmailPayload:
    if kind is NotificationKind.REMINDER:
        return build_reminder(user, occasion, app_url)
    return build_nudge(user, occasion, app_url)
