"""Occasion window calculator — pure date logic.

Decides, for a given "today", whether an occasion is on its reminder day
(exactly reminder_days_before days ahead) or its nudge day (exactly one
day after). Both checks are exact-day matches: a day the scheduler does
not run is a day that occasion is not notified.

No I/O and no clock: callers always pass today explicitly.
"""

from __future__ import annotations

import logging
from datetime import date

from giftwise.data.models import DEFAULT_REMINDER_DAYS_BEFORE, NotificationKind, Occasion

logger = logging.getLogger(__name__)

NUDGE_DAYS_AFTER = 1


def days_until(occasion_date: date, today: date) -> int:
    """Whole calendar days from today to the occasion (negative once passed)."""
    return (occasion_date - today).days


def reminder_offset(occasion: Occasion) -> int:
    """The occasion's reminder_days_before, with a stored null read as 14."""
    if occasion.reminder_days_before is None:
        return DEFAULT_REMINDER_DAYS_BEFORE
    return occasion.reminder_days_before


def is_reminder_day(occasion: Occasion, today: date) -> bool:
    """True only on the single day that is reminder_days_before ahead.

    0 means the occasion day itself; a negative value only matches that
    many days after the occasion.
    """
    if occasion.date is None:
        return False
    return days_until(occasion.date, today) == reminder_offset(occasion)


def is_nudge_day(occasion: Occasion, today: date) -> bool:
    """True only on the day right after the occasion."""
    if occasion.date is None:
        return False
    return days_until(occasion.date, today) == -NUDGE_DAYS_AFTER


def classify(occasion: Occasion, today: date) -> frozenset[NotificationKind]:
    """Return the notification kinds whose window is open today.

    Empty for "neither". Both kinds are returned only when
    reminder_days_before is -1, which lands the reminder on the nudge day.
    """
    if occasion.date is None:
        logger.info("Occasion #%s has no date, skipping", occasion.id)
        return frozenset()

    kinds: set[NotificationKind] = set()
    if is_reminder_day(occasion, today):
        kinds.add(NotificationKind.REMINDER)
    if is_nudge_day(occasion, today):
        kinds.add(NotificationKind.NUDGE)
    return frozenset(kinds)


def matches(kind: NotificationKind, occasion: Occasion, today: date) -> bool:
    """Window check for a single kind."""
    if kind is NotificationKind.REMINDER:
        return is_reminder_day(occasion, today)
    return is_nudge_day(occasion, today)
