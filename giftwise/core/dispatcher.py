"""
GiftWise — Notification Dispatcher.

One pass over every user with an email address: load their occasions and
purchases, ask the delivery guard which reminders and nudges are due
today, send them, and record the sent-date marker after each confirmed
send.

Failure policy:
- Store unreachable when listing users -> DispatchAborted, nothing sent
- One user's reads fail -> that user is skipped, others continue
- One send fails or times out -> counted, marker untouched, retried next run
- Anything else raised while handling one occasion -> logged, counted,
  the next occasion and the other users still run
- Marker write fails after a send -> warning, a duplicate may follow next run

Overlapping passes are not serialized here. Two passes that both read an
occasion before either writes its marker will both send; the harm is one
duplicate email. Acquire an advisory lock in the datastore around run()
if that ever matters.

This module is provider-agnostic: it depends on StorePort and EmailPort
protocols, not on specific implementations.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from giftwise.core.delivery_guard import (
    marker_field,
    marker_update,
    sent_marker,
    should_send,
)
from giftwise.core.messages import build_payload
from giftwise.core.occasion_window import classify
from giftwise.data.models import NotificationKind
from giftwise.ports.store_port import StoreError

if TYPE_CHECKING:
    from giftwise.data.models import Occasion, User
    from giftwise.ports.email_port import EmailPort
    from giftwise.ports.store_port import StorePort

logger = logging.getLogger(__name__)


class DispatchAborted(Exception):
    """The pass could not start (the datastore is unreachable)."""


@dataclass
class DispatchSummary:
    """Counters for one dispatcher pass."""

    reminders_sent: int = 0
    nudges_sent: int = 0
    failures: int = 0
    marker_failures: int = 0
    users_processed: int = 0
    occasions_skipped: int = 0

    def record_sent(self, kind: NotificationKind) -> None:
        if kind is NotificationKind.REMINDER:
            self.reminders_sent += 1
        else:
            self.nudges_sent += 1

    def merge(self, other: DispatchSummary) -> None:
        self.reminders_sent += other.reminders_sent
        self.nudges_sent += other.nudges_sent
        self.failures += other.failures
        self.marker_failures += other.marker_failures
        self.users_processed += other.users_processed
        self.occasions_skipped += other.occasions_skipped


class NotificationDispatcher:
    """Fans reminder and nudge emails out to all users."""

    def __init__(
        self,
        store: StorePort,
        email: EmailPort,
        app_url: str | None = None,
        send_timeout: float | None = None,
        concurrency: int | None = None,
    ) -> None:
        if app_url is None or send_timeout is None or concurrency is None:
            from giftwise.config import settings

            if app_url is None:
                app_url = settings.APP_URL
            if send_timeout is None:
                send_timeout = settings.EMAIL_TIMEOUT_SECONDS
            if concurrency is None:
                concurrency = settings.DISPATCH_CONCURRENCY

        self._store = store
        self._email = email
        self._app_url = app_url
        self._send_timeout = send_timeout
        self._concurrency = max(1, concurrency)

    async def run(self, today: date) -> DispatchSummary:
        """Run one full pass for `today`.

        Raises DispatchAborted if the user list cannot be loaded.
        """
        try:
            users = await asyncio.to_thread(self._store.list_users)
        except StoreError as exc:
            logger.error("Notification pass aborted, cannot list users: %s", exc)
            raise DispatchAborted("datastore unavailable") from exc

        recipients = [u for u in users if u.email and u.email.strip()]
        logger.info(
            "Notification pass for %s: %d users, %d with email",
            today.isoformat(), len(users), len(recipients),
        )

        semaphore = asyncio.Semaphore(self._concurrency)

        async def _bounded(user: User) -> DispatchSummary:
            async with semaphore:
                try:
                    return await self._process_user(user, today)
                except Exception as exc:
                    logger.error("Notification pass failed for user %s: %s", user.id, exc)
                    return DispatchSummary(users_processed=1, failures=1)

        results = await asyncio.gather(*(_bounded(u) for u in recipients))

        summary = DispatchSummary()
        for result in results:
            summary.merge(result)

        logger.info(
            "Notification pass done: %d reminders, %d nudges, %d failures, %d marker failures",
            summary.reminders_sent, summary.nudges_sent,
            summary.failures, summary.marker_failures,
        )
        return summary

    # ------------------------------------------------------------------
    # Per-user work
    # ------------------------------------------------------------------

    async def _process_user(self, user: User, today: date) -> DispatchSummary:
        """Evaluate and deliver every due notification for one user.

        Occasions and kinds are handled one at a time so an occasion's
        marker is never written by two sends at once.
        """
        summary = DispatchSummary(users_processed=1)

        try:
            occasions = await asyncio.to_thread(self._store.get_occasions, user.id)
            purchases = await asyncio.to_thread(self._store.get_purchases, user.id)
        except Exception as exc:
            logger.error("Failed to load occasions/purchases for user %s: %s", user.id, exc)
            summary.failures += 1
            return summary

        for occasion in occasions:
            if occasion.date is None:
                logger.info("Occasion #%s (user %s) has no date, skipping", occasion.id, user.id)
                summary.occasions_skipped += 1
                continue

            due = classify(occasion, today)
            for kind in NotificationKind:
                if kind not in due:
                    continue
                try:
                    if should_send(kind, occasion, today, purchases):
                        await self._deliver(kind, user, occasion, today, summary)
                except Exception as exc:
                    logger.error(
                        "%s failed (user=%s occasion=%s): %s",
                        kind.value, user.id, occasion.id, exc,
                    )
                    summary.failures += 1

        return summary

    async def _deliver(
        self,
        kind: NotificationKind,
        user: User,
        occasion: Occasion,
        today: date,
        summary: DispatchSummary,
    ) -> None:
        payload = build_payload(kind, user, occasion, self._app_url)

        try:
            await asyncio.wait_for(
                self._email.send(payload.to, payload.subject, payload.html),
                timeout=self._send_timeout,
            )
        except asyncio.TimeoutError:
            logger.error(
                "%s email timed out after %.1fs (user=%s occasion=%s)",
                kind.value, self._send_timeout, user.id, occasion.id,
            )
            summary.failures += 1
            return
        except Exception as exc:
            logger.error(
                "%s email failed (user=%s occasion=%s): %s",
                kind.value, user.id, occasion.id, exc,
            )
            summary.failures += 1
            return

        summary.record_sent(kind)
        logger.info("%s sent to user %s for occasion #%s", kind.value, user.id, occasion.id)
        await self._record_marker(kind, user, occasion, today, summary)

    async def _record_marker(
        self,
        kind: NotificationKind,
        user: User,
        occasion: Occasion,
        today: date,
        summary: DispatchSummary,
    ) -> None:
        """Persist the sent-date marker; never move it backwards."""
        current = sent_marker(kind, occasion)
        if current is not None and current > today:
            logger.warning(
                "Not rewinding %s marker for occasion #%s (stored %s, today %s)",
                kind.value, occasion.id, current.isoformat(), today.isoformat(),
            )
            return

        try:
            await asyncio.to_thread(
                self._store.update_occasion, occasion.id, marker_update(kind, today),
            )
        except Exception as exc:
            logger.warning(
                "%s sent but marker not saved (user=%s occasion=%s): %s; "
                "it may be sent again next run",
                kind.value, user.id, occasion.id, exc,
            )
            summary.marker_failures += 1
            return

        setattr(occasion, marker_field(kind), today)

