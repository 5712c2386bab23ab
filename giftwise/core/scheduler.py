"""
GiftWise — Notification Scheduler.

Runs the notification dispatcher on a daily cron schedule and exposes the
same pass as an on-demand trigger (used by POST /api/trigger-reminders).

Scheduled and manual passes are not mutually exclusive; see
giftwise.core.dispatcher for why an overlap costs at most a duplicate
email.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Callable
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from giftwise.core.dispatcher import DispatchAborted

if TYPE_CHECKING:
    from giftwise.core.dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)

JOB_ID = "reminders_and_nudges"

# A late wake-up still runs that day's pass; eligibility is exact-day
MISFIRE_GRACE_SECONDS = 6 * 60 * 60


@dataclass
class TriggerResult:
    """Outcome of one pass, safe to show to a caller."""

    success: bool
    reminders_sent: int = 0
    nudges_sent: int = 0
    failures: int = 0
    marker_failures: int = 0
    error: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def local_today(tz_name: str) -> date:
    """Today's calendar date in the given IANA timezone."""
    return datetime.now(ZoneInfo(tz_name)).date()


class NotificationTrigger:
    """Entry point for both the cron job and the manual trigger."""

    def __init__(
        self,
        dispatcher: NotificationDispatcher,
        today_fn: Callable[[], date] | None = None,
    ) -> None:
        if today_fn is None:
            from giftwise.config import settings

            tz_name = settings.TIMEZONE
            today_fn = lambda: local_today(tz_name)  # noqa: E731

        self._dispatcher = dispatcher
        self._today_fn = today_fn

    async def run_now(self, today: date | None = None) -> TriggerResult:
        """Run a full pass and summarise it.

        Never raises: an aborted or crashed pass comes back as
        success=False with a short message.
        """
        if today is None:
            today = self._today_fn()

        try:
            summary = await self._dispatcher.run(today)
        except DispatchAborted as exc:
            return TriggerResult(success=False, error=f"Notification run could not start: {exc}")
        except Exception:
            logger.exception("Notification run crashed")
            return TriggerResult(success=False, error="Notification run failed unexpectedly")

        return TriggerResult(
            success=True,
            reminders_sent=summary.reminders_sent,
            nudges_sent=summary.nudges_sent,
            failures=summary.failures,
            marker_failures=summary.marker_failures,
        )

    async def run_scheduled(self) -> None:
        """Job body for the recurring schedule."""
        logger.info("Running scheduled reminders and nudges")
        result = await self.run_now()
        if result.success:
            logger.info(
                "Scheduled run: %d reminders, %d nudges, %d failures",
                result.reminders_sent, result.nudges_sent, result.failures,
            )
        else:
            logger.error("Scheduled run failed: %s", result.error)


def build_scheduler(
    trigger: NotificationTrigger,
    cron: str | None = None,
    tz_name: str | None = None,
) -> AsyncIOScheduler:
    """Create an AsyncIOScheduler with the notification job registered.

    The caller starts and shuts it down.
    """
    if cron is None or tz_name is None:
        from giftwise.config import settings

        if cron is None:
            cron = settings.NOTIFICATION_CRON
        if tz_name is None:
            tz_name = settings.TIMEZONE

    tz = ZoneInfo(tz_name)
    scheduler = AsyncIOScheduler(timezone=tz)
    scheduler.add_job(
        trigger.run_scheduled,
        CronTrigger.from_crontab(cron, timezone=tz),
        id=JOB_ID,
        name="Send occasion reminders and nudges",
        replace_existing=True,
        misfire_grace_time=MISFIRE_GRACE_SECONDS,
        coalesce=True,
    )
    logger.info("Reminders and nudges scheduled with cron '%s' (%s)", cron, tz_name)
    return scheduler
