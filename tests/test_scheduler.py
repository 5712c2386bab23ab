"""Tests for giftwise.core.scheduler: trigger and cron wiring."""

from __future__ import annotations

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from giftwise.core.dispatcher import DispatchAborted, DispatchSummary
from giftwise.core.scheduler import (
    JOB_ID,
    MISFIRE_GRACE_SECONDS,
    NotificationTrigger,
    TriggerResult,
    build_scheduler,
)

TODAY = date(2025, 6, 1)


def _make_trigger(run_result=None, run_error=None):
    dispatcher = MagicMock()
    dispatcher.run = AsyncMock(return_value=run_result, side_effect=run_error)
    return NotificationTrigger(dispatcher, today_fn=lambda: TODAY), dispatcher


# ---------------------------------------------------------------------------
# NotificationTrigger.run_now
# ---------------------------------------------------------------------------


class TestRunNow:
    @pytest.mark.asyncio
    async def test_success_summarises_counts(self):
        summary = DispatchSummary(reminders_sent=2, nudges_sent=1, failures=1, marker_failures=1)
        trigger, dispatcher = _make_trigger(run_result=summary)

        result = await trigger.run_now()

        dispatcher.run.assert_awaited_once_with(TODAY)
        assert result == TriggerResult(
            success=True, reminders_sent=2, nudges_sent=1, failures=1, marker_failures=1,
        )

    @pytest.mark.asyncio
    async def test_explicit_today_overrides_clock(self):
        trigger, dispatcher = _make_trigger(run_result=DispatchSummary())
        await trigger.run_now(date(2024, 12, 25))
        dispatcher.run.assert_awaited_once_with(date(2024, 12, 25))

    @pytest.mark.asyncio
    async def test_aborted_run_is_a_failure_result(self):
        trigger, _ = _make_trigger(run_error=DispatchAborted("datastore unavailable"))

        result = await trigger.run_now()

        assert result.success is False
        assert "could not start" in result.error
        assert result.reminders_sent == 0

    @pytest.mark.asyncio
    async def test_unexpected_error_is_summarised_not_raised(self):
        trigger, _ = _make_trigger(run_error=RuntimeError("secret stack detail"))

        result = await trigger.run_now()

        assert result.success is False
        assert "secret stack detail" not in result.error

    @pytest.mark.asyncio
    async def test_run_scheduled_never_raises(self):
        trigger, dispatcher = _make_trigger(run_error=DispatchAborted("down"))
        await trigger.run_scheduled()
        dispatcher.run.assert_awaited_once()

    def test_to_dict(self):
        result = TriggerResult(success=False, error="x")
        assert result.to_dict() == {
            "success": False,
            "reminders_sent": 0,
            "nudges_sent": 0,
            "failures": 0,
            "marker_failures": 0,
            "error": "x",
        }


# ---------------------------------------------------------------------------
# build_scheduler
# ---------------------------------------------------------------------------


class TestBuildScheduler:
    def test_registers_single_job(self):
        trigger, _ = _make_trigger(run_result=DispatchSummary())
        scheduler = build_scheduler(trigger, cron="0 8 * * *", tz_name="UTC")

        jobs = scheduler.get_jobs()
        assert len(jobs) == 1
        assert jobs[0].id == JOB_ID
        assert jobs[0].func == trigger.run_scheduled

    def test_cron_fields(self):
        trigger, _ = _make_trigger(run_result=DispatchSummary())
        scheduler = build_scheduler(trigger, cron="30 7 * * *", tz_name="Asia/Singapore")

        job_trigger = scheduler.get_job(JOB_ID).trigger
        fields = {f.name: str(f) for f in job_trigger.fields}
        assert fields["hour"] == "7"
        assert fields["minute"] == "30"
        assert str(job_trigger.timezone) == "Asia/Singapore"

    def test_defaults_from_settings(self):
        trigger, _ = _make_trigger(run_result=DispatchSummary())
        scheduler = build_scheduler(trigger)
        assert scheduler.get_job(JOB_ID) is not None

    def test_late_wakeup_still_runs_once(self):
        trigger, _ = _make_trigger(run_result=DispatchSummary())
        scheduler = build_scheduler(trigger, cron="0 8 * * *", tz_name="UTC")

        job = scheduler.get_job(JOB_ID)
        assert job.misfire_grace_time == MISFIRE_GRACE_SECONDS
        assert job.misfire_grace_time >= 60 * 60
        assert job.coalesce is True
