"""
Tests for reminder CRUD and the due-reminder job.
"""

import asyncio
import threading
from datetime import datetime, timedelta, timezone

import pytest

from services.reminder_service import next_occurrence
from utils.errors import NotFoundError, ValidationError


class TestNextOccurrence:

    def test_daily_and_weekly(self):
        start = datetime(2024, 3, 10, 9, 0, tzinfo=timezone.utc)
        assert next_occurrence(start, "daily") == start + timedelta(days=1)
        assert next_occurrence(start, "weekly") == start + timedelta(days=7)

    def test_monthly_uses_calendar_months(self):
        start = datetime(2024, 1, 31, tzinfo=timezone.utc)
        assert next_occurrence(start, "monthly") == datetime(2024, 2, 29, tzinfo=timezone.utc)

    def test_once_has_no_next(self):
        assert next_occurrence(datetime(2024, 1, 1, tzinfo=timezone.utc), "once") is None


class TestReminderCrud:

    def test_create_and_get(self, ctx, clock):
        reminder = ctx.reminders.create_reminder("Pay rent", clock.now, type="payment", frequency="monthly")
        assert ctx.reminders.get_reminder(reminder.id).title == "Pay rent"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"title": "", "next_date": datetime(2024, 1, 1)},
            {"title": "X", "next_date": None},
            {"title": "X", "next_date": datetime(2024, 1, 1), "type": "birthday"},
            {"title": "X", "next_date": datetime(2024, 1, 1), "frequency": "yearly"},
        ],
    )
    def test_validation(self, ctx, kwargs):
        with pytest.raises(ValidationError):
            ctx.reminders.create_reminder(**kwargs)

    def test_update_and_delete(self, ctx, clock):
        reminder = ctx.reminders.create_reminder("Check budget", clock.now)
        updated = ctx.reminders.update_reminder(reminder.id, {"frequency": "weekly", "message": "Sunday"})
        assert updated.frequency == "weekly"
        assert updated.message == "Sunday"

        ctx.reminders.delete_reminder(reminder.id)
        with pytest.raises(NotFoundError):
            ctx.reminders.get_reminder(reminder.id)
        with pytest.raises(NotFoundError):
            ctx.reminders.delete_reminder(reminder.id)

    def test_list_sorted_by_next_date(self, ctx, clock):
        later = ctx.reminders.create_reminder("Later", clock.now + timedelta(days=3))
        sooner = ctx.reminders.create_reminder("Sooner", clock.now + timedelta(days=1))
        assert [r.id for r in ctx.reminders.list_reminders()] == [sooner.id, later.id]


class TestProcessDue:

    def test_recurring_reminder_is_rescheduled(self, ctx, clock):
        reminder = ctx.reminders.create_reminder(
            "Top up savings", clock.now - timedelta(minutes=1), frequency="weekly"
        )
        fired = asyncio.run(ctx.reminders.process_due())

        assert [r.id for r in fired] == [reminder.id]
        stored = ctx.reminders.get_reminder(reminder.id)
        assert stored.is_active
        assert stored.next_date == reminder.next_date + timedelta(weeks=1)
        assert ctx.notifications.recent()[0].title == "Top up savings"

    def test_one_shot_reminder_is_deactivated(self, ctx, clock):
        reminder = ctx.reminders.create_reminder("Call bank", clock.now)
        asyncio.run(ctx.reminders.process_due())
        assert not ctx.reminders.get_reminder(reminder.id).is_active
        assert asyncio.run(ctx.reminders.process_due()) == []

    def test_future_and_inactive_reminders_do_not_fire(self, ctx, clock):
        ctx.reminders.create_reminder("Future", clock.now + timedelta(hours=1))
        paused = ctx.reminders.create_reminder("Paused", clock.now - timedelta(days=1))
        ctx.reminders.update_reminder(paused.id, {"is_active": False})

        assert asyncio.run(ctx.reminders.process_due()) == []
        assert ctx.notifications.recent() == []

    def test_failure_on_one_reminder_does_not_stop_tick(self, ctx, clock, monkeypatch):
        broken = ctx.reminders.create_reminder("Broken", clock.now - timedelta(hours=2))
        healthy = ctx.reminders.create_reminder("Healthy", clock.now - timedelta(hours=1))
        original = ctx.notifications.notify

        async def flaky_notify(title, message="", kind="info"):
            if title == "Broken":
                raise RuntimeError("channel down")
            return await original(title, message, kind)

        monkeypatch.setattr(ctx.notifications, "notify", flaky_notify)
        fired = asyncio.run(ctx.reminders.process_due())

        assert [r.id for r in fired] == [healthy.id]
        assert ctx.reminders.get_reminder(broken.id).is_active
        assert not ctx.reminders.get_reminder(healthy.id).is_active

    def test_store_calls_run_off_the_event_loop(self, ctx, clock, monkeypatch):
        ctx.reminders.create_reminder("Rent", clock.now - timedelta(hours=1), frequency="monthly")
        seen = []

        def tracked(method):
            def call(*args):
                seen.append(threading.get_ident())
                return method(*args)
            return call

        monkeypatch.setattr(ctx.reminders.repo, "get_due", tracked(ctx.reminders.repo.get_due))
        monkeypatch.setattr(ctx.reminders.repo, "advance", tracked(ctx.reminders.repo.advance))
        asyncio.run(ctx.reminders.process_due())

        assert len(seen) == 2
        assert threading.get_ident() not in seen
