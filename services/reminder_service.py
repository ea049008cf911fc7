"""
services/reminder_service.py
----------------------------
Business logic for reminders and the periodic job that fires them.
"""

import asyncio
from datetime import date, datetime, timedelta
from typing import Any, Optional

from dateutil.relativedelta import relativedelta

from models.reminder import REMINDER_FREQUENCIES, REMINDER_TYPES, Reminder
from repositories import Repositories
from services.account_service import require_text
from services.notification_service import NotificationService
from utils.clock import Clock, as_datetime, utcnow
from utils.errors import NotFoundError, ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)

_STEPS = {
    "daily": timedelta(days=1),
    "weekly": timedelta(weeks=1),
    "monthly": relativedelta(months=1),
}


def next_occurrence(current: datetime, frequency: str) -> Optional[datetime]:
    """
    Next firing time of a recurring reminder, or None for 'once'.

    Monthly steps use calendar months (Jan 31 -> Feb 28/29).
    """
    step = _STEPS.get(frequency)
    if step is None:
        return None
    return current + step


def _check_choice(value: str, choices: tuple[str, ...], field: str) -> str:
    if value not in choices:
        raise ValidationError(f"{field} must be one of: {', '.join(choices)}")
    return value


class ReminderService:
    """
    Handles all business logic for reminders.

    Responsibilities:
        - CRUD with enum validation.
        - Fire due reminders through the NotificationService.
        - Reschedule recurring reminders; deactivate one-shot ones.
    """

    def __init__(self, repos: Repositories, notifications: NotificationService, clock: Clock = utcnow):
        self.repo = repos.reminders
        self.notifications = notifications
        self.clock = clock

    def create_reminder(
        self,
        title: Optional[str],
        next_date: Optional[date | datetime],
        type: str = "custom",
        frequency: str = "once",
        message: Optional[str] = None,
        goal_id: Optional[str] = None,
    ) -> Reminder:
        """
        Raises:
            ValidationError: Missing title/date or unknown type/frequency.
        """
        if next_date is None:
            raise ValidationError("title and nextDate are required")
        reminder = Reminder(
            title=require_text(title, "title"),
            next_date=as_datetime(next_date),
            type=_check_choice(type or "custom", REMINDER_TYPES, "type"),
            frequency=_check_choice(frequency or "once", REMINDER_FREQUENCIES, "frequency"),
            message=message or None,
            goal_id=goal_id or None,
        )
        return self.repo.add(reminder)

    def get_reminder(self, reminder_id: str) -> Reminder:
        reminder = self.repo.get(reminder_id)
        if reminder is None:
            raise NotFoundError("Reminder", reminder_id)
        return reminder

    def list_reminders(self, active_only: bool = False) -> list[Reminder]:
        return self.repo.get_all(active_only=active_only)

    def update_reminder(self, reminder_id: str, fields: dict[str, Any]) -> Reminder:
        patch = dict(fields)
        if "title" in patch:
            patch["title"] = require_text(patch["title"], "title")
        if "type" in patch:
            _check_choice(patch["type"], REMINDER_TYPES, "type")
        if "frequency" in patch:
            _check_choice(patch["frequency"], REMINDER_FREQUENCIES, "frequency")
        if "next_date" in patch:
            if patch["next_date"] is None:
                raise ValidationError("nextDate cannot be empty")
            patch["next_date"] = as_datetime(patch["next_date"])
        if "is_active" in patch and not isinstance(patch["is_active"], bool):
            raise ValidationError("isActive must be a boolean")
        try:
            updated = self.repo.update_details(reminder_id, patch)
        except ValueError as e:
            raise ValidationError(str(e))
        if updated is None:
            raise NotFoundError("Reminder", reminder_id)
        return updated

    def delete_reminder(self, reminder_id: str) -> None:
        if not self.repo.delete(reminder_id):
            raise NotFoundError("Reminder", reminder_id)
        logger.info(f"Deleted reminder #{reminder_id}")

    async def process_due(self) -> list[Reminder]:
        """
        One scheduler tick: fire every active reminder whose date has come.

        Returns:
            The reminders that fired in this tick.
        """
        now = self.clock()
        fired = []
        for reminder in await asyncio.to_thread(self.repo.get_due, now):
            try:
                await self.notifications.notify(
                    reminder.title, reminder.message or "", kind="reminder"
                )
                following = next_occurrence(reminder.next_date, reminder.frequency)
                if following is None:
                    await asyncio.to_thread(self.repo.deactivate, reminder.id)
                else:
                    await asyncio.to_thread(self.repo.advance, reminder.id, following)
                fired.append(reminder)
                logger.info(f"Fired reminder #{reminder.id} '{reminder.title}'")
            except Exception as e:
                logger.error(f"Failed to process reminder #{reminder.id}: {e}")
        return fired
