"""
models/reminder.py
------------------
Domain model for reminders (goal nudges, payment due dates, free-form notes).
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

REMINDER_TYPES = ("goal", "payment", "custom")
REMINDER_FREQUENCIES = ("once", "daily", "weekly", "monthly")


@dataclass
class Reminder:
    """
    A notification scheduled for `next_date`.

    Attributes:
        id: Generated identifier (None until stored).
        title: Notification title.
        next_date: When the reminder fires next.
        type: 'goal', 'payment' or 'custom'.
        frequency: 'once', 'daily', 'weekly' or 'monthly'.
        message: Optional notification body.
        is_active: False after a one-shot reminder has fired.
        goal_id: Optional goal reference (weak, no cascade).
        created_at: Timestamp when the record was created.
    """
    title: str
    next_date: datetime
    type: str = "custom"
    frequency: str = "once"
    message: Optional[str] = None
    is_active: bool = True
    goal_id: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def is_recurring(self) -> bool:
        return self.frequency != "once"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "message": self.message,
            "type": self.type,
            "frequency": self.frequency,
            "nextDate": self.next_date,
            "isActive": self.is_active,
            "goalId": self.goal_id,
            "createdAt": self.created_at,
        }

    def __str__(self) -> str:
        status = "on" if self.is_active else "off"
        return f"[{status}] {self.title} ({self.frequency}) - next: {self.next_date}"
