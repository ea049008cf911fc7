"""
repositories/reminder_repo.py
-----------------------------
PostgreSQL data access for reminders.
All SQL queries related to the `reminders` table live here.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

from db.connection import transaction
from models.reminder import Reminder
from repositories.interfaces import REMINDER_DETAIL_FIELDS, ReminderRepository, check_fields
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, title, message, type, frequency, next_date, is_active, goal_id, created_at"


class PostgresReminderRepository(ReminderRepository):
    """Repository for CRUD operations on the reminders table."""

    # ── CREATE ────────────────────────────────────────────

    def add(self, reminder: Reminder) -> Reminder:
        """
        Insert a new reminder.

        Returns:
            The same object with its `id` and `created_at` populated.
        """
        reminder.id = reminder.id or uuid4().hex
        sql = """
            INSERT INTO reminders
                (id, title, message, type, frequency, next_date, is_active, goal_id)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING created_at;
        """
        with transaction("add reminder") as cur:
            cur.execute(sql, (
                reminder.id, reminder.title, reminder.message, reminder.type,
                reminder.frequency, reminder.next_date, reminder.is_active, reminder.goal_id,
            ))
            reminder.created_at = cur.fetchone()["created_at"]
        logger.info(f"Added reminder '{reminder.title}' #{reminder.id}")
        return reminder

    # ── READ ──────────────────────────────────────────────

    def get(self, reminder_id: str) -> Optional[Reminder]:
        with transaction("fetch reminder") as cur:
            cur.execute(f"SELECT {_COLUMNS} FROM reminders WHERE id = %s;", (reminder_id,))
            row = cur.fetchone()
        return self._row_to_reminder(row) if row else None

    def get_all(self, active_only: bool = False) -> list[Reminder]:
        sql = f"SELECT {_COLUMNS} FROM reminders"
        if active_only:
            sql += " WHERE is_active = TRUE"
        sql += " ORDER BY next_date ASC;"
        with transaction("list reminders") as cur:
            cur.execute(sql)
            return [self._row_to_reminder(r) for r in cur.fetchall()]

    def get_due(self, now: datetime) -> list[Reminder]:
        """
        Get all active reminders whose next_date has passed.
        Used by the scheduler on every tick.
        """
        sql = f"""
            SELECT {_COLUMNS} FROM reminders
            WHERE is_active = TRUE AND next_date <= %s
            ORDER BY next_date ASC;
        """
        with transaction("fetch due reminders") as cur:
            cur.execute(sql, (now,))
            return [self._row_to_reminder(r) for r in cur.fetchall()]

    # ── UPDATE ────────────────────────────────────────────

    def update_details(self, reminder_id: str, fields: dict[str, Any]) -> Optional[Reminder]:
        check_fields(fields, REMINDER_DETAIL_FIELDS)
        if not fields:
            return self.get(reminder_id)
        assignments = ", ".join(f"{name} = %({name})s" for name in fields)
        sql = f"UPDATE reminders SET {assignments} WHERE id = %(id)s RETURNING {_COLUMNS};"
        with transaction(f"update reminder #{reminder_id}") as cur:
            cur.execute(sql, {**fields, "id": reminder_id})
            row = cur.fetchone()
        return self._row_to_reminder(row) if row else None

    def advance(self, reminder_id: str, next_date: datetime) -> None:
        with transaction(f"advance reminder #{reminder_id}") as cur:
            cur.execute("UPDATE reminders SET next_date = %s WHERE id = %s;", (next_date, reminder_id))
        logger.info(f"Advanced reminder #{reminder_id} to {next_date.isoformat()}")

    def deactivate(self, reminder_id: str) -> None:
        with transaction(f"deactivate reminder #{reminder_id}") as cur:
            cur.execute("UPDATE reminders SET is_active = FALSE WHERE id = %s;", (reminder_id,))

    # ── DELETE ────────────────────────────────────────────

    def delete(self, reminder_id: str) -> bool:
        with transaction(f"delete reminder #{reminder_id}") as cur:
            cur.execute("DELETE FROM reminders WHERE id = %s;", (reminder_id,))
            deleted = cur.rowcount > 0
        if deleted:
            logger.info(f"Deleted reminder #{reminder_id}")
        return deleted

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_reminder(row: dict) -> Reminder:
        """Convert a database row to a Reminder domain object."""
        return Reminder(
            id=row["id"],
            title=row["title"],
            message=row["message"],
            type=row["type"],
            frequency=row["frequency"],
            next_date=row["next_date"],
            is_active=row["is_active"],
            goal_id=row["goal_id"],
            created_at=row["created_at"],
        )
