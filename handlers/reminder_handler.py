"""
handlers/reminder_handler.py
----------------------------
Reminder CRUD. Firing happens in the background job, not here.
"""

from fastapi import APIRouter, Depends, Query

from context import AppContext
from handlers.envelope import get_context, ok
from handlers.schemas import ReminderCreate, ReminderPatch

router = APIRouter(prefix="/api/reminders", tags=["reminders"])


@router.get("")
def list_reminders(
    active_only: bool = Query(False, alias="activeOnly"),
    ctx: AppContext = Depends(get_context),
):
    return ok(ctx.reminders.list_reminders(active_only=active_only))


@router.post("")
def create_reminder(body: ReminderCreate, ctx: AppContext = Depends(get_context)):
    return ok(
        ctx.reminders.create_reminder(
            title=body.title,
            next_date=body.next_date,
            type=body.type,
            frequency=body.frequency,
            message=body.message,
            goal_id=body.goal_id,
        )
    )


@router.get("/{reminder_id}")
def get_reminder(reminder_id: str, ctx: AppContext = Depends(get_context)):
    return ok(ctx.reminders.get_reminder(reminder_id))


@router.patch("/{reminder_id}")
def update_reminder(reminder_id: str, body: ReminderPatch, ctx: AppContext = Depends(get_context)):
    return ok(ctx.reminders.update_reminder(reminder_id, body.patch()))


@router.delete("/{reminder_id}")
def delete_reminder(reminder_id: str, ctx: AppContext = Depends(get_context)):
    ctx.reminders.delete_reminder(reminder_id)
    return ok({"id": reminder_id, "deleted": True})
