"""
services/goal_service.py
------------------------
Business logic for savings goals and contributions from accounts.
"""

from datetime import date, datetime
from typing import Any, Optional

from models.goal import Goal
from models.transaction import Transaction
from repositories import Repositories
from services.account_service import require_positive, require_text
from utils.clock import Clock, as_datetime, utcnow
from utils.errors import NotFoundError, ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)

_PATCHABLE = ("name", "description", "target_amount", "target_date", "icon", "color", "is_active")


class GoalService:
    """
    Handles all business logic for goals.

    Responsibilities:
        - Create, patch and close goals.
        - Move money from an account into a goal as one atomic write.
    """

    def __init__(self, repos: Repositories, clock: Clock = utcnow):
        self.goals = repos.goals
        self.accounts = repos.accounts
        self.clock = clock

    def create_goal(
        self,
        name: Optional[str],
        target_amount: Any,
        description: Optional[str] = None,
        target_date: Optional[date | datetime] = None,
        icon: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Goal:
        """
        Raises:
            ValidationError: Empty name or non-positive target.
        """
        goal = Goal(
            name=require_text(name, "name"),
            target_amount=require_positive(target_amount, "targetAmount"),
            description=description or None,
            target_date=as_datetime(target_date) if target_date else None,
            icon=icon,
            color=color,
        )
        return self.goals.add(goal)

    def get_goal(self, goal_id: str) -> Goal:
        goal = self.goals.get(goal_id)
        if goal is None:
            raise NotFoundError("Goal", goal_id)
        return goal

    def list_goals(self, include_inactive: bool = False) -> list[Goal]:
        return self.goals.get_all(include_inactive=include_inactive)

    def contribute(self, goal_id: str, amount: Any, from_account_id: Optional[str]) -> Goal:
        """
        Move `amount` from an account into the goal.

        The expense transaction, the account debit, and the goal credit
        (with the completion flag) are written together. Once set,
        `is_completed` stays set.

        Raises:
            ValidationError: Non-positive amount or missing account id.
            NotFoundError: Unknown goal or account; nothing is written.
        """
        value = require_positive(amount)
        if not from_account_id:
            raise ValidationError("fromAccountId is required")
        goal = self.get_goal(goal_id)
        if self.accounts.get(from_account_id) is None:
            raise NotFoundError("Account", from_account_id)

        tx = Transaction(
            account_id=from_account_id,
            type="expense",
            amount=-abs(value),
            date=self.clock(),
            description=f"Contribution to goal: {goal.name}",
        )
        updated = self.goals.add_contribution(goal_id, tx)
        if updated.is_completed and not goal.is_completed:
            logger.info(f"Goal #{goal_id} '{goal.name}' reached its target")
        return updated

    def update_goal(self, goal_id: str, fields: dict[str, Any]) -> Goal:
        """
        Patch goal details. Completion is not re-evaluated, so lowering the
        target never sets or clears `is_completed`.

        Raises:
            ValidationError: Unknown or read-only field, bad value.
            NotFoundError: Unknown goal.
        """
        unknown = [f for f in fields if f not in _PATCHABLE]
        if unknown:
            raise ValidationError(f"Cannot update goal fields: {', '.join(unknown)}")

        patch = dict(fields)
        if "name" in patch:
            patch["name"] = require_text(patch["name"], "name")
        if "target_amount" in patch:
            patch["target_amount"] = require_positive(patch["target_amount"], "targetAmount")
        if patch.get("target_date"):
            patch["target_date"] = as_datetime(patch["target_date"])
        if "is_active" in patch and not isinstance(patch["is_active"], bool):
            raise ValidationError("isActive must be a boolean")

        updated = self.goals.update_details(goal_id, patch)
        if updated is None:
            raise NotFoundError("Goal", goal_id)
        return updated

    def close_goal(self, goal_id: str) -> Goal:
        """Deactivate a goal. Contributions already made stay where they are."""
        goal = self.update_goal(goal_id, {"is_active": False})
        logger.info(f"Closed goal #{goal_id}")
        return goal
