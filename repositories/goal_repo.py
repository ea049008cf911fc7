"""
repositories/goal_repo.py
-------------------------
PostgreSQL data access for savings goals and contributions.
"""

from typing import Any, Optional
from uuid import uuid4

from db.connection import transaction
from models.goal import Goal
from models.transaction import Transaction
from repositories.interfaces import GOAL_DETAIL_FIELDS, GoalRepository, check_fields
from repositories.transaction_repo import insert_ledger_entry
from utils.errors import NotFoundError
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = (
    "id, name, description, target_amount, current_amount, target_date, icon, color, "
    "is_completed, is_active, created_at"
)


class PostgresGoalRepository(GoalRepository):
    """Repository for CRUD operations on the goals table."""

    def add(self, goal: Goal) -> Goal:
        goal.id = goal.id or uuid4().hex
        sql = """
            INSERT INTO goals
                (id, name, description, target_amount, current_amount, target_date,
                 icon, color, is_completed, is_active)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING created_at;
        """
        with transaction("add goal") as cur:
            cur.execute(sql, (
                goal.id, goal.name, goal.description, goal.target_amount,
                goal.current_amount, goal.target_date, goal.icon, goal.color,
                goal.is_completed, goal.is_active,
            ))
            goal.created_at = cur.fetchone()["created_at"]
        logger.info(f"Added goal '{goal.name}' #{goal.id}")
        return goal

    def get(self, goal_id: str) -> Optional[Goal]:
        with transaction("fetch goal") as cur:
            cur.execute(f"SELECT {_COLUMNS} FROM goals WHERE id = %s;", (goal_id,))
            row = cur.fetchone()
        return self._row_to_goal(row) if row else None

    def get_all(self, include_inactive: bool = False) -> list[Goal]:
        sql = f"SELECT {_COLUMNS} FROM goals"
        if not include_inactive:
            sql += " WHERE is_active = TRUE"
        sql += " ORDER BY created_at DESC, id DESC;"
        with transaction("list goals") as cur:
            cur.execute(sql)
            return [self._row_to_goal(r) for r in cur.fetchall()]

    def update_details(self, goal_id: str, fields: dict[str, Any]) -> Optional[Goal]:
        check_fields(fields, GOAL_DETAIL_FIELDS)
        if not fields:
            return self.get(goal_id)
        assignments = ", ".join(f"{name} = %({name})s" for name in fields)
        sql = f"UPDATE goals SET {assignments} WHERE id = %(id)s RETURNING {_COLUMNS};"
        with transaction(f"update goal #{goal_id}") as cur:
            cur.execute(sql, {**fields, "id": goal_id})
            row = cur.fetchone()
        return self._row_to_goal(row) if row else None

    def add_contribution(self, goal_id: str, tx: Transaction) -> Goal:
        """
        Debit the account and credit the goal in one database transaction.

        Args:
            goal_id: Goal receiving the money.
            tx: Expense transaction on the source account (negative amount).

        Returns:
            The updated Goal.
        """
        sql = f"""
            UPDATE goals
            SET current_amount = current_amount + %(amount)s,
                is_completed = is_completed OR current_amount + %(amount)s >= target_amount
            WHERE id = %(id)s
            RETURNING {_COLUMNS};
        """
        with transaction(f"contribute to goal #{goal_id}") as cur:
            cur.execute(sql, {"amount": abs(tx.amount), "id": goal_id})
            row = cur.fetchone()
            if row is None:
                raise NotFoundError("Goal", goal_id)
            insert_ledger_entry(cur, tx)
        goal = self._row_to_goal(row)
        logger.info(f"Contributed {abs(tx.amount)} to goal #{goal_id} from account {tx.account_id}")
        return goal

    @staticmethod
    def _row_to_goal(row: dict) -> Goal:
        """Convert a database row to a Goal domain object."""
        return Goal(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            target_amount=row["target_amount"],
            current_amount=row["current_amount"],
            target_date=row["target_date"],
            icon=row["icon"],
            color=row["color"],
            is_completed=row["is_completed"],
            is_active=row["is_active"],
            created_at=row["created_at"],
        )
