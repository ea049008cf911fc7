"""
models/goal.py
--------------
Domain model for savings goals.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class Goal:
    """
    A savings target funded by contributions from accounts.

    Attributes:
        id: Generated identifier (None until stored).
        name: Display name.
        target_amount: Amount to reach; always positive.
        current_amount: Sum of contributions so far.
        description: Optional note.
        target_date: Optional deadline.
        icon: Emoji or icon name for the UI.
        color: Hex color for the UI.
        is_completed: Set once a contribution reaches the target; never cleared.
        is_active: False once the goal is closed.
        created_at: Timestamp when the record was created.
    """
    name: str
    target_amount: Decimal
    current_amount: Decimal = Decimal("0")
    description: Optional[str] = None
    target_date: Optional[datetime] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    is_completed: bool = False
    is_active: bool = True
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def progress(self) -> Decimal:
        """Share of the target reached, in percent (capped at 100)."""
        if self.target_amount <= 0:
            return Decimal("0")
        pct = self.current_amount / self.target_amount * 100
        return min(pct, Decimal("100"))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "targetAmount": self.target_amount,
            "currentAmount": self.current_amount,
            "targetDate": self.target_date,
            "icon": self.icon,
            "color": self.color,
            "isCompleted": self.is_completed,
            "isActive": self.is_active,
            "progress": round(self.progress(), 2),
            "createdAt": self.created_at,
        }
